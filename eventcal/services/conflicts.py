"""Service for detecting scheduling conflicts between events."""

from __future__ import annotations

from typing import Iterable

from eventcal.domain.models import Event


def find_conflicts(candidate: Event, existing_events: Iterable[Event]) -> list[Event]:
    """Return existing events on the candidate's date whose time range overlaps it.

    Overlap rule: conflict if candidate.start_time < other.end_time AND
    other.start_time < candidate.end_time. Exact boundary touches
    (end == start) are NOT considered conflicts. An event never conflicts
    with itself, so editing an event can be checked against the full list.
    """
    return [
        event
        for event in existing_events
        if event.date == candidate.date
        and event.id != candidate.id
        and candidate.start_time < event.end_time
        and event.start_time < candidate.end_time
    ]


def describe_conflict(event: Event) -> str:
    """Render a conflicting event as ``"Title (YYYY-MM-DD HH:MM-HH:MM)"``."""
    return (
        f"{event.title} ({event.date.isoformat()} "
        f"{event.start_time:%H:%M}-{event.end_time:%H:%M})"
    )
