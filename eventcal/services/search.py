"""Service for filtering events by a free-text search term."""

from __future__ import annotations

from typing import Iterable

from eventcal.domain.models import Event


def search_events(events: Iterable[Event], term: str | None) -> list[Event]:
    """Return events whose title, description or location contains *term*.

    Matching is case-insensitive. A blank term matches everything.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return list(events)
    return [
        event
        for event in events
        if any(
            needle in field.lower()
            for field in (event.title, event.description, event.location)
        )
    ]
