"""Service for deciding which events are due an upcoming-start notification."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from eventcal.domain.models import Event


def event_start(event: Event) -> datetime:
    return datetime.combine(event.date, event.start_time)


def due_notifications(
    events: Iterable[Event],
    now: datetime,
    already_notified: set[str] | frozenset[str] = frozenset(),
) -> list[Event]:
    """Return events starting within their ``notification_time`` window.

    An event is due when it has not started yet and starts no more than
    ``notification_time`` minutes after *now*. Ids in *already_notified* are
    skipped so each event alerts once. *now* is a naive local datetime.
    """
    due: list[Event] = []
    for event in events:
        if event.id in already_notified:
            continue
        until_start = event_start(event) - now
        if timedelta(0) < until_start <= timedelta(minutes=event.notification_time):
            due.append(event)
    return due


def notification_message(event: Event) -> str:
    return f"{event.title} starts in {event.notification_time} minutes."
