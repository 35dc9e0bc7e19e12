"""In-memory repositories for events and sent notifications."""

from __future__ import annotations

import uuid
from datetime import datetime

from eventcal.domain.models import Event
from eventcal.services.series import select_group


class EventRepository:
    """Dict-backed store for Event instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def create(self, event: Event) -> Event:
        """Store *event* under a newly allocated id and return the stored copy.

        Ids coming from the recurrence generator are provisional; the
        repository always assigns its own.
        """
        stored = event.model_copy(update={"id": str(uuid.uuid4())})
        self._store[stored.id] = stored
        return stored

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def update(self, event_id: str, event: Event) -> Event | None:
        if event_id not in self._store:
            return None
        stored = event.model_copy(update={"id": event_id})
        self._store[event_id] = stored
        return stored

    def delete(self, event_id: str) -> bool:
        return self._store.pop(event_id, None) is not None

    def delete_where(self, group_id: str) -> list[str]:
        """Delete every member of a recurring series; return the removed ids."""
        to_remove = [e.id for e in select_group(self._store.values(), group_id)]
        for eid in to_remove:
            del self._store[eid]
        return to_remove


class NotificationLogRepository:
    """Remembers which events have already fired their notification."""

    def __init__(self) -> None:
        self._sent: dict[str, datetime] = {}

    def mark_sent(self, event_id: str, sent_at: datetime) -> None:
        self._sent[event_id] = sent_at

    def sent_at(self, event_id: str) -> datetime | None:
        return self._sent.get(event_id)

    def notified_ids(self) -> set[str]:
        return set(self._sent)

    def forget(self, event_ids: list[str]) -> None:
        for eid in event_ids:
            self._sent.pop(eid, None)
