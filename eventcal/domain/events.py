"""Domain events emitted as calendar entries are saved, deleted and notified."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class EventsSaved(BaseModel):
    """Fired after events are created or updated."""

    event_ids: list[str]


class EventsDeleted(BaseModel):
    """Fired after events are removed, singly or as a whole series."""

    event_ids: list[str]
    group_id: str | None = None


class NotificationDue(BaseModel):
    """Fired when an event enters its notification window (via /tick)."""

    event_id: str
    message: str
    fired_at: datetime
