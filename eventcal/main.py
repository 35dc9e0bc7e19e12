"""FastAPI application — entry point for the calendar service."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import FastAPI, HTTPException, Query, Response

from eventcal.core.config import settings
from eventcal.domain.bus import EventBus
from eventcal.domain.events import EventsDeleted, EventsSaved, NotificationDue
from eventcal.domain.handlers import HandlerRegistry
from eventcal.domain.models import Event, EventForm, RepeatRule
from eventcal.repos.memory import EventRepository, NotificationLogRepository
from eventcal.services.conflicts import describe_conflict, find_conflicts
from eventcal.services.notifications import due_notifications, notification_message
from eventcal.services.recurrence import InvalidRuleError, generate
from eventcal.services.search import search_events
from eventcal.services.series import detach_on_edit

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = EventRepository()
notification_repo = NotificationLogRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    notification_repo=notification_repo,
)


def _raise_on_conflicts(candidates: list[Event], existing: list[Event]) -> None:
    """Reject the save with 409 when any candidate overlaps an existing event."""
    overlapping: list[Event] = []
    seen_ids: set[str] = set()
    for candidate in candidates:
        for ev in find_conflicts(candidate, existing):
            if ev.id not in seen_ids:
                seen_ids.add(ev.id)
                overlapping.append(ev)
    if not overlapping:
        return

    logger.info("Save rejected: overlaps %d existing event(s)", len(overlapping))
    raise HTTPException(
        status_code=409,
        detail={
            "message": "The event overlaps with the following events",
            "conflicts": [describe_conflict(ev) for ev in overlapping],
        },
    )


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/events", response_model=list[Event])
def list_events(q: str | None = None) -> list[Event]:
    """Return all stored events, optionally filtered by a search term."""
    return search_events(event_repo.list_all(), q)


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    """Return a single event by id."""
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@app.post("/events", response_model=Event, status_code=201)
def create_event(payload: EventForm, force: bool = False) -> Event:
    """Create one standalone event, warning about overlaps unless *force*."""
    event = payload.to_event().model_copy(update={"repeat": RepeatRule()})
    if not force:
        _raise_on_conflicts([event], event_repo.list_all())

    stored = event_repo.create(event)
    event_bus.publish(EventsSaved(event_ids=[stored.id]))
    logger.info("Created event %s on %s", stored.id, stored.date)
    return stored


@app.post("/events/series", response_model=list[Event], status_code=201)
def create_series(
    payload: EventForm,
    count: int | None = Query(None, ge=1, le=settings.max_series_occurrences),
    force: bool = False,
) -> list[Event]:
    """Expand a recurring event into its occurrences and store them all.

    *count* caps the number of occurrences regardless of the rule, up to
    ``settings.max_series_occurrences``.
    """
    seed = payload.to_event()
    try:
        instances = generate(seed, payload.repeat, count_cap=count)
    except InvalidRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not force:
        _raise_on_conflicts(instances, event_repo.list_all())

    stored = [event_repo.create(instance) for instance in instances]
    event_bus.publish(EventsSaved(event_ids=[ev.id for ev in stored]))
    logger.info(
        "Created series %s with %d events",
        stored[0].repeat.group_id if stored else None,
        len(stored),
    )
    return stored


@app.put("/events/{event_id}", response_model=Event)
def update_event(event_id: str, payload: EventForm, force: bool = False) -> Event:
    """Edit one event. A series member is detached into a standalone event."""
    previous = event_repo.get(event_id)
    if previous is None:
        raise HTTPException(status_code=404, detail="Event not found")

    edited = detach_on_edit(previous, payload.to_event(event_id))
    if not force:
        _raise_on_conflicts([edited], event_repo.list_all())

    stored = event_repo.update(event_id, edited)
    event_bus.publish(EventsSaved(event_ids=[event_id]))
    return stored


@app.delete("/events/{event_id}", status_code=204)
def delete_event(event_id: str) -> Response:
    """Delete exactly one event, even if it belongs to a series."""
    if not event_repo.delete(event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    event_bus.publish(EventsDeleted(event_ids=[event_id]))
    return Response(status_code=204)


@app.delete("/series/{group_id}")
def delete_series(group_id: str) -> dict:
    """Delete every event still attached to the series *group_id*."""
    deleted = event_repo.delete_where(group_id)
    event_bus.publish(EventsDeleted(event_ids=deleted, group_id=group_id))
    return {"deleted": deleted}


@app.post("/tick")
def tick(now: datetime | None = None) -> dict:
    """Advance simulated time and fire any due notifications.

    Pass *now* as a query param to control the simulated clock. Defaults to
    the local ``datetime.now()`` when omitted. Calendar times are naive, so
    any timezone on *now* is dropped.
    """
    current_time = (now or datetime.now()).replace(tzinfo=None)
    due = due_notifications(
        event_repo.list_all(), current_time, notification_repo.notified_ids()
    )

    fired: list[str] = []
    for event in due:
        message = notification_message(event)
        event_bus.publish(
            NotificationDue(event_id=event.id, message=message, fired_at=current_time)
        )
        fired.append(message)

    return {"time": current_time.isoformat(), "notifications": fired}
