"""Domain event handlers — wired up at application startup."""

from __future__ import annotations

import logging

from eventcal.domain.bus import EventBus
from eventcal.domain.events import EventsDeleted, EventsSaved, NotificationDue
from eventcal.repos.memory import EventRepository, NotificationLogRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        notification_repo: NotificationLogRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.notification_repo = notification_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventsSaved, self.on_events_saved)
        self.bus.subscribe(EventsDeleted, self.on_events_deleted)
        self.bus.subscribe(NotificationDue, self.on_notification_due)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_events_saved(self, event: EventsSaved) -> None:
        # An edit may move the start time, so the notification fires again.
        self.notification_repo.forget(event.event_ids)

    def on_events_deleted(self, event: EventsDeleted) -> None:
        self.notification_repo.forget(event.event_ids)
        if event.group_id:
            logger.info(
                "Deleted series %s (%d events)", event.group_id, len(event.event_ids)
            )

    def on_notification_due(self, event: NotificationDue) -> None:
        if self.event_repo.get(event.event_id) is None:
            return
        self.notification_repo.mark_sent(event.event_id, event.fired_at)
        logger.info("Notification for %s: %s", event.event_id, event.message)
