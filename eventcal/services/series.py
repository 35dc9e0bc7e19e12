"""Helpers for editing and deleting events that belong to a recurring series."""

from __future__ import annotations

import logging
from typing import Iterable

from eventcal.domain.models import Event, RepeatRule

logger = logging.getLogger(__name__)


def is_recurring(event: Event) -> bool:
    """True while the event is still a member of a series."""
    return bool(event.repeat.group_id)


def detach_on_edit(previous: Event, edited: Event) -> Event:
    """Turn an individually edited event into a standalone event.

    Editing a single instance always removes it from its series, and an edit
    never joins a series either: the edited copy gets the non-recurring
    sentinel rule whatever repeat value the edit carried.
    """
    if is_recurring(previous):
        logger.debug(
            "Detaching event %s from series %s", previous.id, previous.repeat.group_id
        )
    return edited.model_copy(update={"repeat": RepeatRule()})


def select_group(existing_events: Iterable[Event], group_id: str | None) -> list[Event]:
    """Return every event whose ``repeat.group_id`` equals *group_id*."""
    if not group_id:
        return []
    return [event for event in existing_events if event.repeat.group_id == group_id]
