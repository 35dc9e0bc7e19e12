"""Domain models for the calendar."""

from __future__ import annotations

import datetime
import uuid
from enum import Enum

from pydantic import (
    BaseModel,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from eventcal.core.config import settings

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class RepeatType(StrEnum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def _new_id() -> str:
    return str(uuid.uuid4())


def _default_notification_minutes() -> int:
    return settings.default_notification_minutes


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class RepeatRule(BaseModel):
    """How an event repeats.

    ``RepeatRule()`` is the non-recurring sentinel (``type=none``,
    ``interval=0``). ``group_id`` is shared by every instance of one
    expanded series and is cleared when an instance is detached.
    """

    type: RepeatType = RepeatType.NONE
    interval: int = 0
    end_date: datetime.date | None = None
    occurrence_count: int | None = None
    group_id: str | None = None


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    description: str = ""
    location: str = ""
    category: str = ""
    repeat: RepeatRule = Field(default_factory=RepeatRule)
    notification_time: int = Field(default_factory=_default_notification_minutes)

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: datetime.time) -> str:
        # Times are minute-precision; EventForm rejects seconds on input.
        return value.strftime("%H:%M")


# ---------------------------------------------------------------------------
# Request DTOs
# ---------------------------------------------------------------------------


class EventForm(BaseModel):
    """Event fields as submitted by the edit form (no id)."""

    title: str = Field(min_length=1)
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    description: str = ""
    location: str = ""
    category: str = ""
    repeat: RepeatRule = Field(default_factory=RepeatRule)
    notification_time: int = Field(
        default_factory=_default_notification_minutes, ge=0
    )

    @field_validator("start_time", "end_time")
    @classmethod
    def _whole_minutes(cls, value: datetime.time) -> datetime.time:
        if value.second or value.microsecond:
            raise ValueError("times must be whole minutes (HH:MM)")
        return value

    @model_validator(mode="after")
    def _end_after_start(self) -> EventForm:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @model_validator(mode="after")
    def _bounded_occurrence_count(self) -> EventForm:
        count = self.repeat.occurrence_count
        if count is not None and count > settings.max_series_occurrences:
            raise ValueError(
                f"occurrence_count may not exceed {settings.max_series_occurrences}"
            )
        return self

    def to_event(self, event_id: str | None = None) -> Event:
        data = self.model_dump()
        if event_id is not None:
            data["id"] = event_id
        return Event(**data)
