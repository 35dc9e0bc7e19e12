"""Service for expanding a seed event and its repeat rule into dated
occurrences that share one series (group) id."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from functools import partial
from typing import Callable, Iterator

from dateutil.relativedelta import relativedelta

from eventcal.core.config import settings
from eventcal.domain.models import Event, RepeatRule, RepeatType

logger = logging.getLogger(__name__)


class InvalidRuleError(ValueError):
    """Raised when a RepeatRule cannot be expanded (bad interval, type or count)."""


def _always_valid(seed_date: date, candidate: date) -> bool:
    return True


def _same_day_of_month(seed_date: date, candidate: date) -> bool:
    # relativedelta clamps to the last day of a short month, so a changed day
    # means the target month (or Feb 29 year) has no such date.
    return candidate.day == seed_date.day


@dataclass(frozen=True)
class _Stepping:
    """How one repeat type moves away from the seed date."""

    offset: Callable[[int], relativedelta]
    is_valid: Callable[[date, date], bool]

    def candidate(self, seed_date: date, steps: int) -> date:
        return seed_date + self.offset(steps)


_STEPPINGS: dict[RepeatType, _Stepping] = {
    RepeatType.DAILY: _Stepping(lambda n: relativedelta(days=n), _always_valid),
    RepeatType.WEEKLY: _Stepping(lambda n: relativedelta(weeks=n), _always_valid),
    RepeatType.MONTHLY: _Stepping(
        lambda n: relativedelta(months=n), _same_day_of_month
    ),
    RepeatType.YEARLY: _Stepping(lambda n: relativedelta(years=n), _same_day_of_month),
}


def generate(
    seed: Event,
    rule: RepeatRule,
    count_cap: int | None = None,
    *,
    default_end_date: date | None = None,
    group_id: str | None = None,
    id_factory: Callable[[int], str] | None = None,
) -> list[Event]:
    """Expand *seed* into the occurrences described by *rule*.

    ``seed.repeat`` is ignored; *rule* drives the expansion. The first
    instance sits on ``seed.date`` and keeps ``seed.id``; later instances get
    ids from *id_factory* (called with the 0-based position) or, by default,
    the next ordinals after the seed id. Every instance carries a copy of
    *rule* stamped with one fresh ``group_id``.

    Termination, first match wins:

    1. *count_cap* instances,
    2. ``rule.occurrence_count`` instances,
    3. the last candidate on or before ``rule.end_date``,
    4. the last candidate on or before *default_end_date* (falls back to
       ``settings.default_repeat_end_date``).

    Monthly and yearly candidates whose month or year lacks the seed's
    day-of-month are skipped and never count toward a cap.

    Raises :class:`InvalidRuleError` before producing anything when the rule
    cannot be expanded.
    """
    stepping = _stepping_for(rule)

    limit = count_cap if count_cap is not None else rule.occurrence_count
    if limit is not None and limit <= 0:
        raise InvalidRuleError(f"occurrence count must be positive, got {limit}")

    end_date: date | None = None
    if limit is None:
        end_date = rule.end_date or default_end_date or settings.default_repeat_end_date

    next_id = id_factory or partial(_sequential_id, seed.id)
    series_rule = rule.model_copy(update={"group_id": group_id or _new_group_id()})

    instances: list[Event] = []
    for occurrence in _occurrences(seed.date, stepping, rule.interval):
        if limit is not None and len(instances) >= limit:
            break
        if end_date is not None and occurrence > end_date:
            break
        position = len(instances)
        instances.append(
            seed.model_copy(
                update={
                    "id": seed.id if position == 0 else next_id(position),
                    "date": occurrence,
                    "repeat": series_rule.model_copy(),
                }
            )
        )

    logger.debug(
        "Expanded %s rule from %s into %d instances (group %s)",
        rule.type,
        seed.date.isoformat(),
        len(instances),
        series_rule.group_id,
    )
    return instances


def _stepping_for(rule: RepeatRule) -> _Stepping:
    stepping = _STEPPINGS.get(rule.type)
    if stepping is None:
        raise InvalidRuleError(f"cannot expand repeat type {rule.type!r}")
    if rule.interval <= 0:
        raise InvalidRuleError(f"interval must be positive, got {rule.interval}")
    return stepping


def _occurrences(seed_date: date, stepping: _Stepping, interval: int) -> Iterator[date]:
    """Yield valid candidate dates in order, always stepping from the seed."""
    k = 0
    while True:
        try:
            candidate = stepping.candidate(seed_date, k * interval)
        except (OverflowError, ValueError):
            logger.warning("Stopped expanding series from %s at the calendar limit", seed_date)
            return
        if stepping.is_valid(seed_date, candidate):
            yield candidate
        k += 1


def _sequential_id(seed_id: str, position: int) -> str:
    if seed_id.isdigit():
        return str(int(seed_id) + position)
    return f"{seed_id}-{position + 1}"


def _new_group_id() -> str:
    return str(uuid.uuid4())
