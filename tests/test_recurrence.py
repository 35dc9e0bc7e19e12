"""Tests for the recurrence expansion service."""

from __future__ import annotations

from datetime import date, time

import pytest

from eventcal.domain.models import Event, RepeatRule, RepeatType
from eventcal.services.recurrence import InvalidRuleError, generate


def _seed(day: date, event_id: str = "1", **overrides) -> Event:
    defaults = dict(
        id=event_id,
        title="Assignment",
        date=day,
        start_time=time(13, 0),
        end_time=time(18, 0),
        description="Homework every day",
        location="Home",
        category="Personal",
        notification_time=10,
    )
    defaults.update(overrides)
    return Event(**defaults)


def _dates(instances: list[Event]) -> list[date]:
    return [inst.date for inst in instances]


# ---------------------------------------------------------------------------
# Stepping per repeat type
# ---------------------------------------------------------------------------


def test_daily_until_end_date_inclusive():
    rule = RepeatRule(type=RepeatType.DAILY, interval=1, end_date=date(2025, 5, 22))
    instances = generate(_seed(date(2025, 5, 18)), rule)

    assert _dates(instances) == [date(2025, 5, d) for d in range(18, 23)]
    assert [inst.id for inst in instances] == ["1", "2", "3", "4", "5"]
    group_ids = {inst.repeat.group_id for inst in instances}
    assert len(group_ids) == 1
    assert None not in group_ids


def test_weekly_stops_before_end_date():
    rule = RepeatRule(type=RepeatType.WEEKLY, interval=1, end_date=date(2025, 6, 6))
    instances = generate(_seed(date(2025, 5, 17)), rule)

    assert _dates(instances) == [date(2025, 5, 17), date(2025, 5, 24), date(2025, 5, 31)]


def test_monthly_every_three_months():
    rule = RepeatRule(type=RepeatType.MONTHLY, interval=3, end_date=date(2026, 3, 1))
    instances = generate(_seed(date(2025, 5, 1)), rule)

    assert _dates(instances) == [
        date(2025, 5, 1),
        date(2025, 8, 1),
        date(2025, 11, 1),
        date(2026, 2, 1),
    ]


def test_monthly_on_31st_skips_short_months():
    rule = RepeatRule(type=RepeatType.MONTHLY, interval=1, end_date=date(2025, 10, 1))
    instances = generate(_seed(date(2025, 5, 31)), rule)

    assert _dates(instances) == [date(2025, 5, 31), date(2025, 7, 31), date(2025, 8, 31)]
    assert [inst.id for inst in instances] == ["1", "2", "3"]


def test_monthly_on_30th_skips_february_only():
    rule = RepeatRule(type=RepeatType.MONTHLY, interval=1, end_date=date(2026, 4, 30))
    instances = generate(_seed(date(2026, 1, 30)), rule)

    assert _dates(instances) == [date(2026, 1, 30), date(2026, 3, 30), date(2026, 4, 30)]


def test_monthly_skip_does_not_count_toward_cap():
    rule = RepeatRule(type=RepeatType.MONTHLY, interval=1, occurrence_count=3)
    instances = generate(_seed(date(2025, 5, 31)), rule)

    assert _dates(instances) == [date(2025, 5, 31), date(2025, 7, 31), date(2025, 8, 31)]


def test_monthly_end_date_inside_skipped_month():
    """A cutoff falling in a skipped month ends the series at the last real date."""
    rule = RepeatRule(type=RepeatType.MONTHLY, interval=1, end_date=date(2025, 6, 30))
    instances = generate(_seed(date(2025, 5, 31)), rule)

    assert _dates(instances) == [date(2025, 5, 31)]


def test_monthly_end_date_on_next_valid_day_is_included():
    rule = RepeatRule(type=RepeatType.MONTHLY, interval=1, end_date=date(2025, 7, 31))
    instances = generate(_seed(date(2025, 5, 31)), rule)

    assert _dates(instances) == [date(2025, 5, 31), date(2025, 7, 31)]


def test_yearly_every_other_year():
    rule = RepeatRule(type=RepeatType.YEARLY, interval=2, end_date=date(2030, 12, 31))
    instances = generate(_seed(date(2024, 12, 25)), rule)

    assert _dates(instances) == [
        date(2024, 12, 25),
        date(2026, 12, 25),
        date(2028, 12, 25),
        date(2030, 12, 25),
    ]


def test_yearly_leap_day_only_in_leap_years():
    rule = RepeatRule(type=RepeatType.YEARLY, interval=1, end_date=date(2032, 3, 1))
    instances = generate(_seed(date(2024, 2, 29)), rule)

    assert _dates(instances) == [date(2024, 2, 29), date(2028, 2, 29), date(2032, 2, 29)]
    assert [inst.id for inst in instances] == ["1", "2", "3"]


# ---------------------------------------------------------------------------
# Termination policy
# ---------------------------------------------------------------------------


def test_count_cap_overrides_end_date():
    rule = RepeatRule(type=RepeatType.DAILY, interval=1, end_date=date(2025, 5, 22))
    instances = generate(_seed(date(2025, 5, 18)), rule, count_cap=3)

    assert _dates(instances) == [date(2025, 5, 18), date(2025, 5, 19), date(2025, 5, 20)]


def test_count_cap_overrides_occurrence_count():
    rule = RepeatRule(type=RepeatType.WEEKLY, interval=1, occurrence_count=10)
    instances = generate(_seed(date(2025, 5, 18)), rule, count_cap=2)

    assert len(instances) == 2


def test_occurrence_count_without_end_date():
    rule = RepeatRule(type=RepeatType.WEEKLY, interval=2, occurrence_count=4)
    instances = generate(_seed(date(2025, 11, 3)), rule)

    assert _dates(instances) == [
        date(2025, 11, 3),
        date(2025, 11, 17),
        date(2025, 12, 1),
        date(2025, 12, 15),
    ]


def test_default_end_date_applies_without_end_or_count():
    rule = RepeatRule(type=RepeatType.MONTHLY, interval=2)
    instances = generate(_seed(date(2025, 5, 1)), rule)

    assert _dates(instances) == [date(2025, 5, 1), date(2025, 7, 1), date(2025, 9, 1)]


def test_default_end_date_can_be_overridden():
    rule = RepeatRule(type=RepeatType.DAILY, interval=1)
    instances = generate(
        _seed(date(2026, 1, 1)), rule, default_end_date=date(2026, 1, 3)
    )

    assert _dates(instances) == [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3)]


def test_seed_after_end_date_yields_nothing():
    rule = RepeatRule(type=RepeatType.DAILY, interval=1, end_date=date(2025, 5, 1))
    assert generate(_seed(date(2025, 5, 18)), rule) == []


# ---------------------------------------------------------------------------
# Instance contents
# ---------------------------------------------------------------------------


def test_instances_copy_seed_fields_and_stamp_group():
    seed = _seed(date(2025, 5, 18), repeat=RepeatRule())
    rule = RepeatRule(type=RepeatType.DAILY, interval=2, end_date=date(2025, 5, 22))
    instances = generate(seed, rule, group_id="series-1")

    assert _dates(instances) == [date(2025, 5, 18), date(2025, 5, 20), date(2025, 5, 22)]
    for inst in instances:
        assert inst.title == seed.title
        assert inst.start_time == seed.start_time
        assert inst.end_time == seed.end_time
        assert inst.location == seed.location
        assert inst.repeat.type == RepeatType.DAILY
        assert inst.repeat.interval == 2
        assert inst.repeat.group_id == "series-1"
    # The seed itself is left untouched.
    assert seed.repeat.group_id is None


def test_each_expansion_gets_a_fresh_group():
    rule = RepeatRule(type=RepeatType.DAILY, interval=1, end_date=date(2025, 5, 19))
    first = generate(_seed(date(2025, 5, 18)), rule)
    second = generate(_seed(date(2025, 5, 18)), rule)

    assert first[0].repeat.group_id != second[0].repeat.group_id


def test_instances_do_not_share_repeat_objects():
    rule = RepeatRule(type=RepeatType.DAILY, interval=1, end_date=date(2025, 5, 19))
    first, second = generate(_seed(date(2025, 5, 18)), rule)

    first.repeat.group_id = None
    assert second.repeat.group_id is not None


def test_non_numeric_seed_id_gets_suffixed_ids():
    rule = RepeatRule(type=RepeatType.DAILY, interval=1, end_date=date(2025, 5, 20))
    instances = generate(_seed(date(2025, 5, 18), event_id="standup"), rule)

    assert [inst.id for inst in instances] == ["standup", "standup-2", "standup-3"]


def test_custom_id_factory():
    rule = RepeatRule(type=RepeatType.DAILY, interval=1, end_date=date(2025, 5, 20))
    instances = generate(
        _seed(date(2025, 5, 18), event_id="a"),
        rule,
        id_factory=lambda position: f"tmp-{position}",
    )

    assert [inst.id for inst in instances] == ["a", "tmp-1", "tmp-2"]


def test_numeric_seed_id_continues_from_seed():
    rule = RepeatRule(type=RepeatType.DAILY, interval=1, end_date=date(2025, 5, 20))
    instances = generate(_seed(date(2025, 5, 18), event_id="7"), rule)

    assert [inst.id for inst in instances] == ["7", "8", "9"]


# ---------------------------------------------------------------------------
# Invalid rules
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("interval", [0, -1])
def test_non_positive_interval_rejected(interval):
    rule = RepeatRule(type=RepeatType.DAILY, interval=interval, end_date=date(2025, 5, 22))
    with pytest.raises(InvalidRuleError):
        generate(_seed(date(2025, 5, 18)), rule)


def test_none_rule_cannot_be_expanded():
    with pytest.raises(InvalidRuleError):
        generate(_seed(date(2025, 5, 18)), RepeatRule())


def test_unknown_type_rejected():
    rule = RepeatRule.model_construct(type="hourly", interval=1, end_date=None)
    with pytest.raises(InvalidRuleError):
        generate(_seed(date(2025, 5, 18)), rule)


def test_non_positive_count_rejected():
    rule = RepeatRule(type=RepeatType.DAILY, interval=1)
    with pytest.raises(InvalidRuleError):
        generate(_seed(date(2025, 5, 18)), rule, count_cap=0)


def test_invalid_rule_error_is_a_value_error():
    assert issubclass(InvalidRuleError, ValueError)
