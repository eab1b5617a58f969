import logging
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import InvalidArgumentError
from app.modules.dashboard.date_range import DateRange, resolve_date_range
from app.modules.dashboard.schemas import CustomRange, TimePeriod

NOW = datetime(2024, 3, 15, 14, 30, 0)
MIDNIGHT = datetime(2024, 3, 15)


def test_today_runs_from_midnight_to_now():
    assert resolve_date_range("today", now=NOW) == DateRange(MIDNIGHT, NOW)


def test_yesterday_ends_one_millisecond_before_midnight():
    rng = resolve_date_range(TimePeriod.yesterday, now=NOW)
    assert rng.start_date == datetime(2024, 3, 14)
    assert rng.end_date == MIDNIGHT - timedelta(milliseconds=1)
    assert not rng.contains(MIDNIGHT)


@pytest.mark.parametrize(
    "period, expected_start",
    [
        ("week", datetime(2024, 3, 8)),
        ("month", datetime(2024, 2, 15)),
        ("year", datetime(2023, 3, 15)),
    ],
)
def test_relative_periods_count_back_from_midnight(period, expected_start):
    rng = resolve_date_range(period, now=NOW)
    assert rng.start_date == expected_start
    assert rng.end_date == NOW


def test_month_clamps_day_of_month():
    rng = resolve_date_range("month", now=datetime(2024, 3, 31, 9, 0))
    assert rng.start_date == datetime(2024, 2, 29)


def test_year_from_leap_day():
    rng = resolve_date_range("year", now=datetime(2024, 2, 29, 9, 0))
    assert rng.start_date == datetime(2023, 2, 28)


def test_default_period_is_month():
    assert resolve_date_range(now=NOW) == resolve_date_range("month", now=NOW)


def test_unknown_period_falls_back_to_month_and_warns(caplog):
    with caplog.at_level(logging.WARNING):
        rng = resolve_date_range("fortnight", now=NOW)
    assert rng == resolve_date_range("month", now=NOW)
    assert "Unknown time period: fortnight" in caplog.text


def test_custom_range_is_used_verbatim():
    custom = CustomRange(start_date=datetime(2024, 1, 1), end_date=datetime(2024, 1, 31, 23, 59))
    rng = resolve_date_range("custom", custom, now=NOW)
    assert rng == DateRange(datetime(2024, 1, 1), datetime(2024, 1, 31, 23, 59))


def test_custom_range_aware_bounds_become_naive_utc():
    tz = timezone(timedelta(hours=2))
    custom = CustomRange(
        start_date=datetime(2024, 1, 1, 2, 0, tzinfo=tz),
        end_date=datetime(2024, 1, 2, 2, 0, tzinfo=tz),
    )
    rng = resolve_date_range("custom", custom, now=NOW)
    assert rng == DateRange(datetime(2024, 1, 1), datetime(2024, 1, 2))


@pytest.mark.parametrize(
    "custom",
    [
        None,
        CustomRange(start_date=datetime(2024, 1, 1)),
        CustomRange(end_date=datetime(2024, 1, 1)),
    ],
)
def test_custom_without_both_bounds_is_rejected(custom):
    with pytest.raises(InvalidArgumentError) as exc_info:
        resolve_date_range("custom", custom, now=NOW)
    assert exc_info.value.status_code == 400


def test_custom_with_inverted_bounds_is_rejected():
    custom = CustomRange(start_date=datetime(2024, 2, 1), end_date=datetime(2024, 1, 1))
    with pytest.raises(InvalidArgumentError):
        resolve_date_range("custom", custom, now=NOW)


def test_aware_now_is_normalised():
    aware_now = datetime(2024, 3, 15, 16, 30, tzinfo=timezone(timedelta(hours=2)))
    assert resolve_date_range("today", now=aware_now) == DateRange(MIDNIGHT, NOW)
