"""
Resolve a reporting period into an inclusive [start_date, end_date] range.

All instants are naive UTC. "now" is injectable so resolution is a pure
function of its inputs.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from app.core.exceptions import InvalidArgumentError
from app.core.utils import start_of_day, to_naive_utc, utcnow
from .schemas import CustomRange, TimePeriod

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = TimePeriod.month


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of instants."""

    start_date: datetime
    end_date: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start_date <= moment <= self.end_date


def _period_key(period: Union[TimePeriod, str, None]) -> str:
    if isinstance(period, TimePeriod):
        return period.value
    return str(period)


def resolve_date_range(
    period: Union[TimePeriod, str, None] = DEFAULT_PERIOD,
    custom_range: Optional[CustomRange] = None,
    now: Optional[datetime] = None,
    logger: logging.Logger = logger,
) -> DateRange:
    """
    Turn a named period into a DateRange.

    - today: midnight today .. now
    - yesterday: midnight yesterday .. one millisecond before midnight today
    - week / month / year: midnight today minus 7 days / 1 month / 1 year .. now
      (month and year clamp the day of month, e.g. Mar 31 -> Feb 28)
    - custom: custom_range.start_date .. custom_range.end_date

    Unknown periods log a warning and resolve as month.

    Raises:
        InvalidArgumentError: custom period without both bounds, or with
            start_date after end_date
    """
    now = to_naive_utc(now) if now is not None else utcnow()
    today_start = start_of_day(now)
    key = _period_key(period)

    if key == TimePeriod.today.value:
        return DateRange(today_start, now)

    if key == TimePeriod.yesterday.value:
        return DateRange(
            today_start - timedelta(days=1),
            today_start - timedelta(milliseconds=1),
        )

    if key == TimePeriod.week.value:
        return DateRange(today_start - timedelta(days=7), now)

    if key == TimePeriod.year.value:
        return DateRange(today_start - relativedelta(years=1), now)

    if key == TimePeriod.custom.value:
        if custom_range is None or custom_range.start_date is None or custom_range.end_date is None:
            raise InvalidArgumentError(
                "Custom date range (start_date and end_date) is required for custom period"
            )
        start_date = to_naive_utc(custom_range.start_date)
        end_date = to_naive_utc(custom_range.end_date)
        if start_date > end_date:
            raise InvalidArgumentError("start_date must not be after end_date")
        return DateRange(start_date, end_date)

    if key != TimePeriod.month.value:
        logger.warning(f"Unknown time period: {key}, defaulting to 'month'.")

    return DateRange(today_start - relativedelta(months=1), now)
