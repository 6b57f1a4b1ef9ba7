from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta
from enum import Enum

WEEK_LOOKBACK_DAYS = 6


class TimeRange(str, Enum):
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    YEAR_TO_DATE = "YTD"
    ALL = "ALL"


def parse_time_range(value: TimeRange | str) -> TimeRange:
    if isinstance(value, TimeRange):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported time range: {value!r}")
    normalized = value.strip().upper()
    try:
        return TimeRange(normalized)
    except ValueError as exc:
        raise ValueError("Time range must be one of 1W, 1M, 3M, YTD, or ALL.") from exc


def range_start(time_range: TimeRange | str, today: date) -> date:
    """First calendar day shown for ``time_range`` when the window ends ``today``."""
    time_range = parse_time_range(time_range)
    if time_range is TimeRange.ONE_WEEK:
        return today - timedelta(days=WEEK_LOOKBACK_DAYS)
    if time_range is TimeRange.ONE_MONTH:
        return _add_months(today, -1, today.day)
    if time_range is TimeRange.THREE_MONTHS:
        return _add_months(today, -3, today.day)
    if time_range is TimeRange.YEAR_TO_DATE:
        return date(today.year, 1, 1)
    return _add_months(today, -12, today.day)


def _add_months(start_date: date, months: int, anchor_day: int) -> date:
    total_month = start_date.month - 1 + months
    year = start_date.year + total_month // 12
    month = total_month % 12 + 1
    last_day = monthrange(year, month)[1]
    day = min(anchor_day, last_day)
    return date(year, month, day)
