"""
This module computes the descriptive statistics behind a trend analysis.

Conventions:

- the median of an even-length series is the element at index `n // 2` of the
  sorted rates, not the average of the two middle values;
- the standard deviation is the population one (divides by N).
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Union

import numpy as np

from .constants import DEFAULT_PERIOD_DAYS, TIMESTAMP_DATE_FORMAT, TIMESTAMP_DATE_LENGTH
from .exceptions import EmptyWindowError
from .models import MetadataRecord, TrendStatistics

logger = logging.getLogger(__name__)


def parse_period_days(value: Optional[Union[str, int]]) -> int:
    """Parses a window length in days, falling back to the default."""
    try:
        days = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_PERIOD_DAYS
    return days if days > 0 else DEFAULT_PERIOD_DAYS


def timestamp_to_date(timestamp: Optional[str]) -> Optional[date]:
    """Returns the calendar date of a `YYYYMMDD-HHMMSS` timestamp, or None."""
    if not timestamp:
        return None
    try:
        return datetime.strptime(
            timestamp[:TIMESTAMP_DATE_LENGTH], TIMESTAMP_DATE_FORMAT
        ).date()
    except ValueError:
        return None


def format_timestamp_date(timestamp: Optional[str]) -> str:
    """Formats the date part of a timestamp as `YYYY-MM-DD`."""
    ts = timestamp or ""
    return f"{ts[0:4]}-{ts[4:6]}-{ts[6:8]}"


def filter_trend_window(
    records: List[MetadataRecord],
    period_days: int,
    now: Optional[datetime] = None,
) -> List[MetadataRecord]:
    """
    Keeps the records dated on or after the cutoff day.

    The cutoff is `now - period_days` and the comparison is made on calendar
    days, so a run from any time on the cutoff day is included. Records whose
    timestamp does not start with a valid date are dropped.

    Raises:
        EmptyWindowError: If no record remains.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = (now - timedelta(days=period_days)).date()

    window = []
    for record in records:
        record_date = timestamp_to_date(record.timestamp)
        if record_date is None:
            logger.debug(f"Ignoring record with unparseable timestamp: {record.timestamp!r}")
            continue
        if record_date >= cutoff:
            window.append(record)

    if not window:
        raise EmptyWindowError(f"No reports found in the last {period_days} days")
    return window


def floor_index_median(values: List[float]) -> float:
    """Returns `sorted(values)[len(values) // 2]`."""
    return sorted(values)[len(values) // 2]


def format_history_line(record: MetadataRecord) -> str:
    return (
        f"{format_timestamp_date(record.timestamp)}: {record.pass_rate:.1f}% "
        f"({record.passed}/{record.total_tests})"
    )


def compute_trend_statistics(
    records: List[MetadataRecord],
    period_days: int = DEFAULT_PERIOD_DAYS,
    now: Optional[datetime] = None,
) -> TrendStatistics:
    """
    Filters `records` to the trend window and summarises their pass rates.

    Args:
        records: Metadata records ordered oldest first.
        period_days: The window length in days.
        now: The reference time, defaulting to the current UTC time.

    Returns:
        A TrendStatistics object. `max_record` and `min_record` are the first
        records, in time order, reaching the extreme pass rate.

    Raises:
        EmptyWindowError: If no record falls inside the window.
    """
    window = filter_trend_window(records, period_days, now)
    rates = [r.pass_rate for r in window]

    max_rate = max(rates)
    min_rate = min(rates)
    max_record = next(r for r in window if r.pass_rate == max_rate)
    min_record = next(r for r in window if r.pass_rate == min_rate)

    stats = TrendStatistics(
        period_days=period_days,
        records=window,
        average=float(np.mean(rates)),
        median=floor_index_median(rates),
        std_dev=float(np.std(rates)),
        max_pass_rate=max_rate,
        max_record=max_record,
        min_pass_rate=min_rate,
        min_record=min_record,
        historical_data="\n".join(format_history_line(r) for r in window),
    )
    logger.info(
        f"Trend window: {stats.total_runs} run(s), avg {stats.average:.1f}%, "
        f"std {stats.std_dev:.1f}%"
    )
    return stats
