import math
from datetime import datetime, timezone

import pytest
from helpers import make_metadata

from src.ci_insights.utils.exceptions import EmptyWindowError
from src.ci_insights.utils.models import MetadataRecord
from src.ci_insights.utils.stats_utils import (
    compute_trend_statistics,
    filter_trend_window,
    floor_index_median,
    format_history_line,
    parse_period_days,
    timestamp_to_date,
)

NOW = datetime(2025, 3, 10, 15, 30, tzinfo=timezone.utc)


def record(timestamp: str, pass_rate: float, **fields) -> MetadataRecord:
    return MetadataRecord.model_validate(make_metadata(timestamp, pass_rate, **fields))


def test_mean_and_population_std_dev():
    """Tests that the average is the arithmetic mean and the std divides by N."""
    rates = [80.0, 90.0, 100.0, 95.0]
    records = [record(f"2025030{i + 1}-120000", r) for i, r in enumerate(rates)]

    stats = compute_trend_statistics(records, 30, NOW)

    mean = sum(rates) / len(rates)
    population_std = math.sqrt(sum((r - mean) ** 2 for r in rates) / len(rates))
    assert stats.average == pytest.approx(mean)
    assert stats.std_dev == pytest.approx(population_std)
    assert stats.total_runs == 4


def test_median_takes_floor_index_of_even_length_series():
    """Tests that an even-length median is sorted[n // 2], not an average."""
    assert floor_index_median([10.0, 20.0, 30.0, 40.0]) == 30.0
    assert floor_index_median([40.0, 10.0, 30.0, 20.0]) == 30.0
    assert floor_index_median([5.0, 1.0, 3.0]) == 3.0


def test_window_includes_the_whole_boundary_day():
    """Tests that a run early on the cutoff day is kept while the day before is not."""
    records = [
        record("20250302-235959", 50.0),
        record("20250303-000001", 60.0),
        record("20250310-080000", 70.0),
    ]

    window = filter_trend_window(records, 7, NOW)

    assert [r.timestamp for r in window] == ["20250303-000001", "20250310-080000"]


def test_window_raises_when_empty():
    """Tests that a window without any record is an error."""
    with pytest.raises(EmptyWindowError, match="last 7 days"):
        filter_trend_window([record("20240101-000000", 90.0)], 7, NOW)


def test_window_drops_unparseable_timestamps():
    """Tests that a record whose timestamp has no valid date is ignored."""
    records = [record("not-a-date", 10.0), record("20250309-000000", 90.0)]
    window = filter_trend_window(records, 30, NOW)
    assert [r.pass_rate for r in window] == [90.0]


def test_extremes_keep_the_first_matching_record():
    """Tests that ties on max/min are broken by time order."""
    records = [
        record("20250301-000000", 70.0, run_number=1),
        record("20250302-000000", 95.0, run_number=2),
        record("20250303-000000", 70.0, run_number=3),
        record("20250304-000000", 95.0, run_number=4),
    ]

    stats = compute_trend_statistics(records, 30, NOW)

    assert stats.max_pass_rate == 95.0
    assert stats.max_record.run_number == 2
    assert stats.min_pass_rate == 70.0
    assert stats.min_record.run_number == 1


def test_historical_data_has_one_line_per_run():
    """Tests the `date: rate% (passed/total)` history rendering."""
    records = [
        record("20250308-101010", 90.0, total_tests=50, passed=45),
        record("20250309-101010", 100.0, total_tests=50, passed=50),
    ]

    stats = compute_trend_statistics(records, 30, NOW)

    assert stats.historical_data == (
        "2025-03-08: 90.0% (45/50)\n2025-03-09: 100.0% (50/50)"
    )
    assert format_history_line(records[0]) == "2025-03-08: 90.0% (45/50)"


@pytest.mark.parametrize(
    "value,expected",
    [(None, 30), ("", 30), ("abc", 30), ("0", 30), ("-3", 30), ("7", 7), (14, 14)],
)
def test_parse_period_days(value, expected):
    """Tests that invalid or missing periods fall back to 30 days."""
    assert parse_period_days(value) == expected


def test_timestamp_to_date_ignores_time_of_day():
    """Tests that only the first 8 characters are used."""
    assert timestamp_to_date("20250131-235959") == datetime(2025, 1, 31).date()
    assert timestamp_to_date("2025-01-31") is None
    assert timestamp_to_date(None) is None
