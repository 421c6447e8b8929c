"""
This module turns metadata and statistics into the text sent to the LLM.

Templates use `{name}` placeholders, where `name` is an identifier. Every
occurrence of a placeholder is replaced; a placeholder without a value, or
whose value is None, renders as `N/A`. Any other brace text, such as a JSON
example in the instructions, is copied unchanged.
"""

import logging
import re
from typing import Any, Dict, Mapping, Optional

from .constants import FAILED_TESTS_PREVIEW_LIMIT, NOT_AVAILABLE
from .models import MetadataRecord, TrendStatistics

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def display_value(value: Any) -> str:
    """Renders a free-form metadata field, with `N/A` for empty values."""
    return str(value) if value else NOT_AVAILABLE


def format_percentage(value: Optional[float]) -> str:
    return NOT_AVAILABLE if value is None else f"{value:.1f}"


def format_delta(delta: float) -> str:
    """Formats a pass-rate change with one decimal and an explicit `+` when positive."""
    return f"+{delta:.1f}" if delta > 0 else f"{delta:.1f}"


def render_template(template: str, values: Mapping[str, Any]) -> str:
    """
    Substitutes `values` into the `{name}` placeholders of `template`.

    Args:
        template: The template text.
        values: Placeholder name to value. Values are converted with `str`.

    Returns:
        The rendered text. Brace text that is not a `{name}` token is kept.
    """

    def _substitute(match: "re.Match[str]") -> str:
        name = match.group(1)
        value = values.get(name)
        if value is None:
            logger.debug(f"Placeholder '{{{name}}}' has no value; using {NOT_AVAILABLE}.")
            return NOT_AVAILABLE
        return str(value)

    return PLACEHOLDER_PATTERN.sub(_substitute, template)


def build_failed_tests_details(
    record: MetadataRecord, limit: int = FAILED_TESTS_PREVIEW_LIMIT
) -> str:
    """
    Lists the first failing tests of a run.

    Returns an empty string when the run has no failures. Otherwise the block
    starts with the failure count, lists up to `limit` test names and notes
    how many were left out.
    """
    if record.failed <= 0:
        return ""

    details = f"\nFailed Tests: {record.failed}\n"
    details += "\n".join(f"- {name}" for name in record.failed_tests[:limit])
    if len(record.failed_tests) > limit:
        details += f"\n... and {len(record.failed_tests) - limit} more"
    return details


def build_single_report_values(
    project: str,
    timestamp: str,
    record: MetadataRecord,
    previous_pass_rate: float,
    failed_tests_limit: int = FAILED_TESTS_PREVIEW_LIMIT,
) -> Dict[str, Any]:
    """Builds the placeholder values of the single-report prompt."""
    pass_rate_change = record.pass_rate - previous_pass_rate
    return {
        "project": project,
        "timestamp": timestamp,
        "run_number": display_value(record.run_number),
        "branch": display_value(record.branch),
        "total_tests": record.total_tests,
        "passed": record.passed,
        "failed": record.failed,
        "pass_rate": format_percentage(record.pass_rate),
        "previous_pass_rate": format_percentage(previous_pass_rate),
        "pass_rate_change": format_delta(pass_rate_change),
        "failed_tests_details": build_failed_tests_details(record, failed_tests_limit),
    }


def build_trend_values(project: str, stats: TrendStatistics) -> Dict[str, Any]:
    """Builds the placeholder values of the trend-analysis prompt."""
    return {
        "project": project,
        "period_days": stats.period_days,
        "total_runs": stats.total_runs,
        "historical_data": stats.historical_data,
        "avg_pass_rate": format_percentage(stats.average),
        "median_pass_rate": format_percentage(stats.median),
        "std_dev": format_percentage(stats.std_dev),
        "max_pass_rate": format_percentage(stats.max_pass_rate),
        "max_date": display_value(stats.max_record.timestamp),
        "min_pass_rate": format_percentage(stats.min_pass_rate),
        "min_date": display_value(stats.min_record.timestamp),
    }
