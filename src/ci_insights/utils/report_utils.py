"""
This module writes the analysis artifacts of a project.

All artifacts live under `{analysis_dir}/{project}/` at fixed names and are
overwritten on every run:

- `latest-analysis.md`: the last single-report analysis;
- `insights.json`: a structured summary of that same analysis;
- `trend-analysis.md`: the last trend analysis.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ... import constants
from .models import MetadataRecord, TrendStatistics
from .prompt_utils import display_value
from .storage import Storage

logger = logging.getLogger(__name__)


def utc_isoformat(moment: Optional[datetime] = None) -> str:
    """Formats a UTC time as `2025-01-31T12:00:00.000Z`."""
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def first_line(text: Optional[str]) -> str:
    """Returns the first line of `text`, used as a one-line summary."""
    return (text or "").split("\n")[0]


def _with_footer(header: str, analysis: str, generated_at: str) -> str:
    return f"{header}\n---\n\n{analysis}\n\n---\n\n*Generated at {generated_at}*\n"


def format_single_report(
    project: str, timestamp: str, record: MetadataRecord, analysis: str, generated_at: str
) -> str:
    """Builds the Markdown document of a single-report analysis."""
    header = (
        f"# Analysis for {project} - Run #{display_value(record.run_number)}\n"
        f"\n"
        f"**Timestamp:** {timestamp}\n"
        f"**Branch:** {display_value(record.branch)}\n"
        f"**Status:** {display_value(record.status)}\n"
        f"**Pass Rate:** {record.pass_rate:.1f}% ({record.passed}/{record.total_tests})\n"
    )
    return _with_footer(header, analysis, generated_at)


def format_trend_report(
    project: str, stats: TrendStatistics, analysis: str, generated_at: str
) -> str:
    """Builds the Markdown document of a trend analysis."""
    header = (
        f"# Trend Analysis for {project}\n"
        f"\n"
        f"**Period:** Last {stats.period_days} days\n"
        f"**Total Runs:** {stats.total_runs}\n"
        f"**Average Pass Rate:** {stats.average:.1f}%\n"
        f"**Standard Deviation:** {stats.std_dev:.1f}%\n"
    )
    return _with_footer(header, analysis, generated_at)


def build_insights(
    project: str,
    timestamp: str,
    record: MetadataRecord,
    analysis: str,
    pass_rate_change: float,
    generated_at: str,
) -> Dict[str, Any]:
    return {
        "timestamp": generated_at,
        "project": project,
        "report_timestamp": timestamp,
        "metadata": record.as_metadata(),
        "analysis_summary": first_line(analysis),
        "pass_rate_change": pass_rate_change,
    }


class ReportWriter:
    """
    Persists generated analyses for a project.

    Attributes:
        storage (Storage): Where the artifacts are written.
        analysis_dir (str): The root of the analysis tree.
    """

    def __init__(self, storage: Storage, analysis_dir: str):
        self.storage = storage
        self.analysis_dir = analysis_dir

    def project_dir(self, project: str) -> str:
        """Returns the project's output directory, creating it if needed."""
        path = os.path.join(self.analysis_dir, project)
        self.storage.makedirs(path)
        return path

    def write_single_report(
        self,
        project: str,
        timestamp: str,
        record: MetadataRecord,
        analysis: str,
        pass_rate_change: float,
        generated_at: str,
    ) -> tuple[str, str]:
        """
        Writes `latest-analysis.md` and `insights.json`.

        Returns:
            The paths of the Markdown report and of the insights file.
        """
        project_dir = self.project_dir(project)

        report_path = os.path.join(project_dir, constants.LATEST_ANALYSIS_FILENAME)
        self.storage.write_text(
            report_path,
            format_single_report(project, timestamp, record, analysis, generated_at),
        )
        logger.info(f"Analysis saved to {report_path}")

        insights_path = os.path.join(project_dir, constants.INSIGHTS_FILENAME)
        insights = build_insights(
            project, timestamp, record, analysis, pass_rate_change, generated_at
        )
        self.storage.write_text(insights_path, json.dumps(insights, indent=2))
        logger.info(f"Insights saved to {insights_path}")
        return report_path, insights_path

    def write_trend_report(
        self, project: str, stats: TrendStatistics, analysis: str, generated_at: str
    ) -> str:
        """Writes `trend-analysis.md` and returns its path."""
        report_path = os.path.join(
            self.project_dir(project), constants.TREND_ANALYSIS_FILENAME
        )
        self.storage.write_text(
            report_path, format_trend_report(project, stats, analysis, generated_at)
        )
        logger.info(f"Trend analysis saved to {report_path}")
        return report_path
