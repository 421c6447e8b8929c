"""
This module is the entry point of the CI insights analyzer.

It defines the `InsightAnalyzer` class, which turns the test-run metadata
pushed by client projects into an LLM-written analysis. The key
responsibilities of this module are:

1.  **Configuration Loading**: Loads and validates the LLM settings, directory
    layout and prompt templates from a YAML file using Pydantic models.
2.  **Single-Report Analysis**: Compares one run with the run before it and
    asks the LLM to explain the result.
3.  **Trend Analysis**: Summarises every run of a time window with descriptive
    statistics and asks the LLM to describe the trend.
4.  **Artifact Writing**: Saves the analyses (Markdown) and a structured
    summary (JSON) into the project's analysis folder.

Execution:
    $ python -m src.ci_insights.main --project my-app --type single --timestamp 20250101-120000
    $ python -m src.ci_insights.main --project my-app --type trend --period 7
"""

# =============================================================================
# HEADER (Imports, Constants, Logger)
# =============================================================================
import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .. import constants
from .utils.constants import (
    ANALYSIS_TYPE_SINGLE,
    ANALYSIS_TYPE_TREND,
    ANALYSIS_TYPES,
    DEFAULT_API_KEY_ENV,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_PERIOD_DAYS,
    DEFAULT_PROVIDER,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    FAILED_TESTS_PREVIEW_LIMIT,
    GEMINI_DEFAULT_MODEL_NAME,
)
from .utils.exceptions import AnalyzerError, ConfigurationError
from .utils.llm_utils import AnalysisClient
from .utils.metadata_utils import find_previous_report, load_project_reports, load_report
from .utils.models import AnalysisResult
from .utils.prompt_utils import build_single_report_values, build_trend_values, render_template
from .utils.report_utils import ReportWriter, utc_isoformat
from .utils.stats_utils import compute_trend_statistics, parse_period_days
from .utils.storage import LocalStorage, Storage

# --- Logger ---
logger = logging.getLogger(__name__)

# --- Application Configuration ---
DEFAULT_ANALYZER_CONFIG_PATH = os.path.join(
    constants.PROJECT_ROOT, constants.CONFIG_DIR, constants.ANALYZER_CONFIG_FILENAME
)
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# CONFIGURATION MODELS (Pydantic)
# =============================================================================
class GeminiSettings(BaseModel):
    """Settings specific to the Google Gemini provider."""

    model_name: str = GEMINI_DEFAULT_MODEL_NAME


class OllamaSettings(BaseModel):
    """Settings specific to a local Ollama provider."""

    model_name: Optional[str] = None
    base_url: Optional[str] = None


class LLMConfig(BaseModel):
    """Configuration for the LLM provider and its specific settings."""

    provider: str = Field(
        default=DEFAULT_PROVIDER,
        description="The LLM provider to use ('gemini' or 'ollama').",
    )
    api_key_env: str = Field(
        default=DEFAULT_API_KEY_ENV,
        description="Environment variable holding the provider's API key.",
    )
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS,
        description="Deadline for the single generation request.",
    )
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    gemini_settings: GeminiSettings = Field(default_factory=GeminiSettings)
    ollama_settings: OllamaSettings = Field(default_factory=OllamaSettings)


class DirectoryStructureConfig(BaseModel):
    """Roots of the input and output trees, relative to the working directory."""

    reports_dir: str = Field(
        default=constants.REPORTS_DIR,
        description="Root holding `{project}/{timestamp}/metadata.json` runs.",
    )
    analysis_dir: str = Field(
        default=constants.ANALYSIS_DIR,
        description="Root receiving `{project}/` analysis artifacts.",
    )


class PromptPair(BaseModel):
    """A system instruction and a user prompt template for one analysis type."""

    system_prompt: str
    user_prompt_template: str


class PromptsConfig(BaseModel):
    single_report: PromptPair
    trend_analysis: PromptPair


class AnalyzerConfig(BaseModel):
    """The main configuration model that aggregates all other settings."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    directory_structure: DirectoryStructureConfig = Field(
        default_factory=DirectoryStructureConfig
    )
    prompts: PromptsConfig
    failed_tests_preview_limit: int = Field(
        default=FAILED_TESTS_PREVIEW_LIMIT,
        description="Failing test names listed in a single-report prompt.",
    )


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================
def load_analyzer_config(
    config_path: str = DEFAULT_ANALYZER_CONFIG_PATH,
) -> AnalyzerConfig:
    """
    Loads and validates the analyzer configuration from a YAML file.

    Args:
        config_path: The path to the YAML configuration file.

    Returns:
        A validated AnalyzerConfig object.

    Raises:
        ConfigurationError: If the file is missing, empty, not valid YAML, or
            does not match the `AnalyzerConfig` model.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
        if not config_data:
            raise ConfigurationError(f"Configuration file is empty: {config_path}")
        return AnalyzerConfig(**config_data)
    except FileNotFoundError as e:
        logger.error(f"Analyzer configuration file not found at {config_path}.")
        raise ConfigurationError(f"Configuration file not found: {config_path}") from e
    except yaml.YAMLError as e:
        logger.error(f"Error parsing analyzer configuration YAML file '{config_path}': {e}")
        raise ConfigurationError(f"Invalid YAML in {config_path}") from e
    except ValidationError as e:
        logger.error(f"Error validating configuration from '{config_path}':\n{e}")
        raise ConfigurationError(f"Invalid configuration in {config_path}") from e


# =============================================================================
# MAIN ANALYZER CLASS
# =============================================================================
class InsightAnalyzer:
    """
    Generates LLM-driven analyses of the test runs of a project.

    Every collaborator is injected, so the analyzer can run against an
    in-memory storage and a fake chat model.

    Attributes:
        config (AnalyzerConfig): The validated configuration object.
        storage (Storage): File access for both the reports and analysis trees.
        client (AnalysisClient): The LLM client.
        reports_dir (str): The root of the reports tree.
        writer (ReportWriter): Writes the artifacts under the analysis root.
    """

    def __init__(
        self,
        config: AnalyzerConfig,
        storage: Storage,
        client: AnalysisClient,
        reports_dir: Optional[str] = None,
        analysis_dir: Optional[str] = None,
    ):
        self.config = config
        self.storage = storage
        self.client = client
        self.reports_dir = reports_dir or config.directory_structure.reports_dir
        self.writer = ReportWriter(
            storage, analysis_dir or config.directory_structure.analysis_dir
        )

    def analyze_single(self, project: str, timestamp: str) -> AnalysisResult:
        """
        Analyzes one run against the run immediately before it.

        The first run of a project is compared against a zero baseline.

        Raises:
            NotFoundError: If the run's metadata is missing or unreadable.
            UpstreamError, ParseError: If the LLM call fails.
        """
        logger.info(f"Analyzing single report: {project}/{timestamp}")

        record = load_report(self.storage, self.reports_dir, project, timestamp)
        previous = find_previous_report(self.storage, self.reports_dir, project, timestamp)
        previous_pass_rate = previous.pass_rate if previous else 0.0
        pass_rate_change = record.pass_rate - previous_pass_rate

        prompts = self.config.prompts.single_report
        user_prompt = render_template(
            prompts.user_prompt_template,
            build_single_report_values(
                project,
                timestamp,
                record,
                previous_pass_rate,
                self.config.failed_tests_preview_limit,
            ),
        )
        analysis = self.client.generate(prompts.system_prompt, user_prompt)

        generated_at = utc_isoformat()
        report_path, insights_path = self.writer.write_single_report(
            project, timestamp, record, analysis, pass_rate_change, generated_at
        )
        return AnalysisResult(
            project=project,
            analysis_type=ANALYSIS_TYPE_SINGLE,
            analysis=analysis,
            generated_at=generated_at,
            report_path=report_path,
            insights_path=insights_path,
            record=record,
            pass_rate_change=pass_rate_change,
        )

    def analyze_trend(
        self,
        project: str,
        period_days: int = DEFAULT_PERIOD_DAYS,
        now: Optional[datetime] = None,
    ) -> AnalysisResult:
        """
        Analyzes the pass-rate trend of a project over the last `period_days`.

        Raises:
            NotFoundError: If the project directory does not exist.
            EmptyWindowError: If no run falls inside the window.
            UpstreamError, ParseError: If the LLM call fails.
        """
        logger.info(f"Analyzing trend for {project} over {period_days} days")

        records = load_project_reports(self.storage, self.reports_dir, project)
        stats = compute_trend_statistics(
            records, period_days, now or datetime.now(timezone.utc)
        )

        prompts = self.config.prompts.trend_analysis
        user_prompt = render_template(
            prompts.user_prompt_template, build_trend_values(project, stats)
        )
        analysis = self.client.generate(prompts.system_prompt, user_prompt)

        generated_at = utc_isoformat()
        report_path = self.writer.write_trend_report(project, stats, analysis, generated_at)
        return AnalysisResult(
            project=project,
            analysis_type=ANALYSIS_TYPE_TREND,
            analysis=analysis,
            generated_at=generated_at,
            report_path=report_path,
            statistics=stats,
        )


# =============================================================================
# SCRIPT EXECUTION (The if __name__ == "__main__" block)
# =============================================================================
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate an LLM-based analysis of CI test-run reports."
    )
    parser.add_argument("--project", type=str, help="Project whose reports are analyzed.")
    parser.add_argument(
        "--type",
        type=str,
        dest="analysis_type",
        help=f"Analysis type: {' or '.join(ANALYSIS_TYPES)}.",
    )
    parser.add_argument(
        "--timestamp",
        type=str,
        help="Run to analyze (YYYYMMDD-HHMMSS). Required for 'single'.",
    )
    parser.add_argument(
        "--period",
        type=str,
        default=None,
        help=f"Trend window in days (default: {DEFAULT_PERIOD_DAYS}). Used by 'trend'.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_ANALYZER_CONFIG_PATH,
        help="Path to the analyzer YAML configuration.",
    )
    parser.add_argument(
        "--reports-dir", type=str, help="Override the configured reports root."
    )
    parser.add_argument(
        "--analysis-dir", type=str, help="Override the configured analysis root."
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="INFO",
        choices=LOG_LEVELS,
        help="Logging level (default: INFO).",
    )
    return parser


def validate_args(args: argparse.Namespace) -> None:
    """
    Checks the argument combinations argparse cannot express.

    Raises:
        ConfigurationError: On a missing or invalid argument.
    """
    if not args.project:
        raise ConfigurationError("--project is required")
    if not args.analysis_type:
        raise ConfigurationError("--type is required")
    if args.analysis_type not in ANALYSIS_TYPES:
        raise ConfigurationError(f"Unknown analysis type: {args.analysis_type}")
    if args.analysis_type == ANALYSIS_TYPE_SINGLE and not args.timestamp:
        raise ConfigurationError("--timestamp is required for single report analysis")


def run(args: argparse.Namespace, storage: Optional[Storage] = None) -> AnalysisResult:
    """
    Runs one analysis as described by the parsed command-line arguments.

    Arguments are validated and the LLM client is built (which checks the
    credential) before any report is read or any file is written.
    """
    validate_args(args)
    config = load_analyzer_config(args.config)
    client = AnalysisClient.from_config(config.llm)

    analyzer = InsightAnalyzer(
        config=config,
        storage=storage or LocalStorage(),
        client=client,
        reports_dir=args.reports_dir,
        analysis_dir=args.analysis_dir,
    )
    if args.analysis_type == ANALYSIS_TYPE_SINGLE:
        return analyzer.analyze_single(args.project, args.timestamp)
    return analyzer.analyze_trend(args.project, parse_period_days(args.period))


def main(argv: Optional[List[str]] = None) -> int:
    """Parses command-line arguments, runs the analysis and returns the exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level, format="%(asctime)s - %(levelname)s - %(message)s"
    )
    # Silence noisy third-party loggers to keep the output clean.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)
    logging.getLogger("google.api_core").setLevel(logging.ERROR)

    load_dotenv()

    try:
        run(args)
    except AnalyzerError as e:
        logger.critical(f"Error: {e}")
        return 1
    except OSError as e:
        logger.critical(f"File system error: {e}")
        return 1

    logger.info("Analysis complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
