"""
Centralized definitions for all project-wide constants.

This module consolidates file paths, directory names, and other static values
to ensure consistency and ease of maintenance. The report and analysis roots
are defaults only; every component receives its roots explicitly so they can
be redirected from the command line or the configuration file.

Attributes:
    PROJECT_ROOT (str): The absolute path to the project's root directory.
    CONFIG_DIR (str): The name of the configuration directory.
    REPORTS_DIR (str): The default root holding `{project}/{timestamp}` runs.
    ANALYSIS_DIR (str): The default root receiving generated analyses.
    ANALYZER_CONFIG_FILENAME (str): The filename for the analyzer config.
    METADATA_FILENAME (str): The per-run metadata filename.
    LATEST_ANALYSIS_FILENAME (str): Output of a single-report analysis.
    INSIGHTS_FILENAME (str): Structured summary of a single-report analysis.
    TREND_ANALYSIS_FILENAME (str): Output of a trend analysis.
"""

import os

# --- Project Root ---
# Resolves the absolute path to the project's root directory, allowing for
# consistent pathing regardless of where the script is executed from.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# --- Top-Level Directory Names ---
CONFIG_DIR = "config"
REPORTS_DIR = "reports"
ANALYSIS_DIR = "analysis"

# --- Configuration Filenames ---
ANALYZER_CONFIG_FILENAME = "config_ci_insights.yaml"

# --- File Names (used within a project-specific folder) ---
METADATA_FILENAME = "metadata.json"
LATEST_ANALYSIS_FILENAME = "latest-analysis.md"
INSIGHTS_FILENAME = "insights.json"
TREND_ANALYSIS_FILENAME = "trend-analysis.md"
