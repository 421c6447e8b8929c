"""
This module centralizes all shared constants for the CI insights package.

Using a dedicated constants module ensures consistency, avoids magic strings,
and makes the code easier to maintain and understand.
"""

# =============================================================================
# Analysis Modes
# =============================================================================

ANALYSIS_TYPE_SINGLE = "single"
ANALYSIS_TYPE_TREND = "trend"
ANALYSIS_TYPES = (ANALYSIS_TYPE_SINGLE, ANALYSIS_TYPE_TREND)

# =============================================================================
# Trend Window
# =============================================================================

DEFAULT_PERIOD_DAYS = 30
TIMESTAMP_DATE_FORMAT = "%Y%m%d"  # Applied to the first 8 characters only.
TIMESTAMP_DATE_LENGTH = 8

# =============================================================================
# Prompt Rendering
# =============================================================================

NOT_AVAILABLE = "N/A"
FAILED_TESTS_PREVIEW_LIMIT = 5

# =============================================================================
# LLM Defaults
# =============================================================================

DEFAULT_PROVIDER = "gemini"
DEFAULT_API_KEY_ENV = "GOOGLE_API_KEY"
GEMINI_DEFAULT_MODEL_NAME = "gemini-flash-latest"
DEFAULT_MAX_OUTPUT_TOKENS = 4096
DEFAULT_REQUEST_TIMEOUT_SECONDS = 120.0
