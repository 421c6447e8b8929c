import pytest
from helpers import RecordingLLM

from src.ci_insights.main import DEFAULT_ANALYZER_CONFIG_PATH, AnalyzerConfig, load_analyzer_config
from src.ci_insights.utils.llm_utils import AnalysisClient


@pytest.fixture
def analyzer_config() -> AnalyzerConfig:
    return load_analyzer_config(DEFAULT_ANALYZER_CONFIG_PATH)


@pytest.fixture
def recording_llm() -> RecordingLLM:
    return RecordingLLM()


@pytest.fixture
def fake_client(recording_llm: RecordingLLM) -> AnalysisClient:
    return AnalysisClient(recording_llm.runnable(), provider="fake")
