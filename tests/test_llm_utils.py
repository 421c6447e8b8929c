import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_core.runnables import RunnableLambda
from langchain_ollama import ChatOllama

from src.ci_insights.main import LLMConfig, OllamaSettings
from src.ci_insights.utils.exceptions import (
    AuthError,
    ConfigurationError,
    ParseError,
    UpstreamError,
)
from src.ci_insights.utils.llm_utils import (
    AnalysisClient,
    extract_text,
    get_llm_instance,
    resolve_api_key,
)


def test_missing_credential_raises_auth_error(monkeypatch):
    """Tests that an unset or blank API key is a configuration error."""
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    with pytest.raises(AuthError, match="GOOGLE_API_KEY"):
        resolve_api_key("GOOGLE_API_KEY")

    monkeypatch.setenv("GOOGLE_API_KEY", "   ")
    with pytest.raises(AuthError):
        get_llm_instance(LLMConfig())


def test_auth_error_is_a_configuration_error():
    assert issubclass(AuthError, ConfigurationError)


def test_unknown_provider_is_rejected():
    """Tests that only gemini and ollama are accepted."""
    with pytest.raises(ConfigurationError, match="Invalid LLM provider"):
        get_llm_instance(LLMConfig(provider="carrier-pigeon"))


def test_ollama_requires_a_model_name():
    with pytest.raises(ConfigurationError, match="no model name"):
        get_llm_instance(LLMConfig(provider="ollama"))


def test_ollama_needs_no_credential(monkeypatch):
    """Tests that a local provider is built without any API key."""
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    config = LLMConfig(
        provider="ollama",
        ollama_settings=OllamaSettings(model_name="llama3", base_url="http://localhost:11434"),
    )
    assert isinstance(get_llm_instance(config), ChatOllama)


def test_generate_returns_model_text():
    """Tests a successful round trip through a LangChain chat model."""
    client = AnalysisClient(FakeListChatModel(responses=["All green."]), provider="fake")
    assert client.generate("system", "user") == "All green."


def test_generate_sends_system_and_user_roles():
    """Tests that the instruction and the prompt are sent as separate messages."""
    seen = []

    def respond(messages):
        seen.extend(messages)
        return AIMessage(content="ok")

    AnalysisClient(RunnableLambda(respond)).generate("Be brief.", "Run 42 failed.")

    assert isinstance(seen[0], SystemMessage)
    assert seen[0].content == "Be brief."
    assert isinstance(seen[1], HumanMessage)
    assert seen[1].content == "Run 42 failed."


def test_provider_failure_becomes_upstream_error():
    """Tests that the provider's error text is kept for diagnostics."""

    def fail(_messages):
        raise RuntimeError('403 {"error": "quota exceeded"}')

    with pytest.raises(UpstreamError, match="quota exceeded"):
        AnalysisClient(RunnableLambda(fail)).generate("s", "u")


def test_extract_text_takes_the_first_text_block():
    """Tests list-shaped message content."""
    message = AIMessage(
        content=[{"type": "thinking", "thinking": "..."}, {"type": "text", "text": "Summary"}]
    )
    assert extract_text(message) == "Summary"


@pytest.mark.parametrize("response", [AIMessage(content=""), AIMessage(content=[]), object()])
def test_extract_text_without_text_raises_parse_error(response):
    with pytest.raises(ParseError):
        extract_text(response)
