"""
This module wraps the chat model that writes the analyses.

The model is any LangChain `Runnable` accepting a list of messages, which
keeps the client independent from the provider and lets tests substitute a
fake model. `get_llm_instance` builds the configured provider:

- `gemini`: Google Gemini through `langchain-google-genai`. Requires the API
  key held in the environment variable named by the configuration.
- `ollama`: A local Ollama server through `langchain-ollama`. No credential.

Requests are sent once, without retries, and block until the provider answers
or the configured timeout expires.
"""

import logging
import os
from typing import TYPE_CHECKING, Any, Dict, List

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_core.runnables import Runnable
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_ollama import ChatOllama

from .exceptions import AuthError, ConfigurationError, ParseError, UpstreamError

if TYPE_CHECKING:
    from ..main import LLMConfig

logger = logging.getLogger(__name__)


def resolve_api_key(env_var: str) -> str:
    """
    Reads the API key from the environment.

    Raises:
        AuthError: If the variable is unset or empty.
    """
    api_key = os.environ.get(env_var, "").strip()
    if not api_key:
        raise AuthError(f"{env_var} environment variable not set")
    return api_key


def get_llm_instance(llm_config: "LLMConfig") -> Runnable:
    """
    Initializes the configured chat model via LangChain.

    Raises:
        AuthError: If the provider needs a credential and none is set.
        ConfigurationError: If the provider is unknown or incompletely configured.
    """
    provider = llm_config.provider.lower()
    if provider == "gemini":
        api_key = resolve_api_key(llm_config.api_key_env)
        model_name = llm_config.gemini_settings.model_name
        logger.info(f"Initializing LangChain Gemini model: {model_name}")
        return ChatGoogleGenerativeAI(
            model=model_name,
            google_api_key=api_key,
            max_output_tokens=llm_config.max_output_tokens,
            timeout=llm_config.request_timeout_seconds,
            max_retries=0,
        )

    elif provider == "ollama":
        model_name = llm_config.ollama_settings.model_name
        if not model_name:
            raise ConfigurationError("Ollama provider selected, but no model name is set.")
        logger.info(f"Initializing LangChain Ollama model: {model_name}")
        init_kwargs: Dict[str, Any] = {
            "model": model_name,
            "num_predict": llm_config.max_output_tokens,
            "client_kwargs": {"timeout": llm_config.request_timeout_seconds},
        }
        base_url = llm_config.ollama_settings.base_url or os.environ.get("OLLAMA_BASE_URL")
        if base_url:
            init_kwargs["base_url"] = base_url
            logger.info(f"  Connecting to Ollama at: {base_url}")
        return ChatOllama(**init_kwargs)

    else:
        raise ConfigurationError(f"Invalid LLM provider in config: '{provider}'")


def extract_text(response: Any) -> str:
    """
    Returns the first text segment of a chat model response.

    The content of a LangChain message is either a string or a list of content
    blocks (plain strings or `{"type": "text", "text": ...}` dictionaries).

    Raises:
        ParseError: If the response carries no text segment.
    """
    content = getattr(response, "content", None)
    if isinstance(content, str):
        if content:
            return content
    elif isinstance(content, list):
        for block in content:
            if isinstance(block, str) and block:
                return block
            if isinstance(block, dict) and block.get("type") == "text" and block.get("text"):
                return block["text"]
    raise ParseError(f"Failed to parse API response: no text in {type(response).__name__}")


def _log_token_usage(response: Any, provider: str) -> None:
    usage = getattr(response, "usage_metadata", None)
    if not usage:
        return
    logger.info(f"--- {provider.capitalize()} Token Usage ---")
    logger.info(f"  Input:  {usage.get('input_tokens', 'N/A')} tokens")
    logger.info(f"  Output: {usage.get('output_tokens', 'N/A')} tokens")
    logger.info(f"  Total:  {usage.get('total_tokens', 'N/A')} tokens")


class AnalysisClient:
    """
    Sends a system instruction and a user prompt to a chat model.

    Attributes:
        llm (Runnable): The chat model, or any runnable taking a message list.
        provider (str): The provider name, used for log messages only.
    """

    def __init__(self, llm: Runnable, provider: str = "llm"):
        self.llm = llm
        self.provider = provider

    @classmethod
    def from_config(cls, llm_config: "LLMConfig") -> "AnalysisClient":
        return cls(get_llm_instance(llm_config), provider=llm_config.provider)

    def generate(self, system_prompt: str, user_prompt: str) -> str:
        """
        Requests an analysis and returns the generated text.

        Raises:
            UpstreamError: If the provider call fails for any reason.
            ParseError: If the answer contains no text.
        """
        messages: List[BaseMessage] = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ]
        logger.info(f"Calling {self.provider} model...")
        try:
            response = self.llm.invoke(messages)
        except Exception as e:
            raise UpstreamError(f"API request failed: {e}") from e

        _log_token_usage(response, self.provider)
        text = extract_text(response)
        logger.info(f"--- Generated Analysis (Preview) ---\n{text[:500]}...")
        return text
