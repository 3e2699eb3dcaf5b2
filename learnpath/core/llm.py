"""
LLM provider adapter using LangChain chat models for OpenAI, Anthropic and Gemini
"""
from typing import Any, Callable, Optional
import time

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI
from langchain_anthropic import ChatAnthropic
from langchain_google_genai import ChatGoogleGenerativeAI

from learnpath.config import Settings, settings, get_settings
from learnpath.core.exceptions import (
    ProviderNotConfiguredError,
    ProviderTransportError,
    UnsupportedProviderError,
)
from learnpath.core.logging import get_logger, metrics_logger
from learnpath.core.retry import llm_retrying

logger = get_logger(__name__)

SUPPORTED_PROVIDERS = ("openai", "anthropic", "gemini")

ChatModelBuilder = Callable[[str, str, str], BaseChatModel]
CredentialLookup = Callable[[str], Optional[str]]


def provider_api_key(provider: str, config: Optional[Settings] = None) -> Optional[str]:
    """Return the configured API key for a provider, read from the current environment"""
    config = config or get_settings()
    return {
        "openai": config.openai_api_key,
        "anthropic": config.anthropic_api_key,
        "gemini": config.gemini_api_key,
    }.get(provider)


class ChatModelFactory:
    """Build a LangChain chat model for a provider/model pair.

    SDK-level retries are disabled; the adapter owns the retry loop.
    """

    def __init__(
        self,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[int] = None,
    ):
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.llm_max_tokens
        self.timeout = timeout or settings.llm_timeout

    def __call__(self, provider: str, model: str, api_key: str) -> BaseChatModel:
        if provider == "openai":
            return ChatOpenAI(
                model=model,
                openai_api_key=api_key,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
                max_retries=0
            )
        if provider == "anthropic":
            return ChatAnthropic(
                model=model,
                anthropic_api_key=api_key,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
                max_retries=0
            )
        if provider == "gemini":
            return ChatGoogleGenerativeAI(
                model=model,
                google_api_key=api_key,
                temperature=self.temperature,
                max_output_tokens=self.max_tokens,
                timeout=self.timeout,
                # one attempt per call
                max_retries=1
            )
        raise UnsupportedProviderError(provider)


def message_text(content: Any) -> str:
    """Flatten chat message content (plain string or list of content blocks) to text"""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type", "text") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return str(content or "")


class ProviderAdapter:
    """Send a single prompt to a named LLM provider and return the complete text reply.

    No caching and no streaming: one request, one text response or an error.
    """

    def __init__(
        self,
        model_factory: Optional[ChatModelBuilder] = None,
        credentials: Optional[CredentialLookup] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        retry_auth_errors: Optional[bool] = None,
    ):
        self.model_factory = model_factory or ChatModelFactory()
        self.credentials = credentials or provider_api_key
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.retry_auth_errors = retry_auth_errors

    async def send(self, provider: str, model: str, prompt: str) -> str:
        """
        Send ``prompt`` to ``provider``/``model``.

        Raises:
            UnsupportedProviderError: provider outside openai/anthropic/gemini
            ProviderNotConfiguredError: no API key for the provider
            ProviderTransportError: every attempt failed; chained from the last error
        """
        name = (provider or "").strip().lower()
        if name not in SUPPORTED_PROVIDERS:
            raise UnsupportedProviderError(provider)

        api_key = self.credentials(name)
        if not api_key:
            raise ProviderNotConfiguredError(name)

        try:
            chat_model = self.model_factory(name, model, api_key)
        except Exception as e:
            logger.error("Chat model initialization failed", provider=name, model=model, error=str(e))
            raise ProviderTransportError(name, 0, e) from e

        attempts = 0
        start_time = time.time()
        try:
            async for attempt in llm_retrying(
                max_attempts=self.max_attempts,
                delay_seconds=self.retry_delay,
                retry_auth_errors=self.retry_auth_errors,
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    metrics_logger.log_llm_attempt(name, model, attempts, len(prompt))
                    response = await chat_model.ainvoke([HumanMessage(content=prompt)])
        except Exception as e:
            metrics_logger.log_llm_complete(name, model, time.time() - start_time, attempts, success=False)
            raise ProviderTransportError(name, attempts, e) from e

        metrics_logger.log_llm_complete(name, model, time.time() - start_time, attempts)
        return message_text(response.content)
