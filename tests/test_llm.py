"""
Tests for the LLM provider adapter.
"""
import pytest

from learnpath.core.exceptions import (
    ProviderNotConfiguredError,
    ProviderTransportError,
    UnsupportedProviderError,
)
from learnpath.core.llm import ProviderAdapter, message_text, provider_api_key

from tests.fakes import FakeChatModel, StatusError


def make_adapter(chat_model, keys=None, **kwargs):
    keys = {"openai": "sk-test", "anthropic": "ak-test", "gemini": "gk-test"} if keys is None else keys
    built = []

    def factory(provider, model, api_key):
        built.append((provider, model, api_key))
        return chat_model

    adapter = ProviderAdapter(
        model_factory=factory,
        credentials=keys.get,
        retry_delay=0,
        **kwargs
    )
    return adapter, built


class TestProviderSelection:
    @pytest.mark.asyncio
    async def test_unsupported_provider_fails_without_attempts(self):
        chat_model = FakeChatModel("never")
        adapter, built = make_adapter(chat_model)

        with pytest.raises(UnsupportedProviderError) as exc_info:
            await adapter.send("mistral", "mistral-large", "hello")

        assert exc_info.value.provider == "mistral"
        assert built == []
        assert chat_model.calls == 0

    @pytest.mark.asyncio
    async def test_missing_credentials_fail_before_any_attempt(self):
        chat_model = FakeChatModel("never")
        adapter, built = make_adapter(chat_model, keys={"openai": "sk-test"})

        with pytest.raises(ProviderNotConfiguredError) as exc_info:
            await adapter.send("anthropic", "claude-3-5-sonnet-20241022", "hello")

        assert exc_info.value.provider == "anthropic"
        assert built == []
        assert chat_model.calls == 0

    @pytest.mark.asyncio
    async def test_provider_name_is_case_insensitive(self):
        chat_model = FakeChatModel("hi there")
        adapter, built = make_adapter(chat_model)

        assert await adapter.send("OpenAI", "gpt-4o-mini", "hello") == "hi there"
        assert built == [("openai", "gpt-4o-mini", "sk-test")]

    def test_default_credentials_read_environment_at_call_time(self, monkeypatch):
        assert provider_api_key("gemini") is None

        monkeypatch.setenv("GEMINI_API_KEY", "gk-live")

        assert provider_api_key("gemini") == "gk-live"


class TestRetries:
    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failure(self):
        chat_model = FakeChatModel(ConnectionError("reset"), '{"title": "X"}')
        adapter, _ = make_adapter(chat_model)

        assert await adapter.send("anthropic", "claude", "prompt") == '{"title": "X"}'
        assert chat_model.calls == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_tagged_transport_error(self):
        last_error = TimeoutError("timed out")
        chat_model = FakeChatModel(last_error)
        adapter, _ = make_adapter(chat_model)

        with pytest.raises(ProviderTransportError) as exc_info:
            await adapter.send("gemini", "gemini-1.5-flash", "prompt")

        assert chat_model.calls == 3
        assert exc_info.value.provider == "gemini"
        assert exc_info.value.attempts == 3
        assert exc_info.value.__cause__ is last_error

    @pytest.mark.asyncio
    async def test_retry_budget_is_configurable(self):
        chat_model = FakeChatModel(ConnectionError("down"))
        adapter, _ = make_adapter(chat_model, max_attempts=2)

        with pytest.raises(ProviderTransportError):
            await adapter.send("openai", "gpt-4o", "prompt")

        assert chat_model.calls == 2

    @pytest.mark.asyncio
    async def test_auth_errors_retried_by_default(self):
        chat_model = FakeChatModel(StatusError("invalid x-api-key", 401))
        adapter, _ = make_adapter(chat_model)

        with pytest.raises(ProviderTransportError) as exc_info:
            await adapter.send("anthropic", "claude", "prompt")

        assert chat_model.calls == 3
        assert exc_info.value.attempts == 3

    @pytest.mark.asyncio
    async def test_auth_errors_not_retried_when_classification_enabled(self):
        chat_model = FakeChatModel(StatusError("invalid x-api-key", 401))
        adapter, _ = make_adapter(chat_model, retry_auth_errors=False)

        with pytest.raises(ProviderTransportError) as exc_info:
            await adapter.send("anthropic", "claude", "prompt")

        assert chat_model.calls == 1
        assert exc_info.value.attempts == 1

    @pytest.mark.asyncio
    async def test_forbidden_retried_when_explicitly_enabled(self):
        chat_model = FakeChatModel(StatusError("forbidden", 403))
        adapter, _ = make_adapter(chat_model, retry_auth_errors=True)

        with pytest.raises(ProviderTransportError):
            await adapter.send("anthropic", "claude", "prompt")

        assert chat_model.calls == 3

    @pytest.mark.asyncio
    async def test_factory_failure_is_a_transport_error(self):
        def factory(provider, model, api_key):
            raise ValueError("bad model name")

        adapter = ProviderAdapter(model_factory=factory, credentials=lambda name: "key", retry_delay=0)

        with pytest.raises(ProviderTransportError) as exc_info:
            await adapter.send("openai", "???", "prompt")

        assert exc_info.value.attempts == 0


class TestMessageText:
    def test_plain_string(self):
        assert message_text("hello") == "hello"

    def test_content_blocks_are_joined(self):
        blocks = [
            {"type": "text", "text": '{"title": '},
            {"type": "tool_use", "id": "x"},
            '"X"}',
        ]
        assert message_text(blocks) == '{"title": "X"}'

    def test_none_is_empty(self):
        assert message_text(None) == ""
