"""Tests for the OpenAI completion provider."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from switchboard.providers.ai.base import AIContext, AIMessage, ProviderError
from switchboard.providers.openai.config import OpenAIConfig


class _FakeAPIStatusError(Exception):
    """Stub for openai.APIStatusError used in tests."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


def _mock_openai_module() -> MagicMock:
    mod = MagicMock()
    mod.APIStatusError = _FakeAPIStatusError
    return mod


def _config(**overrides: Any) -> OpenAIConfig:
    defaults: dict[str, Any] = {"api_key": "sk-test-key"}
    defaults.update(overrides)
    return OpenAIConfig(**defaults)


def _mock_response(text: str | None = "ridenow", finish_reason: str = "stop") -> SimpleNamespace:
    return SimpleNamespace(
        choices=[
            SimpleNamespace(
                message=SimpleNamespace(content=text),
                finish_reason=finish_reason,
            )
        ],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=1),
    )


def _context(**overrides: Any) -> AIContext:
    defaults: dict[str, Any] = {"messages": [AIMessage(role="user", content="find me a cab")]}
    defaults.update(overrides)
    return AIContext(**defaults)


class TestOpenAIConfig:
    def test_defaults(self) -> None:
        config = _config()
        assert config.model == "gpt-4o-mini"
        assert config.api_key.get_secret_value() == "sk-test-key"
        assert "sk-test-key" not in repr(config)


class TestOpenAIAIProvider:
    async def test_generate_success(self) -> None:
        with patch.dict("sys.modules", {"openai": _mock_openai_module()}):
            from switchboard.providers.openai.ai import OpenAIAIProvider

            provider = OpenAIAIProvider(_config())
            provider._client = MagicMock()
            provider._client.chat.completions.create = AsyncMock(
                return_value=_mock_response("ridenow")
            )

            result = await provider.generate(_context())

            assert result.content == "ridenow"
            assert result.finish_reason == "stop"
            assert result.usage == {"prompt_tokens": 12, "completion_tokens": 1}
            assert result.metadata["model"] == "gpt-4o-mini"

    async def test_request_shape(self) -> None:
        with patch.dict("sys.modules", {"openai": _mock_openai_module()}):
            from switchboard.providers.openai.ai import OpenAIAIProvider

            provider = OpenAIAIProvider(_config(model="gpt-4o"))
            provider._client = MagicMock()
            provider._client.chat.completions.create = AsyncMock(return_value=_mock_response())

            await provider.generate(
                _context(system_prompt="Classify.", temperature=0.1, max_tokens=50)
            )

            kwargs = provider._client.chat.completions.create.call_args[1]
            assert kwargs["model"] == "gpt-4o"
            assert kwargs["temperature"] == 0.1
            assert kwargs["max_tokens"] == 50
            assert kwargs["messages"] == [
                {"role": "system", "content": "Classify."},
                {"role": "user", "content": "find me a cab"},
            ]

    async def test_empty_choices(self) -> None:
        with patch.dict("sys.modules", {"openai": _mock_openai_module()}):
            from switchboard.providers.openai.ai import OpenAIAIProvider

            provider = OpenAIAIProvider(_config())
            provider._client = MagicMock()
            provider._client.chat.completions.create = AsyncMock(
                return_value=SimpleNamespace(choices=[], usage=None)
            )

            result = await provider.generate(_context())
            assert result.content == ""

    async def test_null_content(self) -> None:
        with patch.dict("sys.modules", {"openai": _mock_openai_module()}):
            from switchboard.providers.openai.ai import OpenAIAIProvider

            provider = OpenAIAIProvider(_config())
            provider._client = MagicMock()
            provider._client.chat.completions.create = AsyncMock(
                return_value=_mock_response(text=None)
            )

            assert (await provider.generate(_context())).content == ""

    @pytest.mark.parametrize(("status", "retryable"), [(429, True), (503, True), (400, False)])
    async def test_status_error_maps_to_provider_error(self, status: int, retryable: bool) -> None:
        with patch.dict("sys.modules", {"openai": _mock_openai_module()}):
            from switchboard.providers.openai.ai import OpenAIAIProvider

            provider = OpenAIAIProvider(_config())
            provider._client = MagicMock()
            provider._client.chat.completions.create = AsyncMock(
                side_effect=_FakeAPIStatusError("nope", status_code=status)
            )

            with pytest.raises(ProviderError) as exc_info:
                await provider.generate(_context())
            assert exc_info.value.retryable is retryable
            assert exc_info.value.status_code == status
            assert exc_info.value.provider == "openai"

    async def test_other_errors_wrapped(self) -> None:
        with patch.dict("sys.modules", {"openai": _mock_openai_module()}):
            from switchboard.providers.openai.ai import OpenAIAIProvider

            provider = OpenAIAIProvider(_config())
            provider._client = MagicMock()
            provider._client.chat.completions.create = AsyncMock(
                side_effect=ConnectionError("reset")
            )

            with pytest.raises(ProviderError) as exc_info:
                await provider.generate(_context())
            assert not exc_info.value.retryable

    async def test_close(self) -> None:
        with patch.dict("sys.modules", {"openai": _mock_openai_module()}):
            from switchboard.providers.openai.ai import OpenAIAIProvider

            provider = OpenAIAIProvider(_config())
            provider._client = MagicMock()
            provider._client.close = AsyncMock()

            await provider.close()
            provider._client.close.assert_awaited_once()

    def test_names(self) -> None:
        with patch.dict("sys.modules", {"openai": _mock_openai_module()}):
            from switchboard.providers.openai.ai import OpenAIAIProvider

            provider = OpenAIAIProvider(_config(model="gpt-4o"))
            assert provider.name == "openai"
            assert provider.model_name == "gpt-4o"
