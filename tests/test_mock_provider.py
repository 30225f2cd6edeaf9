"""Tests for MockAIProvider."""

from __future__ import annotations

import asyncio

import pytest

from switchboard.providers.ai.base import AIContext, AIMessage, ProviderError
from switchboard.providers.ai.mock import MockAIProvider


def _ctx(text: str = "hi") -> AIContext:
    return AIContext(messages=[AIMessage(role="user", content=text)])


class TestMockAIProvider:
    async def test_default_response(self) -> None:
        provider = MockAIProvider()
        response = await provider.generate(_ctx())
        assert response.content == "Hello from AI"
        assert response.finish_reason == "stop"

    async def test_cycles_responses(self) -> None:
        provider = MockAIProvider(["a", "b"])
        contents = [(await provider.generate(_ctx())).content for _ in range(3)]
        assert contents == ["a", "b", "a"]

    async def test_records_calls(self) -> None:
        provider = MockAIProvider()
        await provider.generate(_ctx("first"))
        await provider.generate(_ctx("second"))
        assert provider.call_count == 2
        assert provider.calls[1].messages[0].content == "second"

    async def test_scripted_error(self) -> None:
        provider = MockAIProvider([ProviderError("down", retryable=True), "recovered"])
        with pytest.raises(ProviderError) as exc_info:
            await provider.generate(_ctx())
        assert exc_info.value.retryable
        assert (await provider.generate(_ctx())).content == "recovered"

    async def test_delay(self) -> None:
        provider = MockAIProvider(delay=1.0)
        with pytest.raises(TimeoutError):
            await asyncio.wait_for(provider.generate(_ctx()), 0.01)

    def test_names(self) -> None:
        provider = MockAIProvider()
        assert provider.name == "MockAIProvider"
        assert provider.model_name == "mock"
