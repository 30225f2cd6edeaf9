"""Mock completion provider for testing."""

from __future__ import annotations

import asyncio

from switchboard.providers.ai.base import AIContext, AIProvider, AIResponse


class MockAIProvider(AIProvider):
    """Round-robin scripted provider for tests.

    ``responses`` are returned in order (cycling).  An entry that is an
    ``Exception`` instance is raised instead of returned, which lets a test
    script "fail once, then answer".  ``delay`` makes every call sleep
    first, for exercising timeouts.
    """

    def __init__(
        self,
        responses: list[str | Exception] | None = None,
        *,
        delay: float = 0.0,
    ) -> None:
        self.responses: list[str | Exception] = responses or ["Hello from AI"]
        self.delay = delay
        self.calls: list[AIContext] = []
        self._index = 0

    @property
    def model_name(self) -> str:
        return "mock"

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def generate(self, context: AIContext) -> AIResponse:
        self.calls.append(context)
        if self.delay:
            await asyncio.sleep(self.delay)
        item = self.responses[self._index % len(self.responses)]
        self._index += 1
        if isinstance(item, Exception):
            raise item
        return AIResponse(
            content=item,
            finish_reason="stop",
            usage={"prompt_tokens": 10, "completion_tokens": 5},
        )
