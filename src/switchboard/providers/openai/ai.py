"""OpenAI provider: completions via the Chat Completions API."""

from __future__ import annotations

from typing import Any

from switchboard.providers.ai.base import (
    AIContext,
    AIMessage,
    AIProvider,
    AIResponse,
    ProviderError,
)
from switchboard.providers.openai.config import OpenAIConfig

_RETRYABLE_STATUS = (408, 429, 500, 502, 503, 504)


class OpenAIAIProvider(AIProvider):
    """Completion provider using the OpenAI Chat Completions API."""

    def __init__(self, config: OpenAIConfig) -> None:
        try:
            import openai as _openai
        except ImportError as exc:
            raise ImportError(
                "openai is required for OpenAIAIProvider. "
                "Install it with: pip install agent-switchboard[openai]"
            ) from exc
        self._config = config
        self._api_status_error = _openai.APIStatusError
        self._client = _openai.AsyncOpenAI(
            api_key=config.api_key.get_secret_value(),
            base_url=config.base_url,
            timeout=config.timeout,
        )

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._config.model

    @staticmethod
    def _build_messages(
        messages: list[AIMessage], system_prompt: str | None
    ) -> list[dict[str, Any]]:
        result: list[dict[str, Any]] = []
        if system_prompt:
            result.append({"role": "system", "content": system_prompt})
        result.extend({"role": m.role, "content": m.content} for m in messages)
        return result

    async def generate(self, context: AIContext) -> AIResponse:
        kwargs: dict[str, Any] = {
            "model": self._config.model,
            "max_tokens": context.max_tokens or self._config.max_tokens,
            "messages": self._build_messages(context.messages, context.system_prompt),
            "temperature": context.temperature,
        }

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except self._api_status_error as exc:
            raise ProviderError(
                str(exc),
                retryable=exc.status_code in _RETRYABLE_STATUS,
                provider=self.name,
                status_code=exc.status_code,
            ) from exc
        except Exception as exc:
            raise ProviderError(str(exc), provider=self.name) from exc

        if not response.choices:
            return AIResponse(content="")

        choice = response.choices[0]
        usage: dict[str, int] = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
            }
        return AIResponse(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason,
            usage=usage,
            metadata={"model": self._config.model},
        )

    async def close(self) -> None:
        await self._client.close()
