"""OpenAI provider configuration."""

from __future__ import annotations

from pydantic import BaseModel, SecretStr


class OpenAIConfig(BaseModel):
    """Settings for the Chat Completions backed provider.

    Attributes:
        api_key: API key for authentication.
        base_url: Base URL for OpenAI-compatible servers. ``None`` uses the
            public OpenAI API.
        model: Model identifier. Classification prompts are tiny, so a small
            model is the default.
        max_tokens: Upper bound used when a request does not set its own.
        temperature: Default sampling temperature.
        timeout: HTTP request timeout in seconds.
    """

    api_key: SecretStr
    base_url: str | None = None
    model: str = "gpt-4o-mini"
    max_tokens: int = 500
    temperature: float = 0.7
    timeout: float = 30.0
