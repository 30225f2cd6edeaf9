"""Abstract base class for the external completion service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class ProviderError(Exception):
    """Error from a completion service call.

    Attributes:
        retryable: Whether the caller could retry the request.
        provider: Name of the provider that raised the error.
        status_code: HTTP status code from the provider, if available.
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        provider: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.provider = provider
        self.status_code = status_code


class AIMessage(BaseModel):
    """A message in the completion request."""

    role: str  # "system", "user", "assistant"
    content: str


class AIContext(BaseModel):
    """Everything a provider needs for one completion."""

    messages: list[AIMessage] = Field(default_factory=list)
    system_prompt: str | None = None
    temperature: float = 0.7
    max_tokens: int = 1024
    metadata: dict[str, Any] = Field(default_factory=dict)


class AIResponse(BaseModel):
    """Response from a provider."""

    content: str
    finish_reason: str | None = None
    usage: dict[str, int] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)


class AIProvider(ABC):
    """Stateless request/response completion service.

    Used for two things: intent classification (the orchestrator asks for
    exactly one agent id) and free-text generation inside agents.  Callers
    must treat it as unreliable: any call may raise ``ProviderError`` or
    return malformed output.
    """

    @property
    def name(self) -> str:
        """Provider name (e.g. 'openai')."""
        return self.__class__.__name__

    @property
    def model_name(self) -> str:
        return "unknown"

    @abstractmethod
    async def generate(self, context: AIContext) -> AIResponse:
        """Generate a completion for *context*."""
        ...

    async def close(self) -> None:
        """Release provider resources. The default does nothing."""
        return None
