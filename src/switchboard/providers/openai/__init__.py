"""OpenAI completion provider."""

from switchboard.providers.openai.ai import OpenAIAIProvider
from switchboard.providers.openai.config import OpenAIConfig

__all__ = ["OpenAIAIProvider", "OpenAIConfig"]
