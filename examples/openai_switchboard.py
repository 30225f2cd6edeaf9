"""Switchboard backed by OpenAI for classification and free-text replies.

Requires the ``openai`` extra and an API key:

    pip install agent-switchboard[openai]
    export OPENAI_API_KEY=sk-...

Run with:
    uv run python examples/openai_switchboard.py
"""

from __future__ import annotations

import asyncio
import logging
import os

from pydantic import SecretStr

from switchboard import OrchestratorConfig, ReaperConfig, Switchboard, SwitchboardConfig
from switchboard.providers.openai import OpenAIAIProvider, OpenAIConfig

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


async def main() -> None:
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise SystemExit("Set OPENAI_API_KEY to run this example")

    provider = OpenAIAIProvider(
        OpenAIConfig(
            api_key=SecretStr(api_key),
            model=os.environ.get("OPENAI_MODEL", "gpt-4o-mini"),
        )
    )
    config = SwitchboardConfig(
        orchestrator=OrchestratorConfig(classification_timeout=5.0, max_sticky_turns=20),
        reaper=ReaperConfig(idle_timeout=3600, interval=300),
    )

    async with Switchboard(provider, config=config) as board:
        print("Type a message (empty line to quit).")
        while True:
            text = await asyncio.to_thread(input, "you> ")
            if not text.strip():
                break
            envelope = await board.handle_message("cli-user", text)
            print(f"{envelope.agent}> {envelope.message}")
            if envelope.suggestions:
                print("  suggestions: " + " | ".join(envelope.suggestions))


if __name__ == "__main__":
    asyncio.run(main())
