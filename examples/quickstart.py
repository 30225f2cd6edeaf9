"""Switchboard quickstart: one user talking to the bundled agents.

Uses ``MockAIProvider`` for intent classification, so no API key is
needed.  The scripted classifier answers "ridenow", then "foodie".

Run with:
    uv run python examples/quickstart.py
"""

from __future__ import annotations

import asyncio

from switchboard import (
    Address,
    LiveEvent,
    MockAIProvider,
    Preferences,
    RidePreferences,
    Switchboard,
    UserProfile,
)


async def main() -> None:
    # --- Setup -----------------------------------------------------------
    provider = MockAIProvider(responses=["ridenow", "foodie"])
    profile = UserProfile(
        user_id="asha",
        name="Asha",
        addresses=[Address(label="Home", street="12 MG Road", city="Bangalore", is_default=True)],
        preferences=Preferences(ride=RidePreferences(preferred_ride_type="Economy")),
    )

    async with Switchboard(provider) as board:
        # Live events arrive alongside the returned envelopes.
        async def on_event(event: LiveEvent) -> None:
            print(f"  [live] {event.type}: agent={event.data.get('agent')}")

        await board.realtime.subscribe_to_user("asha", on_event)

        # --- Conversation ------------------------------------------------
        for text in (
            "find me a cab to the airport",
            "ok book the cheapest one",
            "I'm hungry, any pizza nearby?",
            "what can you help me with?",
        ):
            envelope = await board.handle_message("asha", text, profile)
            print(f"asha> {text}")
            print(f"{envelope.agent}> {envelope.message}")
            if envelope.handoff:
                print(f"  (handoff to {envelope.handoff.target_agent}: {envelope.handoff.reason})")
            await asyncio.sleep(0)

        # --- Explicit handoff and inspection -----------------------------
        envelope = await board.request_handoff("asha", "ridenow", reason="back to rides")
        print(f"{envelope.agent}> {envelope.message}")

        context = await board.get_context("asha")
        assert context is not None
        print(f"\nCurrent agent: {context.current_agent}")
        print(f"History: {len(context.history)} turns")
        for agent_id, status in board.list_agents().items():
            print(f"  {agent_id}: {status.display_name} (fallback={status.is_fallback})")

        await board.clear_context("asha")


if __name__ == "__main__":
    asyncio.run(main())
