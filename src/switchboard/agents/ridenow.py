"""RideNow: cab booking, fares and ride tracking."""

from __future__ import annotations

import re
import zlib
from dataclasses import dataclass, field
from typing import Any

from switchboard.agents._text import (
    extract_destination,
    extract_location,
    extract_number,
    extract_pickup,
    extract_time,
    keyword_pattern,
)
from switchboard.agents.base import Agent
from switchboard.models.profile import UserProfile
from switchboard.models.response import AgentResponse
from switchboard.orchestration.state import ConversationContext

RIDE_KEYWORDS = (
    "cab", "taxi", "ride", "book", "uber", "ola", "auto", "rickshaw",
    "transport", "travel", "pickup", "drop", "fare", "driver",
    "airport", "station", "go to", "take me to",
)

RIDES: tuple[dict[str, Any], ...] = (
    {"id": "ride_1", "type": "Economy", "provider": "Ola", "fare": 185, "eta": 25, "capacity": 4,
     "features": ["AC", "GPS Tracking"]},
    {"id": "ride_2", "type": "Premium", "provider": "Uber", "fare": 285, "eta": 22, "capacity": 4,
     "features": ["AC", "Leather Seats", "GPS Tracking"]},
    {"id": "ride_3", "type": "Shared", "provider": "Ola", "fare": 95, "eta": 35, "capacity": 2,
     "features": ["AC", "Shared Ride"]},
    {"id": "ride_4", "type": "Auto", "provider": "Ola", "fare": 65, "eta": 30, "capacity": 3,
     "features": ["Open Air", "Budget Friendly"]},
)

NEARBY_CABS: tuple[dict[str, Any], ...] = (
    {"driver": "Rajesh Singh", "vehicle": "Hatchback", "rating": 4.6, "away": "2 mins",
     "number": "DL 02 XY 5678"},
    {"driver": "Amit Sharma", "vehicle": "Sedan", "rating": 4.8, "away": "3 mins",
     "number": "DL 03 AB 9012"},
    {"driver": "Vikash Kumar", "vehicle": "SUV", "rating": 4.5, "away": "5 mins",
     "number": "DL 05 CD 3456"},
)

SUGGESTIONS: dict[str, list[str]] = {
    "initial": ["Book a ride", "Get fare estimate", "Nearby cabs", "Schedule ride"],
    "ride_selection": ["Book this ride", "Compare fares", "Check driver details", "Modify route"],
    "booking_confirmed": ["Track ride", "Call driver", "Share trip", "Cancel ride"],
}

PER_KM_RATE = 12

_RIDE_RE = keyword_pattern(RIDE_KEYWORDS)
_FOOD_RE = keyword_pattern(("food", "restaurant", "hungry", "menu", "meal", "dinner", "lunch"))
_CANCEL_RE = keyword_pattern(("cancel",))
_TRACK_RE = keyword_pattern(("track", "where is my ride", "where is my cab", "ride status"))
_SCHEDULE_RE = keyword_pattern(("schedule", "later", "tomorrow"))
_NEARBY_RE = keyword_pattern(("nearby", "near me", "around me"))
_FARE_RE = keyword_pattern(("fare", "how much", "estimate", "cost"))
_CHOOSE_RE = keyword_pattern(
    ("cheapest", "fastest", "option", "this one", "confirm", "yes", "ok", "okay")
)
_BOOK_RE = keyword_pattern(("book", "cab", "taxi", "ride", "go to", "take me to", "pickup", "drop"))
# "2", "option 3", "#1", "the 2nd one": a pick from the offered list.
_NUMERIC_PICK_RE = re.compile(
    r"^\s*(?:option\s*|#|no\.?\s*)?\d+(?:st|nd|rd|th)?(?:\s*one)?\s*[.!]?\s*$", re.IGNORECASE
)


@dataclass
class _RideState:
    stage: str = "initial"
    pickup: str | None = None
    destination: str | None = None
    when: str | None = None
    options: list[dict[str, Any]] = field(default_factory=list)
    selected: dict[str, Any] | None = None


def _suggestions(stage: str) -> list[str]:
    return list(SUGGESTIONS.get(stage, SUGGESTIONS["initial"]))


class RideNowAgent(Agent):
    """Ride booking over mock fleet data."""

    agent_id = "ridenow"
    display_name = "RideNow AI"
    capabilities = (
        "cab booking",
        "ride sharing",
        "transportation options",
        "fare estimation",
        "ride tracking",
    )

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._rides: dict[str, _RideState] = {}

    def can_handle(self, message: str, context: ConversationContext) -> bool:
        if _RIDE_RE.search(message):
            return True
        state = self._rides.get(context.user_id)
        if state is not None and state.stage == "ride_selection":
            return bool(_NUMERIC_PICK_RE.match(message) or _CHOOSE_RE.search(message))
        return False

    def generate_suggestions(self, user_id: str) -> list[str]:
        state = self._rides.get(user_id)
        return _suggestions(state.stage if state else "initial")

    def forget(self, user_id: str) -> None:
        self._rides.pop(user_id, None)

    async def respond(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None,
    ) -> AgentResponse:
        state = self._rides.setdefault(context.user_id, _RideState())
        intent = await self._detect_intent(message, state)

        if intent == "food_request":
            return self.format_response(
                "Sounds like you're thinking about food. Foodie AI can take it from "
                "here whenever you're ready.",
                suggestions=["Order food", "Keep booking my ride"],
                handoff=self.create_handoff(
                    "foodie", "user asked about food", {"user_message": message}
                ),
            )
        if intent == "cancel_ride":
            return self._cancel(context.user_id, state)
        if intent == "track_ride":
            return self._track(state)
        if intent == "choose_ride":
            return self._choose(message, state)
        if intent == "scheduled_ride":
            return self._schedule(message, state, profile)
        if intent == "find_nearby_cabs":
            return self._nearby(message, profile)
        if intent == "get_fare_estimate":
            return self._fare_estimate(message, state, profile)
        if intent == "book_ride":
            return self._book(message, state, profile)
        return await self._general_query(message)

    async def _detect_intent(self, message: str, state: _RideState) -> str:
        if _FOOD_RE.search(message) and not _RIDE_RE.search(message):
            return "food_request"
        if _CANCEL_RE.search(message):
            return "cancel_ride"
        if _TRACK_RE.search(message):
            return "track_ride"
        if state.stage == "ride_selection" and (
            _NUMERIC_PICK_RE.match(message) or _CHOOSE_RE.search(message)
        ):
            return "choose_ride"
        if _SCHEDULE_RE.search(message):
            return "scheduled_ride"
        if _NEARBY_RE.search(message):
            return "find_nearby_cabs"
        if _FARE_RE.search(message):
            return "get_fare_estimate"
        if _BOOK_RE.search(message):
            return "book_ride"
        analysis = await self.analyze_intent(message)
        return analysis.intent

    # -- Handlers ------------------------------------------------------------

    def _fill_route(self, message: str, state: _RideState, profile: UserProfile | None) -> None:
        pickup = extract_pickup(message)
        destination = extract_destination(message)
        if pickup:
            state.pickup = pickup
        if destination:
            state.destination = destination
        if state.pickup is None and profile is not None:
            address = profile.default_address()
            if address is not None:
                state.pickup = address.label

    def _book(self, message: str, state: _RideState, profile: UserProfile | None) -> AgentResponse:
        self._fill_route(message, state, profile)
        state.when = extract_time(message) or state.when

        if state.pickup is None:
            return self.format_response(
                "Where would you like to be picked up from?",
                [{"type": "location_input", "field": "pickup"}],
                ["Current location", "Home", "Work", "Enter manually"],
            )
        if state.destination is None:
            return self.format_response(
                "Where would you like to go?",
                [{"type": "location_input", "field": "destination"}],
                ["Popular destinations", "Airport", "Railway station", "Enter manually"],
            )

        preferred = profile.preferences.ride.preferred_ride_type if profile else None
        options = self._available_rides(preferred)
        if not options:
            return self.format_response(
                "I'm sorry, no rides are available for your route right now. "
                "Would you like me to check alternative options or try again later?",
                suggestions=["Try again", "Check alternative routes", "Schedule for later"],
            )

        state.stage = "ride_selection"
        state.options = options
        listing = "\n".join(
            f"{i}. {ride['type']} - ₹{ride['fare']} ({ride['eta']} mins) - {ride['provider']}"
            for i, ride in enumerate(options, start=1)
        )
        return self.format_response(
            f"🚗 **Available rides from {state.pickup} to {state.destination}:**\n\n"
            f"{listing}\n\nWhich ride would you prefer?",
            [
                {"type": "ride_selection", "rides": options},
                {"type": "fare_comparison", "rides": options},
            ],
            [f"{ride['type']} - ₹{ride['fare']}" for ride in options[:3]],
        )

    def _choose(self, message: str, state: _RideState) -> AgentResponse:
        lowered = message.lower()
        ride: dict[str, Any] | None
        if "cheapest" in lowered:
            ride = min(state.options, key=lambda r: r["fare"])
        elif "fastest" in lowered:
            ride = min(state.options, key=lambda r: r["eta"])
        else:
            number = extract_number(message)
            if number is None:
                ride = state.options[0]
            elif 1 <= number <= len(state.options):
                ride = state.options[number - 1]
            else:
                ride = None
        if ride is None:
            return self.format_response(
                f"Please pick an option between 1 and {len(state.options)}.",
                suggestions=[f"{r['type']} - ₹{r['fare']}" for r in state.options[:3]],
            )

        state.selected = ride
        state.stage = "booking_confirmed"
        return self.format_response(
            f"✅ Booked! Your {ride['type']} ({ride['provider']}) from {state.pickup} "
            f"to {state.destination} costs ₹{ride['fare']} and arrives in about "
            f"{ride['eta']} mins.",
            [
                {
                    "type": "ride_booking_confirmed",
                    "ride": ride,
                    "pickup": state.pickup,
                    "destination": state.destination,
                }
            ],
            _suggestions("booking_confirmed"),
        )

    def _fare_estimate(
        self,
        message: str,
        state: _RideState,
        profile: UserProfile | None,
    ) -> AgentResponse:
        self._fill_route(message, state, profile)
        if state.pickup is None or state.destination is None:
            return self.format_response(
                "To estimate the fare, I need both pickup and destination locations. "
                "Could you provide them?",
                [{"type": "location_input", "fields": ["pickup", "destination"]}],
                ["Use current location", "Select saved address"],
            )
        estimates = self._estimate_fares(state.pickup, state.destination)
        listing = "\n\n".join(
            f"🚗 **{e['type']}** ({e['provider']})\n₹{e['min_fare']} - ₹{e['max_fare']} • "
            f"{e['eta']} mins"
            for e in estimates
        )
        return self.format_response(
            f"💰 **Fare estimates from {state.pickup} to {state.destination}:**\n\n{listing}\n\n"
            "*Fares may vary based on demand and traffic conditions",
            [{"type": "fare_estimates", "estimates": estimates}],
            ["Book now", "Compare options", "Schedule ride", "Get directions"],
        )

    def _nearby(self, message: str, profile: UserProfile | None) -> AgentResponse:
        location = extract_location(message)
        if location is None and profile is not None:
            address = profile.default_address()
            location = address.label if address else None
        if location is None:
            return self.format_response(
                "To find nearby cabs, I need your location. Could you share it?",
                [{"type": "location_input", "required": True}],
                ["Use current location", "Enter manually"],
            )
        listing = "\n\n".join(
            f"🚗 **{cab['driver']}** ⭐ {cab['rating']}\n"
            f"{cab['vehicle']} ({cab['number']}) • {cab['away']} away"
            for cab in NEARBY_CABS
        )
        return self.format_response(
            f"🗺️ **Nearby cabs at {location}:**\n\n{listing}",
            [{"type": "nearby_cabs", "cabs": list(NEARBY_CABS), "location": location}],
            ["Book instantly", "Get fare estimate", "Filter by type", "Refresh"],
        )

    def _schedule(
        self, message: str, state: _RideState, profile: UserProfile | None
    ) -> AgentResponse:
        when = extract_time(message)
        if when is None:
            return self.format_response(
                "When would you like to schedule your ride? Please specify the date and time.",
                [{"type": "datetime_picker", "purpose": "schedule_ride"}],
                ["Tomorrow morning", "This evening", "In 2 hours", "Custom time"],
            )
        self._fill_route(message, state, profile)
        if state.pickup is None or state.destination is None:
            state.when = when
            return self.format_response(
                "Please provide both pickup and destination locations for your scheduled ride.",
                [{"type": "location_input", "fields": ["pickup", "destination"]}],
                ["Use saved addresses", "Current location"],
            )
        state.when = when
        state.stage = "booking_confirmed"
        return self.format_response(
            f"📅 **Ride Scheduled!**\n\n⏰ **Pickup Time**: {when}\n"
            f"📍 **From**: {state.pickup}\n📍 **To**: {state.destination}\n\n"
            "🔔 You'll receive a reminder 15 minutes before your ride.",
            [
                {
                    "type": "scheduled_ride_confirmation",
                    "pickup_time": when,
                    "pickup": state.pickup,
                    "destination": state.destination,
                }
            ],
            ["Modify schedule", "Cancel schedule", "Set reminder", "View all schedules"],
        )

    def _track(self, state: _RideState) -> AgentResponse:
        if state.selected is None:
            return self.format_response(
                "You don't have an active ride right now. Would you like to book one?",
                suggestions=_suggestions("initial"),
            )
        ride = state.selected
        return self.format_response(
            f"🚗 **Ride Status**: DRIVER ASSIGNED\n\n{ride['type']} ({ride['provider']}) "
            f"heading to {state.pickup}.\n⏰ **ETA**: 5 mins\n💰 **Fare**: ₹{ride['fare']}",
            [{"type": "ride_tracking", "ride": ride, "status": "driver_assigned"}],
            ["Call driver", "Cancel ride", "Share trip", "Report issue"],
        )

    def _cancel(self, user_id: str, state: _RideState) -> AgentResponse:
        had_ride = state.selected is not None or state.stage != "initial"
        self.forget(user_id)
        message = (
            "Your ride has been cancelled. No cancellation fee was charged."
            if had_ride
            else "There's no ride to cancel right now."
        )
        return self.format_response(
            message,
            [{"type": "ride_cancelled"}] if had_ride else [],
            _suggestions("initial"),
        )

    async def _general_query(self, message: str) -> AgentResponse:
        reply = await self.generate_response(
            "You are RideNow AI, a helpful assistant for booking rides and "
            "transportation. Answer the user's travel related question briefly.",
            message,
            max_tokens=200,
        )
        return self.format_response(
            reply, suggestions=["Book a ride", "Get fare estimate", "Track ride", "Schedule ride"]
        )

    # -- Lookups -------------------------------------------------------------

    @staticmethod
    def _available_rides(preferred_type: str | None) -> list[dict[str, Any]]:
        if preferred_type:
            wanted = preferred_type.lower()
            preferred = [dict(r) for r in RIDES if r["type"].lower() == wanted]
            if preferred:
                return preferred
        return sorted((dict(r) for r in RIDES), key=lambda r: r["fare"])

    @staticmethod
    def _estimate_fares(pickup: str, destination: str) -> list[dict[str, Any]]:
        # Stable pseudo-distance per route, 5-20 km.
        distance = 5 + zlib.crc32(f"{pickup.lower()}|{destination.lower()}".encode()) % 16
        base = distance * PER_KM_RATE
        bands = (("Auto", "Ola", 0.4, 0.6, 3.0), ("Economy", "Multiple", 0.8, 1.2, 2.5),
                 ("Premium", "Uber", 1.5, 2.0, 2.0))
        return [
            {
                "type": kind,
                "provider": provider,
                "min_fare": round(base * low),
                "max_fare": round(base * high),
                "eta": round(distance * minutes_per_km),
                "distance_km": distance,
            }
            for kind, provider, low, high, minutes_per_km in bands
        ]
