"""User profile handed to agents for personalization.

Profiles are owned by the caller (persistence is out of scope); the
orchestrator only reads them.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Address(BaseModel):
    label: str
    street: str = ""
    city: str = ""
    landmark: str | None = None
    is_default: bool = False

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.street, self.city) if p]
        return ", ".join(parts) or self.label


class DietaryPreferences(BaseModel):
    vegetarian: bool = False
    vegan: bool = False
    allergies: list[str] = Field(default_factory=list)
    cuisine_preferences: list[str] = Field(default_factory=list)


class RidePreferences(BaseModel):
    preferred_ride_type: str | None = None
    preferred_payment_method: str | None = None


class Preferences(BaseModel):
    dietary: DietaryPreferences = Field(default_factory=DietaryPreferences)
    ride: RidePreferences = Field(default_factory=RidePreferences)
    language: str = "en"


class UserProfile(BaseModel):
    """Read-only view of a user for personalization."""

    user_id: str
    name: str | None = None
    addresses: list[Address] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)
    favorite_agents: list[str] = Field(default_factory=list)
    total_orders: int = 0

    def default_address(self) -> Address | None:
        for address in self.addresses:
            if address.is_default:
                return address
        return self.addresses[0] if self.addresses else None

    def routing_hints(self) -> dict[str, Any]:
        """Preferences relevant to intent classification."""
        hints: dict[str, Any] = self.preferences.model_dump(mode="json", exclude_defaults=True)
        if self.favorite_agents:
            hints["favorite_agents"] = list(self.favorite_agents)
        return hints
