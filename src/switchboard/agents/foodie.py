"""Foodie: restaurant discovery and food ordering."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from switchboard.agents._text import extract_location, extract_number, keyword_pattern
from switchboard.agents.base import Agent
from switchboard.models.profile import UserProfile
from switchboard.models.response import AgentResponse
from switchboard.orchestration.state import ConversationContext

FOOD_KEYWORDS = (
    "food", "order", "restaurant", "eat", "hungry", "delivery", "menu",
    "cuisine", "dish", "meal", "breakfast", "lunch", "dinner", "snack",
    "pizza", "burger", "biryani", "curry", "chinese", "italian",
    "cart", "checkout",
)

FREE_DELIVERY_ABOVE = 200
DELIVERY_FEE = 40
GST_PERCENT = 5

RESTAURANTS: tuple[dict[str, Any], ...] = (
    {
        "id": "rest_1",
        "name": "Spice Garden",
        "cuisine": "Indian",
        "rating": 4.2,
        "delivery_time": 35,
        "price_range": "₹₹",
        "specialties": ["Biryani", "Curry", "Tandoor"],
        "is_veg": False,
        "has_veg_options": True,
    },
    {
        "id": "rest_2",
        "name": "Green Bowl",
        "cuisine": "Healthy",
        "rating": 4.5,
        "delivery_time": 25,
        "price_range": "₹₹₹",
        "specialties": ["Salads", "Smoothies", "Quinoa Bowl"],
        "is_veg": True,
        "has_veg_options": True,
    },
    {
        "id": "rest_3",
        "name": "Burger Hub",
        "cuisine": "American",
        "rating": 4.0,
        "delivery_time": 30,
        "price_range": "₹₹",
        "specialties": ["Burgers", "Fries", "Shakes"],
        "is_veg": False,
        "has_veg_options": True,
    },
)

def _item(item_id: str, name: str, price: int, category: str, *, veg: bool) -> dict[str, Any]:
    return {"id": item_id, "name": name, "price": price, "category": category, "is_veg": veg}


MENUS: dict[str, tuple[dict[str, Any], ...]] = {
    "rest_1": (
        _item("item_1", "Chicken Biryani", 280, "Main Course", veg=False),
        _item("item_2", "Paneer Butter Masala", 220, "Main Course", veg=True),
        _item("item_3", "Garlic Naan", 60, "Bread", veg=True),
        _item("item_4", "Raita", 80, "Sides", veg=True),
    ),
    "rest_2": (
        _item("item_5", "Quinoa Power Bowl", 320, "Main Course", veg=True),
        _item("item_6", "Green Smoothie", 180, "Beverages", veg=True),
        _item("item_7", "Avocado Toast", 250, "Breakfast", veg=True),
    ),
    "rest_3": (
        _item("item_8", "Classic Burger", 180, "Main Course", veg=False),
        _item("item_9", "Veggie Burger", 150, "Main Course", veg=True),
        _item("item_10", "Fries", 90, "Sides", veg=True),
    ),
}

SUGGESTIONS: dict[str, list[str]] = {
    "initial": ["Popular restaurants", "Order again", "Cuisine categories", "Deals & offers"],
    "restaurant_selection": ["View menu", "Check reviews", "Filter by rating", "Delivery time"],
    "menu_browse": ["Add to cart", "View categories", "Popular items", "Chef's special"],
    "cart": ["Proceed to checkout", "Add more items", "Apply coupon", "Modify quantity"],
    "checkout": ["Confirm order", "Change address", "Payment options", "Add instructions"],
}

_FOOD_RE = keyword_pattern(FOOD_KEYWORDS)
_TRACK_RE = keyword_pattern(("track", "where is my order", "order status"))
_CHECKOUT_RE = keyword_pattern(
    ("checkout", "check out", "place order", "place my order", "pay", "bill")
)
_ADD_RE = re.compile(r"\badd\b", re.IGNORECASE)
_MENU_RE = keyword_pattern(("menu",))
_SEARCH_RE = keyword_pattern(("restaurant", "find", "show", "search", "recommend"))
_ORDER_RE = keyword_pattern(("order", "hungry", "eat", "craving"))
_GENERAL_RE = keyword_pattern(
    ("help", "what can you do", "how does this app work", "app features", "who are you")
)


@dataclass
class _OrderState:
    stage: str = "initial"
    restaurant: dict[str, Any] | None = None
    items: list[dict[str, Any]] = field(default_factory=list)
    location: str | None = None

    @property
    def subtotal(self) -> int:
        return sum(item["price"] * item["quantity"] for item in self.items)


def _bill(subtotal: int) -> dict[str, int]:
    delivery_fee = 0 if subtotal > FREE_DELIVERY_ABOVE else DELIVERY_FEE
    # Half-up rounding to whole rupees.
    gst = (subtotal * GST_PERCENT + 50) // 100
    return {
        "subtotal": subtotal,
        "delivery_fee": delivery_fee,
        "gst": gst,
        "total": subtotal + delivery_fee + gst,
    }


def _suggestions(stage: str) -> list[str]:
    return list(SUGGESTIONS.get(stage, SUGGESTIONS["initial"]))


def _cart_summary(items: list[dict[str, Any]], subtotal: int) -> str:
    if not items:
        return "Your cart is empty"
    lines = "\n".join(
        f"{item['quantity']}x {item['name']} - ₹{item['price'] * item['quantity']}"
        for item in items
    )
    return f"**Your Cart:**\n{lines}\n\n**Total: ₹{subtotal}**"


class FoodieAgent(Agent):
    """Restaurant search, menus, cart and checkout over mock data."""

    agent_id = "foodie"
    display_name = "Foodie AI"
    capabilities = (
        "food ordering",
        "restaurant recommendations",
        "cuisine suggestions",
        "dietary preferences",
        "food delivery tracking",
    )

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._orders: dict[str, _OrderState] = {}

    def can_handle(self, message: str, context: ConversationContext) -> bool:
        return _FOOD_RE.search(message) is not None

    def generate_suggestions(self, user_id: str) -> list[str]:
        state = self._orders.get(user_id)
        return _suggestions(state.stage if state else "initial")

    def forget(self, user_id: str) -> None:
        self._orders.pop(user_id, None)

    async def respond(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None,
    ) -> AgentResponse:
        state = self._orders.setdefault(context.user_id, _OrderState())
        intent = await self._detect_intent(message)

        if intent == "general_question":
            return self.format_response(
                "That sounds like a general question, so let me bring in AskMe AI.",
                handoff=self.create_handoff(
                    "askme",
                    "user asked a general question",
                    {"user_message": message},
                    auto_handoff=True,
                ),
            )
        if intent == "track_order":
            return self._track_order(state)
        if intent == "checkout":
            return self._checkout(state, profile)
        if intent == "add_to_cart":
            return self._add_to_cart(message, state)
        if intent == "select_restaurant":
            return self._select_restaurant(message, state)
        if intent == "menu_browse":
            return self._menu(state)
        if intent in ("order_food", "restaurant_search"):
            return self._search(message, state, profile)
        return await self._general_query(message)

    async def _detect_intent(self, message: str) -> str:
        if _GENERAL_RE.search(message) and not _FOOD_RE.search(message):
            return "general_question"
        if _TRACK_RE.search(message):
            return "track_order"
        if _CHECKOUT_RE.search(message):
            return "checkout"
        if _ADD_RE.search(message):
            return "add_to_cart"
        if self._match_restaurant(message) is not None:
            return "select_restaurant"
        if _MENU_RE.search(message):
            return "menu_browse"
        if _SEARCH_RE.search(message):
            return "restaurant_search"
        if _ORDER_RE.search(message) or self._match_cuisine(message):
            return "order_food"
        analysis = await self.analyze_intent(message)
        return analysis.intent

    # -- Handlers ------------------------------------------------------------

    def _search(
        self,
        message: str,
        state: _OrderState,
        profile: UserProfile | None,
    ) -> AgentResponse:
        location = extract_location(message) or state.location
        if location is None and profile is not None:
            address = profile.default_address()
            location = (address.city or address.label) if address else None
        if not location:
            return self.format_response(
                "I'd love to help you order food! Could you tell me your location "
                "or pick one of your saved addresses?",
                [{"type": "location_input", "required": True}],
                ["Use my current location", "Select saved address"],
            )

        cuisine = self._match_cuisine(message)
        vegetarian = bool(profile and profile.preferences.dietary.vegetarian)
        restaurants = self._find_restaurants(cuisine, vegetarian=vegetarian)
        what = cuisine or "food"
        if not restaurants:
            return self.format_response(
                f"I couldn't find any restaurants serving {what} in {location}. "
                "Would you like me to suggest some popular options instead?",
                suggestions=[
                    "Show popular restaurants",
                    "Try different cuisine",
                    "Change location",
                ],
            )

        state.stage = "restaurant_selection"
        state.location = location
        listing = "\n".join(
            f"{i}. {r['name']} - {r['cuisine']} ({r['rating']}⭐) - {r['delivery_time']} mins"
            for i, r in enumerate(restaurants, start=1)
        )
        return self.format_response(
            f"Here are some great restaurants for {what} in {location}:\n\n{listing}\n\n"
            "Which restaurant would you like to order from?",
            [{"type": "restaurant_selection", "restaurants": list(restaurants)}],
            [r["name"] for r in restaurants[:3]],
        )

    def _select_restaurant(self, message: str, state: _OrderState) -> AgentResponse:
        state.restaurant = self._match_restaurant(message)
        state.items = []
        return self._menu(state)

    def _menu(self, state: _OrderState) -> AgentResponse:
        if state.restaurant is None:
            return self.format_response(
                "Please select a restaurant first to view their menu.",
                suggestions=["Show restaurants", "Search restaurants"],
            )
        state.stage = "menu_browse"
        menu = MENUS.get(state.restaurant["id"], ())
        listing = "\n\n".join(
            f"🍽️ **{item['name']}** {'🥬' if item['is_veg'] else '🍖'}\n"
            f"₹{item['price']} • {item['category']}"
            for item in menu
        )
        return self.format_response(
            f"Here's the menu from {state.restaurant['name']}:\n\n{listing}",
            [{"type": "menu_display", "menu": list(menu)}],
            _suggestions("menu_browse"),
        )

    def _add_to_cart(self, message: str, state: _OrderState) -> AgentResponse:
        if state.restaurant is None:
            return self.format_response(
                "Pick a restaurant first, then I can add items to your cart.",
                suggestions=["Show restaurants"],
            )
        item = self._match_item(message, state.restaurant["id"])
        if item is None:
            return self.format_response(
                "I couldn't find that on the menu. Would you like to browse the full menu?",
                suggestions=["View menu", "Popular items"],
            )

        quantity = extract_number(message) or 1
        for entry in state.items:
            if entry["id"] == item["id"]:
                entry["quantity"] += quantity
                break
        else:
            state.items.append({**item, "quantity": quantity})
        state.stage = "cart"

        return self.format_response(
            f"Added {quantity}x {item['name']} to your cart! 🛒\n\n"
            f"{_cart_summary(state.items, state.subtotal)}",
            [{"type": "cart_update", "items": list(state.items), "total": state.subtotal}],
            _suggestions("cart"),
        )

    def _checkout(self, state: _OrderState, profile: UserProfile | None) -> AgentResponse:
        if not state.items:
            return self.format_response(
                "Your cart is empty. Would you like to browse restaurants and add "
                "some delicious items?",
                suggestions=["Browse restaurants", "Popular dishes", "Cuisines"],
            )
        address = profile.default_address() if profile else None
        if address is None:
            return self.format_response(
                "I need a delivery address to complete your order. "
                "Please add your delivery address.",
                [{"type": "address_input", "required": True}],
                ["Use current location", "Add new address"],
            )

        state.stage = "checkout"
        bill = _bill(state.subtotal)
        lines = "\n".join(
            f"{item['quantity']}x {item['name']} - ₹{item['price'] * item['quantity']}"
            for item in state.items
        )
        summary = (
            f"📋 **Order Summary**\n{lines}\n\n"
            f"💰 **Bill Details**\n"
            f"Subtotal: ₹{bill['subtotal']}\n"
            f"Delivery Fee: ₹{bill['delivery_fee']}\n"
            f"GST ({GST_PERCENT}%): ₹{bill['gst']}\n"
            f"**Total: ₹{bill['total']}**\n\n"
            f"📍 **Delivery Address**\n{address.display_name}\n\n"
            "🕐 **Estimated Delivery**: 35-45 mins\n\n"
            "Everything looks good? Shall I place your order?"
        )
        return self.format_response(
            summary,
            [
                {
                    "type": "order_confirmation",
                    "restaurant": state.restaurant,
                    "items": list(state.items),
                    "bill": bill,
                    "address": address.model_dump(),
                }
            ],
            _suggestions("checkout"),
        )

    def _track_order(self, state: _OrderState) -> AgentResponse:
        restaurant = state.restaurant["name"] if state.restaurant else "your restaurant"
        timeline = (
            ("confirmed", True),
            ("preparing", True),
            ("packed", False),
            ("out for delivery", False),
            ("delivered", False),
        )
        steps = "\n".join(f"{'✅' if done else '⏳'} {step}" for step, done in timeline)
        return self.format_response(
            f"🍔 **Order Status**: PREPARING\n\n🏪 {restaurant}\n"
            f"🕐 **Estimated Delivery**: 25 mins\n\n📍 **Tracking Timeline**:\n{steps}",
            [{"type": "order_tracking", "status": "preparing", "restaurant": restaurant}],
            ["Call restaurant", "Cancel order", "Report issue", "Rate order"],
        )

    async def _general_query(self, message: str) -> AgentResponse:
        reply = await self.generate_response(
            "You are Foodie AI, a helpful assistant for food ordering and restaurant "
            "recommendations. Answer the user's food related question briefly.",
            message,
            max_tokens=200,
        )
        return self.format_response(reply, suggestions=_suggestions("initial"))

    # -- Lookups -------------------------------------------------------------

    @staticmethod
    def _find_restaurants(cuisine: str | None, *, vegetarian: bool) -> list[dict[str, Any]]:
        found = list(RESTAURANTS)
        if cuisine:
            needle = cuisine.lower()
            found = [
                r
                for r in found
                if needle in r["cuisine"].lower()
                or any(needle in s.lower() for s in r["specialties"])
            ]
        if vegetarian:
            found = [r for r in found if r["is_veg"] or r["has_veg_options"]]
        return found

    @staticmethod
    def _match_cuisine(message: str) -> str | None:
        lowered = message.lower()
        for restaurant in RESTAURANTS:
            for term in (restaurant["cuisine"], *restaurant["specialties"]):
                # "biryani" should match the "Biryani" specialty, "burger" the "Burgers" one.
                stem = term.lower().rstrip("s")
                if stem and stem in lowered:
                    return term
        return None

    @staticmethod
    def _match_restaurant(message: str) -> dict[str, Any] | None:
        lowered = message.lower()
        for restaurant in RESTAURANTS:
            if restaurant["name"].lower() in lowered:
                return restaurant
        return None

    @staticmethod
    def _match_item(message: str, restaurant_id: str) -> dict[str, Any] | None:
        lowered = message.lower()
        menu = MENUS.get(restaurant_id, ())
        for item in menu:
            if item["name"].lower() in lowered:
                return item
        for item in menu:
            if any(len(word) > 3 and word in lowered for word in item["name"].lower().split()):
                return item
        return None
