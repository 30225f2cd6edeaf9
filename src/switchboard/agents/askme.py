"""AskMe: general help and the fallback agent."""

from __future__ import annotations

import re
from typing import Any

from switchboard.agents._text import keyword_pattern
from switchboard.agents.base import Agent
from switchboard.models.profile import UserProfile
from switchboard.models.response import AgentResponse
from switchboard.orchestration.state import ConversationContext

SUGGESTIONS = [
    "How can I help you?",
    "Show app features",
    "Get recommendations",
    "Connect to specialist agent",
    "Technical support",
]

FEATURES: tuple[dict[str, Any], ...] = (
    {
        "name": "Foodie AI 🍽️",
        "description": "Order food from restaurants, get recommendations, track deliveries",
        "capabilities": [
            "Restaurant search",
            "Menu browsing",
            "Order tracking",
            "Dietary preferences",
        ],
    },
    {
        "name": "RideNow AI 🚗",
        "description": "Book cabs, get fare estimates, track rides, schedule trips",
        "capabilities": ["Instant booking", "Fare comparison", "Live tracking", "Scheduled rides"],
    },
    {
        "name": "AskMe AI 💬",
        "description": "General questions, app help and guidance",
        "capabilities": ["App features", "Troubleshooting", "Recommendations", "Casual chat"],
    },
)

AGENT_INFO: dict[str, dict[str, Any]] = {
    "foodie": {
        "name": "Foodie AI",
        "expertise": "Food ordering and restaurant recommendations",
        "commands": ["order food", "find restaurants", "track my order"],
        "tip": "Tell me your location and food preferences for better recommendations",
    },
    "ridenow": {
        "name": "RideNow AI",
        "expertise": "Cab booking and transportation",
        "commands": ["book a ride", "get fare estimate", "track my ride"],
        "tip": "Specify pickup and destination for quick booking",
    },
    "askme": {
        "name": "AskMe AI (that's me!)",
        "expertise": "General help and app navigation",
        "commands": ["help", "app features", "how to use"],
        "tip": "Ask me anything about the app or get help with any feature",
    },
}

HELP_CATEGORIES: dict[str, tuple[str, str]] = {
    "account": ("Account Help", "Manage your profile, settings, and preferences"),
    "agents": ("AI Agents Guide", "Learn about our specialized AI assistants"),
    "orders": ("Orders & Bookings", "Track your orders, rides, and bookings"),
    "payments": ("Payment Support", "Payment methods, refunds, and billing"),
    "technical": ("Technical Support", "App issues, bugs, and troubleshooting"),
}

TROUBLESHOOTING: dict[str, list[str]] = {
    "app slow": [
        "Close and restart the app",
        "Check your internet connection",
        "Clear app cache",
        "Update to latest version",
    ],
    "login issues": [
        "Check email/password spelling",
        "Reset password if needed",
        "Try a different network",
    ],
    "payment failed": [
        "Check card details",
        "Verify sufficient balance",
        "Try a different payment method",
    ],
    "notifications": [
        "Check notification settings",
        "Allow app permissions",
        "Restart device",
    ],
}

# Phrases that name a specialist: "switch to foodie", "connect me to RideNow".
_SWITCH_TARGETS = {"foodie": "foodie", "food": "foodie", "ridenow": "ridenow", "ride": "ridenow"}
_SWITCH_RE = keyword_pattern(("switch to", "connect me to", "talk to", "transfer me to"))

_GREETING_RE = re.compile(
    r"^\s*(?:hi|hello|hey|namaste|good (?:morning|afternoon|evening))\b", re.IGNORECASE
)
_FEATURES_RE = keyword_pattern(
    ("features", "what can you do", "what can this app", "how does this app")
)
_AGENTS_RE = keyword_pattern(("agents", "who are you", "which agent"))
_RECOMMEND_RE = keyword_pattern(("recommend", "suggest", "what should i"))
_COMPLAINT_RE = keyword_pattern(
    ("complain", "complaint", "terrible", "not happy", "refund", "disappointed")
)
_TECH_RE = keyword_pattern(
    ("not working", "bug", "crash", "login", "slow", "error", "notification")
)
_HELP_RE = keyword_pattern(("help", "support"))


def _describe_agent(info: dict[str, Any]) -> str:
    commands = ", ".join(f'"{c}"' for c in info["commands"])
    return (
        f"🤖 **{info['name']}**\n{info['expertise']}\n\n"
        f"**Try saying:** {commands}\n\n💡 **Tip:** {info['tip']}"
    )


class AskMeAgent(Agent):
    """General assistant and the roster's fallback agent."""

    agent_id = "askme"
    display_name = "AskMe AI"
    capabilities = (
        "general questions",
        "casual conversation",
        "help and support",
        "information lookup",
        "recommendations",
    )
    fallback = True

    def can_handle(self, message: str, context: ConversationContext) -> bool:
        return True

    def generate_suggestions(self, user_id: str) -> list[str]:
        return list(SUGGESTIONS)

    async def handle_handoff(
        self,
        handoff_context: dict[str, Any],
        context: ConversationContext,
    ) -> AgentResponse:
        self._touch()
        from_agent = handoff_context.get("from_agent")
        if from_agent:
            message = (
                f"Hi! I'm AskMe AI. I've taken over from {from_agent} to help you with "
                "general questions or guide you to other services. What can I help you with?"
            )
        else:
            message = "Hi! I'm AskMe AI. What can I help you with?"
        return self.format_response(
            message,
            [
                {
                    "type": "agent_handoff_complete",
                    "from_agent": from_agent,
                    "to_agent": self.agent_id,
                }
            ],
            [
                "What can you help me with?",
                "Show app features",
                "Get recommendations",
                "How to use other agents",
            ],
        )

    def handle_error(self, message: str, error: BaseException) -> AgentResponse:
        self._log_failure(error)
        return self.error_response()

    def error_response(self) -> AgentResponse:
        """The polite degraded reply used when any turn fails."""
        return self.format_response(
            "I apologize, but I encountered an issue while processing your request. "
            "Let me try to help you in a different way.\n\n"
            "Here are some things I can definitely help you with:\n"
            "• General questions about the app\n"
            "• Connecting you to specialized agents\n"
            "• App features and guidance\n"
            "• Troubleshooting common issues\n\n"
            "What would you like to try?",
            suggestions=[
                "Try again",
                "Show app features",
                "Connect to food agent",
                "Connect to ride agent",
                "Get help",
            ],
            metadata={"error": True},
        )

    async def respond(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None,
    ) -> AgentResponse:
        target = self._switch_target(message)
        if target is not None:
            return self.format_response(
                f"Sure, connecting you to {AGENT_INFO[target]['name']}.",
                handoff=self.create_handoff(
                    target,
                    "user asked to switch agents",
                    {"user_message": message},
                    auto_handoff=True,
                ),
            )
        if _TECH_RE.search(message):
            return self._technical_support()
        if _COMPLAINT_RE.search(message):
            return self._complaint()
        if _FEATURES_RE.search(message):
            return self._features()
        if _AGENTS_RE.search(message):
            return self._agent_information()
        if _RECOMMEND_RE.search(message):
            return self._recommendations(profile)
        if _HELP_RE.search(message):
            return self._help_menu()
        if _GREETING_RE.match(message):
            return self._greeting(profile)
        return await self._general_query(message, profile)

    # -- Handlers ------------------------------------------------------------

    def _greeting(self, profile: UserProfile | None) -> AgentResponse:
        name = profile.name if profile and profile.name else "there"
        return self.format_response(
            f"{self._time_greeting()}, {name}! 👋 I'm AskMe AI, your helpful assistant. "
            "I'm here to help with any questions you have or assist you in navigating the app.",
            [
                {
                    "type": "quick_actions",
                    "actions": ["Show app features", "Get help", "Talk to agents"],
                }
            ],
            [
                "What can you help me with?",
                "Show me app features",
                "Order food",
                "Book a ride",
            ],
        )

    def _help_menu(self) -> AgentResponse:
        menu = "\n\n".join(
            f"🔹 **{title}**\n{description}" for title, description in HELP_CATEGORIES.values()
        )
        return self.format_response(
            f"I'm here to help! Here are the main areas I can assist you with:\n\n{menu}\n\n"
            "What specific help do you need?",
            [{"type": "help_categories", "categories": list(HELP_CATEGORIES)}],
            [
                "Account help",
                "How to use agents",
                "Track my orders",
                "Payment issues",
                "App problems",
            ],
        )

    def _features(self) -> AgentResponse:
        text = "\n\n".join(
            f"**{f['name']}**\n{f['description']}\n• {' • '.join(f['capabilities'])}"
            for f in FEATURES
        )
        return self.format_response(
            f"🌟 **App Features:**\n\n{text}\n\nJust talk naturally and I'll connect you "
            "to the right agent!",
            [{"type": "feature_showcase", "features": list(FEATURES)}],
            ["Try Foodie AI", "Book a ride", "How to switch agents"],
        )

    def _agent_information(self) -> AgentResponse:
        text = "\n\n---\n\n".join(_describe_agent(info) for info in AGENT_INFO.values())
        return self.format_response(
            f"Here's information about our AI agents:\n\n{text}\n\n**Agent Switching:** "
            "mention what you need and I'll connect you to the right specialist!",
            [{"type": "agent_info", "agents": AGENT_INFO}],
            ["Switch to Foodie AI", "Switch to RideNow AI", "What else can you do?"],
        )

    def _recommendations(self, profile: UserProfile | None) -> AgentResponse:
        hour = self._clock.now().hour
        sections: list[tuple[str, list[str]]] = []
        if 6 <= hour < 12:
            sections.append(
                (
                    "Good Morning Suggestions",
                    ["Order breakfast from nearby cafes", "Book a cab to work"],
                )
            )
        elif 12 <= hour < 17:
            sections.append(
                (
                    "Afternoon Activities",
                    ["Order lunch from popular restaurants", "Plan your commute home"],
                )
            )
        elif 17 <= hour < 22:
            sections.append(
                ("Evening Suggestions", ["Order dinner", "Book a ride for your evening plans"])
            )
        if profile and profile.favorite_agents:
            usage = [f"Continue with {agent.capitalize()} AI" for agent in profile.favorite_agents]
            sections.append(("Based on Your Usage", usage))
        if profile and profile.total_orders == 0:
            sections.append(
                (
                    "Getting Started",
                    ["Try ordering your first meal", "Set up your addresses and preferences"],
                )
            )
        if not sections:
            sections.append(("Popular Right Now", ["Late night food delivery", "Book a ride home"]))

        text = "\n\n".join(f"**{title}**\n• " + "\n• ".join(items) for title, items in sections)
        return self.format_response(
            f"Here are some personalized recommendations for you:\n\n{text}\n\n"
            "What would you like to try?",
            [
                {
                    "type": "recommendations",
                    "sections": [{"title": t, "items": i} for t, i in sections],
                }
            ],
            ["Order food now", "Book a ride", "Explore features", "Set up preferences"],
        )

    def _complaint(self) -> AgentResponse:
        return self.format_response(
            "I understand your concern and I want to help resolve this for you. "
            "Your feedback is important to us.\n\n"
            "Could you please provide more details about the specific issue "
            "you're experiencing?",
            [
                {
                    "type": "support_options",
                    "categories": [
                        "Order issue",
                        "Payment problem",
                        "App bug",
                        "Service quality",
                        "Other",
                    ],
                }
            ],
            ["Order not delivered", "Payment failed", "App is slow", "Speak to human agent"],
        )

    def _technical_support(self) -> AgentResponse:
        text = "\n\n".join(
            f"**{issue.upper()}:**\n"
            + "\n".join(f"{i}. {step}" for i, step in enumerate(steps, start=1))
            for issue, steps in TROUBLESHOOTING.items()
        )
        return self.format_response(
            f"Here are some common technical issues and solutions:\n\n{text}\n\n"
            "If these don't help, I can connect you with our technical support team.",
            [{"type": "troubleshooting", "steps": TROUBLESHOOTING}],
            ["App is slow", "Can't login", "Payment not working", "Contact tech support"],
        )

    async def _general_query(self, message: str, profile: UserProfile | None) -> AgentResponse:
        about = "New user"
        if profile is not None:
            about = f"Name: {profile.name}, total orders: {profile.total_orders}"
        reply = await self.generate_response(
            "You are AskMe AI, a friendly assistant in a super app with specialist agents "
            "for food ordering (Foodie AI) and ride booking (RideNow AI). Answer helpfully "
            "and mention the relevant agent when the question is about food or rides.\n"
            f"User context: {about}",
            message,
            max_tokens=250,
        )
        return self.format_response(
            reply,
            suggestions=[
                "Connect me to right agent",
                "How does this app work?",
                "Show me features",
                "Get help",
            ],
        )

    def _time_greeting(self) -> str:
        hour = self._clock.now().hour
        if hour < 12:
            return "Good morning"
        if hour < 17:
            return "Good afternoon"
        if hour < 22:
            return "Good evening"
        return "Hello"

    @staticmethod
    def _switch_target(message: str) -> str | None:
        match = _SWITCH_RE.search(message)
        if match is None:
            return None
        rest = message[match.end():].lower()
        for word, agent_id in _SWITCH_TARGETS.items():
            if word in rest:
                return agent_id
        return None
