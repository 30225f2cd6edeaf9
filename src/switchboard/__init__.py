"""Agent Switchboard - route conversations between domain AI agents."""

from switchboard._version import __version__
from switchboard.agents import (
    Agent,
    AgentRoster,
    AskMeAgent,
    FoodieAgent,
    IntentAnalysis,
    RideNowAgent,
    default_roster,
)
from switchboard.core.circuit_breaker import CircuitBreaker
from switchboard.core.clock import Clock, ManualClock, SystemClock
from switchboard.core.framework import (
    AgentProcessingError,
    InvalidMessageError,
    RosterError,
    Switchboard,
    SwitchboardConfig,
    SwitchboardError,
    UnknownAgentError,
)
from switchboard.core.locks import InMemoryLockManager, KeyedLockManager
from switchboard.models.agent import AgentDescriptor
from switchboard.models.delivery import InboundMessage
from switchboard.models.profile import (
    Address,
    DietaryPreferences,
    Preferences,
    RidePreferences,
    UserProfile,
)
from switchboard.models.response import AgentResponse, HandoffDirective, ResponseEnvelope
from switchboard.orchestration import (
    AgentRouter,
    Classification,
    ClassificationOutcome,
    ConversationContext,
    ConversationPhase,
    ConversationTurn,
    HandoffPolicy,
    IntentClassifier,
    Orchestrator,
    OrchestratorConfig,
    ReaperConfig,
    RouteReason,
    RoutingDecision,
    SessionReaper,
    TurnOrigin,
)
from switchboard.providers.ai.base import (
    AIContext,
    AIMessage,
    AIProvider,
    AIResponse,
    ProviderError,
)
from switchboard.providers.ai.mock import MockAIProvider
from switchboard.realtime import (
    InMemoryRealtime,
    LiveCallback,
    LiveEvent,
    LiveEventType,
    RealtimeBackend,
)
from switchboard.store.base import ContextStore
from switchboard.store.memory import InMemoryContextStore

__all__ = [
    "__version__",
    # Framework
    "Switchboard",
    "SwitchboardConfig",
    # Errors
    "AgentProcessingError",
    "InvalidMessageError",
    "ProviderError",
    "RosterError",
    "SwitchboardError",
    "UnknownAgentError",
    # Agents
    "Agent",
    "AgentRoster",
    "AskMeAgent",
    "FoodieAgent",
    "IntentAnalysis",
    "RideNowAgent",
    "default_roster",
    # Models
    "Address",
    "AgentDescriptor",
    "AgentResponse",
    "DietaryPreferences",
    "HandoffDirective",
    "InboundMessage",
    "Preferences",
    "ResponseEnvelope",
    "RidePreferences",
    "UserProfile",
    # Orchestration
    "AgentRouter",
    "Classification",
    "ClassificationOutcome",
    "ConversationContext",
    "ConversationPhase",
    "ConversationTurn",
    "HandoffPolicy",
    "IntentClassifier",
    "Orchestrator",
    "OrchestratorConfig",
    "ReaperConfig",
    "RouteReason",
    "RoutingDecision",
    "SessionReaper",
    "TurnOrigin",
    # Core
    "CircuitBreaker",
    "Clock",
    "InMemoryLockManager",
    "KeyedLockManager",
    "ManualClock",
    "SystemClock",
    # Providers
    "AIContext",
    "AIMessage",
    "AIProvider",
    "AIResponse",
    "MockAIProvider",
    # Realtime
    "InMemoryRealtime",
    "LiveCallback",
    "LiveEvent",
    "LiveEventType",
    "RealtimeBackend",
    # Store
    "ContextStore",
    "InMemoryContextStore",
]
