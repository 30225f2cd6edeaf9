"""Agent orchestration: conversation state, routing, handoff and eviction."""

from switchboard.orchestration.classifier import (
    Classification,
    ClassificationOutcome,
    IntentClassifier,
)
from switchboard.orchestration.config import OrchestratorConfig, ReaperConfig
from switchboard.orchestration.handoff import HandoffPolicy, handoff_request_message
from switchboard.orchestration.orchestrator import Orchestrator
from switchboard.orchestration.reaper import SessionReaper
from switchboard.orchestration.router import AgentRouter, RouteReason, RoutingDecision
from switchboard.orchestration.state import (
    ConversationContext,
    ConversationPhase,
    ConversationTurn,
    TurnOrigin,
)

__all__ = [
    # State
    "ConversationContext",
    "ConversationPhase",
    "ConversationTurn",
    "TurnOrigin",
    # Routing
    "AgentRouter",
    "Classification",
    "ClassificationOutcome",
    "IntentClassifier",
    "RouteReason",
    "RoutingDecision",
    # Handoff
    "HandoffPolicy",
    "handoff_request_message",
    # Runtime
    "Orchestrator",
    "OrchestratorConfig",
    "ReaperConfig",
    "SessionReaper",
]
