"""Domain agents and the roster that holds them."""

from switchboard.agents.askme import AskMeAgent
from switchboard.agents.base import Agent, IntentAnalysis
from switchboard.agents.foodie import FoodieAgent
from switchboard.agents.ridenow import RideNowAgent
from switchboard.agents.roster import AgentRoster, default_roster

__all__ = [
    "Agent",
    "AgentRoster",
    "AskMeAgent",
    "FoodieAgent",
    "IntentAnalysis",
    "RideNowAgent",
    "default_roster",
]
