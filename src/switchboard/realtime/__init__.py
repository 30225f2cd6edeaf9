"""Live notification channel for pushing turn results to users."""

from switchboard.realtime.base import (
    LiveCallback,
    LiveEvent,
    LiveEventType,
    RealtimeBackend,
)
from switchboard.realtime.memory import InMemoryRealtime

__all__ = [
    "InMemoryRealtime",
    "LiveCallback",
    "LiveEvent",
    "LiveEventType",
    "RealtimeBackend",
]
