"""
Streaming session state models.

Models:
    SessionState: Connection state enumeration
    StateChange: Notification payload for state transitions
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SessionState(str, Enum):
    """
    Streaming session state.

    Transitions: disconnected -> connecting -> open -> (disconnected |
    closing -> disconnected).

    Attributes:
        DISCONNECTED: No socket; a reconnect may be scheduled.
        CONNECTING: Opening handshake in progress.
        OPEN: Socket open, subscriptions can be changed.
        CLOSING: Graceful close requested.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"

    @property
    def is_open(self) -> bool:
        """Check if frames can be sent."""
        return self == SessionState.OPEN


class StateChange(BaseModel):
    """
    A single session state transition.

    Attributes:
        previous: State before the transition.
        current: State after the transition.
        timestamp: When the transition happened (UTC).
        reason: Short machine-readable cause (e.g., "heartbeat_timeout").
    """

    model_config = {"frozen": True, "extra": "forbid"}

    previous: SessionState = Field(
        ...,
        description="State before the transition",
    )
    current: SessionState = Field(
        ...,
        description="State after the transition",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Transition time (UTC)",
    )
    reason: Optional[str] = Field(
        default=None,
        description="Cause of the transition",
    )
