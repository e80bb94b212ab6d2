"""Connection status and stream state models.

ConnectionStatus is what callers observe. StreamState is the finer-grained
lifecycle of one subscription, used for diagnostics and transition hooks.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class ConnectionStatus(str, Enum):
    """Last observed open/error transition of the stream."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class StreamState(str, Enum):
    """Lifecycle of a subscription.

    idle -> connecting -> connected -> backoff -> connecting ... -> exhausted
    Any state may move to disposed; disposed is final.
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    BACKOFF = "backoff"
    EXHAUSTED = "exhausted"
    DISPOSED = "disposed"

    @property
    def is_terminal(self) -> bool:
        return self in (StreamState.EXHAUSTED, StreamState.DISPOSED)


@dataclass
class StreamTransition:
    """One state change of a subscription, delivered to transition hooks."""

    room: Optional[str]
    state: StreamState
    status: ConnectionStatus
    attempt: int = 0
    error: Optional[str] = None
    delay: Optional[float] = None  # Seconds until the next attempt, when in backoff
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            'room': self.room,
            'state': self.state.value,
            'status': self.status.value,
            'attempt': self.attempt,
            'error': self.error,
            'delay': self.delay,
            'at': self.at.isoformat() if self.at else None
        }
