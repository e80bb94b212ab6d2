"""History entry model representing a received message shown to the user."""

from dataclasses import dataclass
from typing import Any, Optional

from .. import config
from .inbound_event import InboundEvent


@dataclass
class HistoryEntry:
    """Represents a received message in the caller-side history."""

    identifier: Any = None
    text: str = ""
    timestamp: Any = None
    is_final: bool = True
    sender: str = config.RECEIVED_SENDER
    status: str = config.RECEIVED_STATUS

    @property
    def key(self) -> tuple:
        """Duplicate-suppression key."""
        return (self.identifier, self.timestamp)

    def to_dict(self) -> dict:
        """Convert entry to dictionary for display or export."""
        return {
            'id': self.identifier,
            'text': self.text,
            'timestamp': self.timestamp,
            'isFinal': self.is_final,
            'sender': self.sender,
            'status': self.status
        }

    @classmethod
    def from_event(cls, event: InboundEvent) -> 'HistoryEntry':
        """Create entry from a content event."""
        return cls(
            identifier=event.identifier,
            text=(event.text or "").strip(),
            timestamp=event.timestamp,
            is_final=event.is_final
        )
