"""Inbound event model representing one decoded stream frame."""

import json
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from .. import config


def _local_identifier() -> int:
    """Millisecond wall-clock stamp used when a frame carries no id."""
    return int(time.time() * 1000)


@dataclass
class InboundEvent:
    """The most recently received, successfully decoded stream payload.

    Content frames carry text; control frames (heartbeat, connection) carry
    none and exist so callers can observe that the stream is alive.
    """

    identifier: Any = field(default_factory=_local_identifier)
    text: Optional[str] = None
    timestamp: Any = None  # Producer-assigned ordering token, opaque
    is_final: bool = False  # Committed message vs. in-progress draft
    type: Optional[str] = None
    raw: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert event back to its wire representation."""
        data = dict(self.raw)
        data.update({
            'identifier': self.identifier,
            'text': self.text,
            'timestamp': self.timestamp,
            'isFinal': self.is_final,
            'type': self.type
        })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'InboundEvent':
        """Create event from a decoded frame payload.

        Raises:
            ValueError: if the payload is not a JSON object.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Frame payload must be an object, got {type(data).__name__}")

        identifier = data.get('identifier')
        if identifier is None:
            identifier = data.get('id')
        if identifier is None:
            identifier = _local_identifier()

        event_type = data.get('type')
        return cls(
            identifier=identifier,
            text=data.get('text'),
            timestamp=data.get('timestamp'),
            is_final=bool(data.get('isFinal', False)),
            type=str(event_type) if event_type is not None else None,
            raw=data
        )

    @classmethod
    def from_json(cls, payload: str) -> 'InboundEvent':
        """Decode a raw frame. Raises ValueError on malformed input."""
        return cls.from_dict(json.loads(payload))

    @property
    def is_heartbeat(self) -> bool:
        """Check if this is a liveness ping."""
        return self.type == config.EVENT_TYPE_HEARTBEAT

    @property
    def is_control(self) -> bool:
        """Check if this frame carries no user-visible content."""
        return self.type in config.CONTROL_EVENT_TYPES
