"""Caller-side message history built from stream events.

The stream client reports every frame, control frames included, and never
deduplicates. This is the layer that turns its output into what a chat view
shows: content only, each message once, newest first.
"""

from typing import List, Optional, Set

from .. import config
from ..models import HistoryEntry, InboundEvent
from .logging_config import get_logger

logger = get_logger("history")


class MessageHistory:
    """Accumulates received messages, newest first.

    Usage:
        history = MessageHistory()
        client.add_event_callback(history.add_event)
    """

    def __init__(self, max_size: int = config.MAX_HISTORY_SIZE):
        self._max_size = max(1, max_size)
        self._entries: List[HistoryEntry] = []
        self._seen: Set[tuple] = set()

    @property
    def entries(self) -> List[HistoryEntry]:
        """Entries, newest first."""
        return list(self._entries)

    @property
    def latest(self) -> Optional[HistoryEntry]:
        return self._entries[0] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def add_event(self, event: Optional[InboundEvent]) -> Optional[HistoryEntry]:
        """Record a content event. Returns the new entry, or None if skipped."""
        if event is None or event.is_control:
            return None

        if not isinstance(event.text, str) or not event.text.strip():
            return None

        entry = HistoryEntry.from_event(event)
        if entry.key in self._seen:
            logger.debug(f"Skipping duplicate event {entry.identifier}")
            return None

        self._seen.add(entry.key)
        self._entries.insert(0, entry)

        # Trim oldest
        while len(self._entries) > self._max_size:
            dropped = self._entries.pop()
            self._seen.discard(dropped.key)

        return entry

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()
        self._seen.clear()
