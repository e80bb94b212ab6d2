from .connection_status import ConnectionStatus, StreamState, StreamTransition
from .history_entry import HistoryEntry
from .inbound_event import InboundEvent

__all__ = [
    'ConnectionStatus',
    'StreamState',
    'StreamTransition',
    'HistoryEntry',
    'InboundEvent'
]
