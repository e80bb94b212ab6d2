from .logging_config import setup_logging, get_logger
from .event_source import HttpxEventSource, NotAnEventStreamError, StreamClosedError
from .stream_client import StreamClient, Subscription, compute_reconnect_delay
from .room_service import RoomService, RoomServiceError
from .message_history import MessageHistory

__all__ = [
    'setup_logging',
    'get_logger',
    'HttpxEventSource',
    'StreamClosedError',
    'NotAnEventStreamError',
    'StreamClient',
    'Subscription',
    'compute_reconnect_delay',
    'RoomService',
    'RoomServiceError',
    'MessageHistory'
]
