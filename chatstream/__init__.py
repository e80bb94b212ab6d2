"""Chat Stream - resilient live-update client for chat rooms."""

from .models import ConnectionStatus, InboundEvent, StreamState, StreamTransition
from .services import MessageHistory, RoomService, RoomServiceError, StreamClient, Subscription

__version__ = "1.0.0"

__all__ = [
    'ConnectionStatus',
    'InboundEvent',
    'StreamState',
    'StreamTransition',
    'MessageHistory',
    'RoomService',
    'RoomServiceError',
    'StreamClient',
    'Subscription'
]
