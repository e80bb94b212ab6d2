"""Resilient event-stream client.

Keeps a best-effort, always-on subscription to a room's server push stream:
1. Opens the stream transport for the room
2. Decodes each frame and stores it as the latest event
3. On transport failure, retries with exponential backoff up to a fixed budget
4. Reports everything through three observables: latest_event, status, error

Failures never raise to the caller; they surface as status and error values.
"""

import asyncio
from functools import partial
from typing import Any, Callable, List, Optional

from .. import config
from ..models import ConnectionStatus, InboundEvent, StreamState, StreamTransition
from .event_source import HttpxEventSource
from .logging_config import get_logger

logger = get_logger("stream")

# (url, on_open, on_message, on_error) -> transport with close()
TransportFactory = Callable[..., Any]


def compute_reconnect_delay(
    attempts: int,
    base_delay: float = config.BASE_RECONNECT_DELAY,
    max_delay: float = config.MAX_RECONNECT_DELAY
) -> float:
    """Backoff delay in seconds after `attempts` earlier failed retries."""
    return min(base_delay * (2 ** attempts), max_delay)


def build_stream_url(base_url: str, room: str) -> str:
    """Build <base>/chat/<room>/stream."""
    return f"{base_url.rstrip('/')}/{config.CHAT_PATH}/{room}/{config.STREAM_SUFFIX}"


class Subscription:
    """One room's live connection, including all of its retries.

    A Subscription exclusively owns its transport, its reconnect timer and
    its attempt counter. Every asynchronous callback carries the connection
    generation it was created for and is dropped unless the subscription is
    still alive and that generation is still current.

    Observables:
        latest_event: last successfully decoded frame, control frames included
        status: ConnectionStatus of the last open/error transition
        error: None while healthy, a progress or terminal message otherwise
    """

    def __init__(
        self,
        room: Optional[str],
        base_url: str = None,
        transport_factory: TransportFactory = None,
        scheduler=None,
        max_attempts: int = config.MAX_RECONNECT_ATTEMPTS,
        base_delay: float = config.BASE_RECONNECT_DELAY,
        max_delay: float = config.MAX_RECONNECT_DELAY
    ):
        """Create an idle subscription. Call start() to connect.

        Args:
            room: Room identifier; empty or None keeps the subscription idle
            base_url: Backend base URL (defaults to config.DEFAULT_BASE_URL)
            transport_factory: Builds a transport from (url, on_open, on_message, on_error)
            scheduler: Object with call_later(delay, callback); defaults to the running loop
            max_attempts: Retry budget before giving up
            base_delay: First backoff delay in seconds
            max_delay: Backoff cap in seconds
        """
        self.room = room or None
        self.base_url = (base_url or config.DEFAULT_BASE_URL).rstrip('/')
        self._transport_factory = transport_factory or HttpxEventSource
        self._scheduler = scheduler
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay

        self._alive = True
        self._generation = 0
        self._transport = None
        self._timer = None
        self._attempts = 0
        self._state = StreamState.IDLE

        self._latest_event: Optional[InboundEvent] = None
        self._status = ConnectionStatus.DISCONNECTED
        self._error: Optional[str] = None

        self._on_event: List[Callable[[InboundEvent], None]] = []
        self._on_status: List[Callable[[ConnectionStatus], None]] = []
        self._on_error: List[Callable[[Optional[str]], None]] = []
        self._on_transition: List[Callable[[StreamTransition], None]] = []

    # ============ Observables ============

    @property
    def latest_event(self) -> Optional[InboundEvent]:
        return self._latest_event

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def state(self) -> StreamState:
        """Current lifecycle state (diagnostics only)."""
        return self._state

    @property
    def attempts(self) -> int:
        """Consecutive failed attempts since the last successful open."""
        return self._attempts

    @property
    def is_disposed(self) -> bool:
        return not self._alive

    @property
    def has_pending_reconnect(self) -> bool:
        return self._timer is not None

    @property
    def url(self) -> Optional[str]:
        if not self.room:
            return None
        return build_stream_url(self.base_url, self.room)

    def add_event_callback(self, callback: Callable[[InboundEvent], None]) -> None:
        """Add a callback for each decoded frame."""
        self._on_event.append(callback)

    def add_status_callback(self, callback: Callable[[ConnectionStatus], None]) -> None:
        """Add a callback for status changes."""
        self._on_status.append(callback)

    def add_error_callback(self, callback: Callable[[Optional[str]], None]) -> None:
        """Add a callback for error message changes."""
        self._on_error.append(callback)

    def add_transition_callback(self, callback: Callable[[StreamTransition], None]) -> None:
        """Add an observability hook for state transitions."""
        self._on_transition.append(callback)

    def _notify(self, callbacks: list, value) -> None:
        for callback in callbacks:
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Error in stream callback: {e}")

    def _set_status(self, status: ConnectionStatus) -> None:
        if not self._alive or status == self._status:
            return
        self._status = status
        self._notify(self._on_status, status)

    def _set_error(self, error: Optional[str]) -> None:
        if not self._alive or error == self._error:
            return
        self._error = error
        self._notify(self._on_error, error)

    def _transition(self, state: StreamState, delay: Optional[float] = None) -> None:
        # Only dispose() may report a transition once the subscription is dead
        if not self._alive and state != StreamState.DISPOSED:
            return
        self._state = state
        transition = StreamTransition(
            room=self.room,
            state=state,
            status=self._status,
            attempt=self._attempts,
            error=self._error,
            delay=delay
        )
        logger.debug(f"[{self.room}] -> {state.value} (attempt {self._attempts})")
        self._notify(self._on_transition, transition)

    # ============ Lifecycle ============

    def start(self) -> None:
        """Begin connecting. No-op without a room or once disposed."""
        if not self._alive:
            return
        if not self.room:
            logger.debug("No room yet, staying idle")
            return
        if self._state != StreamState.IDLE:
            return
        self._connect()

    def dispose(self) -> None:
        """Cancel any pending reconnect and close the transport.

        Idempotent. No observable changes after this returns.
        """
        if not self._alive:
            return
        self._alive = False
        self._cancel_timer()
        self._close_transport()
        self._status = ConnectionStatus.DISCONNECTED
        self._transition(StreamState.DISPOSED)
        logger.info(f"[{self.room}] Subscription disposed")

        self._on_event.clear()
        self._on_status.clear()
        self._on_error.clear()
        self._on_transition.clear()

    def _is_current(self, generation: int) -> bool:
        return self._alive and generation == self._generation

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _close_transport(self) -> None:
        # Bumping the generation orphans every callback of the old transport
        self._generation += 1
        if self._transport is not None:
            transport, self._transport = self._transport, None
            try:
                transport.close()
            except Exception as e:
                logger.warning(f"[{self.room}] Error closing transport: {e}")

    def _connect(self) -> None:
        """Close any existing transport and open a new one."""
        if not self._alive:
            return

        self._cancel_timer()
        self._close_transport()
        generation = self._generation
        url = self.url

        self._transition(StreamState.CONNECTING)
        if not self._alive:
            return
        logger.info(f"[{self.room}] Connecting to {url}")

        try:
            self._transport = self._transport_factory(
                url,
                on_open=partial(self._handle_open, generation),
                on_message=partial(self._handle_message, generation),
                on_error=partial(self._handle_error, generation)
            )
        except Exception as e:
            logger.error(f"[{self.room}] Error creating transport: {e}")
            self._transport = None
            self._handle_error(generation, e)

    def _handle_open(self, generation: int) -> None:
        if not self._is_current(generation):
            return

        logger.info(f"[{self.room}] Connected")
        self._attempts = 0
        self._set_status(ConnectionStatus.CONNECTED)
        if not self._alive:
            return
        self._set_error(None)
        if not self._alive:
            return
        self._transition(StreamState.CONNECTED)

    def _handle_message(self, generation: int, data: str) -> None:
        if not self._is_current(generation):
            return

        try:
            event = InboundEvent.from_json(data)
        except ValueError as e:
            logger.warning(f"[{self.room}] Dropping malformed frame: {e}")
            return

        if event.is_heartbeat:
            logger.debug(f"[{self.room}] Heartbeat received")
        else:
            logger.debug(f"[{self.room}] Event received: {event.type or 'message'} {event.identifier}")

        self._latest_event = event
        self._notify(self._on_event, event)

    def _handle_error(self, generation: int, exc: Optional[Exception] = None) -> None:
        if not self._is_current(generation):
            return

        logger.error(f"[{self.room}] Connection error: {exc}")
        self._close_transport()
        self._set_status(ConnectionStatus.DISCONNECTED)
        if not self._alive:
            return
        self._schedule_reconnect()

    def _schedule_reconnect(self) -> None:
        if not self._alive:
            return

        if self._attempts >= self._max_attempts:
            logger.error(f"[{self.room}] Max reconnect attempts reached")
            self._set_error(config.CONNECTION_FAILED_MESSAGE)
            if not self._alive:
                return
            self._transition(StreamState.EXHAUSTED)
            return

        delay = compute_reconnect_delay(self._attempts, self._base_delay, self._max_delay)
        self._attempts += 1

        try:
            scheduler = self._scheduler or asyncio.get_running_loop()
            self._timer = scheduler.call_later(
                delay, partial(self._fire_reconnect, self._generation)
            )
        except RuntimeError as e:
            logger.error(f"[{self.room}] Cannot schedule reconnect: {e}")
            self._set_error(str(e))
            if not self._alive:
                return
            self._transition(StreamState.EXHAUSTED)
            return

        logger.info(
            f"[{self.room}] Reconnecting in {delay:.1f}s "
            f"(attempt {self._attempts}/{self._max_attempts})"
        )
        self._set_error(config.RECONNECTING_MESSAGE.format(attempt=self._attempts))
        if not self._alive:
            return
        self._transition(StreamState.BACKOFF, delay=delay)

    def _fire_reconnect(self, generation: int) -> None:
        if not self._is_current(generation):
            return
        self._timer = None
        self._connect()


class StreamClient:
    """Holds at most one live Subscription and swaps it on room change.

    Callbacks added here are attached to every subscription this client
    creates, so a caller keeps its listeners across room switches.

    Usage:
        client = StreamClient("http://localhost:3000")
        client.add_event_callback(on_event)
        subscription = client.subscribe(room_id)
        # ... later ...
        client.close()
    """

    def __init__(
        self,
        base_url: str = None,
        transport_factory: TransportFactory = None,
        scheduler=None,
        max_attempts: int = config.MAX_RECONNECT_ATTEMPTS,
        base_delay: float = config.BASE_RECONNECT_DELAY,
        max_delay: float = config.MAX_RECONNECT_DELAY
    ):
        self.base_url = base_url or config.DEFAULT_BASE_URL
        self._transport_factory = transport_factory
        self._scheduler = scheduler
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._subscription: Optional[Subscription] = None

        self._on_event: List[Callable[[InboundEvent], None]] = []
        self._on_status: List[Callable[[ConnectionStatus], None]] = []
        self._on_error: List[Callable[[Optional[str]], None]] = []
        self._on_transition: List[Callable[[StreamTransition], None]] = []

    @property
    def subscription(self) -> Optional[Subscription]:
        return self._subscription

    def add_event_callback(self, callback: Callable[[InboundEvent], None]) -> None:
        self._on_event.append(callback)

    def add_status_callback(self, callback: Callable[[ConnectionStatus], None]) -> None:
        self._on_status.append(callback)

    def add_error_callback(self, callback: Callable[[Optional[str]], None]) -> None:
        self._on_error.append(callback)

    def add_transition_callback(self, callback: Callable[[StreamTransition], None]) -> None:
        self._on_transition.append(callback)

    def subscribe(self, room: Optional[str], base_url: str = None) -> Subscription:
        """Tear down the current subscription, then subscribe to `room`.

        With an empty room the returned subscription stays idle.
        """
        self.close()

        subscription = Subscription(
            room,
            base_url=base_url or self.base_url,
            transport_factory=self._transport_factory,
            scheduler=self._scheduler,
            max_attempts=self._max_attempts,
            base_delay=self._base_delay,
            max_delay=self._max_delay
        )
        for callback in self._on_event:
            subscription.add_event_callback(callback)
        for callback in self._on_status:
            subscription.add_status_callback(callback)
        for callback in self._on_error:
            subscription.add_error_callback(callback)
        for callback in self._on_transition:
            subscription.add_transition_callback(callback)

        self._subscription = subscription
        subscription.start()
        return subscription

    def close(self) -> None:
        """Dispose the current subscription, if any."""
        if self._subscription is not None:
            self._subscription.dispose()
            self._subscription = None
