"""Server-Sent Events transport.

Opens one long-lived GET against the room stream and reports what happens
through three callbacks: on_open, on_message(data) and on_error(exc). This is
the Python counterpart of a browser EventSource without its built-in retry;
reconnection is the stream client's job.
"""

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

import httpx

from .. import config
from .logging_config import get_logger

logger = get_logger("event_source")

SSE_HEADERS = {
    "Accept": "text/event-stream",
    "Cache-Control": "no-cache",
}

DEFAULT_EVENT_NAME = "message"


class StreamClosedError(Exception):
    """Raised when the server ends the stream."""


class NotAnEventStreamError(Exception):
    """Raised when a 2xx response is not text/event-stream."""


@dataclass
class SSEFrame:
    """One dispatched SSE event."""

    data: str
    event: str = DEFAULT_EVENT_NAME
    last_event_id: Optional[str] = None


async def iter_sse_frames(lines: AsyncIterator[str]) -> AsyncIterator[SSEFrame]:
    """Group raw stream lines into SSE frames.

    Data lines are joined with newlines; a blank line dispatches the frame.
    Comment lines (leading colon) are keep-alives and are skipped.
    """
    data_lines = []
    event_name = ""
    last_event_id = None

    async for line in lines:
        line = line.rstrip("\r\n")

        if not line:
            if data_lines:
                yield SSEFrame(
                    data="\n".join(data_lines),
                    event=event_name or DEFAULT_EVENT_NAME,
                    last_event_id=last_event_id
                )
            data_lines = []
            event_name = ""
            continue

        if line.startswith(":"):
            continue

        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if field == "data":
            data_lines.append(value)
        elif field == "event":
            event_name = value
        elif field == "id" and "\0" not in value:
            last_event_id = value
        # retry and unknown fields are ignored

    # A frame without its terminating blank line is discarded


class HttpxEventSource:
    """A single SSE connection driven by an asyncio task.

    The transport is created already connecting. close() cancels it; after
    close() returns no callback fires.

    Usage:
        source = HttpxEventSource(url, on_open, on_message, on_error)
        # ... later ...
        source.close()
    """

    def __init__(
        self,
        url: str,
        on_open: Callable[[], None],
        on_message: Callable[[str], None],
        on_error: Callable[[Exception], None],
        client: Optional[httpx.AsyncClient] = None
    ):
        """Start connecting.

        Args:
            url: Full stream URL
            on_open: Called once the server answers 2xx with text/event-stream
            on_message: Called with the data of each unnamed frame
            on_error: Called once when the connection fails or ends
            client: Shared httpx client; one is created (and closed) if omitted

        Raises:
            RuntimeError: if there is no running event loop
        """
        self.url = url
        self._on_open = on_open
        self._on_message = on_message
        self._on_error = on_error
        self._closed = False

        # Fails before any client exists when called outside a loop
        loop = asyncio.get_running_loop()

        # An owned client is built inside the task so it always gets closed
        self._client = client
        self._task = loop.create_task(self._run())

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the connection (idempotent)."""
        if self._closed:
            return
        self._closed = True
        self._task.cancel()
        logger.debug(f"Closed stream {self.url}")

    async def _run(self) -> None:
        owns_client = self._client is None
        client = self._client or httpx.AsyncClient(
            timeout=httpx.Timeout(None, connect=float(config.STREAM_CONNECT_TIMEOUT_SECONDS))
        )
        try:
            async with client.stream("GET", self.url, headers=SSE_HEADERS) as response:
                response.raise_for_status()
                content_type = response.headers.get("content-type", "")
                if not content_type.lower().startswith("text/event-stream"):
                    raise NotAnEventStreamError(
                        f"Expected text/event-stream, got '{content_type or 'none'}'"
                    )
                if self._closed:
                    return
                self._on_open()

                async for frame in iter_sse_frames(response.aiter_lines()):
                    if self._closed:
                        return
                    if frame.event != DEFAULT_EVENT_NAME:
                        logger.debug(f"Ignoring named event '{frame.event}'")
                        continue
                    self._on_message(frame.data)

            raise StreamClosedError("Server closed the stream")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._closed:
                self._closed = True
                self._on_error(e)
        finally:
            if owns_client:
                await client.aclose()
