"""Room service for the request/response side of the chat backend.

Creates rooms and posts outgoing text. The stream client never calls this;
callers use it to obtain a room identifier before subscribing.
"""

from typing import Optional

import requests

from .. import config
from .logging_config import get_logger

logger = get_logger("room")

# Keys a room-creation response may use for the new identifier
ROOM_ID_KEYS = ("chatId", "roomId", "id", "room")


class RoomServiceError(Exception):
    """Raised when a room cannot be provisioned."""


class RoomService:
    """Handles room provisioning and outbound messages over plain HTTP."""

    def __init__(self, base_url: str = None, session: Optional[requests.Session] = None):
        """Initialize room service.

        Args:
            base_url: Backend base URL (defaults to config.DEFAULT_BASE_URL)
            session: Optional requests session to reuse connections
        """
        self.base_url = (base_url or config.DEFAULT_BASE_URL).rstrip('/')
        self._session = session or requests.Session()

    def _chat_url(self, room: Optional[str] = None) -> str:
        if room is None:
            return f"{self.base_url}/{config.CHAT_PATH}"
        return f"{self.base_url}/{config.CHAT_PATH}/{room}/"

    def create_room(self) -> str:
        """Create a room and return its identifier.

        Raises:
            RoomServiceError: on network failure, HTTP error or missing id
        """
        url = self._chat_url()
        try:
            response = self._session.post(url, timeout=config.API_TIMEOUT_SECONDS)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"Room creation failed: {e}")
            raise RoomServiceError(f"Could not create room: {e}") from e
        except ValueError as e:
            logger.error(f"Room creation returned invalid JSON: {e}")
            raise RoomServiceError("Room creation returned invalid JSON") from e

        room_id = None
        if isinstance(data, dict):
            for key in ROOM_ID_KEYS:
                if data.get(key):
                    room_id = str(data[key])
                    break

        if not room_id:
            logger.error(f"Room creation response has no id: {data}")
            raise RoomServiceError("Room creation response has no room id")

        logger.info(f"Created room {room_id}")
        return room_id

    def send_message(self, room: str, text: str, is_final: bool = True) -> bool:
        """Post outgoing text to a room. Returns True on success."""
        if not room or not text or not text.strip():
            return False

        payload = {"text": text.strip(), "isFinal": is_final}
        try:
            response = self._session.post(
                self._chat_url(room),
                json=payload,
                timeout=config.API_TIMEOUT_SECONDS
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Error sending message to room {room}: {e}")
            return False

        logger.debug(f"Sent {'final' if is_final else 'draft'} message to room {room}")
        return True

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()
