"""Application configuration constants.

Central location for all configurable values used throughout the application.
"""

import os

# =============================================================================
# Backend Endpoints
# =============================================================================

DEFAULT_BASE_URL = os.environ.get("CHATSTREAM_BASE_URL", "http://localhost:3000")

# Path segments, relative to the base URL
CHAT_PATH = "chat"
STREAM_SUFFIX = "stream"

# =============================================================================
# Stream Control Frames
# =============================================================================
# Frames of these types carry no user-visible content. The stream client still
# stores them as the latest event so callers can observe liveness.

EVENT_TYPE_HEARTBEAT = "heartbeat"      # Liveness ping
EVENT_TYPE_CONNECTION = "connection"    # Handshake acknowledgement
CONTROL_EVENT_TYPES = [EVENT_TYPE_HEARTBEAT, EVENT_TYPE_CONNECTION]

# =============================================================================
# Reconnect Policy
# =============================================================================

MAX_RECONNECT_ATTEMPTS = 10
BASE_RECONNECT_DELAY = 1.0   # Seconds; doubles per consecutive failure
MAX_RECONNECT_DELAY = 30.0   # Seconds; backoff cap

RECONNECTING_MESSAGE = "Reconnecting... (attempt {attempt})"
CONNECTION_FAILED_MESSAGE = "Connection failed. Please refresh the page."

# =============================================================================
# HTTP Configuration
# =============================================================================

# The stream has no read timeout: a silent connection is healthy
STREAM_CONNECT_TIMEOUT_SECONDS = 10
API_TIMEOUT_SECONDS = 30

# =============================================================================
# Message History
# =============================================================================

MAX_HISTORY_SIZE = 500
RECEIVED_SENDER = "Patient"
RECEIVED_STATUS = "Received"

# =============================================================================
# Logging
# =============================================================================

LOG_FILE_NAME = "chatstream.log"
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10MB per log file
LOG_BACKUP_COUNT = 5  # Number of backup files to keep
