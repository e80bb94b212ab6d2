#!/usr/bin/env python3
"""Chat Stream watcher.

Subscribes to a room's live stream and prints what arrives: connection
status, reconnect progress and each new message.

Usage:
    chatstream                          # Create a room and watch it
    chatstream --room abc123            # Watch an existing room
    chatstream --base-url http://host:3000 -v
"""

import argparse
import asyncio
import sys

from . import config
from .models import ConnectionStatus, InboundEvent, StreamState, StreamTransition
from .services import MessageHistory, RoomService, RoomServiceError, StreamClient, setup_logging


async def watch(base_url: str, room: str) -> int:
    """Watch `room` until interrupted or the retry budget is spent.

    Returns the process exit code.
    """
    client = StreamClient(base_url)
    history = MessageHistory()
    stopped = asyncio.Event()
    exit_code = 0

    def on_status(status: ConnectionStatus):
        print(f"[status] {status.value}")

    def on_error(error):
        if error:
            print(f"[error] {error}")

    def on_event(event: InboundEvent):
        entry = history.add_event(event)
        if entry:
            marker = "" if entry.is_final else " (typing)"
            print(f"{entry.sender}: {entry.text}{marker}")

    def on_transition(transition: StreamTransition):
        nonlocal exit_code
        if transition.state == StreamState.EXHAUSTED:
            exit_code = 1
            stopped.set()

    client.add_status_callback(on_status)
    client.add_error_callback(on_error)
    client.add_event_callback(on_event)
    client.add_transition_callback(on_transition)

    print(f"Watching room {room} at {base_url}")
    client.subscribe(room)
    try:
        await stopped.wait()
    finally:
        client.close()
    return exit_code


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Chat Stream - live room watcher",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    chatstream                       # Create a room and watch it
    chatstream --room abc123         # Watch an existing room
    chatstream -v                    # Debug output on the console
        """
    )
    parser.add_argument(
        "--base-url",
        default=config.DEFAULT_BASE_URL,
        help=f"Backend base URL (default: {config.DEFAULT_BASE_URL})"
    )
    parser.add_argument(
        "--room",
        help="Room to watch (a new room is created if omitted)"
    )
    parser.add_argument(
        "--log-dir",
        help="Directory for the log file (default: current directory)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging on the console"
    )

    args = parser.parse_args(argv)
    setup_logging(args.log_dir, verbose=args.verbose)

    room = args.room
    if not room:
        room_service = RoomService(args.base_url)
        try:
            room = room_service.create_room()
        except RoomServiceError as e:
            print(f"Error: {e}")
            return 1
        finally:
            room_service.close()

    try:
        return asyncio.run(watch(args.base_url, room))
    except KeyboardInterrupt:
        print("\nStopped.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
