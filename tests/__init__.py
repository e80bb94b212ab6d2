# Test suite for Chat Stream
#
# Run all tests: python tests/run_all_tests.py
# Run specific suite: python tests/run_all_tests.py --suite stream
# Run with pytest: python -m pytest tests/ -v
#
# Test suites:
#   - test_stream_client.py - Connection state machine, backoff, disposal
#   - test_event_source.py - SSE parsing and the httpx transport
#   - test_models.py - Data models (InboundEvent, ConnectionStatus, etc.)
#   - test_message_history.py - Caller-side filtering and dedup
#   - test_room_service.py - Room provisioning and outbound HTTP (mocked)
#   - test_config.py - Configuration and logging
#   - test_main.py - Command-line watcher
