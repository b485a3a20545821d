"""
Logging tests.

Tests for opentok_native._logging and opentok_native.log:
- Formatter output (JSON and human)
- Environment-driven configuration
- Engine log forwarding

Maps to: opentok_native/_logging.py, opentok_native/log.py
"""
