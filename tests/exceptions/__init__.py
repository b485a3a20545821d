"""
Exception handling tests.

Tests for opentok_native.exceptions:
- Error hierarchy and builtin base classes
- Engine status code to exception mapping
- Structured details and original status codes

Maps to: opentok_native/exceptions/
"""
