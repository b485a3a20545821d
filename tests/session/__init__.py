"""
Session tests.

Maps to: opentok_native/session/
"""
