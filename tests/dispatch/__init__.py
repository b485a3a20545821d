"""
Callback dispatch tests.

Maps to: opentok_native/_dispatch.py
"""
