"""
NativeHandle tests.

Maps to: opentok_native/handle.py
"""
