"""
Custom media tests.

Maps to: opentok_native/media/
"""
