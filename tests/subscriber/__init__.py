"""
Subscriber tests.

Maps to: opentok_native/subscriber/
"""
