"""
Publisher tests.

Maps to: opentok_native/publisher/
"""
