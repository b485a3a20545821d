"""
Instance registry tests.

Maps to: opentok_native/registry.py
"""
