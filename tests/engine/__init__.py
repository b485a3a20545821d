"""
Engine lifecycle tests.

Maps to: opentok_native/engine.py, opentok_native/log.py,
opentok_native/_bindings.py
"""
