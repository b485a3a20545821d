"""
Value entity tests.

Maps to: opentok_native/types/, opentok_native/media/video_frame.py
"""
