"""
Shared test fixtures for opentok_native.

The fake engine stands in for ``libopentok`` in every test.
"""

from .fake_engine import FakeEngine, FakeObject

__all__ = [
    "FakeEngine",
    "FakeObject",
]
