"""Helpers for tests that wait on media loops."""

import time

import pytest


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def wait_for():
    """Poll ``predicate`` until it holds or the timeout expires."""
    return _wait_for
