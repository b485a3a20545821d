"""
Global pytest fixtures for opentok_native tests.

This module provides:
- Fault handling for native crashes in callback trampolines
- A fake ``libopentok`` (tests/fixtures/fake_engine.py)
- Engines initialized over the fake, one per test

No test needs the real SDK: every engine here is built with
``Engine(lib=FakeEngine())``, so tests never share routing state.
"""

import faulthandler
import gc

import pytest

from tests.fixtures.fake_engine import FakeEngine

# Enable faulthandler to trace native crashes (segfaults)
faulthandler.enable()


@pytest.fixture
def fake():
    """A fresh fake engine library."""
    return FakeEngine()


@pytest.fixture
def engine(fake):
    """An initialized engine over ``fake``, deinitialized after the test."""
    from opentok_native.engine import Engine

    engine = Engine(lib=fake)
    engine.init()
    yield engine
    if engine.initialized:
        engine.deinit()
    gc.collect()


@pytest.fixture
def default_engine(fake, monkeypatch):
    """Install ``fake`` as the default engine for the test."""
    import opentok_native.engine as engine_module

    monkeypatch.setattr(engine_module, "_default", None)
    engine = engine_module.init(lib=fake)
    yield engine
    if engine_module._default is engine:
        engine_module.deinit()


@pytest.fixture
def session(engine, fake):
    """A session created on ``engine``."""
    from opentok_native.session import Session

    return Session("api-key", "session-1", engine=engine)


@pytest.fixture
def stream_ptr(fake):
    """Pointer to an engine-owned stream, as a callback would lend it."""
    return fake.new_stream()
