"""
Tests for Engine init/deinit and the default engine.

Tests that:
1. init runs once and installs the audio device
2. deinit releases publishers, subscribers and sessions before otc_destroy
3. Handles are not deleted again after the engine is destroyed
4. The module-level init/deinit/get_engine manage one default engine
"""

import logging

import pytest

import opentok_native
from opentok_native.engine import Engine
from opentok_native.exceptions import AlreadyInitializedError, InitializationError
from opentok_native.publisher import Publisher
from opentok_native.session import Session
from opentok_native.subscriber import Subscriber
from opentok_native.types import Stream

RELEASE_CALLS = (
    "otc_session_unpublish",
    "otc_session_unsubscribe",
    "otc_session_disconnect",
    "otc_destroy",
)


def release_calls(fake):
    return [name for name in fake.call_names() if name in RELEASE_CALLS]


@pytest.fixture
def populated(engine, fake, stream_ptr):
    """A session with one publisher and one subscriber attached."""
    session = Session("api-key", "session-1", engine=engine)
    publisher = Publisher("camera", engine=engine)
    subscriber = Subscriber(engine=engine)
    subscriber.set_stream(Stream.from_borrowed(fake, stream_ptr))
    session.publish(publisher)
    session.subscribe(subscriber)
    return session, publisher, subscriber


class TestInit:
    """Tests for Engine.init."""

    def test_init(self, fake):
        engine = Engine(lib=fake)

        engine.init()

        assert engine.initialized
        assert fake.initialized
        assert fake.calls_to("otc_init") == [(None,)]
        assert engine.audio_device is not None
        engine.deinit()

    def test_init_twice(self, engine):
        with pytest.raises(AlreadyInitializedError):
            engine.init()

    def test_init_failure(self, fake):
        """A failed otc_init raises with the engine status attached."""
        fake.fail("otc_init", 2)
        engine = Engine(lib=fake)

        with pytest.raises(InitializationError) as exc_info:
            engine.init()

        assert exc_info.value.original_code == 2
        assert not engine.initialized
        assert engine.audio_device is None

    def test_context_manager(self, fake):
        with Engine(lib=fake) as engine:
            assert engine.initialized

        assert fake.destroyed
        assert not engine.initialized

    def test_missing_library(self, monkeypatch, tmp_path):
        """Without a loadable SDK the engine cannot be created."""
        import ctypes.util

        from opentok_native import _bindings

        missing = str(tmp_path / "libopentok.so")
        monkeypatch.setattr(_bindings, "_lib", None)
        monkeypatch.setattr(ctypes.util, "find_library", lambda name: None)
        monkeypatch.setenv("OPENTOK_LIB_PATH", missing)
        monkeypatch.delenv("OPENTOK_LIB_DIR", raising=False)

        with pytest.raises(InitializationError) as exc_info:
            Engine()

        assert exc_info.value.details["searched"] == [missing]
        assert missing in exc_info.value.details["errors"]


class TestDeinit:
    """Tests for Engine.deinit."""

    def test_release_order(self, engine, fake, populated):
        """Publishers, then subscribers, then sessions, then the engine."""
        engine.deinit()

        assert release_calls(fake) == list(RELEASE_CALLS)
        assert fake.destroyed
        assert len(engine.registry) == 0

    def test_no_delete_after_destroy(self, engine, fake, populated):
        """Objects closed after deinit do not touch the destroyed engine."""
        session, publisher, subscriber = populated
        engine.deinit()

        publisher.close()
        subscriber.close()
        session.close()

        assert fake.deletes("publisher") == []
        assert fake.deletes("subscriber") == []
        assert fake.deletes("session") == []

    def test_failed_release_logged(self, engine, fake, populated, caplog):
        """A refused unpublish does not stop the shutdown."""
        fake.fail("otc_session_unpublish", 1)

        with caplog.at_level(logging.WARNING, logger="opentok_native"):
            engine.deinit()

        assert fake.destroyed
        assert "Release of" in caplog.text

    def test_deinit_twice(self, engine):
        engine.deinit()

        with pytest.raises(InitializationError):
            engine.deinit()

    def test_destroy_failure(self, engine, fake):
        """A failed otc_destroy raises after the registry is cleared."""
        from opentok_native.exceptions import OpenTokError

        fake.fail("otc_destroy", 2)

        with pytest.raises(OpenTokError):
            engine.deinit()

        assert len(engine.registry) == 0
        assert engine.audio_device is None

    def test_events_after_deinit_dropped(self, engine, fake):
        """Late engine events find no owner."""
        seen = []
        session = Session(
            "api-key",
            "session-1",
            opentok_native.SessionListeners(on_connected=seen.append),
            engine=engine,
        )
        ptr = session._ptr()
        engine.deinit()

        fake.fire(ptr, "on_connected")

        assert seen == []


class TestDefaultEngine:
    """Tests for the module-level default engine."""

    def test_objects_use_default(self, default_engine, fake):
        session = opentok_native.Session("api-key", "session-1")

        assert session.engine is default_engine
        assert opentok_native.get_engine() is default_engine
        assert fake.calls_to("otc_session_new") == [(b"api-key", b"session-1")]

    def test_init_twice(self, default_engine, fake):
        with pytest.raises(AlreadyInitializedError):
            opentok_native.init(lib=fake)

    def test_deinit(self, default_engine, fake):
        opentok_native.deinit()

        assert fake.destroyed
        with pytest.raises(InitializationError):
            opentok_native.get_engine()

    def test_without_init(self, monkeypatch):
        import opentok_native.engine as engine_module

        monkeypatch.setattr(engine_module, "_default", None)

        with pytest.raises(InitializationError):
            opentok_native.deinit()
        with pytest.raises(InitializationError):
            Session("api-key", "session-1")
