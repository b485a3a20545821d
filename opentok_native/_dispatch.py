"""
Callback dispatch.

Builds the C callback tables handed to the engine. Each table field is a
trampoline that:

1. resolves its owner from the ``user_data`` token (or the object pointer)
   through the engine's :class:`~opentok_native.registry.InstanceRegistry`;
2. converts raw arguments into owned Python values, copying borrowed
   pointers before returning to the engine;
3. calls ``owner._handle_event(event, ptr, *args)``.

An event for an unknown owner is dropped. Exceptions never cross back into
the engine: they are logged and the callback returns its default.

Trampolines are created once per :class:`Dispatcher` and referenced for
its whole lifetime, since the engine keeps calling the function pointers
long after the table was passed in.
"""

from __future__ import annotations

import ctypes
from collections.abc import Callable
from typing import Any

from . import _native
from ._bindings import from_c_string
from ._logging import scoped_logger
from .media.video_frame import VideoFrame
from .publisher.types import PublisherAudioStats, PublisherErrorCode, PublisherVideoStats
from .registry import InstanceRegistry
from .session.types import SessionErrorCode
from .subscriber.types import (
    SubscriberAudioStats,
    SubscriberErrorCode,
    SubscriberVideoStats,
    VideoReason,
)
from .types import Connection, Stream, StreamVideoType

__all__ = ["Dispatcher"]

log = scoped_logger("dispatch")

Converter = Callable[..., tuple]

# =============================================================================
# Argument Converters
# =============================================================================
# Each takes (lib, *raw_args) and returns the listener arguments.


def _none(lib: Any) -> tuple:
    return ()


def _stream(lib: Any, ptr: int | None) -> tuple:
    return (Stream.from_borrowed(lib, ptr),)


def _connection(lib: Any, ptr: int | None) -> tuple:
    return (Connection.from_borrowed(lib, ptr),)


def _stream_flag(lib: Any, ptr: int | None, flag: int) -> tuple:
    return (Stream.from_borrowed(lib, ptr), bool(flag))


def _stream_dimensions(lib: Any, ptr: int | None, width: int, height: int) -> tuple:
    return (Stream.from_borrowed(lib, ptr), width, height)


def _stream_video_type(lib: Any, ptr: int | None, video_type: int) -> tuple:
    return (Stream.from_borrowed(lib, ptr), StreamVideoType.from_native(video_type))


def _signal(lib: Any, signal_type: bytes | None, data: bytes | None, conn: int | None) -> tuple:
    connection = Connection.from_borrowed(lib, conn) if conn else None
    return (from_c_string(signal_type), from_c_string(data), connection)


def _archive_started(lib: Any, archive_id: bytes | None, name: bytes | None) -> tuple:
    return (from_c_string(archive_id) or "", from_c_string(name))


def _archive_stopped(lib: Any, archive_id: bytes | None) -> tuple:
    return (from_c_string(archive_id) or "",)


def _error(codes: Any) -> Converter:
    def convert(lib: Any, message: bytes | None, code: int) -> tuple:
        return (from_c_string(message) or "", codes.from_native(code))

    return convert


def _frame(lib: Any, ptr: int | None) -> tuple:
    return (VideoFrame.from_borrowed(lib, ptr),)


def _level(lib: Any, level: float) -> tuple:
    return (float(level),)


def _reason(lib: Any, reason: int) -> tuple:
    return (VideoReason.from_native(reason),)


def _stats_array(record: Any) -> Converter:
    def convert(lib: Any, array: Any, count: int) -> tuple:
        if not array:
            return ([],)
        return ([record.from_c(array[i]) for i in range(count)],)

    return convert


def _stats_value(record: Any) -> Converter:
    def convert(lib: Any, raw: Any) -> tuple:
        return (record.from_c(raw),)

    return convert


def _passthrough(lib: Any, *raw: Any) -> tuple:
    return raw


# =============================================================================
# Table Layouts
# =============================================================================
# field name -> (event name, prototype, converter)

_SESSION = {
    "on_connected": ("connected", _native.EventCallback, _none),
    "on_disconnected": ("disconnected", _native.EventCallback, _none),
    "on_connection_created": ("connection_created", _native.PointerEventCallback, _connection),
    "on_connection_dropped": ("connection_dropped", _native.PointerEventCallback, _connection),
    "on_stream_received": ("stream_received", _native.PointerEventCallback, _stream),
    "on_stream_dropped": ("stream_dropped", _native.PointerEventCallback, _stream),
    "on_stream_has_audio_changed": (
        "stream_has_audio_changed",
        _native.PointerFlagEventCallback,
        _stream_flag,
    ),
    "on_stream_has_video_changed": (
        "stream_has_video_changed",
        _native.PointerFlagEventCallback,
        _stream_flag,
    ),
    "on_stream_video_dimensions_changed": (
        "stream_video_dimensions_changed",
        _native.DimensionsEventCallback,
        _stream_dimensions,
    ),
    "on_stream_video_type_changed": (
        "stream_video_type_changed",
        _native.PointerFlagEventCallback,
        _stream_video_type,
    ),
    "on_signal_received": ("signal_received", _native.SignalEventCallback, _signal),
    "on_reconnection_started": ("reconnection_started", _native.EventCallback, _none),
    "on_reconnected": ("reconnected", _native.EventCallback, _none),
    "on_archive_started": ("archive_started", _native.ArchiveStartedCallback, _archive_started),
    "on_archive_stopped": ("archive_stopped", _native.ArchiveStoppedCallback, _archive_stopped),
    "on_error": ("error", _native.ErrorEventCallback, _error(SessionErrorCode)),
}

_PUBLISHER = {
    "on_stream_created": ("stream_created", _native.PointerEventCallback, _stream),
    "on_stream_destroyed": ("stream_destroyed", _native.PointerEventCallback, _stream),
    "on_render_frame": ("render_frame", _native.PointerEventCallback, _frame),
    "on_audio_level_updated": ("audio_level_updated", _native.FloatEventCallback, _level),
    "on_audio_stats": (
        "audio_stats",
        _native.PublisherAudioStatsCallback,
        _stats_array(PublisherAudioStats),
    ),
    "on_video_stats": (
        "video_stats",
        _native.PublisherVideoStatsCallback,
        _stats_array(PublisherVideoStats),
    ),
    "on_error": ("error", _native.ErrorEventCallback, _error(PublisherErrorCode)),
}

_SUBSCRIBER = {
    "on_connected": ("connected", _native.PointerEventCallback, _stream),
    "on_disconnected": ("disconnected", _native.EventCallback, _none),
    "on_reconnected": ("reconnected", _native.EventCallback, _none),
    "on_render_frame": ("render_frame", _native.PointerEventCallback, _frame),
    "on_video_disabled": ("video_disabled", _native.IntEventCallback, _reason),
    "on_video_enabled": ("video_enabled", _native.IntEventCallback, _reason),
    "on_audio_disabled": ("audio_disabled", _native.EventCallback, _none),
    "on_audio_enabled": ("audio_enabled", _native.EventCallback, _none),
    "on_video_data_received": ("video_data_received", _native.EventCallback, _none),
    "on_video_disable_warning": ("video_disable_warning", _native.EventCallback, _none),
    "on_video_disable_warning_lifted": (
        "video_disable_warning_lifted",
        _native.EventCallback,
        _none,
    ),
    "on_audio_stats": (
        "audio_stats",
        _native.SubscriberAudioStatsCallback,
        _stats_value(SubscriberAudioStats),
    ),
    "on_video_stats": (
        "video_stats",
        _native.SubscriberVideoStatsCallback,
        _stats_value(SubscriberVideoStats),
    ),
    "on_audio_level_updated": ("audio_level_updated", _native.FloatEventCallback, _level),
    "on_error": ("error", _native.ErrorEventCallback, _error(SubscriberErrorCode)),
}

_VIDEO_CAPTURER = {
    "init": ("init", _native.BoolCallback, _none),
    "destroy": ("destroy", _native.BoolCallback, _none),
    "start": ("start", _native.BoolCallback, _none),
    "stop": ("stop", _native.BoolCallback, _none),
    "get_capture_settings": (
        "get_capture_settings",
        _native.VideoCapturerSettingsCallback,
        _passthrough,
    ),
}

# Fixed table: the device is always installed, whatever the application uses
_AUDIO_DEVICE = {
    "start_capturer": ("start_capturer", _native.BoolCallback, _none),
    "stop_capturer": ("stop_capturer", _native.BoolCallback, _none),
    "get_capture_settings": (
        "get_capture_settings",
        _native.AudioDeviceSettingsCallback,
        _passthrough,
    ),
    "start_renderer": ("start_renderer", _native.BoolCallback, _none),
    "stop_renderer": ("stop_renderer", _native.BoolCallback, _none),
    "get_render_settings": (
        "get_render_settings",
        _native.AudioDeviceSettingsCallback,
        _passthrough,
    ),
}

# table name -> (struct, layout, returns otc_bool)
_TABLES: dict[str, tuple[type[ctypes.Structure], dict, bool]] = {
    "session": (_native.SessionCallbacksC, _SESSION, False),
    "publisher": (_native.PublisherCallbacksC, _PUBLISHER, False),
    "subscriber": (_native.SubscriberCallbacksC, _SUBSCRIBER, False),
    "video_capturer": (_native.VideoCapturerCallbacksC, _VIDEO_CAPTURER, True),
    "audio_device": (_native.AudioDeviceCallbacksC, _AUDIO_DEVICE, True),
}


# =============================================================================
# Dispatcher
# =============================================================================


class Dispatcher:
    """
    Trampolines and callback tables for one engine.

    Example:
        >>> dispatcher = Dispatcher(lib, registry)
        >>> table = dispatcher.session_table(token)
        >>> lib.otc_session_new(api_key, session_id, ctypes.pointer(table))
    """

    def __init__(self, lib: Any, registry: InstanceRegistry):
        self._lib = lib
        self._registry = registry
        self._trampolines: dict[str, dict[str, Any]] = {}
        for table, (_, layout, returns_bool) in _TABLES.items():
            self._trampolines[table] = {
                field: prototype(self._trampoline(table, event, convert, returns_bool))
                for field, (event, prototype, convert) in layout.items()
            }

    def _trampoline(
        self, table: str, event: str, convert: Converter, returns_bool: bool
    ) -> Callable[..., int | None]:
        registry = self._registry
        lib = self._lib
        default = _native.OTC_FALSE if returns_bool else None

        def trampoline(ptr: int | None, user_data: int | None, *raw: Any) -> int | None:
            owner = registry.lookup(user_data, ptr)
            if owner is None:
                log.debug(
                    "Dropped %s event for unknown owner",
                    event,
                    extra={"table": table, "token": user_data},
                )
                return default
            # Exceptions cannot cross the native boundary
            try:
                args = convert(lib, *raw)
                result = owner._handle_event(event, ptr, *args)
            except Exception:
                log.error(
                    "Error handling %s event",
                    event,
                    extra={"table": table, "token": user_data},
                    exc_info=True,
                )
                return default
            if not returns_bool:
                return None
            if result is None:
                return _native.OTC_TRUE
            return int(result)

        return trampoline

    def table(self, name: str, token: int) -> ctypes.Structure:
        """Build the ``name`` callback table routed to ``token``.

        Args:
            name: One of "session", "publisher", "subscriber",
                "video_capturer", "audio_device".
            token: Registry token written into ``user_data``.

        Returns:
            A fresh struct; the caller keeps it alive while the engine
            may read it.
        """
        struct_type, _, _ = _TABLES[name]
        struct = struct_type()
        for field, trampoline in self._trampolines[name].items():
            setattr(struct, field, trampoline)
        struct.user_data = token
        return struct

    def session_table(self, token: int) -> _native.SessionCallbacksC:
        return self.table("session", token)

    def publisher_table(self, token: int) -> _native.PublisherCallbacksC:
        return self.table("publisher", token)

    def subscriber_table(self, token: int) -> _native.SubscriberCallbacksC:
        return self.table("subscriber", token)

    def video_capturer_table(self, token: int) -> _native.VideoCapturerCallbacksC:
        return self.table("video_capturer", token)

    def audio_device_table(self, token: int) -> _native.AudioDeviceCallbacksC:
        return self.table("audio_device", token)
