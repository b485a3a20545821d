"""
In-process fake of the OpenTok C library.

Provides :class:`FakeEngine`, an object exposing the ``otc_*`` functions
the binding calls. Pointers are plain integers, strings come back as
bytes (as ``c_char_p`` results do), and callback tables are read through
the ``ctypes.pointer`` the binding passes in, so events fire through the
real CFUNCTYPE trampolines.

The fake:
1. Records every call as ``(name, args)`` in :attr:`FakeEngine.calls`
2. Returns injected failure statuses (:meth:`FakeEngine.fail`) or null
   pointers (:meth:`FakeEngine.return_null`)
3. Fires events on request, inline or from its own threads
"""

import ctypes
import itertools
import threading
from collections import deque

from opentok_native import _native

SUCCESS = 0


class FakeObject:
    """One engine-side object: its pointer, callback table and state."""

    def __init__(self, ptr, kind, callbacks=None, **state):
        self.ptr = ptr
        self.kind = kind
        self.callbacks = callbacks
        self.__dict__.update(state)


class FakeEngine:
    """Fake ``libopentok`` with call recording and event injection."""

    def __init__(self):
        self._lock = threading.RLock()
        self._ptrs = itertools.count(0x1000, 0x10)
        self.calls = []
        self.objects = {}
        # Outlive deletion, so tests can fire at deleted objects
        self._tables = {}
        self.deleted = []
        self._failures = {}
        self._nulls = set()
        self.initialized = False
        self.destroyed = False
        self.audio_device = None
        self.audio_device_ptr = self._new_ptr()
        self.capture_data = []
        self.render_data = deque()
        self.log_callback = None
        self.log_level = None

    # =========================================================================
    # Test controls
    # =========================================================================

    def fail(self, name, status):
        """Make every later call of ``name`` return ``status``."""
        self._failures[name] = status

    def return_null(self, name):
        """Make every later call of ``name`` return a null pointer."""
        self._nulls.add(name)

    def call_names(self):
        with self._lock:
            return [name for name, _ in self.calls]

    def calls_to(self, name):
        with self._lock:
            return [args for call, args in self.calls if call == name]

    def deletes(self, kind):
        """Pointers passed to ``otc_<kind>_delete``, in order."""
        with self._lock:
            return [ptr for deleted_kind, ptr in self.deleted if deleted_kind == kind]

    def of_kind(self, kind):
        with self._lock:
            return [obj for obj in self.objects.values() if obj.kind == kind]

    def _new_ptr(self):
        return next(self._ptrs)

    def _record(self, name, *args):
        with self._lock:
            self.calls.append((name, args))

    def _status(self, name):
        return self._failures.get(name, SUCCESS)

    def _create(self, func, kind, callbacks=None, **state):
        if func in self._nulls:
            return None
        ptr = self._new_ptr()
        with self._lock:
            self.objects[ptr] = FakeObject(ptr, kind, callbacks, **state)
            if callbacks is not None:
                self._tables[ptr] = callbacks
        return ptr

    def _delete(self, kind, ptr):
        with self._lock:
            self.deleted.append((kind, ptr))
            self.objects.pop(ptr, None)
        return self._status(f"otc_{kind}_delete")

    def get(self, ptr):
        with self._lock:
            return self.objects[ptr]

    # =========================================================================
    # Event injection
    # =========================================================================

    def fire(self, ptr, field, *args):
        """Invoke callback ``field`` of object ``ptr`` through its C table."""
        table = self._tables[ptr]
        return getattr(table, field)(ptr, table.user_data, *args)

    def fire_async(self, ptr, field, *args):
        """Fire from a fake engine thread; returns the started thread."""
        thread = threading.Thread(target=self.fire, args=(ptr, field, *args), daemon=True)
        thread.start()
        return thread

    def fire_capturer(self, publisher_ptr, field, *args):
        capturer = self.get(publisher_ptr).capturer
        table = capturer.callbacks
        return getattr(table, field)(capturer.ptr, table.user_data, *args)

    def capturer_settings(self, publisher_ptr):
        """Ask the capturer for its settings, as the engine does on start."""
        settings = _native.VideoCapturerSettingsC()
        ok = self.fire_capturer(publisher_ptr, "get_capture_settings", ctypes.pointer(settings))
        return ok, settings

    def fire_audio(self, field, *args):
        table = self.audio_device
        return getattr(table, field)(self.audio_device_ptr, table.user_data, *args)

    def audio_settings(self, field):
        settings = _native.AudioDeviceSettingsC()
        ok = self.fire_audio(field, ctypes.pointer(settings))
        return ok, settings

    def stats_array(self, struct_type, records):
        array = (struct_type * len(records))()
        for i, record in enumerate(records):
            for key, value in record.items():
                setattr(array[i], key, value)
        return array

    # =========================================================================
    # Entity factories (engine-owned, borrowed by callbacks)
    # =========================================================================

    def new_connection(self, conn_id="conn-1", data="", session_id="session-1", creation_time=1):
        return self._create(
            "connection",
            "connection",
            id=conn_id.encode(),
            data=data.encode(),
            session_id=session_id.encode(),
            creation_time=creation_time,
        )

    def new_stream(
        self,
        stream_id="stream-1",
        name="camera",
        connection=None,
        has_video=True,
        has_audio=True,
        width=640,
        height=480,
        video_type=1,
        creation_time=2,
    ):
        if connection is None:
            connection = self.new_connection()
        return self._create(
            "stream",
            "stream",
            id=stream_id.encode(),
            name=name.encode(),
            connection=connection,
            has_video=int(has_video),
            has_audio=int(has_audio),
            width=width,
            height=height,
            video_type=video_type,
            creation_time=creation_time,
        )

    def new_frame(self, format=11, width=2, height=2, data=None):
        if data is None:
            data = bytes(range(width * height * 4))
        return self._frame("frame", format, width, height, data)

    def _frame(self, name, format, width, height, data):
        buffer = (ctypes.c_uint8 * len(data)).from_buffer_copy(bytes(data))
        return self._create(
            name, "video_frame", format=format, width=width, height=height, data=buffer, timestamp=0
        )

    def _copy(self, name, ptr):
        self._record(name, ptr)
        if name in self._nulls:
            return None
        source = self.get(ptr)
        state = {k: v for k, v in vars(source).items() if k not in ("ptr", "kind", "callbacks")}
        if "data" in state and isinstance(state["data"], ctypes.Array):
            state["data"] = (ctypes.c_uint8 * len(state["data"])).from_buffer_copy(state["data"])
        return self._create(name, source.kind, **state)

    # =========================================================================
    # Library lifecycle / logging
    # =========================================================================

    def otc_init(self, config):
        self._record("otc_init", config)
        status = self._status("otc_init")
        if status == SUCCESS:
            self.initialized = True
        return status

    def otc_destroy(self):
        self._record("otc_destroy")
        self.destroyed = True
        return self._status("otc_destroy")

    def otc_log_set_logger_callback(self, callback):
        self._record("otc_log_set_logger_callback", callback)
        self.log_callback = callback

    def otc_log_enable(self, level):
        self._record("otc_log_enable", level)
        self.log_level = level

    def emit_log(self, line):
        self.log_callback(line.encode())

    # =========================================================================
    # Session
    # =========================================================================

    def otc_session_new(self, api_key, session_id, callbacks):
        self._record("otc_session_new", api_key, session_id)
        return self._create(
            "otc_session_new",
            "session",
            callbacks.contents,
            api_key=api_key,
            session_id=session_id,
            connected=False,
            token=None,
        )

    def otc_session_delete(self, ptr):
        self._record("otc_session_delete", ptr)
        return self._delete("session", ptr)

    def otc_session_get_id(self, ptr):
        return self.get(ptr).session_id

    def otc_session_connect(self, ptr, token):
        self._record("otc_session_connect", ptr, token)
        status = self._status("otc_session_connect")
        if status == SUCCESS:
            self.get(ptr).token = token
        return status

    def otc_session_disconnect(self, ptr):
        self._record("otc_session_disconnect", ptr)
        return self._status("otc_session_disconnect")

    def otc_session_publish(self, ptr, publisher):
        self._record("otc_session_publish", ptr, publisher)
        status = self._status("otc_session_publish")
        if status == SUCCESS:
            self.get(publisher).session = ptr
        return status

    def otc_session_unpublish(self, ptr, publisher):
        self._record("otc_session_unpublish", ptr, publisher)
        with self._lock:
            obj = self.objects.get(publisher)
            if obj is not None:
                obj.session = None
        return self._status("otc_session_unpublish")

    def otc_session_subscribe(self, ptr, subscriber):
        self._record("otc_session_subscribe", ptr, subscriber)
        status = self._status("otc_session_subscribe")
        if status == SUCCESS:
            self.get(subscriber).session = ptr
        return status

    def otc_session_unsubscribe(self, ptr, subscriber):
        self._record("otc_session_unsubscribe", ptr, subscriber)
        with self._lock:
            obj = self.objects.get(subscriber)
            if obj is not None:
                obj.session = None
        return self._status("otc_session_unsubscribe")

    def otc_session_send_signal(self, ptr, signal_type, data):
        self._record("otc_session_send_signal", ptr, signal_type, data)
        return self._status("otc_session_send_signal")

    def otc_session_send_signal_to_connection(self, ptr, signal_type, data, connection):
        self._record("otc_session_send_signal_to_connection", ptr, signal_type, data, connection)
        return self._status("otc_session_send_signal_to_connection")

    # =========================================================================
    # Publisher
    # =========================================================================

    def otc_publisher_new(self, name, capturer_callbacks, callbacks):
        self._record("otc_publisher_new", name, capturer_callbacks)
        capturer = None
        if capturer_callbacks is not None:
            capturer = FakeObject(self._new_ptr(), "video_capturer", capturer_callbacks.contents)
        ptr = self._create(
            "otc_publisher_new",
            "publisher",
            callbacks.contents,
            name=name,
            capturer=capturer,
            session=None,
            publish_audio=1,
            publish_video=1,
        )
        if ptr is not None and capturer is not None:
            # The engine initializes a custom capturer while creating the publisher
            self.fire_capturer(ptr, "init")
        return ptr

    def otc_publisher_delete(self, ptr):
        self._record("otc_publisher_delete", ptr)
        return self._delete("publisher", ptr)

    def otc_publisher_get_session(self, ptr):
        return self.get(ptr).session

    def otc_publisher_get_name(self, ptr):
        return self.get(ptr).name

    def otc_publisher_get_publisher_id(self, ptr):
        return f"publisher-{ptr:x}".encode()

    def otc_publisher_set_publish_audio(self, ptr, enabled):
        self._record("otc_publisher_set_publish_audio", ptr, enabled)
        self.get(ptr).publish_audio = enabled
        return self._status("otc_publisher_set_publish_audio")

    def otc_publisher_set_publish_video(self, ptr, enabled):
        self._record("otc_publisher_set_publish_video", ptr, enabled)
        self.get(ptr).publish_video = enabled
        return self._status("otc_publisher_set_publish_video")

    def otc_publisher_get_publish_audio(self, ptr):
        return self.get(ptr).publish_audio

    def otc_publisher_get_publish_video(self, ptr):
        return self.get(ptr).publish_video

    # =========================================================================
    # Subscriber
    # =========================================================================

    def otc_subscriber_new(self, stream, callbacks):
        self._record("otc_subscriber_new", stream)
        return self._create(
            "otc_subscriber_new",
            "subscriber",
            callbacks.contents,
            stream=stream,
            session=None,
            subscribe_audio=1,
            subscribe_video=1,
            resolution=(0, 0),
            framerate=0.0,
        )

    def otc_subscriber_delete(self, ptr):
        self._record("otc_subscriber_delete", ptr)
        return self._delete("subscriber", ptr)

    def otc_subscriber_get_session(self, ptr):
        return self.get(ptr).session

    def otc_subscriber_get_stream(self, ptr):
        return self.get(ptr).stream

    def otc_subscriber_get_subscriber_id(self, ptr):
        return f"subscriber-{ptr:x}".encode()

    def otc_subscriber_set_subscribe_to_video(self, ptr, enabled):
        self._record("otc_subscriber_set_subscribe_to_video", ptr, enabled)
        self.get(ptr).subscribe_video = enabled
        return self._status("otc_subscriber_set_subscribe_to_video")

    def otc_subscriber_set_subscribe_to_audio(self, ptr, enabled):
        self._record("otc_subscriber_set_subscribe_to_audio", ptr, enabled)
        self.get(ptr).subscribe_audio = enabled
        return self._status("otc_subscriber_set_subscribe_to_audio")

    def otc_subscriber_get_subscribe_to_video(self, ptr):
        return self.get(ptr).subscribe_video

    def otc_subscriber_get_subscribe_to_audio(self, ptr):
        return self.get(ptr).subscribe_audio

    def otc_subscriber_set_preferred_resolution(self, ptr, width, height):
        self._record("otc_subscriber_set_preferred_resolution", ptr, width, height)
        self.get(ptr).resolution = (width, height)
        return self._status("otc_subscriber_set_preferred_resolution")

    def otc_subscriber_get_preferred_resolution(self, ptr, width, height):
        width[0], height[0] = self.get(ptr).resolution
        return self._status("otc_subscriber_get_preferred_resolution")

    def otc_subscriber_set_preferred_framerate(self, ptr, framerate):
        self._record("otc_subscriber_set_preferred_framerate", ptr, framerate)
        self.get(ptr).framerate = framerate
        return self._status("otc_subscriber_set_preferred_framerate")

    def otc_subscriber_get_preferred_framerate(self, ptr, framerate):
        framerate[0] = self.get(ptr).framerate
        return self._status("otc_subscriber_get_preferred_framerate")

    # =========================================================================
    # Stream / Connection
    # =========================================================================

    def otc_stream_copy(self, ptr):
        return self._copy("otc_stream_copy", ptr)

    def otc_stream_delete(self, ptr):
        self._record("otc_stream_delete", ptr)
        return self._delete("stream", ptr)

    def otc_stream_get_id(self, ptr):
        return self.get(ptr).id

    def otc_stream_get_name(self, ptr):
        return self.get(ptr).name

    def otc_stream_has_video(self, ptr):
        return self.get(ptr).has_video

    def otc_stream_has_video_track(self, ptr):
        return self.get(ptr).has_video

    def otc_stream_has_audio(self, ptr):
        return self.get(ptr).has_audio

    def otc_stream_has_audio_track(self, ptr):
        return self.get(ptr).has_audio

    def otc_stream_get_video_width(self, ptr):
        return self.get(ptr).width

    def otc_stream_get_video_height(self, ptr):
        return self.get(ptr).height

    def otc_stream_get_creation_time(self, ptr):
        return self.get(ptr).creation_time

    def otc_stream_get_video_type(self, ptr):
        return self.get(ptr).video_type

    def otc_stream_get_connection(self, ptr):
        return self.get(ptr).connection

    def otc_connection_copy(self, ptr):
        return self._copy("otc_connection_copy", ptr)

    def otc_connection_delete(self, ptr):
        self._record("otc_connection_delete", ptr)
        return self._delete("connection", ptr)

    def otc_connection_get_id(self, ptr):
        return self.get(ptr).id

    def otc_connection_get_creation_time(self, ptr):
        return self.get(ptr).creation_time

    def otc_connection_get_data(self, ptr):
        return self.get(ptr).data

    def otc_connection_get_session_id(self, ptr):
        return self.get(ptr).session_id

    # =========================================================================
    # Video frame
    # =========================================================================

    def otc_video_frame_new(self, format, width, height, buffer):
        self._record("otc_video_frame_new", format, width, height)
        return self._frame("otc_video_frame_new", format, width, height, bytes(buffer))

    def otc_video_frame_new_MJPEG(self, width, height, buffer, size):
        self._record("otc_video_frame_new_MJPEG", width, height, size)
        return self._frame("otc_video_frame_new_MJPEG", 10, width, height, bytes(buffer)[:size])

    def otc_video_frame_new_compressed(self, width, height, buffer, size):
        self._record("otc_video_frame_new_compressed", width, height, size)
        return self._frame(
            "otc_video_frame_new_compressed", 255, width, height, bytes(buffer)[:size]
        )

    def otc_video_frame_copy(self, ptr):
        return self._copy("otc_video_frame_copy", ptr)

    def otc_video_frame_delete(self, ptr):
        self._record("otc_video_frame_delete", ptr)
        return self._delete("video_frame", ptr)

    def otc_video_frame_convert(self, format, ptr):
        self._record("otc_video_frame_convert", format, ptr)
        if "otc_video_frame_convert" in self._nulls:
            return None
        source = self.get(ptr)
        return self._frame(
            "otc_video_frame_convert", format, source.width, source.height, bytes(source.data)
        )

    def otc_video_frame_get_buffer(self, ptr):
        return ctypes.addressof(self.get(ptr).data)

    def otc_video_frame_get_buffer_size(self, ptr):
        return len(self.get(ptr).data)

    def otc_video_frame_get_timestamp(self, ptr):
        return self.get(ptr).timestamp

    def otc_video_frame_set_timestamp(self, ptr, timestamp):
        self.get(ptr).timestamp = timestamp

    def otc_video_frame_get_width(self, ptr):
        return self.get(ptr).width

    def otc_video_frame_get_height(self, ptr):
        return self.get(ptr).height

    def otc_video_frame_get_format(self, ptr):
        return self.get(ptr).format

    def otc_video_frame_get_number_of_planes(self, ptr):
        return 3 if self.get(ptr).format == 1 else 1

    def otc_video_frame_get_plane_binary_data(self, ptr, plane):
        return ctypes.addressof(self.get(ptr).data)

    def otc_video_frame_get_plane_size(self, ptr, plane):
        return len(self.get(ptr).data) if plane in (0, 3) else 0

    def otc_video_frame_get_plane_stride(self, ptr, plane):
        return self.get(ptr).width * 4

    def otc_video_frame_get_plane_width(self, ptr, plane):
        return self.get(ptr).width

    def otc_video_frame_get_plane_height(self, ptr, plane):
        return self.get(ptr).height

    # =========================================================================
    # Custom media
    # =========================================================================

    def otc_video_capturer_provide_frame(self, capturer, rotation, frame):
        self._record("otc_video_capturer_provide_frame", capturer, rotation, frame)
        return self._status("otc_video_capturer_provide_frame")

    def otc_set_audio_device(self, callbacks):
        self._record("otc_set_audio_device")
        self.audio_device = callbacks.contents
        return self._status("otc_set_audio_device")

    def otc_audio_device_write_capture_data(self, data, count):
        self._record("otc_audio_device_write_capture_data", count)
        with self._lock:
            self.capture_data.append(list(data[:count]))
        return self._status("otc_audio_device_write_capture_data")

    def otc_audio_device_read_render_data(self, buffer, count):
        with self._lock:
            if not self.render_data:
                return 0
            chunk = self.render_data.popleft()
        n = min(len(chunk), count)
        for i in range(n):
            buffer[i] = chunk[i]
        return n
