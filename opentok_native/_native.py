"""
ctypes declarations for the OpenTok C SDK.

Mirrors the subset of ``opentok.h`` this package binds: callback tables,
settings and stats structs, callback prototypes, and the argtypes/restype
of every ``otc_*`` function. Field order is ABI; do not reorder.
"""

import ctypes
from ctypes import (
    CFUNCTYPE,
    POINTER,
    Structure,
    c_char_p,
    c_double,
    c_float,
    c_int,
    c_int16,
    c_int64,
    c_size_t,
    c_uint32,
    c_uint64,
    c_uint8,
    c_void_p,
)

# otc_bool / otc_status are plain ints on every supported platform
otc_bool = c_int
otc_status = c_int

OTC_TRUE = 1
OTC_FALSE = 0

# =============================================================================
# Settings / Stats Structs
# =============================================================================


class VideoCapturerSettingsC(Structure):
    """struct otc_video_capturer_settings"""

    _fields_ = [
        ("format", c_int),
        ("width", c_int),
        ("height", c_int),
        ("fps", c_int),
        ("expected_delay", c_int),
        ("mirror_on_local_render", otc_bool),
    ]


class AudioDeviceSettingsC(Structure):
    """struct otc_audio_device_settings"""

    _fields_ = [
        ("sampling_rate", c_int),
        ("number_of_channels", c_int),
    ]


class PublisherAudioStatsC(Structure):
    """struct otc_publisher_audio_stats"""

    _fields_ = [
        ("connection_id", c_char_p),
        ("subscriber_id", c_char_p),
        ("packets_lost", c_int64),
        ("packets_sent", c_int64),
        ("bytes_sent", c_int64),
        ("audio_level", c_float),
        ("timestamp", c_double),
        ("start_time", c_double),
    ]


class PublisherVideoStatsC(Structure):
    """struct otc_publisher_video_stats"""

    _fields_ = [
        ("connection_id", c_char_p),
        ("subscriber_id", c_char_p),
        ("packets_lost", c_int64),
        ("packets_sent", c_int64),
        ("bytes_sent", c_int64),
        ("timestamp", c_double),
        ("start_time", c_double),
    ]


class SubscriberAudioStatsC(Structure):
    """struct otc_subscriber_audio_stats (passed by value)"""

    _fields_ = [
        ("packets_lost", c_uint64),
        ("packets_received", c_uint64),
        ("bytes_received", c_uint64),
        ("audio_level", c_float),
        ("timestamp", c_double),
    ]


class SubscriberVideoStatsC(Structure):
    """struct otc_subscriber_video_stats (passed by value)"""

    _fields_ = [
        ("packets_lost", c_uint64),
        ("packets_received", c_uint64),
        ("bytes_received", c_uint64),
        ("timestamp", c_double),
    ]


# =============================================================================
# Callback Prototypes
# =============================================================================
# Every engine callback starts with (const otc_<object>*, void* user_data).

LoggerCallback = CFUNCTYPE(None, c_char_p)

EventCallback = CFUNCTYPE(None, c_void_p, c_void_p)
PointerEventCallback = CFUNCTYPE(None, c_void_p, c_void_p, c_void_p)
PointerFlagEventCallback = CFUNCTYPE(None, c_void_p, c_void_p, c_void_p, c_int)
DimensionsEventCallback = CFUNCTYPE(None, c_void_p, c_void_p, c_void_p, c_int, c_int)
IntEventCallback = CFUNCTYPE(None, c_void_p, c_void_p, c_int)
FloatEventCallback = CFUNCTYPE(None, c_void_p, c_void_p, c_float)
SignalEventCallback = CFUNCTYPE(None, c_void_p, c_void_p, c_char_p, c_char_p, c_void_p)
ArchiveStartedCallback = CFUNCTYPE(None, c_void_p, c_void_p, c_char_p, c_char_p)
ArchiveStoppedCallback = CFUNCTYPE(None, c_void_p, c_void_p, c_char_p)
ErrorEventCallback = CFUNCTYPE(None, c_void_p, c_void_p, c_char_p, c_int)

PublisherAudioStatsCallback = CFUNCTYPE(
    None, c_void_p, c_void_p, POINTER(PublisherAudioStatsC), c_size_t
)
PublisherVideoStatsCallback = CFUNCTYPE(
    None, c_void_p, c_void_p, POINTER(PublisherVideoStatsC), c_size_t
)
SubscriberAudioStatsCallback = CFUNCTYPE(None, c_void_p, c_void_p, SubscriberAudioStatsC)
SubscriberVideoStatsCallback = CFUNCTYPE(None, c_void_p, c_void_p, SubscriberVideoStatsC)

BoolCallback = CFUNCTYPE(otc_bool, c_void_p, c_void_p)
DelayCallback = CFUNCTYPE(c_int, c_void_p, c_void_p)
VideoCapturerSettingsCallback = CFUNCTYPE(
    otc_bool, c_void_p, c_void_p, POINTER(VideoCapturerSettingsC)
)
AudioDeviceSettingsCallback = CFUNCTYPE(
    otc_bool, c_void_p, c_void_p, POINTER(AudioDeviceSettingsC)
)

# =============================================================================
# Callback Tables
# =============================================================================


class SessionCallbacksC(Structure):
    """struct otc_session_callbacks"""

    _fields_ = [
        ("on_connected", EventCallback),
        ("on_disconnected", EventCallback),
        ("on_connection_created", PointerEventCallback),
        ("on_connection_dropped", PointerEventCallback),
        ("on_stream_received", PointerEventCallback),
        ("on_stream_dropped", PointerEventCallback),
        ("on_stream_has_audio_changed", PointerFlagEventCallback),
        ("on_stream_has_video_changed", PointerFlagEventCallback),
        ("on_stream_video_dimensions_changed", DimensionsEventCallback),
        ("on_stream_video_type_changed", PointerFlagEventCallback),
        ("on_signal_received", SignalEventCallback),
        ("on_reconnection_started", EventCallback),
        ("on_reconnected", EventCallback),
        ("on_archive_started", ArchiveStartedCallback),
        ("on_archive_stopped", ArchiveStoppedCallback),
        ("on_error", ErrorEventCallback),
        ("user_data", c_void_p),
        ("reserved", c_void_p),
    ]


class PublisherCallbacksC(Structure):
    """struct otc_publisher_callbacks"""

    _fields_ = [
        ("on_stream_created", PointerEventCallback),
        ("on_stream_destroyed", PointerEventCallback),
        ("on_render_frame", PointerEventCallback),
        ("on_audio_level_updated", FloatEventCallback),
        ("on_audio_stats", PublisherAudioStatsCallback),
        ("on_video_stats", PublisherVideoStatsCallback),
        ("on_error", ErrorEventCallback),
        ("user_data", c_void_p),
        ("reserved", c_void_p),
    ]


class SubscriberCallbacksC(Structure):
    """struct otc_subscriber_callbacks"""

    _fields_ = [
        ("on_connected", PointerEventCallback),
        ("on_disconnected", EventCallback),
        ("on_reconnected", EventCallback),
        ("on_render_frame", PointerEventCallback),
        ("on_video_disabled", IntEventCallback),
        ("on_video_enabled", IntEventCallback),
        ("on_audio_disabled", EventCallback),
        ("on_audio_enabled", EventCallback),
        ("on_video_data_received", EventCallback),
        ("on_video_disable_warning", EventCallback),
        ("on_video_disable_warning_lifted", EventCallback),
        ("on_audio_stats", SubscriberAudioStatsCallback),
        ("on_video_stats", SubscriberVideoStatsCallback),
        ("on_audio_level_updated", FloatEventCallback),
        ("on_error", ErrorEventCallback),
        ("user_data", c_void_p),
        ("reserved", c_void_p),
    ]


class VideoCapturerCallbacksC(Structure):
    """struct otc_video_capturer_callbacks"""

    _fields_ = [
        ("init", BoolCallback),
        ("destroy", BoolCallback),
        ("start", BoolCallback),
        ("stop", BoolCallback),
        ("get_capture_settings", VideoCapturerSettingsCallback),
        ("user_data", c_void_p),
        ("reserved", c_void_p),
    ]


class AudioDeviceCallbacksC(Structure):
    """struct otc_audio_device_callbacks"""

    _fields_ = [
        ("init", BoolCallback),
        ("destroy", BoolCallback),
        ("init_capturer", BoolCallback),
        ("destroy_capturer", BoolCallback),
        ("start_capturer", BoolCallback),
        ("stop_capturer", BoolCallback),
        ("is_capturer_initialized", BoolCallback),
        ("is_capturer_started", BoolCallback),
        ("get_estimated_capture_delay", DelayCallback),
        ("get_capture_settings", AudioDeviceSettingsCallback),
        ("init_renderer", BoolCallback),
        ("destroy_renderer", BoolCallback),
        ("start_renderer", BoolCallback),
        ("stop_renderer", BoolCallback),
        ("is_renderer_initialized", BoolCallback),
        ("is_renderer_started", BoolCallback),
        ("get_estimated_render_delay", DelayCallback),
        ("get_render_settings", AudioDeviceSettingsCallback),
        ("user_data", c_void_p),
        ("reserved", c_void_p),
    ]


# =============================================================================
# Function Signatures
# =============================================================================

# name -> (argtypes, restype)
SIGNATURES: dict[str, tuple[list, object]] = {
    # Library lifecycle / logging
    "otc_init": ([c_void_p], otc_status),
    "otc_destroy": ([], otc_status),
    "otc_log_set_logger_callback": ([LoggerCallback], None),
    "otc_log_enable": ([c_int], None),
    # Session
    "otc_session_new": ([c_char_p, c_char_p, POINTER(SessionCallbacksC)], c_void_p),
    "otc_session_delete": ([c_void_p], otc_status),
    "otc_session_connect": ([c_void_p, c_char_p], otc_status),
    "otc_session_disconnect": ([c_void_p], otc_status),
    "otc_session_publish": ([c_void_p, c_void_p], otc_status),
    "otc_session_unpublish": ([c_void_p, c_void_p], otc_status),
    "otc_session_subscribe": ([c_void_p, c_void_p], otc_status),
    "otc_session_unsubscribe": ([c_void_p, c_void_p], otc_status),
    "otc_session_send_signal": ([c_void_p, c_char_p, c_char_p], otc_status),
    "otc_session_send_signal_to_connection": (
        [c_void_p, c_char_p, c_char_p, c_void_p],
        otc_status,
    ),
    "otc_session_get_id": ([c_void_p], c_char_p),
    # Publisher
    "otc_publisher_new": (
        [c_char_p, POINTER(VideoCapturerCallbacksC), POINTER(PublisherCallbacksC)],
        c_void_p,
    ),
    "otc_publisher_delete": ([c_void_p], otc_status),
    "otc_publisher_get_stream": ([c_void_p], c_void_p),
    "otc_publisher_get_session": ([c_void_p], c_void_p),
    "otc_publisher_get_name": ([c_void_p], c_char_p),
    "otc_publisher_get_publisher_id": ([c_void_p], c_char_p),
    "otc_publisher_set_publish_video": ([c_void_p, otc_bool], otc_status),
    "otc_publisher_set_publish_audio": ([c_void_p, otc_bool], otc_status),
    "otc_publisher_get_publish_video": ([c_void_p], otc_bool),
    "otc_publisher_get_publish_audio": ([c_void_p], otc_bool),
    # Subscriber
    "otc_subscriber_new": ([c_void_p, POINTER(SubscriberCallbacksC)], c_void_p),
    "otc_subscriber_delete": ([c_void_p], otc_status),
    "otc_subscriber_get_stream": ([c_void_p], c_void_p),
    "otc_subscriber_get_session": ([c_void_p], c_void_p),
    "otc_subscriber_get_subscriber_id": ([c_void_p], c_char_p),
    "otc_subscriber_set_subscribe_to_video": ([c_void_p, otc_bool], otc_status),
    "otc_subscriber_set_subscribe_to_audio": ([c_void_p, otc_bool], otc_status),
    "otc_subscriber_get_subscribe_to_video": ([c_void_p], otc_bool),
    "otc_subscriber_get_subscribe_to_audio": ([c_void_p], otc_bool),
    "otc_subscriber_set_preferred_resolution": ([c_void_p, c_uint32, c_uint32], otc_status),
    "otc_subscriber_get_preferred_resolution": (
        [c_void_p, POINTER(c_uint32), POINTER(c_uint32)],
        otc_status,
    ),
    "otc_subscriber_set_preferred_framerate": ([c_void_p, c_float], otc_status),
    "otc_subscriber_get_preferred_framerate": ([c_void_p, POINTER(c_float)], otc_status),
    # Stream
    "otc_stream_copy": ([c_void_p], c_void_p),
    "otc_stream_delete": ([c_void_p], otc_status),
    "otc_stream_get_id": ([c_void_p], c_char_p),
    "otc_stream_get_name": ([c_void_p], c_char_p),
    "otc_stream_has_video": ([c_void_p], otc_bool),
    "otc_stream_has_video_track": ([c_void_p], otc_bool),
    "otc_stream_has_audio": ([c_void_p], otc_bool),
    "otc_stream_has_audio_track": ([c_void_p], otc_bool),
    "otc_stream_get_video_width": ([c_void_p], c_int),
    "otc_stream_get_video_height": ([c_void_p], c_int),
    "otc_stream_get_creation_time": ([c_void_p], c_int64),
    "otc_stream_get_video_type": ([c_void_p], c_int),
    "otc_stream_get_connection": ([c_void_p], c_void_p),
    # Connection
    "otc_connection_copy": ([c_void_p], c_void_p),
    "otc_connection_delete": ([c_void_p], otc_status),
    "otc_connection_get_id": ([c_void_p], c_char_p),
    "otc_connection_get_creation_time": ([c_void_p], c_int64),
    "otc_connection_get_data": ([c_void_p], c_char_p),
    "otc_connection_get_session_id": ([c_void_p], c_char_p),
    # Video frame
    "otc_video_frame_new": ([c_int, c_int, c_int, POINTER(c_uint8)], c_void_p),
    "otc_video_frame_new_MJPEG": ([c_int, c_int, POINTER(c_uint8), c_size_t], c_void_p),
    "otc_video_frame_new_compressed": (
        [c_int, c_int, POINTER(c_uint8), c_size_t],
        c_void_p,
    ),
    "otc_video_frame_delete": ([c_void_p], otc_status),
    "otc_video_frame_copy": ([c_void_p], c_void_p),
    "otc_video_frame_convert": ([c_int, c_void_p], c_void_p),
    "otc_video_frame_get_buffer": ([c_void_p], c_void_p),
    "otc_video_frame_get_buffer_size": ([c_void_p], c_size_t),
    "otc_video_frame_get_timestamp": ([c_void_p], c_int64),
    "otc_video_frame_set_timestamp": ([c_void_p, c_int64], None),
    "otc_video_frame_get_width": ([c_void_p], c_int),
    "otc_video_frame_get_height": ([c_void_p], c_int),
    "otc_video_frame_get_number_of_planes": ([c_void_p], c_size_t),
    "otc_video_frame_get_format": ([c_void_p], c_int),
    "otc_video_frame_set_format": ([c_void_p, c_int], None),
    "otc_video_frame_get_plane_binary_data": ([c_void_p, c_int], c_void_p),
    "otc_video_frame_get_plane_size": ([c_void_p, c_int], c_size_t),
    "otc_video_frame_get_plane_stride": ([c_void_p, c_int], c_int),
    "otc_video_frame_get_plane_width": ([c_void_p, c_int], c_int),
    "otc_video_frame_get_plane_height": ([c_void_p, c_int], c_int),
    # Video capturer
    "otc_video_capturer_provide_frame": ([c_void_p, c_int, c_void_p], otc_status),
    # Audio device
    "otc_set_audio_device": ([POINTER(AudioDeviceCallbacksC)], otc_status),
    "otc_audio_device_read_render_data": ([POINTER(c_int16), c_size_t], c_size_t),
    "otc_audio_device_write_capture_data": ([POINTER(c_int16), c_size_t], otc_status),
}


def setup_signatures(lib: ctypes.CDLL) -> list[str]:
    """Configure argtypes/restype for every bound function.

    Args:
        lib: The loaded SDK library.

    Returns:
        Names of functions missing from this build of the SDK. They are
        skipped so older SDKs still load; calling one raises AttributeError.
    """
    missing = []
    for name, (argtypes, restype) in SIGNATURES.items():
        try:
            func = getattr(lib, name)
        except AttributeError:
            missing.append(name)
            continue
        func.argtypes = argtypes
        func.restype = restype
    return missing
