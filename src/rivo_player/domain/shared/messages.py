"""Centralized message constants for error messages, validation, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Track Validation Errors
    EMPTY_TRACK_ID = "Track ID cannot be empty"

    # Queue Errors
    QUEUE_INDEX_OUT_OF_RANGE = "Queue index {index} is out of range for a queue of {size} tracks"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "UtcDateTime requires a timezone-aware datetime"

    # Settings Validation Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # User-visible playback errors
    FILE_NOT_FOUND = "Cannot play music: file not found"
    SOURCE_FILE_MISSING = "file not found"
    MUSIC_NOT_FOUND = "Music not found"
    PLAYBACK_FAILED = "Playback error: {reason}"
    CANNOT_PLAY = "Cannot play music: {reason}"
    FAVORITE_FAILED = "Failed to update favorite status: {reason}"

    # Backend Errors
    BACKEND_UNREACHABLE = "Backend unreachable: {reason}"
    BACKEND_STATUS = "Backend returned HTTP {status} for {path}"
    BACKEND_BAD_PAYLOAD = "Backend returned an unexpected payload for {path}"

    # Media Player Errors
    MPV_START_FAILED = "Failed to start mpv: {error}"
    MPV_NOT_RUNNING = "mpv is not running"
    MPV_COMMAND_FAILED = "mpv command {command} failed: {error}"
    MPV_FILE_ERROR = "mpv could not play the file (error {code})"
    MPV_EXITED = "mpv exited unexpectedly"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Application Lifecycle
    APP_STARTING = "Starting Rivo player (environment: {environment})"
    APP_STOPPED = "Rivo player stopped"
    APP_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down"
    APP_FATAL_ERROR = "Fatal error: %s"

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Queue Operations
    QUEUE_REPLACED = "Queue replaced with %d tracks, starting at index %d"
    QUEUE_TRACK_APPENDED = "Appended '%s' to queue at index %d"
    QUEUE_SKIP_NOOP = "Skip %s ignored at index %d of %d (repeat=%s)"
    QUEUE_EXHAUSTED = "Reached end of queue after '%s'"
    SHUFFLE_TOGGLED = "Shuffle %s"
    REPEAT_CHANGED = "Repeat mode set to %s"

    # Playback Operations
    PLAYBACK_LOADING = "Loading '%s' from %s"
    PLAYBACK_STARTED = "Started playing '%s'"
    PLAYBACK_PAUSED = "Paused '%s'"
    PLAYBACK_RESUMED = "Resumed '%s'"
    PLAYBACK_STOPPED = "Stopped playback"
    PLAYBACK_RESTARTED = "Restarting '%s' from the beginning"
    PLAYBACK_SEEK = "Seek to %.1fs in '%s'"
    PLAYBACK_NO_PATH = "Cannot play '%s': path is empty"
    PLAYBACK_ERROR = "Playback error for '%s': %s"
    PLAYBACK_COMPLETED = "Track '%s' completed"
    PLAYBACK_IGNORING_CALLBACK = "Ignoring stale player callback for '%s'"

    # Fallback
    FALLBACK_STARTED = "Retrying '%s' from a local copy"
    FALLBACK_COPIED = "Copied stream for '%s' to %s"
    FALLBACK_FAILED = "Local copy playback failed for '%s': %s"
    FALLBACK_ALREADY_TRIED = "Fallback already attempted for '%s', giving up"
    CACHE_CLEARED = "Cleared %d cached audio files from %s"

    # Cleanup
    CLEANUP_COMPLETED = "Cleanup completed: %d cached files, %d ledger rows"
    CLEANUP_CACHE_FAILED = "Failed to clear audio cache: %s"
    CLEANUP_LEDGER_FAILED = "Failed to prune play ledger: %s"

    # Listening Monitor
    MONITOR_STARTED = "Listening monitor started for '%s' (threshold %.0fs)"
    MONITOR_STOPPED = "Listening monitor stopped for '%s'"
    MONITOR_SEEK_DETECTED = "Seek detected on '%s': delta %.2fs over %.2fs elapsed"
    MONITOR_THRESHOLD_REACHED = "Listening threshold reached for '%s' after %.1fs"
    MONITOR_ALREADY_COUNTED = "'%s' already counted this session, monitor not started"

    # Play Reporting
    PLAY_REPORTED = "Play counted for '%s' (server total: %s)"
    PLAY_ALREADY_REPORTED = "Play for '%s' already reported this session"
    PLAY_REPORT_RETRY = "Play report attempt %d/%d failed for '%s': %s"
    PLAY_REPORT_FAILED = "Giving up on play report for '%s': %s"
    PLAY_LEDGER_FAILED = "Failed to record play for '%s' locally"
    PLAY_REDELIVERED = "Redelivered %d of %d unreported plays"
    PLAY_REDELIVERY_STOPPED = "Backend unavailable while redelivering '%s', retrying next start: %s"
    PLAY_REDELIVERY_REJECTED = "Backend rejected stored play of '%s', dropping it: %s"

    # Backend
    BACKEND_REQUEST = "%s %s"
    BACKEND_CLIENT_INITIALIZED = "Backend client initialized for %s (timeout %.1fs)"
    BACKEND_TRACK_CACHED = "Cached track '%s' fetched from backend"
    BACKEND_FETCH_FAILED = "Failed to fetch track %s from backend: %s"

    # Media Player
    MPV_STARTED = "mpv core started (audio device: %s)"
    MPV_STOPPED = "mpv stopped"
    MPV_END_FILE = "mpv end-file (reason %s, error %s)"
    MPV_LOG = "mpv %s [%s] %s"
    MPV_EXITED = "mpv core shut down unexpectedly"

    # Notifications
    NOTIFY_NOW_PLAYING = "Now playing: %s by %s [%s]%s"
    NOTIFY_CANCELLED = "Cleared now-playing notification"

    # Event Bus
    EVENT_HANDLER_ERROR = "Error in handler for %s: %s"
    EVENT_CALLBACK_ERROR = "Error in player callback"
