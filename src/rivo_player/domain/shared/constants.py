"""Centralized constants for database schema, backend routes and other shared values.

This module provides reusable constants that reduce magic strings and improve maintainability.
"""

from __future__ import annotations


class SQLPragmas:
    """SQLite PRAGMA statements for database configuration.

    These pragmas are applied to each connection to ensure consistent behavior.
    """

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class DatabaseURLSchemes:
    """Valid database URL schemes."""

    SQLITE = "sqlite:///"

    # For in-memory testing
    MEMORY = ":memory:"
    MEMORY_SHARED_URI = "file:rivo-player?mode=memory&cache=shared"


class BackendRoutes:
    """REST routes of the Rivo backend consumed by the player."""

    MUSIC_BY_ID = "/api/music/{track_id}"
    MUSIC_PLAY = "/api/music/{track_id}/play"
    ARTIST_STATS = "/api/stats/artist"
    LISTENER_STATS = "/api/stats/listener/{user_id}"


class HTTPHeaders:
    """HTTP header names and common values."""

    USER_AGENT = "User-Agent"
    AUTHORIZATION = "Authorization"
    ACCEPT = "Accept"

    JSON = "application/json"
    BEARER = "Bearer {token}"
    USER_AGENT_VALUE = "rivo-player/1.0"


class AudioConstants:
    """Local audio cache and mpv constants."""

    TEMP_FILE_TEMPLATE = "temp_{millis}.mp3"
    TEMP_FILE_GLOB = "temp_*.mp3"
    COPY_CHUNK_BYTES = 64 * 1024

    # libmpv mpv_end_file_reason values
    MPV_END_FILE_EOF = 0
    MPV_END_FILE_ERROR = 4
