"""Now-playing notifier that renders to the log."""

from __future__ import annotations

import logging

from rivo_player.application.interfaces.notifier import NowPlayingNotifier
from rivo_player.domain.music.entities import Track
from rivo_player.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class LoggingNotifier(NowPlayingNotifier):
    def __init__(self) -> None:
        self._current: Track | None = None
        self._is_playing = False

    @property
    def current(self) -> Track | None:
        return self._current

    @property
    def is_ongoing(self) -> bool:
        return self._current is not None and self._is_playing

    def show_now_playing(self, track: Track, is_playing: bool) -> None:
        self._current = track
        self._is_playing = is_playing
        suffix = "" if is_playing else " (paused)"
        logger.info(
            LogTemplates.NOTIFY_NOW_PLAYING, track.title, track.artist, track.duration_formatted, suffix
        )

    def cancel_all(self) -> None:
        if self._current is None:
            return
        self._current = None
        self._is_playing = False
        logger.info(LogTemplates.NOTIFY_CANCELLED)
