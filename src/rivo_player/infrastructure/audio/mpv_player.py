"""
mpv Media Player

Infrastructure component that plays audio through libmpv using python-mpv.
python-mpv calls property observers and event callbacks on its own event
thread, so anything that reaches the controller is handed to the asyncio loop
with ``call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Iterator
from typing import Any

from rivo_player.application.interfaces.media_player import (
    CompletionCallback,
    ErrorCallback,
    MediaPlayer,
)
from rivo_player.config.settings import PlaybackSettings
from rivo_player.domain.shared.constants import AudioConstants
from rivo_player.domain.shared.exceptions import MediaPlayerError
from rivo_player.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

# python-mpv raises these builtins for libmpv error codes (ShutdownError is a SystemError)
_MPV_ERRORS = (SystemError, RuntimeError, ValueError, AttributeError, TypeError)


def create_mpv(**options: Any) -> Any:
    """Create a libmpv handle. libmpv is loaded on first playback, not at import."""
    import mpv

    return mpv.MPV(**options)


class MpvMediaPlayer(MediaPlayer):
    """MediaPlayer backed by an in-process libmpv handle."""

    def __init__(
        self,
        settings: PlaybackSettings | None = None,
        *,
        player_factory: Callable[..., Any] = create_mpv,
    ) -> None:
        self._settings = settings or PlaybackSettings()
        self._player_factory = player_factory
        self._player: Any = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._callback_tasks: set[asyncio.Task[None]] = set()

        # Property mirror, written from the mpv event thread
        self._position = 0.0
        self._duration: float | None = None
        self._paused = True

        self._loaded = False
        self._closing = False
        self._current_uri: str | None = None
        self._last_log_error: str | None = None

        self._on_completion: CompletionCallback | None = None
        self._on_error: ErrorCallback | None = None

    @property
    def is_running(self) -> bool:
        return self._player is not None

    # ─────────────────────────────────────────────────────────────────
    # Core lifecycle
    # ─────────────────────────────────────────────────────────────────

    def _mpv_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "vo": "null",
            "video": False,
            "ytdl": False,
            "idle": True,
            "keep_open": False,
            "audio_display": False,
            "input_default_bindings": False,
            "log_handler": self._on_log,
            "loglevel": "error",
        }
        if self._settings.audio_device:
            options["audio_device"] = self._settings.audio_device
        return options

    async def _ensure_started(self) -> None:
        if self._player is not None:
            return

        self._loop = asyncio.get_running_loop()
        self._closing = False
        try:
            player = await asyncio.to_thread(self._player_factory, **self._mpv_options())
        except (OSError, *_MPV_ERRORS) as e:
            raise MediaPlayerError(ErrorMessages.MPV_START_FAILED.format(error=e)) from e

        player.observe_property("time-pos", self._on_time_pos)
        player.observe_property("duration", self._on_duration)
        player.observe_property("pause", self._on_pause)
        player.event_callback("end-file")(self._on_end_file)
        player.event_callback("shutdown")(self._on_shutdown)

        self._player = player
        logger.info(LogTemplates.MPV_STARTED, self._settings.audio_device or "auto")

    @contextlib.contextmanager
    def _command(self, name: str) -> Iterator[Any]:
        if self._player is None:
            raise MediaPlayerError(ErrorMessages.MPV_NOT_RUNNING, uri=self._current_uri)
        try:
            yield self._player
        except _MPV_ERRORS as e:
            raise MediaPlayerError(
                ErrorMessages.MPV_COMMAND_FAILED.format(command=name, error=e),
                uri=self._current_uri,
            ) from e

    # ─────────────────────────────────────────────────────────────────
    # mpv event thread
    # ─────────────────────────────────────────────────────────────────

    def _on_time_pos(self, _name: str, value: float | None) -> None:
        self._position = float(value) if value is not None else 0.0

    def _on_duration(self, _name: str, value: float | None) -> None:
        self._duration = float(value) if value is not None else None

    def _on_pause(self, _name: str, value: bool | None) -> None:
        if value is not None:
            self._paused = bool(value)

    def _on_log(self, level: str, component: str, message: str) -> None:
        text = message.strip()
        logger.debug(LogTemplates.MPV_LOG, level, component, text)
        if level in ("fatal", "error"):
            self._last_log_error = text

    def _on_end_file(self, event: Any) -> None:
        data = event.data
        self._call_soon(self._handle_end_file, data.reason, data.error)

    def _on_shutdown(self, _event: Any) -> None:
        self._call_soon(self._handle_shutdown)

    def _call_soon(self, callback: Callable[..., None], *args: Any) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(callback, *args)

    # ─────────────────────────────────────────────────────────────────
    # Event loop side
    # ─────────────────────────────────────────────────────────────────

    def _handle_end_file(self, reason: int, error: int) -> None:
        logger.debug(LogTemplates.MPV_END_FILE, reason, error)

        # Files ended by our own load/stop arrive after _loaded was reset or reassigned
        if not self._loaded:
            return
        if reason == AudioConstants.MPV_END_FILE_EOF:
            self._loaded = False
            if self._on_completion is not None:
                self._spawn(self._on_completion())
        elif reason == AudioConstants.MPV_END_FILE_ERROR:
            self._loaded = False
            self._notify_error(
                self._last_log_error or ErrorMessages.MPV_FILE_ERROR.format(code=error)
            )

    def _handle_shutdown(self) -> None:
        self._player = None
        if self._closing:
            return

        logger.warning(LogTemplates.MPV_EXITED)
        was_loaded = self._loaded
        self._loaded = False
        self._paused = True
        if was_loaded:
            self._notify_error(ErrorMessages.MPV_EXITED)

    def _notify_error(self, reason: str) -> None:
        if self._on_error is not None:
            self._spawn(self._on_error(reason))

    def _spawn(self, coro: Any) -> None:
        task = asyncio.create_task(coro)
        self._callback_tasks.add(task)
        task.add_done_callback(self._on_callback_done)

    def _on_callback_done(self, task: asyncio.Task[None]) -> None:
        self._callback_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(LogTemplates.EVENT_CALLBACK_ERROR, exc_info=task.exception())

    # ─────────────────────────────────────────────────────────────────
    # MediaPlayer
    # ─────────────────────────────────────────────────────────────────

    async def load(self, uri: str) -> None:
        await self._ensure_started()
        self._current_uri = uri
        self._position = 0.0
        self._duration = None
        self._last_log_error = None

        with self._command("loadfile") as player:
            player.pause = True
            player.play(uri)
        self._paused = True
        self._loaded = True

    async def play(self) -> None:
        with self._command("play") as player:
            player.pause = False
        self._paused = False

    async def pause(self) -> None:
        with self._command("pause") as player:
            player.pause = True
        self._paused = True

    async def stop(self) -> None:
        if self._player is None:
            return
        self._loaded = False
        self._position = 0.0
        with self._command("stop") as player:
            player.stop()

    async def seek(self, position_seconds: float) -> None:
        with self._command("seek") as player:
            player.seek(position_seconds, reference="absolute")
        self._position = position_seconds

    def position(self) -> float:
        return self._position

    def duration(self) -> float | None:
        return self._duration

    def is_playing(self) -> bool:
        return self._loaded and not self._paused

    def set_on_completion_callback(self, callback: CompletionCallback) -> None:
        self._on_completion = callback

    def set_on_error_callback(self, callback: ErrorCallback) -> None:
        self._on_error = callback

    async def close(self) -> None:
        player = self._player
        self._closing = True
        self._player = None
        self._loaded = False

        for task in list(self._callback_tasks):
            task.cancel()
        self._callback_tasks.clear()

        if player is None:
            return
        with contextlib.suppress(*_MPV_ERRORS):
            await asyncio.to_thread(player.terminate)
        logger.info(LogTemplates.MPV_STOPPED)
