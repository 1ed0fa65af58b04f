"""Play Count Monitor - samples playback once per tick and counts genuine listens."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.music.listening import ListeningSession, Observation
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import PlaybackSettings
    from ...domain.music.entities import Track
    from ..interfaces.media_player import MediaPlayer
    from .play_reporter import PlayReporter

logger = logging.getLogger(__name__)


class PlayCountMonitor:
    """Owns the listening session of the current track.

    One ticking task runs per playing track. It is cancelled and replaced on
    every track change and stops itself once the play has been counted.
    Reports run as background tasks so a slow backend never stalls playback.
    """

    def __init__(
        self,
        *,
        media_player: MediaPlayer,
        reporter: PlayReporter,
        settings: PlaybackSettings,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._player = media_player
        self._reporter = reporter
        self._settings = settings
        self._clock = clock

        self._track: Track | None = None
        self._session: ListeningSession | None = None
        self._task: asyncio.Task[None] | None = None
        self._report_tasks: set[asyncio.Task[bool]] = set()

    @property
    def session(self) -> ListeningSession | None:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, track: Track) -> None:
        """Begin a fresh listening session for ``track``."""
        self._cancel_task()
        self._track = track
        self._session = None

        if self._reporter.has_counted(track.id):
            logger.debug(LogTemplates.MONITOR_ALREADY_COUNTED, track.title)
            return

        self._session = ListeningSession(
            track_id=track.id,
            threshold_seconds=self._settings.play_count_threshold_seconds,
            tolerance_seconds=self._settings.seek_tolerance_seconds,
        )
        self._session.rebase(self._clock(), self._player.position())
        self._task = asyncio.create_task(self._run_loop(), name=f"listening-monitor-{track.id}")
        logger.debug(
            LogTemplates.MONITOR_STARTED, track.title, self._settings.play_count_threshold_seconds
        )

    async def stop(self) -> None:
        task = self._task
        self._cancel_task()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._session = None
        self._track = None

    def _cancel_task(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def on_pause(self) -> None:
        # Credit the stretch played right before the pause
        if self._session is not None:
            self._observe(is_playing=True)

    def on_resume(self) -> None:
        if self._session is not None:
            self._session.rebase(self._clock(), self._player.position())

    def on_seek(self, position_seconds: float) -> None:
        if self._session is not None:
            self._session.rebase(self._clock(), position_seconds)

    def tick(self) -> Observation | None:
        """Take one observation; reports the play when the threshold is crossed."""
        if self._session is None:
            return None
        return self._observe(is_playing=self._player.is_playing())

    def _observe(self, *, is_playing: bool) -> Observation:
        assert self._session is not None and self._track is not None
        session = self._session

        previous_tick = session.last_tick
        previous_position = session.last_position
        observation = session.observe(self._clock(), self._player.position(), is_playing)

        if observation is Observation.SEEK and previous_tick is not None:
            logger.debug(
                LogTemplates.MONITOR_SEEK_DETECTED,
                self._track.title,
                (session.last_position or 0.0) - (previous_position or 0.0),
                (session.last_tick or 0.0) - previous_tick,
            )

        if session.should_report:
            session.mark_counted()
            logger.info(
                LogTemplates.MONITOR_THRESHOLD_REACHED, self._track.title, session.accumulated_seconds
            )
            self._schedule_report(self._track, session.accumulated_seconds)

        return observation

    def _schedule_report(self, track: Track, listened_seconds: float) -> None:
        task = asyncio.create_task(self._reporter.report(track, listened_seconds))
        self._report_tasks.add(task)
        task.add_done_callback(self._report_tasks.discard)

    async def _run_loop(self) -> None:
        track = self._track
        try:
            while self._session is not None and not self._session.counted:
                await asyncio.sleep(self._settings.tick_interval_seconds)
                self.tick()
        finally:
            if track is not None:
                logger.debug(LogTemplates.MONITOR_STOPPED, track.title)

    async def drain(self) -> None:
        """Wait for in-flight play reports to finish."""
        if self._report_tasks:
            await asyncio.gather(*self._report_tasks, return_exceptions=True)

    async def close(self) -> None:
        await self.stop()
        await self.drain()
