"""Playback Application Service - owns the play queue and drives the media player."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from ...domain.music.entities import PlayQueue, Track
from ...domain.music.value_objects import PlaybackState, RepeatMode, SkipDirection, TrackId
from ...domain.shared.events import (
    PlaybackFailed,
    PlaybackPaused,
    PlaybackResumed,
    QueueExhausted,
    TrackStartedPlaying,
    get_event_bus,
)
from ...domain.shared.exceptions import InvalidOperationError, MediaPlayerError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.shared.types import PositionSeconds, QueueIndexInt

if TYPE_CHECKING:
    from ...config.settings import PlaybackSettings
    from ...domain.music.repository import TrackRepository
    from ...infrastructure.audio.local_copy import LocalCopyFallback
    from ..interfaces.media_player import MediaPlayer
    from ..interfaces.notifier import NowPlayingNotifier
    from .play_count_monitor import PlayCountMonitor

logger = logging.getLogger(__name__)


class PlayerSnapshot(BaseModel):
    """Read-only view of the player for rendering."""

    model_config = ConfigDict(frozen=True)

    current_track: Track | None
    current_index: QueueIndexInt
    queue_size: int
    state: PlaybackState
    shuffle_enabled: bool
    repeat_mode: RepeatMode
    position_seconds: PositionSeconds
    duration_seconds: float | None
    error: str | None

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    @property
    def progress(self) -> float:
        if not self.duration_seconds:
            return 0.0
        return min(1.0, self.position_seconds / self.duration_seconds)


class PlaybackController:
    """Single writer of queue and playback state.

    Player errors trigger one retry per load from a local copy of the media.
    Completion callbacks advance the queue according to the repeat mode.
    """

    def __init__(
        self,
        *,
        media_player: MediaPlayer,
        track_repository: TrackRepository,
        monitor: PlayCountMonitor,
        notifier: NowPlayingNotifier,
        settings: PlaybackSettings,
        fallback: LocalCopyFallback | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._player = media_player
        self._track_repo = track_repository
        self._monitor = monitor
        self._notifier = notifier
        self._settings = settings
        self._fallback = fallback
        self._rng = rng or random.Random()

        self._queue = PlayQueue()
        self._state = PlaybackState.IDLE
        self._error: str | None = None

        # Bumped on every load; callbacks and delayed retries from an older load are dropped.
        self._generation = 0
        self._fallback_attempted = False

        self._player.set_on_completion_callback(self._on_player_completion)
        self._player.set_on_error_callback(self._on_player_error)

    # ─────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def current_track(self) -> Track | None:
        return self._queue.current

    @property
    def tracks(self) -> list[Track]:
        return list(self._queue.tracks)

    def _transition(self, target: PlaybackState) -> None:
        if target == self._state:
            return
        if not self._state.can_transition_to(target):
            raise InvalidOperationError(
                operation=f"transition to {target.value}",
                current_state=self._state.value,
            )
        self._state = target

    def snapshot(self) -> PlayerSnapshot:
        track = self._queue.current
        active = self._state.is_active
        return PlayerSnapshot(
            current_track=track,
            current_index=self._queue.current_index,
            queue_size=self._queue.size,
            state=self._state,
            shuffle_enabled=self._queue.shuffle_enabled,
            repeat_mode=self._queue.repeat_mode,
            position_seconds=max(0.0, self._player.position()) if active else 0.0,
            duration_seconds=(self._player.duration() if active else None)
            or (track.duration_seconds if track else None),
            error=self._error,
        )

    # ─────────────────────────────────────────────────────────────────
    # Queue
    # ─────────────────────────────────────────────────────────────────

    async def set_queue(self, tracks: list[Track], start_index: int = 0) -> None:
        """Replace the queue. A track still playing from the old queue is stopped."""
        self._queue.replace(tracks, start_index)
        if not await self.stop():
            await self._monitor.stop()
        self._error = None
        logger.info(LogTemplates.QUEUE_REPLACED, len(tracks), self._queue.current_index)

    async def play_track(self, track: Track) -> bool:
        """Play ``track``, appending it to the queue when it is not queued yet."""
        appended = self._queue.index_of(track.id) is None
        index = self._queue.select_track(track)
        if appended:
            logger.debug(LogTemplates.QUEUE_TRACK_APPENDED, track.title, index)
        return await self._load(track)

    async def play_at(self, index: int) -> bool:
        track = self._queue.select(index)
        return await self._load(track)

    async def load_and_play(self, track_id: TrackId | str) -> bool:
        """Look the track up (local cache, then backend) and play it."""
        if isinstance(track_id, str):
            track_id = TrackId(track_id)

        track = await self._track_repo.get(track_id)
        if track is None:
            self._error = ErrorMessages.MUSIC_NOT_FOUND
            logger.warning(LogTemplates.BACKEND_FETCH_FAILED, track_id, self._error)
            return False
        return await self.play_track(track)

    async def skip_next(self) -> bool:
        return await self._skip(SkipDirection.NEXT)

    async def skip_previous(self) -> bool:
        track = self._queue.current
        if (
            track is not None
            and self._state.is_active
            and self._player.position() > self._settings.restart_threshold_seconds
        ):
            logger.info(LogTemplates.PLAYBACK_RESTARTED, track.title)
            return await self.seek(0.0)
        return await self._skip(SkipDirection.PREVIOUS)

    async def _skip(self, direction: SkipDirection) -> bool:
        if direction is SkipDirection.NEXT:
            index = self._queue.next_index(self._rng)
        else:
            index = self._queue.previous_index(self._rng)

        if index is None:
            logger.debug(
                LogTemplates.QUEUE_SKIP_NOOP,
                direction.value,
                self._queue.current_index,
                self._queue.size,
                self._queue.repeat_mode.value,
            )
            return False
        return await self.play_at(index)

    def toggle_shuffle(self) -> bool:
        enabled = self._queue.toggle_shuffle()
        logger.info(LogTemplates.SHUFFLE_TOGGLED, "enabled" if enabled else "disabled")
        return enabled

    def toggle_repeat(self) -> RepeatMode:
        mode = self._queue.toggle_repeat()
        logger.info(LogTemplates.REPEAT_CHANGED, mode.value)
        return mode

    def set_repeat_mode(self, mode: RepeatMode) -> None:
        self._queue.repeat_mode = mode
        logger.info(LogTemplates.REPEAT_CHANGED, mode.value)

    # ─────────────────────────────────────────────────────────────────
    # Transport
    # ─────────────────────────────────────────────────────────────────

    async def _load(self, track: Track, *, uri: str | None = None, is_retry: bool = False) -> bool:
        await self._monitor.stop()
        self._generation += 1
        if not is_retry:
            self._fallback_attempted = False

        if not track.has_path:
            logger.warning(LogTemplates.PLAYBACK_NO_PATH, track.title)
            await self._fail(track, ErrorMessages.FILE_NOT_FOUND)
            return False

        source = uri or track.path
        logger.info(LogTemplates.PLAYBACK_LOADING, track.title, source)
        self._transition(PlaybackState.LOADING)
        self._error = None

        try:
            await self._player.load(source)
            await self._player.play()
        except MediaPlayerError as e:
            await self._handle_playback_error(track, e.message)
            return False

        self._transition(PlaybackState.PLAYING)
        self._monitor.start(track)
        self._notifier.show_now_playing(track, True)
        logger.info(LogTemplates.PLAYBACK_STARTED, track.title)

        await get_event_bus().publish(
            TrackStartedPlaying(
                track_id=track.id.value,
                track_title=track.title,
                queue_index=self._queue.current_index,
            )
        )
        return True

    async def pause(self) -> bool:
        track = self._queue.current
        if track is None or self._state != PlaybackState.PLAYING:
            return False

        await self._player.pause()
        self._monitor.on_pause()
        self._transition(PlaybackState.PAUSED)
        self._notifier.show_now_playing(track, False)
        logger.debug(LogTemplates.PLAYBACK_PAUSED, track.title)
        await get_event_bus().publish(PlaybackPaused(track_id=track.id.value))
        return True

    async def resume(self) -> bool:
        track = self._queue.current
        if track is None or self._state != PlaybackState.PAUSED:
            return False

        await self._player.play()
        self._monitor.on_resume()
        self._transition(PlaybackState.PLAYING)
        self._notifier.show_now_playing(track, True)
        logger.debug(LogTemplates.PLAYBACK_RESUMED, track.title)
        await get_event_bus().publish(PlaybackResumed(track_id=track.id.value))
        return True

    async def stop(self) -> bool:
        if not self._state.is_active:
            return False

        self._generation += 1
        await self._monitor.stop()
        await self._player.stop()
        self._transition(PlaybackState.STOPPED)
        self._notifier.cancel_all()
        logger.info(LogTemplates.PLAYBACK_STOPPED)
        return True

    async def seek(self, position_seconds: float) -> bool:
        track = self._queue.current
        if track is None or not self._state.is_active:
            return False

        position = max(0.0, position_seconds)
        duration = self._player.duration()
        if duration is not None:
            position = min(position, duration)

        await self._player.seek(position)
        self._monitor.on_seek(position)
        logger.debug(LogTemplates.PLAYBACK_SEEK, position, track.title)
        return True

    async def toggle_favorite(self, track_id: TrackId | None = None) -> bool | None:
        """Flip the favorite flag; returns the new value, or None if nothing was updated."""
        track = self._queue.current
        if track_id is not None:
            index = self._queue.index_of(track_id)
            if index is not None:
                track = self._queue.tracks[index]
            else:
                track = await self._track_repo.get(track_id)
        if track is None:
            return None

        is_favorite = not track.is_favorite
        updated = track.with_favorite(is_favorite)
        try:
            if not await self._track_repo.set_favorite(track.id, is_favorite):
                await self._track_repo.save(updated)
        except Exception as e:
            self._error = ErrorMessages.FAVORITE_FAILED.format(reason=e)
            logger.exception("Error updating favorite for '%s'", track.title)
            return None

        self._queue.update_track(updated)
        return is_favorite

    # ─────────────────────────────────────────────────────────────────
    # Player callbacks
    # ─────────────────────────────────────────────────────────────────

    async def _on_player_completion(self) -> None:
        track = self._queue.current
        if track is None or self._state != PlaybackState.PLAYING:
            logger.debug(LogTemplates.PLAYBACK_IGNORING_CALLBACK, track.title if track else None)
            return

        logger.info(LogTemplates.PLAYBACK_COMPLETED, track.title)

        if self._queue.repeat_mode is RepeatMode.ONE:
            logger.info(LogTemplates.PLAYBACK_RESTARTED, track.title)
            await self._load(track)
            return

        index = self._queue.next_index(self._rng)
        if index is not None:
            await self.play_at(index)
            return

        await self._monitor.stop()
        self._transition(PlaybackState.STOPPED)
        self._notifier.show_now_playing(track, False)
        logger.info(LogTemplates.QUEUE_EXHAUSTED, track.title)
        await get_event_bus().publish(
            QueueExhausted(last_track_id=track.id.value, last_track_title=track.title)
        )

    async def _on_player_error(self, reason: str) -> None:
        track = self._queue.current
        if track is None or not self._state.is_active:
            logger.debug(LogTemplates.PLAYBACK_IGNORING_CALLBACK, track.title if track else None)
            return
        await self._handle_playback_error(track, reason)

    async def _fail(self, track: Track, message: str) -> None:
        await self._monitor.stop()
        if self._state.is_active:
            self._transition(PlaybackState.STOPPED)
        self._error = message
        await get_event_bus().publish(
            PlaybackFailed(track_id=track.id.value, message=message, will_retry=False)
        )

    async def _handle_playback_error(self, track: Track, reason: str) -> None:
        logger.error(LogTemplates.PLAYBACK_ERROR, track.title, reason)

        will_retry = self._fallback is not None and not self._fallback_attempted
        if not will_retry:
            if self._fallback_attempted:
                logger.warning(LogTemplates.FALLBACK_ALREADY_TRIED, track.title)
            await self._fail(track, ErrorMessages.CANNOT_PLAY.format(reason=reason))
            return

        await self._monitor.stop()
        self._transition(PlaybackState.STOPPED)
        self._error = ErrorMessages.PLAYBACK_FAILED.format(reason=reason)
        await get_event_bus().publish(
            PlaybackFailed(track_id=track.id.value, message=self._error, will_retry=True)
        )

        self._fallback_attempted = True
        generation = self._generation
        await asyncio.sleep(self._settings.fallback_retry_delay_seconds)
        if generation != self._generation:
            return

        assert self._fallback is not None
        logger.info(LogTemplates.FALLBACK_STARTED, track.title)
        try:
            local_copy = await self._fallback.prepare(track)
        except MediaPlayerError as e:
            logger.warning(LogTemplates.FALLBACK_FAILED, track.title, e.message)
            await self._fail(track, ErrorMessages.CANNOT_PLAY.format(reason=e.message))
            return

        if generation != self._generation:
            return
        await self._load(track, uri=str(local_copy), is_retry=True)

    async def close(self) -> None:
        self._generation += 1
        await self._monitor.close()
        self._notifier.cancel_all()
