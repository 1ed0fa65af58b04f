"""
Unit Tests for PlaybackController

Tests for:
- Queue replacement and playing tracks
- Skip next/previous, including no-op and wrap-around rules
- Pause/resume/seek/stop transport
- Completion handling per repeat mode
- Error recovery with a single local-copy retry per load
- Favorites and the player snapshot
"""

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from rivo_player.application.services.playback_service import PlaybackController
from rivo_player.domain.music.value_objects import PlaybackState, RepeatMode, TrackId
from rivo_player.domain.shared.events import (
    PlaybackFailed,
    PlaybackPaused,
    PlaybackResumed,
    QueueExhausted,
    TrackStartedPlaying,
    get_event_bus,
)
from rivo_player.domain.shared.exceptions import MediaPlayerError


@pytest.fixture
def mock_player():
    player = MagicMock()
    player.load = AsyncMock()
    player.play = AsyncMock()
    player.pause = AsyncMock()
    player.stop = AsyncMock()
    player.seek = AsyncMock()
    player.close = AsyncMock()
    player.position.return_value = 0.0
    player.duration.return_value = None
    player.is_playing.return_value = True
    return player


@pytest.fixture
def mock_monitor():
    monitor = MagicMock()
    monitor.stop = AsyncMock()
    monitor.close = AsyncMock()
    return monitor


@pytest.fixture
def mock_repo():
    return AsyncMock()


@pytest.fixture
def mock_notifier():
    return MagicMock()


@pytest.fixture
def mock_fallback(tmp_path):
    fallback = MagicMock()
    fallback.prepare = AsyncMock(return_value=tmp_path / "temp_1.mp3")
    return fallback


@pytest.fixture
def controller(mock_player, mock_repo, mock_monitor, mock_notifier, mock_fallback, playback_settings):
    return PlaybackController(
        media_player=mock_player,
        track_repository=mock_repo,
        monitor=mock_monitor,
        notifier=mock_notifier,
        settings=playback_settings,
        fallback=mock_fallback,
        rng=random.Random(7),
    )


@pytest.fixture
def events():
    """Collect every playback event published during a test."""
    received = []

    async def handler(event) -> None:
        received.append(event)

    bus = get_event_bus()
    for event_type in (
        TrackStartedPlaying,
        PlaybackPaused,
        PlaybackResumed,
        PlaybackFailed,
        QueueExhausted,
    ):
        bus.subscribe(event_type, handler)
    return received


def _completion(mock_player):
    return mock_player.set_on_completion_callback.call_args.args[0]


def _error(mock_player):
    return mock_player.set_on_error_callback.call_args.args[0]


# =============================================================================
# Playing Tests
# =============================================================================


class TestPlay:
    @pytest.mark.asyncio
    async def test_play_at_loads_and_plays(
        self, controller, mock_player, mock_monitor, mock_notifier, sample_tracks, events
    ):
        await controller.set_queue(sample_tracks)

        assert await controller.play_at(1) is True

        mock_player.load.assert_awaited_once_with(sample_tracks[1].path)
        mock_player.play.assert_awaited_once()
        mock_monitor.start.assert_called_once_with(sample_tracks[1])
        mock_notifier.show_now_playing.assert_called_with(sample_tracks[1], True)
        assert controller.state is PlaybackState.PLAYING
        assert controller.current_track == sample_tracks[1]
        assert isinstance(events[-1], TrackStartedPlaying)
        assert events[-1].queue_index == 1

    @pytest.mark.asyncio
    async def test_play_track_appends_unknown_track(self, controller, sample_tracks, sample_track):
        await controller.set_queue(sample_tracks)

        await controller.play_track(sample_track)

        assert controller.tracks[-1] == sample_track
        assert controller.snapshot().current_index == 4

    @pytest.mark.asyncio
    async def test_track_without_path_fails(self, controller, mock_player, sample_track, events):
        """Should report a missing file without touching the player."""
        no_path = sample_track.model_copy(update={"path": None})

        assert await controller.play_track(no_path) is False

        mock_player.load.assert_not_called()
        assert controller.error == "Cannot play music: file not found"
        assert isinstance(events[-1], PlaybackFailed)
        assert events[-1].will_retry is False

    @pytest.mark.asyncio
    async def test_load_and_play_missing_track(self, controller, mock_repo, mock_player):
        mock_repo.get.return_value = None

        assert await controller.load_and_play("65f1c0ffee0000000000dead") is False

        assert controller.error == "Music not found"
        mock_player.load.assert_not_called()

    @pytest.mark.asyncio
    async def test_load_and_play_found_track(self, controller, mock_repo, mock_player, sample_track):
        mock_repo.get.return_value = sample_track

        assert await controller.load_and_play(sample_track.id.value) is True

        mock_repo.get.assert_awaited_once_with(TrackId(sample_track.id.value))
        mock_player.load.assert_awaited_once_with(sample_track.path)

    @pytest.mark.asyncio
    async def test_set_queue_clears_error(self, controller, mock_repo, sample_tracks):
        mock_repo.get.return_value = None
        await controller.load_and_play("missing")

        await controller.set_queue(sample_tracks)
        assert controller.error is None

    @pytest.mark.asyncio
    async def test_set_queue_stops_previous_track(
        self, controller, mock_player, mock_notifier, sample_track, sample_tracks
    ):
        """Should stop the old track so its completion cannot skip the new start track."""
        await controller.play_track(sample_track)

        await controller.set_queue(sample_tracks, start_index=0)

        mock_player.stop.assert_awaited_once()
        mock_notifier.cancel_all.assert_called_once()
        assert controller.state is PlaybackState.STOPPED

        await _completion(mock_player)()

        assert controller.snapshot().current_index == 0
        assert controller.current_track == sample_tracks[0]
        assert await controller.pause() is False

    @pytest.mark.asyncio
    async def test_set_queue_when_idle_leaves_player_alone(
        self, controller, mock_player, mock_monitor, sample_tracks
    ):
        await controller.set_queue(sample_tracks)

        mock_player.stop.assert_not_called()
        mock_monitor.stop.assert_awaited_once()
        assert controller.state is PlaybackState.IDLE


# =============================================================================
# Skip Tests
# =============================================================================


class TestSkip:
    @pytest.mark.asyncio
    async def test_skip_next_advances(self, controller, mock_player, sample_tracks):
        await controller.set_queue(sample_tracks)
        await controller.play_at(0)

        assert await controller.skip_next() is True
        assert controller.current_track == sample_tracks[1]

    @pytest.mark.asyncio
    async def test_skip_next_at_end_is_noop(self, controller, mock_player, sample_tracks):
        await controller.set_queue(sample_tracks, start_index=3)
        await controller.play_at(3)
        mock_player.load.reset_mock()

        assert await controller.skip_next() is False
        mock_player.load.assert_not_called()
        assert controller.current_track == sample_tracks[3]

    @pytest.mark.asyncio
    async def test_skip_next_wraps_with_repeat_all(self, controller, sample_tracks):
        await controller.set_queue(sample_tracks, start_index=3)
        controller.set_repeat_mode(RepeatMode.ALL)
        await controller.play_at(3)

        assert await controller.skip_next() is True
        assert controller.current_track == sample_tracks[0]

    @pytest.mark.asyncio
    async def test_skip_previous_at_start_is_noop(self, controller, sample_tracks):
        await controller.set_queue(sample_tracks)
        await controller.play_at(0)

        assert await controller.skip_previous() is False

    @pytest.mark.asyncio
    async def test_skip_previous_restarts_after_threshold(
        self, controller, mock_player, mock_monitor, sample_tracks
    ):
        """Should seek to zero instead of changing tracks past three seconds."""
        await controller.set_queue(sample_tracks)
        await controller.play_at(2)
        mock_player.position.return_value = 12.0

        assert await controller.skip_previous() is True

        mock_player.seek.assert_awaited_once_with(0.0)
        mock_monitor.on_seek.assert_called_once_with(0.0)
        assert controller.current_track == sample_tracks[2]

    @pytest.mark.asyncio
    async def test_skip_previous_goes_back_early_in_track(self, controller, mock_player, sample_tracks):
        await controller.set_queue(sample_tracks)
        await controller.play_at(2)
        mock_player.position.return_value = 1.0

        assert await controller.skip_previous() is True
        assert controller.current_track == sample_tracks[1]

    @pytest.mark.asyncio
    async def test_shuffle_never_repeats_current(self, controller, sample_tracks):
        await controller.set_queue(sample_tracks)
        assert controller.toggle_shuffle() is True
        await controller.play_at(0)

        for _ in range(10):
            before = controller.current_track
            await controller.skip_next()
            assert controller.current_track != before

    def test_toggle_repeat_cycles(self, controller):
        assert controller.toggle_repeat() is RepeatMode.ONE
        assert controller.toggle_repeat() is RepeatMode.ALL
        assert controller.toggle_repeat() is RepeatMode.OFF


# =============================================================================
# Transport Tests
# =============================================================================


class TestTransport:
    @pytest.mark.asyncio
    async def test_pause_and_resume(
        self, controller, mock_player, mock_monitor, mock_notifier, sample_track, events
    ):
        await controller.play_track(sample_track)

        assert await controller.pause() is True
        assert controller.state is PlaybackState.PAUSED
        mock_player.pause.assert_awaited_once()
        mock_monitor.on_pause.assert_called_once()
        mock_notifier.show_now_playing.assert_called_with(sample_track, False)

        assert await controller.pause() is False

        assert await controller.resume() is True
        assert controller.state is PlaybackState.PLAYING
        mock_monitor.on_resume.assert_called_once()

        assert [type(e) for e in events[-2:]] == [PlaybackPaused, PlaybackResumed]

    @pytest.mark.asyncio
    async def test_pause_without_track(self, controller):
        assert await controller.pause() is False
        assert await controller.resume() is False

    @pytest.mark.asyncio
    async def test_seek_is_clamped(self, controller, mock_player, sample_track):
        await controller.play_track(sample_track)
        mock_player.duration.return_value = 100.0

        await controller.seek(250.0)
        mock_player.seek.assert_awaited_with(100.0)

        await controller.seek(-5.0)
        mock_player.seek.assert_awaited_with(0.0)

    @pytest.mark.asyncio
    async def test_stop(self, controller, mock_player, mock_notifier, sample_track):
        await controller.play_track(sample_track)

        assert await controller.stop() is True
        assert controller.state is PlaybackState.STOPPED
        mock_player.stop.assert_awaited_once()
        mock_notifier.cancel_all.assert_called_once()

        assert await controller.stop() is False


# =============================================================================
# Completion Tests
# =============================================================================


class TestCompletion:
    @pytest.mark.asyncio
    async def test_completion_advances(self, controller, mock_player, sample_tracks):
        await controller.set_queue(sample_tracks)
        await controller.play_at(0)

        await _completion(mock_player)()

        assert controller.current_track == sample_tracks[1]
        assert controller.state is PlaybackState.PLAYING

    @pytest.mark.asyncio
    async def test_repeat_one_replays(self, controller, mock_player, sample_tracks):
        await controller.set_queue(sample_tracks)
        controller.set_repeat_mode(RepeatMode.ONE)
        await controller.play_at(1)

        await _completion(mock_player)()

        assert controller.current_track == sample_tracks[1]
        assert mock_player.load.await_count == 2

    @pytest.mark.asyncio
    async def test_explicit_skip_under_repeat_one_moves_on(self, controller, sample_tracks):
        await controller.set_queue(sample_tracks)
        controller.set_repeat_mode(RepeatMode.ONE)
        await controller.play_at(1)

        await controller.skip_next()
        assert controller.current_track == sample_tracks[2]

    @pytest.mark.asyncio
    async def test_queue_exhausted(self, controller, mock_player, mock_notifier, sample_tracks, events):
        await controller.set_queue(sample_tracks, start_index=3)
        await controller.play_at(3)

        await _completion(mock_player)()

        assert controller.state is PlaybackState.STOPPED
        mock_notifier.show_now_playing.assert_called_with(sample_tracks[3], False)
        assert isinstance(events[-1], QueueExhausted)
        assert events[-1].last_track_id == "track-3"

    @pytest.mark.asyncio
    async def test_completion_ignored_when_not_playing(self, controller, mock_player, sample_tracks):
        await controller.set_queue(sample_tracks)
        await controller.play_at(0)
        await controller.pause()

        await _completion(mock_player)()

        assert controller.current_track == sample_tracks[0]
        assert controller.state is PlaybackState.PAUSED


# =============================================================================
# Error Recovery Tests
# =============================================================================


class TestErrorRecovery:
    @pytest.mark.asyncio
    async def test_load_error_retries_from_local_copy(
        self, controller, mock_player, mock_fallback, sample_track, tmp_path, events
    ):
        mock_player.load.side_effect = [MediaPlayerError("codec"), None]

        await controller.play_track(sample_track)

        mock_fallback.prepare.assert_awaited_once_with(sample_track)
        assert mock_player.load.await_args_list[1].args == (str(tmp_path / "temp_1.mp3"),)
        assert controller.state is PlaybackState.PLAYING
        assert controller.error is None

        failures = [e for e in events if isinstance(e, PlaybackFailed)]
        assert len(failures) == 1
        assert failures[0].will_retry is True
        assert failures[0].message == "Playback error: codec"

    @pytest.mark.asyncio
    async def test_only_one_retry_per_load(self, controller, mock_player, mock_fallback, sample_track, events):
        mock_player.load.side_effect = [MediaPlayerError("codec"), MediaPlayerError("still broken")]

        await controller.play_track(sample_track)

        mock_fallback.prepare.assert_awaited_once()
        assert mock_player.load.await_count == 2
        assert controller.state is PlaybackState.STOPPED
        assert controller.error == "Cannot play music: still broken"
        assert events[-1].will_retry is False

    @pytest.mark.asyncio
    async def test_fallback_failure(self, controller, mock_player, mock_fallback, sample_track):
        mock_player.load.side_effect = MediaPlayerError("codec")
        mock_fallback.prepare.side_effect = MediaPlayerError("file not found")

        await controller.play_track(sample_track)

        assert controller.error == "Cannot play music: file not found"
        assert mock_player.load.await_count == 1

    @pytest.mark.asyncio
    async def test_runtime_error_callback_triggers_retry(
        self, controller, mock_player, mock_fallback, sample_track
    ):
        await controller.play_track(sample_track)

        await _error(mock_player)("stream dropped")

        mock_fallback.prepare.assert_awaited_once()
        assert mock_player.load.await_count == 2
        assert controller.state is PlaybackState.PLAYING

    @pytest.mark.asyncio
    async def test_new_load_resets_retry_budget(
        self, controller, mock_player, mock_fallback, sample_tracks
    ):
        await controller.set_queue(sample_tracks)
        await controller.play_at(0)
        await _error(mock_player)("dropped")

        await controller.play_at(1)
        await _error(mock_player)("dropped again")

        assert mock_fallback.prepare.await_count == 2

    @pytest.mark.asyncio
    async def test_error_callback_ignored_when_stopped(self, controller, mock_player, mock_fallback, sample_track):
        await controller.play_track(sample_track)
        await controller.stop()

        await _error(mock_player)("late error")

        mock_fallback.prepare.assert_not_called()

    @pytest.mark.asyncio
    async def test_without_fallback_fails_immediately(
        self, mock_player, mock_repo, mock_monitor, mock_notifier, playback_settings, sample_track
    ):
        controller = PlaybackController(
            media_player=mock_player,
            track_repository=mock_repo,
            monitor=mock_monitor,
            notifier=mock_notifier,
            settings=playback_settings,
        )
        mock_player.load.side_effect = MediaPlayerError("codec")

        await controller.play_track(sample_track)

        assert controller.error == "Cannot play music: codec"


# =============================================================================
# Favorites and Snapshot Tests
# =============================================================================


class TestFavorites:
    @pytest.mark.asyncio
    async def test_toggle_current(self, controller, mock_repo, sample_track):
        mock_repo.set_favorite.return_value = True
        await controller.play_track(sample_track)

        assert await controller.toggle_favorite() is True
        mock_repo.set_favorite.assert_awaited_once_with(sample_track.id, True)
        assert controller.current_track.is_favorite is True

        assert await controller.toggle_favorite() is False

    @pytest.mark.asyncio
    async def test_toggle_uncached_track_saves_it(self, controller, mock_repo, sample_track):
        mock_repo.set_favorite.return_value = False
        await controller.play_track(sample_track)

        await controller.toggle_favorite()

        mock_repo.save.assert_awaited_once_with(sample_track.with_favorite(True))

    @pytest.mark.asyncio
    async def test_toggle_failure_sets_error(self, controller, mock_repo, sample_track):
        mock_repo.set_favorite.side_effect = RuntimeError("locked")
        await controller.play_track(sample_track)

        assert await controller.toggle_favorite() is None
        assert controller.error == "Failed to update favorite status: locked"
        assert controller.current_track.is_favorite is False

    @pytest.mark.asyncio
    async def test_toggle_without_track(self, controller):
        assert await controller.toggle_favorite() is None


class TestSnapshot:
    def test_idle_snapshot(self, controller):
        snapshot = controller.snapshot()

        assert snapshot.current_track is None
        assert snapshot.state is PlaybackState.IDLE
        assert snapshot.progress == 0.0
        assert not snapshot.is_playing

    @pytest.mark.asyncio
    async def test_playing_snapshot(self, controller, mock_player, sample_tracks):
        await controller.set_queue(sample_tracks)
        await controller.play_at(1)
        mock_player.position.return_value = 50.0

        snapshot = controller.snapshot()

        assert snapshot.is_playing
        assert snapshot.queue_size == 4
        assert snapshot.position_seconds == 50.0
        assert snapshot.duration_seconds == 200.0
        assert snapshot.progress == pytest.approx(0.25)


@pytest.mark.asyncio
async def test_close_stops_monitor_and_notifications(controller, mock_monitor, mock_notifier):
    await controller.close()

    mock_monitor.close.assert_awaited_once()
    mock_notifier.cancel_all.assert_called_once()
