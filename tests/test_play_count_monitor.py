"""
Unit Tests for PlayCountMonitor

Tests for:
- Counting a play after the listening threshold
- Seeks not counting towards the threshold
- Pause/resume/seek notifications
- Single report per track and skipping tracks already counted
- The periodic ticking task
"""

import asyncio
import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from rivo_player.application.services.play_count_monitor import PlayCountMonitor
from rivo_player.config.settings import PlaybackSettings
from rivo_player.domain.music.listening import Observation


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FakePlayer:
    """Just enough of MediaPlayer for the monitor."""

    def __init__(self) -> None:
        self.pos = 0.0
        self.playing = True

    def position(self) -> float:
        return self.pos

    def is_playing(self) -> bool:
        return self.playing


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def reporter():
    mock = MagicMock()
    mock.has_counted.return_value = False
    mock.report = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def monitor(player, reporter, clock):
    # Long tick interval: the tests drive ticks by hand
    settings = PlaybackSettings(tick_interval_seconds=10.0)
    return PlayCountMonitor(media_player=player, reporter=reporter, settings=settings, clock=clock)


def _advance(clock: FakeClock, player: FakePlayer, monitor: PlayCountMonitor, seconds: int) -> None:
    for _ in range(seconds):
        clock.now += 1.0
        if player.playing:
            player.pos += 1.0
        monitor.tick()


class TestThreshold:
    @pytest.mark.asyncio
    async def test_reports_after_45_seconds(self, monitor, player, clock, reporter, sample_track):
        monitor.start(sample_track)

        _advance(clock, player, monitor, 44)
        await monitor.drain()
        reporter.report.assert_not_called()

        _advance(clock, player, monitor, 1)
        await monitor.drain()
        reporter.report.assert_awaited_once()
        args = reporter.report.await_args.args
        assert args[0] == sample_track
        assert args[1] == pytest.approx(45.0)

        await monitor.close()

    @pytest.mark.asyncio
    async def test_reports_only_once(self, monitor, player, clock, reporter, sample_track):
        """Should report at most once even if listening continues past the threshold."""
        monitor.start(sample_track)

        _advance(clock, player, monitor, 200)
        await monitor.drain()

        assert reporter.report.await_count == 1
        assert monitor.session.counted
        await monitor.close()

    @pytest.mark.asyncio
    async def test_seek_does_not_count(self, monitor, player, clock, reporter, sample_track):
        """Should not credit a jump beyond the tolerance window."""
        monitor.start(sample_track)
        _advance(clock, player, monitor, 10)

        clock.now += 1.0
        player.pos += 120.0
        assert monitor.tick() is Observation.SEEK

        _advance(clock, player, monitor, 30)
        await monitor.drain()

        assert monitor.session.accumulated_seconds == pytest.approx(40.0)
        reporter.report.assert_not_called()
        await monitor.close()


class TestPauseResume:
    @pytest.mark.asyncio
    async def test_pause_stops_accumulation(self, monitor, player, clock, sample_track):
        monitor.start(sample_track)
        _advance(clock, player, monitor, 20)

        player.playing = False
        monitor.on_pause()
        _advance(clock, player, monitor, 60)
        assert monitor.session.accumulated_seconds == pytest.approx(20.0)

        player.playing = True
        monitor.on_resume()
        _advance(clock, player, monitor, 5)
        assert monitor.session.accumulated_seconds == pytest.approx(25.0)
        await monitor.close()

    @pytest.mark.asyncio
    async def test_on_pause_credits_partial_interval(self, monitor, player, clock, sample_track):
        monitor.start(sample_track)
        clock.now += 0.5
        player.pos += 0.5

        monitor.on_pause()
        assert monitor.session.accumulated_seconds == pytest.approx(0.5)
        await monitor.close()

    @pytest.mark.asyncio
    async def test_explicit_seek_rebases(self, monitor, player, clock, sample_track):
        monitor.start(sample_track)
        _advance(clock, player, monitor, 5)

        player.pos = 90.0
        monitor.on_seek(90.0)
        _advance(clock, player, monitor, 5)

        assert monitor.session.accumulated_seconds == pytest.approx(10.0)
        assert monitor.session.seeks_detected == 0
        await monitor.close()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_already_counted_track_is_not_monitored(self, monitor, reporter, sample_track):
        reporter.has_counted.return_value = True

        monitor.start(sample_track)

        assert monitor.session is None
        assert not monitor.is_running
        assert monitor.tick() is None

    @pytest.mark.asyncio
    async def test_track_change_resets_session(self, monitor, player, clock, sample_tracks):
        monitor.start(sample_tracks[0])
        _advance(clock, player, monitor, 30)

        player.pos = 0.0
        monitor.start(sample_tracks[1])

        assert monitor.session.track_id == sample_tracks[1].id
        assert monitor.session.accumulated_seconds == 0.0
        await monitor.close()

    @pytest.mark.asyncio
    async def test_stop_clears_session(self, monitor, sample_track):
        monitor.start(sample_track)
        assert monitor.is_running

        await monitor.stop()

        assert monitor.session is None
        assert not monitor.is_running


@pytest.mark.asyncio
async def test_ticking_task_reports_and_stops(sample_track):
    """Should tick on its own and stop once the play is counted."""
    start = time.monotonic()
    player = MagicMock()
    player.position.side_effect = lambda: time.monotonic() - start
    player.is_playing.return_value = True

    reporter = MagicMock()
    reporter.has_counted.return_value = False
    reporter.report = AsyncMock(return_value=True)

    settings = PlaybackSettings(
        play_count_threshold_seconds=0.05,
        seek_tolerance_seconds=0.02,
        tick_interval_seconds=0.01,
    )
    monitor = PlayCountMonitor(media_player=player, reporter=reporter, settings=settings)
    monitor.start(sample_track)

    for _ in range(200):
        if reporter.report.await_count:
            break
        await asyncio.sleep(0.01)

    await monitor.drain()
    reporter.report.assert_awaited_once()

    await asyncio.sleep(0.05)
    assert not monitor.is_running
    await monitor.close()
