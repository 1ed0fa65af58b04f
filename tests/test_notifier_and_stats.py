"""
Unit Tests for the now-playing notifier and StatsService

Tests for:
- LoggingNotifier state and log output
- StatsService delegation to the backend and the local ledger summary
"""

import logging
from unittest.mock import AsyncMock

import pytest

from rivo_player.application.interfaces.backend_client import ArtistStats, ListenerStats
from rivo_player.application.services.stats_service import StatsService
from rivo_player.infrastructure.notifications.logging_notifier import LoggingNotifier

# =============================================================================
# LoggingNotifier Tests
# =============================================================================


class TestLoggingNotifier:
    def test_show_now_playing(self, sample_track, caplog):
        notifier = LoggingNotifier()

        with caplog.at_level(logging.INFO):
            notifier.show_now_playing(sample_track, True)

        assert notifier.current == sample_track
        assert notifier.is_ongoing
        assert "Now playing: Test Track by Test Artist [3:00]" in caplog.text
        assert "(paused)" not in caplog.text

    def test_paused_notification_is_not_ongoing(self, sample_track, caplog):
        notifier = LoggingNotifier()

        with caplog.at_level(logging.INFO):
            notifier.show_now_playing(sample_track, False)

        assert notifier.current == sample_track
        assert not notifier.is_ongoing
        assert "(paused)" in caplog.text

    def test_cancel_all(self, sample_track, caplog):
        notifier = LoggingNotifier()
        notifier.show_now_playing(sample_track, True)

        with caplog.at_level(logging.INFO):
            notifier.cancel_all()
            notifier.cancel_all()

        assert notifier.current is None
        assert caplog.text.count("Cleared now-playing notification") == 1


# =============================================================================
# StatsService Tests
# =============================================================================


class TestStatsService:
    @pytest.fixture
    def backend(self):
        return AsyncMock()

    @pytest.mark.asyncio
    async def test_artist_and_listener_stats(self, backend, ledger_repository):
        backend.fetch_artist_stats.return_value = ArtistStats(total_plays=10)
        backend.fetch_listener_stats.return_value = ListenerStats(user_id="u1", total_plays=4)
        service = StatsService(backend_client=backend, ledger_repository=ledger_repository)

        assert (await service.artist_stats()).total_plays == 10
        assert (await service.listener_stats("u1")).total_plays == 4
        backend.fetch_listener_stats.assert_awaited_once_with("u1")

    @pytest.mark.asyncio
    async def test_local_play_summary(self, backend, ledger_repository, sample_tracks):
        for _ in range(2):
            await ledger_repository.record_play(sample_tracks[0], 50.0)
        await ledger_repository.record_play(sample_tracks[1], 46.0)
        await ledger_repository.mark_reported(sample_tracks[1].id)
        service = StatsService(backend_client=backend, ledger_repository=ledger_repository)

        summary = await service.local_play_summary(limit=1)

        assert summary.total_plays == 3
        assert summary.unreported_plays == 2
        assert [(entry.track.id, entry.plays) for entry in summary.most_played] == [
            (sample_tracks[0].id, 2)
        ]
        assert [(entry.artist, entry.plays) for entry in summary.top_artists] == [("Queue Artist", 3)]
        backend.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_summary(self, backend, ledger_repository):
        service = StatsService(backend_client=backend, ledger_repository=ledger_repository)

        summary = await service.local_play_summary()

        assert summary.total_plays == 0
        assert summary.most_played == []
        assert summary.top_artists == []
