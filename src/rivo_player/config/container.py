"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for repositories, adapters and services.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.backend_client import BackendClient
    from ..application.interfaces.media_player import MediaPlayer
    from ..application.interfaces.notifier import NowPlayingNotifier
    from ..application.services.play_count_monitor import PlayCountMonitor
    from ..application.services.play_reporter import PlayReporter
    from ..application.services.playback_service import PlaybackController
    from ..application.services.stats_service import StatsService
    from ..infrastructure.audio.local_copy import LocalCopyFallback
    from ..infrastructure.persistence.cleanup import CleanupJob
    from ..infrastructure.persistence.database import Database
    from ..infrastructure.persistence.repositories.ledger_repository import (
        SQLitePlayLedgerRepository,
    )
    from ..infrastructure.persistence.repositories.track_repository import (
        CachedTrackRepository,
        SQLiteTrackRepository,
    )
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed. Adapters may be
    injected up front (tests pass fakes for the media player and backend).
    """

    settings: Settings

    # Persistence layer
    _database: Database | None = None
    _track_cache: SQLiteTrackRepository | None = None
    _track_repository: CachedTrackRepository | None = None
    _ledger_repository: SQLitePlayLedgerRepository | None = None

    # Infrastructure adapters
    _backend_client: BackendClient | None = None
    _media_player: MediaPlayer | None = None
    _notifier: NowPlayingNotifier | None = None
    _fallback: LocalCopyFallback | None = None

    # Application services
    _play_reporter: PlayReporter | None = None
    _play_count_monitor: PlayCountMonitor | None = None
    _playback_controller: PlaybackController | None = None
    _stats_service: StatsService | None = None

    # Maintenance
    _cleanup_job: CleanupJob | None = None

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    # === Repositories ===

    @property
    def track_cache(self) -> SQLiteTrackRepository:
        if self._track_cache is None:
            from ..infrastructure.persistence.repositories.track_repository import (
                SQLiteTrackRepository,
            )

            self._track_cache = SQLiteTrackRepository(self.database)
        return self._track_cache

    @property
    def track_repository(self) -> CachedTrackRepository:
        """Get the cache-then-backend track repository."""
        if self._track_repository is None:
            from ..infrastructure.persistence.repositories.track_repository import (
                CachedTrackRepository,
            )

            self._track_repository = CachedTrackRepository(self.track_cache, self.backend_client)
        return self._track_repository

    @property
    def ledger_repository(self) -> SQLitePlayLedgerRepository:
        """Get the play ledger repository."""
        if self._ledger_repository is None:
            from ..infrastructure.persistence.repositories.ledger_repository import (
                SQLitePlayLedgerRepository,
            )

            self._ledger_repository = SQLitePlayLedgerRepository(self.database)
        return self._ledger_repository

    # === Infrastructure Adapters ===

    @property
    def backend_client(self) -> BackendClient:
        """Get the backend client."""
        if self._backend_client is None:
            from ..infrastructure.api.http_client import HttpBackendClient

            self._backend_client = HttpBackendClient(self.settings.backend)
        return self._backend_client

    @property
    def media_player(self) -> MediaPlayer:
        """Get the media player."""
        if self._media_player is None:
            from ..infrastructure.audio.mpv_player import MpvMediaPlayer

            self._media_player = MpvMediaPlayer(self.settings.playback)
        return self._media_player

    @property
    def notifier(self) -> NowPlayingNotifier:
        if self._notifier is None:
            from ..infrastructure.notifications.logging_notifier import LoggingNotifier

            self._notifier = LoggingNotifier()
        return self._notifier

    @property
    def fallback(self) -> LocalCopyFallback:
        if self._fallback is None:
            from ..infrastructure.audio.local_copy import LocalCopyFallback

            self._fallback = LocalCopyFallback(
                self.settings.playback.cache_dir,
                timeout_seconds=self.settings.backend.timeout_seconds,
            )
        return self._fallback

    # === Application Services ===

    @property
    def play_reporter(self) -> PlayReporter:
        if self._play_reporter is None:
            from ..application.services.play_reporter import PlayReporter

            self._play_reporter = PlayReporter(
                backend_client=self.backend_client,
                track_repository=self.track_repository,
                ledger_repository=self.ledger_repository,
                settings=self.settings.backend,
            )
        return self._play_reporter

    @property
    def play_count_monitor(self) -> PlayCountMonitor:
        if self._play_count_monitor is None:
            from ..application.services.play_count_monitor import PlayCountMonitor

            self._play_count_monitor = PlayCountMonitor(
                media_player=self.media_player,
                reporter=self.play_reporter,
                settings=self.settings.playback,
            )
        return self._play_count_monitor

    @property
    def playback_controller(self) -> PlaybackController:
        """Get the playback controller."""
        if self._playback_controller is None:
            from ..application.services.playback_service import PlaybackController

            self._playback_controller = PlaybackController(
                media_player=self.media_player,
                track_repository=self.track_repository,
                monitor=self.play_count_monitor,
                notifier=self.notifier,
                settings=self.settings.playback,
                fallback=self.fallback,
            )
        return self._playback_controller

    @property
    def stats_service(self) -> StatsService:
        if self._stats_service is None:
            from ..application.services.stats_service import StatsService

            self._stats_service = StatsService(
                backend_client=self.backend_client,
                ledger_repository=self.ledger_repository,
            )
        return self._stats_service

    # === Maintenance ===

    @property
    def cleanup_job(self) -> CleanupJob:
        """Get the startup cleanup job."""
        if self._cleanup_job is None:
            from ..infrastructure.persistence.cleanup import CleanupJob

            self._cleanup_job = CleanupJob(
                ledger_repository=self.ledger_repository,
                fallback=self.fallback,
                settings=self.settings.database,
            )
        return self._cleanup_job

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()
        await self.cleanup_job.run_cleanup()
        try:
            await self.play_reporter.redeliver_unreported()
        except Exception as exc:
            logger.warning("Failed redelivering unreported plays: %r", exc)

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._playback_controller is not None:
            try:
                await self._playback_controller.close()
            except Exception as exc:
                logger.warning("Failed closing playback controller: %r", exc)

        if self._media_player is not None:
            try:
                await self._media_player.close()
            except Exception as exc:
                logger.warning("Failed closing media player: %r", exc)

        if self._backend_client is not None:
            await self._backend_client.close()

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
