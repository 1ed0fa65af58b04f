"""Play Reporter - records counted plays locally and on the backend."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING

from ...domain.shared.events import PlayCounted, get_event_bus
from ...domain.shared.exceptions import BackendError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import BackendSettings
    from ...domain.music.entities import Track
    from ...domain.music.repository import PlayLedgerRepository, TrackRepository
    from ...domain.music.value_objects import TrackId
    from ..interfaces.backend_client import BackendClient

logger = logging.getLogger(__name__)


def _jitter(n: int, base: float) -> float:
    return base * (2 ** (n - 1)) + random.random() * 0.2


class PlayReporter:
    """Reports each track at most once per process.

    Failures never propagate: the ledger and cache writes are best-effort and
    the backend call is retried, then given up on with a warning.
    """

    def __init__(
        self,
        *,
        backend_client: BackendClient,
        track_repository: TrackRepository,
        ledger_repository: PlayLedgerRepository,
        settings: BackendSettings,
    ) -> None:
        self._backend = backend_client
        self._track_repo = track_repository
        self._ledger_repo = ledger_repository
        self._settings = settings
        self._counted: set[TrackId] = set()

    def has_counted(self, track_id: TrackId) -> bool:
        return track_id in self._counted

    async def report(self, track: Track, listened_seconds: float = 0.0) -> bool:
        """Count a play of ``track``; returns False if it was already counted."""
        if track.id in self._counted:
            logger.debug(LogTemplates.PLAY_ALREADY_REPORTED, track.title)
            return False
        self._counted.add(track.id)

        try:
            await self._ledger_repo.record_play(track, listened_seconds)
            await self._track_repo.increment_play_count(track.id)
        except Exception:
            logger.exception(LogTemplates.PLAY_LEDGER_FAILED, track.title)

        try:
            server_total = await self._send(track)
        except BackendError as e:
            logger.warning(LogTemplates.PLAY_REPORT_FAILED, track.title, e.message)
        except Exception as e:
            logger.warning(LogTemplates.PLAY_REPORT_FAILED, track.title, e)
        else:
            logger.info(LogTemplates.PLAY_REPORTED, track.title, server_total)
            try:
                await self._ledger_repo.mark_reported(track.id)
            except Exception:
                logger.exception(LogTemplates.PLAY_LEDGER_FAILED, track.title)

        await get_event_bus().publish(
            PlayCounted(
                track_id=track.id.value,
                track_title=track.title,
                listened_seconds=listened_seconds,
            )
        )
        return True

    async def redeliver_unreported(self, limit: int = 50) -> int:
        """Send plays from earlier runs that the backend never acknowledged.

        Plays the backend rejects outright are settled so they are not sent
        again. A transient failure stops the pass; the remaining plays wait for
        the next start. Returns the number of plays delivered.
        """
        entries = await self._ledger_repo.unreported(limit)
        delivered = 0

        for entry in entries:
            try:
                await self._send(entry.track)
            except BackendError as e:
                if e.is_retryable:
                    logger.warning(LogTemplates.PLAY_REDELIVERY_STOPPED, entry.track.title, e.message)
                    break
                logger.warning(LogTemplates.PLAY_REDELIVERY_REJECTED, entry.track.title, e.message)
            else:
                delivered += 1
            await self._ledger_repo.mark_entry_reported(entry.entry_id)

        if entries:
            logger.info(LogTemplates.PLAY_REDELIVERED, delivered, len(entries))
        return delivered

    async def _send(self, track: Track) -> int:
        """POST the play, retrying transient failures. Raises the last BackendError."""
        max_attempts = self._settings.report_max_attempts
        attempt = 1

        while True:
            try:
                return await self._backend.report_play(track.id)
            except BackendError as e:
                if not e.is_retryable or attempt >= max_attempts:
                    raise
                logger.warning(
                    LogTemplates.PLAY_REPORT_RETRY, attempt, max_attempts, track.title, e.message
                )
                await asyncio.sleep(_jitter(attempt, self._settings.report_backoff_base_seconds))
                attempt += 1
