"""Startup cleanup of leftover audio copies and old ledger rows."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from rivo_player.domain.shared.datetime_utils import UtcDateTime
from rivo_player.domain.shared.messages import LogTemplates
from rivo_player.domain.shared.types import NonNegativeInt

if TYPE_CHECKING:
    from ...config.settings import DatabaseSettings
    from ...domain.music.repository import PlayLedgerRepository
    from ..audio.local_copy import LocalCopyFallback

logger = logging.getLogger(__name__)


class CleanupJob:
    def __init__(
        self,
        *,
        ledger_repository: PlayLedgerRepository,
        fallback: LocalCopyFallback,
        settings: DatabaseSettings,
    ) -> None:
        self._ledger_repo = ledger_repository
        self._fallback = fallback
        self._settings = settings

    async def run_cleanup(self) -> CleanupStats:
        stats = CleanupStats()

        try:
            stats.cache_files_removed = self._fallback.clear_cache()
        except OSError as e:
            logger.error(LogTemplates.CLEANUP_CACHE_FAILED, e)

        cutoff = UtcDateTime.days_ago(self._settings.ledger_retention_days).dt
        try:
            stats.ledger_rows_removed = await self._ledger_repo.cleanup_old(cutoff)
        except Exception as e:
            logger.error(LogTemplates.CLEANUP_LEDGER_FAILED, e)

        if stats.total_cleaned > 0:
            logger.info(
                LogTemplates.CLEANUP_COMPLETED,
                stats.cache_files_removed,
                stats.ledger_rows_removed,
            )

        return stats


class CleanupStats(BaseModel):
    cache_files_removed: NonNegativeInt = 0
    ledger_rows_removed: NonNegativeInt = 0

    @property
    def total_cleaned(self) -> int:
        return self.cache_files_removed + self.ledger_rows_removed
