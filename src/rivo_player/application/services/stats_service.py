"""Stats Application Service - artist/listener numbers and the local play summary."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ...domain.music.entities import Track
from ...domain.shared.types import NonNegativeInt

if TYPE_CHECKING:
    from ...domain.music.repository import PlayLedgerRepository
    from ..interfaces.backend_client import ArtistStats, BackendClient, ListenerStats

logger = logging.getLogger(__name__)


class TrackPlays(BaseModel):
    model_config = ConfigDict(frozen=True)

    track: Track
    plays: NonNegativeInt


class ArtistPlays(BaseModel):
    model_config = ConfigDict(frozen=True)

    artist: str
    plays: NonNegativeInt


class LocalPlaySummary(BaseModel):
    """Plays counted on this device, from the local ledger."""

    model_config = ConfigDict(frozen=True)

    total_plays: NonNegativeInt = 0
    unreported_plays: NonNegativeInt = 0
    most_played: list[TrackPlays] = Field(default_factory=list)
    top_artists: list[ArtistPlays] = Field(default_factory=list)


class StatsService:
    def __init__(
        self,
        *,
        backend_client: BackendClient,
        ledger_repository: PlayLedgerRepository,
    ) -> None:
        self._backend = backend_client
        self._ledger_repo = ledger_repository

    async def artist_stats(self) -> ArtistStats:
        """Fetch the signed-in artist's dashboard numbers. Raises BackendError."""
        return await self._backend.fetch_artist_stats()

    async def listener_stats(self, user_id: str) -> ListenerStats:
        return await self._backend.fetch_listener_stats(user_id)

    async def local_play_summary(self, limit: int = 5) -> LocalPlaySummary:
        total = await self._ledger_repo.total_plays()
        unreported = await self._ledger_repo.unreported()
        most_played = await self._ledger_repo.most_played(limit)
        by_artist = await self._ledger_repo.plays_by_artist(limit)
        logger.debug("Local play summary: %d plays, %d unreported", total, len(unreported))

        return LocalPlaySummary(
            total_plays=total,
            unreported_plays=len(unreported),
            most_played=[TrackPlays(track=track, plays=plays) for track, plays in most_played],
            top_artists=[ArtistPlays(artist=artist, plays=plays) for artist, plays in by_artist],
        )
