"""Track repositories: the SQLite cache and the cache-then-backend lookup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from rivo_player.domain.music.entities import Track
from rivo_player.domain.music.repository import TrackRepository
from rivo_player.domain.music.value_objects import TrackId
from rivo_player.domain.shared.datetime_utils import UtcDateTime
from rivo_player.domain.shared.exceptions import BackendError
from rivo_player.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ....application.interfaces.backend_client import BackendClient
    from ..database import Database

logger = logging.getLogger(__name__)


class SQLiteTrackRepository(TrackRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, track_id: TrackId) -> Track | None:
        row = await self._db.fetch_one(
            "SELECT * FROM tracks WHERE track_id = ?",
            (track_id.value,),
        )
        return self._row_to_track(row) if row else None

    async def save(self, track: Track) -> None:
        await self._db.execute(
            """
            INSERT INTO tracks (
                track_id, title, artist, artist_id, path, duration_seconds,
                is_favorite, play_count, album, genre, artwork_url, cached_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(track_id) DO UPDATE SET
                title = excluded.title,
                artist = excluded.artist,
                artist_id = excluded.artist_id,
                path = excluded.path,
                duration_seconds = excluded.duration_seconds,
                play_count = MAX(tracks.play_count, excluded.play_count),
                album = excluded.album,
                genre = excluded.genre,
                artwork_url = excluded.artwork_url,
                cached_at = excluded.cached_at
            """,
            (
                track.id.value,
                track.title,
                track.artist,
                track.artist_id,
                track.path,
                track.duration_seconds,
                int(track.is_favorite),
                track.play_count,
                track.album,
                track.genre,
                track.artwork_url,
                UtcDateTime.now().iso,
            ),
        )

    async def set_favorite(self, track_id: TrackId, is_favorite: bool) -> bool:
        updated = await self._db.execute(
            "UPDATE tracks SET is_favorite = ? WHERE track_id = ?",
            (int(is_favorite), track_id.value),
        )
        return updated > 0

    async def increment_play_count(self, track_id: TrackId) -> int | None:
        updated = await self._db.execute(
            "UPDATE tracks SET play_count = play_count + 1 WHERE track_id = ?",
            (track_id.value,),
        )
        if updated == 0:
            return None
        row = await self._db.fetch_one(
            "SELECT play_count FROM tracks WHERE track_id = ?",
            (track_id.value,),
        )
        return row["play_count"] if row else None

    @staticmethod
    def _row_to_track(row: dict[str, Any]) -> Track:
        return Track(
            id=TrackId(row["track_id"]),
            title=row["title"],
            artist=row["artist"],
            artist_id=row["artist_id"],
            path=row["path"],
            duration_seconds=row["duration_seconds"],
            is_favorite=bool(row["is_favorite"]),
            play_count=row["play_count"],
            album=row["album"],
            genre=row["genre"],
            artwork_url=row["artwork_url"],
        )


class CachedTrackRepository(TrackRepository):
    """Reads the local cache first and falls back to the backend.

    Tracks fetched from the backend are written back to the cache. The
    favorite flag is local state, so saving a backend copy keeps it.
    """

    def __init__(self, cache: SQLiteTrackRepository, backend: BackendClient) -> None:
        self._cache = cache
        self._backend = backend

    async def get(self, track_id: TrackId) -> Track | None:
        cached = await self._cache.get(track_id)
        if cached is not None:
            return cached

        try:
            fetched = await self._backend.fetch_track(track_id)
        except BackendError as e:
            logger.warning(LogTemplates.BACKEND_FETCH_FAILED, track_id, e.message)
            return None

        if fetched is None:
            return None

        await self._cache.save(fetched)
        logger.debug(LogTemplates.BACKEND_TRACK_CACHED, fetched.title)
        return fetched

        await self._cache.save(fetched)
        return await self._cache.get(track_id)

    async def save(self, track: Track) -> None:
        await self._cache.save(track)

    async def set_favorite(self, track_id: TrackId, is_favorite: bool) -> bool:
        return await self._cache.set_favorite(track_id, is_favorite)

    async def increment_play_count(self, track_id: TrackId) -> int | None:
        return await self._cache.increment_play_count(track_id)
