"""SQLite implementation of the play ledger repository."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from rivo_player.domain.music.entities import LedgerEntry, Track
from rivo_player.domain.music.repository import PlayLedgerRepository
from rivo_player.domain.music.value_objects import TrackId
from rivo_player.domain.shared.datetime_utils import UtcDateTime

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


class SQLitePlayLedgerRepository(PlayLedgerRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def record_play(
        self,
        track: Track,
        listened_seconds: float,
        played_at: datetime | None = None,
        reported: bool = False,
    ) -> None:
        if played_at is None:
            played_at = UtcDateTime.now().dt

        await self._db.execute(
            """
            INSERT INTO play_ledger (
                track_id, title, artist, listened_seconds, played_at, reported
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                track.id.value,
                track.title,
                track.artist,
                listened_seconds,
                UtcDateTime(played_at).iso,
                int(reported),
            ),
        )
        logger.debug("Recorded play of '%s' (%.1fs)", track.title, listened_seconds)

    async def mark_reported(self, track_id: TrackId) -> None:
        await self._db.execute(
            """
            UPDATE play_ledger SET reported = 1
            WHERE id = (
                SELECT id FROM play_ledger
                WHERE track_id = ?
                ORDER BY played_at DESC, id DESC
                LIMIT 1
            )
            """,
            (track_id.value,),
        )

    async def count_plays(self, track_id: TrackId) -> int:
        row = await self._db.fetch_one(
            "SELECT COUNT(*) as count FROM play_ledger WHERE track_id = ?",
            (track_id.value,),
        )
        return row["count"] if row else 0

    async def total_plays(self) -> int:
        row = await self._db.fetch_one("SELECT COUNT(*) as count FROM play_ledger")
        return row["count"] if row else 0

    async def most_played(self, limit: int = 10) -> list[tuple[Track, int]]:
        rows = await self._db.fetch_all(
            """
            SELECT track_id, MAX(title) as title, MAX(artist) as artist,
                   COUNT(*) as play_count
            FROM play_ledger
            GROUP BY track_id
            ORDER BY play_count DESC, MAX(played_at) DESC
            LIMIT ?
            """,
            (limit,),
        )
        return [(self._row_to_track(row), row["play_count"]) for row in rows]

    async def plays_by_artist(self, limit: int = 10) -> list[tuple[str, int]]:
        rows = await self._db.fetch_all(
            """
            SELECT artist, COUNT(*) as play_count
            FROM play_ledger
            GROUP BY artist
            ORDER BY play_count DESC, artist COLLATE NOCASE
            LIMIT ?
            """,
            (limit,),
        )
        return [(row["artist"], row["play_count"]) for row in rows]

    async def unreported(self, limit: int | None = None) -> list[LedgerEntry]:
        rows = await self._db.fetch_all(
            """
            SELECT * FROM play_ledger
            WHERE reported = 0
            ORDER BY played_at, id
            LIMIT ?
            """,
            (-1 if limit is None else limit,),
        )
        return [self._row_to_entry(row) for row in rows]

    async def mark_entry_reported(self, entry_id: int) -> None:
        await self._db.execute(
            "UPDATE play_ledger SET reported = 1 WHERE id = ?",
            (entry_id,),
        )

    async def cleanup_old(self, older_than: datetime) -> int:
        return await self._db.execute(
            "DELETE FROM play_ledger WHERE played_at < ?",
            (UtcDateTime(older_than).iso,),
        )

    @staticmethod
    def _row_to_track(row: dict[str, Any]) -> Track:
        return Track(
            id=TrackId(row["track_id"]),
            title=row["title"],
            artist=row["artist"],
        )

    @classmethod
    def _row_to_entry(cls, row: dict[str, Any]) -> LedgerEntry:
        return LedgerEntry(
            entry_id=row["id"],
            track=cls._row_to_track(row),
            played_at=datetime.fromisoformat(row["played_at"]),
            listened_seconds=row["listened_seconds"],
            reported=bool(row["reported"]),
        )
