"""SQLite repository implementations."""

from rivo_player.infrastructure.persistence.repositories.ledger_repository import (
    SQLitePlayLedgerRepository,
)
from rivo_player.infrastructure.persistence.repositories.track_repository import (
    CachedTrackRepository,
    SQLiteTrackRepository,
)

__all__ = [
    "CachedTrackRepository",
    "SQLitePlayLedgerRepository",
    "SQLiteTrackRepository",
]
