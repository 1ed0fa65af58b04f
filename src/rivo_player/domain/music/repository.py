"""
Music Domain Repository Interfaces

Abstract base classes defining the contracts for the local track cache and
the play ledger. Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from rivo_player.domain.music.entities import LedgerEntry, Track
from rivo_player.domain.music.value_objects import TrackId


class TrackRepository(ABC):
    """Abstract repository for track metadata.

    The playback core only needs to look tracks up by id and keep the
    favorite flag and play count of cached copies current.
    """

    @abstractmethod
    async def get(self, track_id: TrackId) -> Track | None:
        """Retrieve a track by id.

        Args:
            track_id: The backend track id.

        Returns:
            The track if known, None otherwise.
        """
        ...

    @abstractmethod
    async def save(self, track: Track) -> None:
        """Insert or replace a track."""
        ...

    @abstractmethod
    async def set_favorite(self, track_id: TrackId, is_favorite: bool) -> bool:
        """Update the favorite flag.

        Returns:
            True if the track exists and was updated.
        """
        ...

    @abstractmethod
    async def increment_play_count(self, track_id: TrackId) -> int | None:
        """Increment the cached play count.

        Returns:
            The new play count, or None if the track is not cached.
        """
        ...


class PlayLedgerRepository(ABC):
    """Abstract repository for counted plays.

    Every play that crossed the listening threshold is recorded here,
    independent of whether the backend report succeeded.
    """

    @abstractmethod
    async def record_play(
        self,
        track: Track,
        listened_seconds: float,
        played_at: datetime | None = None,
        reported: bool = False,
    ) -> None:
        """Record a counted play.

        Args:
            track: The track that was played.
            listened_seconds: Accumulated genuine listening time.
            played_at: When the play was counted (defaults to now).
            reported: Whether the backend acknowledged the play.
        """
        ...

    @abstractmethod
    async def mark_reported(self, track_id: TrackId) -> None:
        """Flag the most recent play of a track as acknowledged by the backend."""
        ...

    @abstractmethod
    async def count_plays(self, track_id: TrackId) -> int:
        """Number of counted plays of a track."""
        ...

    @abstractmethod
    async def total_plays(self) -> int:
        """Number of counted plays across all tracks."""
        ...

    @abstractmethod
    async def most_played(self, limit: int = 10) -> list[tuple[Track, int]]:
        """Most played tracks as (track, play_count), sorted by count descending."""
        ...

    @abstractmethod
    async def plays_by_artist(self, limit: int = 10) -> list[tuple[str, int]]:
        """Counted plays per artist as (artist, play_count), sorted by count descending."""
        ...

    @abstractmethod
    async def unreported(self, limit: int | None = None) -> list[LedgerEntry]:
        """Plays the backend never acknowledged, oldest first."""
        ...

    @abstractmethod
    async def mark_entry_reported(self, entry_id: int) -> None:
        """Flag a single ledger entry as acknowledged by the backend."""
        ...

    @abstractmethod
    async def cleanup_old(self, older_than: datetime) -> int:
        """Remove plays counted before ``older_than`` and return how many were removed."""
        ...
