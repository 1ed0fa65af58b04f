"""Port interface for the Rivo REST backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from rivo_player.domain.music.entities import Track
from rivo_player.domain.shared.types import NonNegativeInt

if TYPE_CHECKING:
    from ...domain.music.value_objects import TrackId


class ArtistStats(BaseModel):
    """Dashboard numbers for the signed-in artist."""

    model_config = ConfigDict(frozen=True)

    total_plays: NonNegativeInt = 0
    followers_count: NonNegativeInt = 0
    total_songs: NonNegativeInt = 0
    top_songs: list[Track] = Field(default_factory=list)


class ListenerStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    total_plays: NonNegativeInt = 0


class BackendClient(ABC):
    """Interface for the backend endpoints the playback core consumes."""

    @abstractmethod
    async def fetch_track(self, track_id: TrackId) -> Track | None:
        """Fetch track metadata by id, or None if the backend does not know it."""
        ...

    @abstractmethod
    async def report_play(self, track_id: TrackId) -> int:
        """Increment the server-side play count and return the new total."""
        ...

    @abstractmethod
    async def fetch_artist_stats(self) -> ArtistStats:
        ...

    @abstractmethod
    async def fetch_listener_stats(self, user_id: str) -> ListenerStats:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

