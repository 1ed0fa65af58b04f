"""Wire models for the Rivo backend's JSON payloads."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from rivo_player.application.interfaces.backend_client import ArtistStats, ListenerStats
from rivo_player.domain.music.entities import Track
from rivo_player.domain.music.value_objects import TrackId


class MusicPayload(BaseModel):
    """A ``Music`` document as served by ``/api/music``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1, validation_alias=AliasChoices("_id", "id"))
    title: str = Field(..., min_length=1)
    artist_name: str | None = Field(default=None, validation_alias="artistName")
    artist_id: str | None = Field(default=None, validation_alias="artist")
    url: str | None = None
    duration: float = Field(default=0.0, ge=0.0)
    plays: int = Field(default=0, ge=0)
    album: str | None = None
    genre: str | None = None
    cover_image_url: str | None = Field(default=None, validation_alias="coverImageUrl")

    def to_domain(self) -> Track:
        return Track(
            id=TrackId(self.id),
            title=self.title[:500],
            artist=self.artist_name or "Unknown Artist",
            artist_id=self.artist_id or None,
            path=self.url or None,
            duration_seconds=self.duration or None,
            play_count=self.plays,
            album=self.album,
            genre=self.genre,
            artwork_url=self.cover_image_url or None,
        )


class PlayCountPayload(BaseModel):
    """Response of ``POST /api/music/{id}/play``."""

    model_config = ConfigDict(extra="ignore")

    plays: int = Field(..., ge=0)


class ArtistStatsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_plays: int = Field(default=0, ge=0, validation_alias="totalPlays")
    followers_count: int = Field(default=0, ge=0, validation_alias="followersCount")
    total_songs: int = Field(default=0, ge=0, validation_alias="totalSongs")
    top_songs: list[MusicPayload] = Field(default_factory=list, validation_alias="topSongs")

    def to_domain(self) -> ArtistStats:
        return ArtistStats(
            total_plays=self.total_plays,
            followers_count=self.followers_count,
            total_songs=self.total_songs,
            top_songs=[song.to_domain() for song in self.top_songs],
        )


class ListenerStatsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_plays: int = Field(default=0, ge=0, validation_alias="totalPlays")

    def to_domain(self, user_id: str) -> ListenerStats:
        return ListenerStats(user_id=user_id, total_plays=self.total_plays)
