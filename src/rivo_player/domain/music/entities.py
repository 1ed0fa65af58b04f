"""Core domain entities for the music context."""

from __future__ import annotations

import random

from pydantic import BaseModel, ConfigDict, Field

from rivo_player.domain.music.value_objects import RepeatMode, SkipDirection, TrackIdField
from rivo_player.domain.shared.exceptions import InvalidOperationError
from rivo_player.domain.shared.messages import ErrorMessages
from rivo_player.domain.shared.types import (
    DurationSeconds,
    NonEmptyStr,
    NonNegativeInt,
    QueueIndexInt,
    TrackTitleStr,
    UtcDatetimeField,
)


class Track(BaseModel):
    """Immutable value object representing a playable track."""

    model_config = ConfigDict(frozen=True)

    id: TrackIdField
    title: TrackTitleStr
    artist: NonEmptyStr = "Unknown Artist"
    artist_id: NonEmptyStr | None = None
    path: str | None = None
    duration_seconds: DurationSeconds | None = None
    is_favorite: bool = False
    play_count: NonNegativeInt = 0

    album: str | None = None
    genre: str | None = None
    artwork_url: str | None = None

    @property
    def has_path(self) -> bool:
        return bool(self.path and self.path.strip())

    @property
    def is_remote(self) -> bool:
        return bool(self.path and self.path.startswith(("http://", "https://")))

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS or HH:MM:SS."""
        if self.duration_seconds is None:
            return "Unknown"

        hours, remainder = divmod(int(self.duration_seconds), 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    def with_favorite(self, is_favorite: bool) -> Track:
        return self.model_copy(update={"is_favorite": is_favorite})

    def with_play_count(self, play_count: int) -> Track:
        return self.model_copy(update={"play_count": play_count})


class LedgerEntry(BaseModel):
    """A counted play as stored in the local ledger."""

    model_config = ConfigDict(frozen=True)

    entry_id: int
    track: Track
    played_at: UtcDatetimeField
    listened_seconds: float = 0.0
    reported: bool = False


class PlayQueue(BaseModel):
    """Ordered tracks being played through, with the current index and skip modes."""

    tracks: list[Track] = Field(default_factory=list)
    current_index: QueueIndexInt = 0
    shuffle_enabled: bool = False
    repeat_mode: RepeatMode = RepeatMode.OFF

    @property
    def size(self) -> int:
        return len(self.tracks)

    @property
    def is_empty(self) -> bool:
        return not self.tracks

    @property
    def current(self) -> Track | None:
        if 0 <= self.current_index < len(self.tracks):
            return self.tracks[self.current_index]
        return None

    def replace(self, tracks: list[Track], start_index: int = 0) -> None:
        """Replace the whole queue and move to ``start_index``."""
        if tracks and not 0 <= start_index < len(tracks):
            raise InvalidOperationError(
                operation="set queue",
                current_state=f"{len(tracks)} tracks",
                message=ErrorMessages.QUEUE_INDEX_OUT_OF_RANGE.format(
                    index=start_index, size=len(tracks)
                ),
            )
        self.tracks = list(tracks)
        self.current_index = start_index if tracks else 0

    def index_of(self, track_id: object) -> int | None:
        for index, track in enumerate(self.tracks):
            if track.id == track_id:
                return index
        return None

    def select(self, index: int) -> Track:
        """Make ``index`` the current entry and return its track."""
        if not 0 <= index < len(self.tracks):
            raise InvalidOperationError(
                operation="select",
                current_state=f"{len(self.tracks)} tracks",
                message=ErrorMessages.QUEUE_INDEX_OUT_OF_RANGE.format(
                    index=index, size=len(self.tracks)
                ),
            )
        self.current_index = index
        return self.tracks[index]

    def select_track(self, track: Track) -> int:
        """Move to ``track``, appending it when it is not queued yet."""
        index = self.index_of(track.id)
        if index is None:
            self.tracks.append(track)
            index = len(self.tracks) - 1
        else:
            # Keep the freshest copy of the track metadata.
            self.tracks[index] = track
        self.current_index = index
        return index

    def update_track(self, track: Track) -> bool:
        """Swap in an updated copy of a queued track."""
        index = self.index_of(track.id)
        if index is None:
            return False
        self.tracks[index] = track
        return True

    def next_index(self, rng: random.Random | None = None) -> int | None:
        """Index to play after the current one, or None when skipping is a no-op."""
        return self._step(SkipDirection.NEXT, rng)

    def previous_index(self, rng: random.Random | None = None) -> int | None:
        """Index to play before the current one, or None when skipping is a no-op."""
        return self._step(SkipDirection.PREVIOUS, rng)

    def _step(self, direction: SkipDirection, rng: random.Random | None) -> int | None:
        size = len(self.tracks)
        if size == 0:
            return None

        if self.shuffle_enabled and size > 1:
            candidates = [i for i in range(size) if i != self.current_index]
            return (rng or random).choice(candidates)

        offset = 1 if direction is SkipDirection.NEXT else -1
        candidate = self.current_index + offset
        if 0 <= candidate < size:
            return candidate
        if self.repeat_mode is RepeatMode.ALL:
            return candidate % size
        return None

    def toggle_shuffle(self) -> bool:
        self.shuffle_enabled = not self.shuffle_enabled
        return self.shuffle_enabled

    def toggle_repeat(self) -> RepeatMode:
        """Cycle the repeat mode and return the new mode."""
        self.repeat_mode = self.repeat_mode.next_mode()
        return self.repeat_mode

    def clear(self) -> int:
        count = len(self.tracks)
        self.tracks.clear()
        self.current_index = 0
        return count
