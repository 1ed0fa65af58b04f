"""Immutable value objects for the music context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated

from pydantic import PlainSerializer, PlainValidator

from rivo_player.domain.shared.messages import ErrorMessages


@dataclass(frozen=True)
class TrackId:
    """Backend identifier of a track (a MongoDB ObjectId string)."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError(ErrorMessages.EMPTY_TRACK_ID)

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)


# Serializes as plain string in JSON, stores as TrackId in the model.
TrackIdField = Annotated[
    TrackId,
    PlainValidator(lambda v: TrackId(v) if isinstance(v, str) else v),
    PlainSerializer(lambda v: v.value, return_type=str),
]


class PlaybackState(Enum):
    """Playback state with enforced transitions.

    State transitions:
    - IDLE -> LOADING (track selected)
    - LOADING -> PLAYING (media ready)
    - PLAYING <-> PAUSED
    - any active state -> STOPPED (stop command, end of queue or error)
    - STOPPED -> LOADING (new track selected)
    """

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"

    def can_transition_to(self, target: PlaybackState) -> bool:
        """Check if transition to target state is valid."""
        valid_transitions = {
            PlaybackState.IDLE: {PlaybackState.LOADING},
            PlaybackState.LOADING: {
                PlaybackState.LOADING,
                PlaybackState.PLAYING,
                PlaybackState.STOPPED,
            },
            PlaybackState.PLAYING: {
                PlaybackState.LOADING,
                PlaybackState.PAUSED,
                PlaybackState.STOPPED,
            },
            PlaybackState.PAUSED: {
                PlaybackState.LOADING,
                PlaybackState.PLAYING,
                PlaybackState.STOPPED,
            },
            PlaybackState.STOPPED: {PlaybackState.LOADING, PlaybackState.IDLE},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_active(self) -> bool:
        return self in {PlaybackState.LOADING, PlaybackState.PLAYING, PlaybackState.PAUSED}

    @property
    def is_playing(self) -> bool:
        return self == PlaybackState.PLAYING


class RepeatMode(Enum):
    """Repeat settings consumed by the skip logic."""

    OFF = "off"
    ONE = "one"  # Replay current track on completion
    ALL = "all"  # Wrap around at the ends of the queue

    def next_mode(self) -> RepeatMode:
        """Cycle to next repeat mode."""
        modes = list(RepeatMode)
        current_index = modes.index(self)
        next_index = (current_index + 1) % len(modes)
        return modes[next_index]


class SkipDirection(Enum):
    NEXT = "next"
    PREVIOUS = "previous"
