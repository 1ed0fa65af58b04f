"""
Music Context

Domain logic for tracks, the play queue and listening-time accounting.
"""

from rivo_player.domain.music.entities import LedgerEntry, PlayQueue, Track
from rivo_player.domain.music.listening import ListeningSession, Observation
from rivo_player.domain.music.repository import PlayLedgerRepository, TrackRepository
from rivo_player.domain.music.value_objects import PlaybackState, RepeatMode, TrackId

__all__ = [
    # Entities
    "Track",
    "PlayQueue",
    "LedgerEntry",
    # Value Objects
    "TrackId",
    "PlaybackState",
    "RepeatMode",
    # Listening
    "ListeningSession",
    "Observation",
    # Repositories
    "TrackRepository",
    "PlayLedgerRepository",
]
