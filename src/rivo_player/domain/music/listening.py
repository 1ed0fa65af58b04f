"""Listening-time accounting for the play-count heuristic.

A play is only counted after the listener has accumulated a threshold of
*real* playback. Every observation compares the wall-clock time elapsed since
the previous observation with how far the playback position moved:

- delta within ``tolerance`` of elapsed time  -> genuine playback, accumulated
- any other jump (forward or backward)       -> a seek, ignored
- not playing                                -> nothing accumulated

Each observation becomes the baseline for the next one, so a seek only
discards the interval in which it happened.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rivo_player.domain.music.value_objects import TrackId


class Observation(Enum):
    """How a single observation was classified."""

    ACCUMULATED = "accumulated"
    SEEK = "seek"
    IDLE = "idle"


@dataclass
class ListeningSession:
    """Per-track listening state; discarded whenever the current track changes."""

    track_id: TrackId
    threshold_seconds: float
    tolerance_seconds: float
    accumulated_seconds: float = 0.0
    last_position: float | None = None
    last_tick: float | None = None
    counted: bool = False
    seeks_detected: int = 0

    @property
    def should_report(self) -> bool:
        return not self.counted and self.accumulated_seconds >= self.threshold_seconds

    def rebase(self, now: float, position: float) -> None:
        """Move the baseline without accumulating anything."""
        self.last_tick = now
        self.last_position = position

    def observe(self, now: float, position: float, is_playing: bool) -> Observation:
        """Classify the interval since the previous observation and accumulate it if genuine."""
        if self.last_tick is None or self.last_position is None:
            self.rebase(now, position)
            return Observation.IDLE

        elapsed = now - self.last_tick
        delta = position - self.last_position
        self.rebase(now, position)

        if not is_playing or elapsed <= 0:
            return Observation.IDLE

        if abs(delta - elapsed) > self.tolerance_seconds:
            self.seeks_detected += 1
            return Observation.SEEK

        if delta > 0:
            self.accumulated_seconds += delta
        return Observation.ACCUMULATED

    def mark_counted(self) -> None:
        self.counted = True
