"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across the package is defined here once,
so models can simply annotate their fields::

    from rivo_player.domain.shared.types import NonEmptyStr, PositionSeconds

    class MyModel(BaseModel):
        title: NonEmptyStr
        position: PositionSeconds
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackTitleStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track title: 1-500 characters."""


# ── Domain-specific numeric constraints ─────────────────────────────

DurationSeconds = Annotated[float, Field(ge=0.0, le=86_400.0)]
"""Track duration in seconds: 0 … 86 400 (24 hours)."""

PositionSeconds = Annotated[float, Field(ge=0.0)]
"""Playback position in seconds."""

QueueIndexInt = Annotated[int, Field(ge=0)]
"""Zero-based queue index."""


# ── Datetime constraints ────────────────────────────────────────────

def _ensure_utc(v: datetime) -> datetime:
    """Validate that a datetime is timezone-aware and normalise to UTC."""
    if v.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return v.astimezone(UTC)


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input."""
