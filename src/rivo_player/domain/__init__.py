# ruff: noqa: N999
"""
Domain Layer

Contains pure playback logic organized by context:
- shared/: Cross-cutting types, exceptions, messages and the event bus
- music/: Track, play queue and listening-time domain logic
"""

from rivo_player.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
