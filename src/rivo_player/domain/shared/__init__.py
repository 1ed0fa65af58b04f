"""
Shared Domain Kernel

Contains exceptions, constrained types and the event bus shared across the package.
"""

from rivo_player.domain.shared.exceptions import (
    BackendError,
    DomainError,
    InvalidOperationError,
    MediaPlayerError,
)

__all__ = [
    "DomainError",
    "InvalidOperationError",
    "BackendError",
    "MediaPlayerError",
]
