"""Audio playback adapters."""

from rivo_player.infrastructure.audio.local_copy import LocalCopyFallback
from rivo_player.infrastructure.audio.mpv_player import MpvMediaPlayer

__all__ = [
    "LocalCopyFallback",
    "MpvMediaPlayer",
]
