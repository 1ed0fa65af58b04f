"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters.
"""

from rivo_player.application.interfaces.backend_client import (
    ArtistStats,
    BackendClient,
    ListenerStats,
)
from rivo_player.application.interfaces.media_player import MediaPlayer
from rivo_player.application.interfaces.notifier import NowPlayingNotifier

__all__ = [
    "ArtistStats",
    "BackendClient",
    "ListenerStats",
    "MediaPlayer",
    "NowPlayingNotifier",
]
