"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite cache and play ledger)
- Backend (httpx REST client)
- Audio (libmpv through python-mpv, local-copy fallback)
- Notifications
"""

from rivo_player.infrastructure.api.http_client import HttpBackendClient
from rivo_player.infrastructure.audio.mpv_player import MpvMediaPlayer
from rivo_player.infrastructure.persistence.database import Database

__all__ = [
    "HttpBackendClient",
    "MpvMediaPlayer",
    "Database",
]
