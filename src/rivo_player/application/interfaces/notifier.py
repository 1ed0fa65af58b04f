"""Port interface for the OS notification service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import Track


class NowPlayingNotifier(ABC):
    """Interface for rendering the now-playing notification."""

    @abstractmethod
    def show_now_playing(self, track: "Track", is_playing: bool) -> None:
        """Show or update the notification; ``is_playing`` makes it ongoing."""
        ...

    @abstractmethod
    def cancel_all(self) -> None:
        ...
