"""Port interface for the OS media layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

CompletionCallback = Callable[[], Awaitable[None]]
ErrorCallback = Callable[[str], Awaitable[None]]


class MediaPlayer(ABC):
    """Interface for loading a URI and controlling its playback."""

    @abstractmethod
    async def load(self, uri: str) -> None:
        """Load a URI, replacing whatever was loaded before. Raises MediaPlayerError."""
        ...

    @abstractmethod
    async def play(self) -> None:
        ...

    @abstractmethod
    async def pause(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop playback and unload the current media."""
        ...

    @abstractmethod
    async def seek(self, position_seconds: float) -> None:
        ...

    @abstractmethod
    def position(self) -> float:
        """Current playback position in seconds."""
        ...

    @abstractmethod
    def duration(self) -> float | None:
        """Duration of the loaded media in seconds, if known."""
        ...

    @abstractmethod
    def is_playing(self) -> bool:
        ...

    @abstractmethod
    def set_on_completion_callback(self, callback: CompletionCallback) -> None:
        """Set callback for when the loaded media plays to the end."""
        ...

    @abstractmethod
    def set_on_error_callback(self, callback: ErrorCallback) -> None:
        """Set callback for when the loaded media fails to play."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying player."""
        ...
