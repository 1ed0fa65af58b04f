"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class BackendError(DomainError):
    """Raised when the Rivo backend cannot serve a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, code="BACKEND_ERROR")
        self.status_code = status_code

    @property
    def is_retryable(self) -> bool:
        # Transport failures carry no status; 5xx and 429 are transient.
        if self.status_code is None:
            return True
        return self.status_code >= 500 or self.status_code == 429


class MediaPlayerError(DomainError):
    """Raised when the media layer fails to load or control a stream."""

    def __init__(self, message: str, uri: str | None = None) -> None:
        super().__init__(message, code="MEDIA_PLAYER_ERROR")
        self.uri = uri
