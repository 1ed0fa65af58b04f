"""Rivo backend REST client."""

from rivo_player.infrastructure.api.http_client import HttpBackendClient

__all__ = [
    "HttpBackendClient",
]
