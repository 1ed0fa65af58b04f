"""httpx-based client for the Rivo REST backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from rivo_player.application.interfaces.backend_client import (
    ArtistStats,
    BackendClient,
    ListenerStats,
)
from rivo_player.config.settings import BackendSettings
from rivo_player.domain.music.entities import Track
from rivo_player.domain.music.value_objects import TrackId
from rivo_player.domain.shared.constants import BackendRoutes, HTTPHeaders
from rivo_player.domain.shared.exceptions import BackendError
from rivo_player.domain.shared.messages import ErrorMessages, LogTemplates
from rivo_player.infrastructure.api.models import (
    ArtistStatsPayload,
    ListenerStatsPayload,
    MusicPayload,
    PlayCountPayload,
)

logger = logging.getLogger(__name__)


class HttpBackendClient(BackendClient):
    def __init__(
        self,
        settings: BackendSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or BackendSettings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client

        headers = {
            HTTPHeaders.ACCEPT: HTTPHeaders.JSON,
            HTTPHeaders.USER_AGENT: HTTPHeaders.USER_AGENT_VALUE,
        }
        token = self._settings.token.get_secret_value()
        if token:
            headers[HTTPHeaders.AUTHORIZATION] = HTTPHeaders.BEARER.format(token=token)

        self._client = httpx.AsyncClient(
            base_url=self._settings.base_url,
            headers=headers,
            timeout=self._settings.timeout_seconds,
            transport=self._transport,
        )
        logger.info(
            LogTemplates.BACKEND_CLIENT_INITIALIZED,
            self._settings.base_url,
            self._settings.timeout_seconds,
        )
        return self._client

    async def _request(self, method: str, path: str) -> httpx.Response:
        client = self._get_client()
        logger.debug(LogTemplates.BACKEND_REQUEST, method, path)
        try:
            response = await client.request(method, path)
        except httpx.HTTPError as e:
            raise BackendError(
                ErrorMessages.BACKEND_UNREACHABLE.format(reason=e.__class__.__name__)
            ) from e
        return response

    def _raise_for_status(self, response: httpx.Response, path: str) -> None:
        if response.is_error:
            raise BackendError(
                ErrorMessages.BACKEND_STATUS.format(status=response.status_code, path=path),
                status_code=response.status_code,
            )

    def _parse(self, response: httpx.Response, path: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(
                ErrorMessages.BACKEND_BAD_PAYLOAD.format(path=path),
                status_code=response.status_code,
            ) from e

    async def fetch_track(self, track_id: TrackId) -> Track | None:
        path = BackendRoutes.MUSIC_BY_ID.format(track_id=track_id.value)
        response = await self._request("GET", path)
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        self._raise_for_status(response, path)

        try:
            payload = MusicPayload.model_validate(self._parse(response, path))
        except PydanticValidationError as e:
            raise BackendError(ErrorMessages.BACKEND_BAD_PAYLOAD.format(path=path)) from e
        return payload.to_domain()

    async def report_play(self, track_id: TrackId) -> int:
        path = BackendRoutes.MUSIC_PLAY.format(track_id=track_id.value)
        response = await self._request("POST", path)
        self._raise_for_status(response, path)

        try:
            payload = PlayCountPayload.model_validate(self._parse(response, path))
        except PydanticValidationError as e:
            raise BackendError(ErrorMessages.BACKEND_BAD_PAYLOAD.format(path=path)) from e
        return payload.plays

    async def fetch_artist_stats(self) -> ArtistStats:
        path = BackendRoutes.ARTIST_STATS
        response = await self._request("GET", path)
        self._raise_for_status(response, path)

        try:
            payload = ArtistStatsPayload.model_validate(self._parse(response, path))
        except PydanticValidationError as e:
            raise BackendError(ErrorMessages.BACKEND_BAD_PAYLOAD.format(path=path)) from e
        return payload.to_domain()

    async def fetch_listener_stats(self, user_id: str) -> ListenerStats:
        path = BackendRoutes.LISTENER_STATS.format(user_id=user_id)
        response = await self._request("GET", path)
        self._raise_for_status(response, path)

        try:
            payload = ListenerStatsPayload.model_validate(self._parse(response, path))
        except PydanticValidationError as e:
            raise BackendError(ErrorMessages.BACKEND_BAD_PAYLOAD.format(path=path)) from e
        return payload.to_domain(user_id)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
