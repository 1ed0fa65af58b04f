"""Local copy of a track's audio, used to retry playback after a stream error."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shutil
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from rivo_player.domain.music.entities import Track
from rivo_player.domain.shared.constants import AudioConstants, HTTPHeaders
from rivo_player.domain.shared.datetime_utils import UtcDateTime
from rivo_player.domain.shared.exceptions import MediaPlayerError
from rivo_player.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)


class LocalCopyFallback:
    """Copies a track's media into the cache directory as ``temp_<millis>.mp3``.

    Remote tracks are streamed with httpx; local paths (plain or ``file://``)
    are copied on a worker thread. File writes never run on the event loop.
    """

    def __init__(
        self,
        cache_dir: Path,
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._cache_dir = cache_dir
        self._timeout = timeout_seconds
        self._transport = transport

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    async def prepare(self, track: Track) -> Path:
        """Copy the track's media locally and return the copy's path.

        Raises:
            MediaPlayerError: If the source is missing or cannot be read.
        """
        if not track.has_path:
            raise MediaPlayerError(ErrorMessages.SOURCE_FILE_MISSING)

        await asyncio.to_thread(self._cache_dir.mkdir, parents=True, exist_ok=True)
        target = self._cache_dir / AudioConstants.TEMP_FILE_TEMPLATE.format(
            millis=UtcDateTime.now().unix_millis
        )

        try:
            if track.is_remote:
                await self._download(track.path, target)
            else:
                await self._copy_local(track.path, target)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                target.unlink()
            raise

        logger.info(LogTemplates.FALLBACK_COPIED, track.title, target)
        return target

    async def _download(self, url: str, target: Path) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={HTTPHeaders.USER_AGENT: HTTPHeaders.USER_AGENT_VALUE},
                transport=self._transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    fh = await asyncio.to_thread(target.open, "wb")
                    try:
                        async for chunk in response.aiter_bytes(AudioConstants.COPY_CHUNK_BYTES):
                            await asyncio.to_thread(fh.write, chunk)
                    finally:
                        await asyncio.to_thread(fh.close)
        except httpx.HTTPError as e:
            raise MediaPlayerError(str(e) or type(e).__name__, uri=url) from e
        except OSError as e:
            raise MediaPlayerError(str(e), uri=url) from e

    async def _copy_local(self, path: str, target: Path) -> None:
        source = Path(unquote(urlparse(path).path)) if path.startswith("file://") else Path(path)
        if not source.is_file():
            raise MediaPlayerError(ErrorMessages.SOURCE_FILE_MISSING, uri=path)

        try:
            await asyncio.to_thread(shutil.copyfile, source, target)
        except OSError as e:
            raise MediaPlayerError(str(e), uri=path) from e

    def clear_cache(self) -> int:
        """Delete leftover temp copies and return how many were removed."""
        if not self._cache_dir.is_dir():
            return 0

        removed = 0
        for path in self._cache_dir.glob(AudioConstants.TEMP_FILE_GLOB):
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning("Could not delete cached file %s: %s", path, e)

        logger.info(LogTemplates.CACHE_CLEARED, removed, self._cache_dir)
        return removed
