from __future__ import annotations

import asyncio
import logging

import aiohttp

logger = logging.getLogger(__name__)

_USER_AGENT = "flutter-interview-linkcheck/2026 (+https://github.com)"


class AiohttpLinkProbe:
    """Probe external URLs with HEAD, falling back to GET for hosts that reject HEAD.

    Implements the ``LinkProbe`` protocol.
    """

    def __init__(self, timeout: float = 10.0) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout, headers={"User-Agent": _USER_AGENT})
        return self._session

    async def check(self, url: str) -> int | str:
        session = self._get_session()
        try:
            async with session.head(url, allow_redirects=True) as response:
                status = response.status
            if status >= 400:
                async with session.get(url, allow_redirects=True) as response:
                    status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.debug("Probe failed for %s: %r", url, exc)
            return str(exc) or type(exc).__name__
        return status

    async def close(self) -> None:
        if self._session is None:
            return
        await self._session.close()
        self._session = None
