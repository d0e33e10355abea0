"""
HTTP transport used by the session client.

The transport is the only component that talks to the network.  It
sends one request and hands back an ``ApiResponse`` whatever the status
code; deciding what a status means is left to the classifier.  When no
response can be obtained at all (DNS failure, refused connection,
timeout) it raises ``TransportError``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Mapping, Optional

import aiohttp

from ..errors import TransportError
from ..models import ApiResponse

logger = logging.getLogger(__name__)


class Transport:
    """Abstract transport."""

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        payload: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> ApiResponse:  # pragma: no cover - override
        raise NotImplementedError

    async def close(self) -> None:
        return None


class AiohttpTransport(Transport):
    """Transport backed by a shared ``aiohttp.ClientSession``.

    The session is created lazily on first use so the transport can be
    constructed outside a running event loop.  A session passed in by the
    caller is used as-is and left open on ``close()``.
    """

    def __init__(self, *, timeout: float = 30.0, session: Optional[aiohttp.ClientSession] = None) -> None:
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            self._owns_session = True
        return self._session

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        payload: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> ApiResponse:
        body = json.dumps(payload) if payload is not None else None
        session = self._get_session()
        try:
            async with session.request(method, url, headers=dict(headers), data=body, params=params) as resp:
                text = await resp.text(errors="replace")
                return ApiResponse(
                    status=resp.status,
                    payload=_decode(text),
                    headers=dict(resp.headers),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.debug("%s %s failed without a response: %r", method, url, exc)
            raise TransportError(f"{method} {url} failed: {exc!r}") from exc

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()


def _decode(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        # Avoid carrying large non-JSON bodies around; truncate
        return text[:200]


__all__ = ["Transport", "AiohttpTransport"]
