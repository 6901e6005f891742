"""HTTP transports executing wire requests."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp

from .errors import TransportError
from .messages import WireRequest, WireResponse

log = logging.getLogger(__name__)

Transport = Callable[[WireRequest], Awaitable[WireResponse]]


class AiohttpTransport:
    """Sends requests over one lazily created ``aiohttp.ClientSession``.

    Safe to share between concurrent dispatches. Timeouts belong here, not to
    the dispatcher.
    """

    def __init__(self, *, timeout_s: float = 30.0, session_options: Optional[Dict[str, Any]] = None):
        self.timeout_s = timeout_s
        self.session_options = session_options or {}
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()

    async def _ensure(self) -> aiohttp.ClientSession:
        async with self._lock:
            if self._session is not None and not self._session.closed:
                return self._session
            timeout = aiohttp.ClientTimeout(total=self.timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout, **self.session_options)
            return self._session

    async def __call__(self, request: WireRequest) -> WireResponse:
        session = await self._ensure()
        try:
            async with session.request(
                request.method,
                request.target,
                headers=request.headers,
                data=request.body,
                allow_redirects=False,
            ) as resp:
                body = await resp.read()
                return WireResponse(status=resp.status, headers=resp.headers, body=body)
        except asyncio.TimeoutError as exc:
            log.error("%s %s timed out after %ss", request.method, request.target, self.timeout_s)
            raise TransportError(request.method, str(request.target), "timeout") from exc
        except aiohttp.ClientError as exc:
            log.error("%s %s transport failure: %s", request.method, request.target, exc)
            raise TransportError(request.method, str(request.target), str(exc) or type(exc).__name__) from exc

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "AiohttpTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
