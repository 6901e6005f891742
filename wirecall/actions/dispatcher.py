"""Dispatcher running one action end to end."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, TypeVar

from yarl import URL

from wirecall.auth import AuthStrategy, NoAuth
from wirecall.errors import TransportError
from wirecall.messages import WireRequest
from wirecall.metrics import DISPATCH_LATENCY, DISPATCH_TOTAL, TRANSPORT_ERRORS
from wirecall.result import RemoteFailure, Result
from wirecall.serialization import Codec, RawCodec
from wirecall.transport import Transport

from .base import Action

log = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class DispatcherConfig:
    """Everything a dispatcher needs, passed in explicitly.

    ``codec`` is the connector's wire format for untyped :class:`Call` actions;
    typed actions carry their own.
    """

    transport: Transport
    auth: AuthStrategy = field(default_factory=NoAuth)
    base_url: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    codec: Codec = field(default_factory=RawCodec)
    name: str = "default"


class Dispatcher:
    def __init__(self, config: DispatcherConfig):
        self.config = config
        self._base = URL(config.base_url) if config.base_url else None

    @property
    def name(self) -> str:
        return self.config.name

    def prepare(self, action: Action[R]) -> WireRequest:
        """Build and authenticate the request ``action`` would send."""
        request = action.build_request()
        if self._base is not None and not request.target.is_absolute():
            request = request.with_target(_join(self._base, request.target))
        if self.config.headers:
            request = request.with_default_headers(self.config.headers)
        return self.config.auth.apply(request)

    async def __call__(self, action: Action[R]) -> Result[R, RemoteFailure]:
        request = self.prepare(action)
        log.debug("dispatching %s %s via %s", request.method, request.target, self.name)
        start = time.perf_counter()
        try:
            response = await self.config.transport(request)
        except TransportError:
            TRANSPORT_ERRORS.labels(self.name).inc()
            raise
        DISPATCH_LATENCY.labels(self.name).observe((time.perf_counter() - start) * 1000)
        result = action.decode_response(response)
        if result.is_success:
            DISPATCH_TOTAL.labels(self.name, "success").inc()
        else:
            DISPATCH_TOTAL.labels(self.name, "failure").inc()
            log.warning("%s: %s", self.name, result.error)
        return result


def _join(base: URL, target: URL) -> URL:
    path = base.raw_path.rstrip("/") + "/" + target.raw_path.lstrip("/")
    return URL.build(
        scheme=base.scheme,
        authority=base.raw_authority,
        path=path,
        query_string=target.raw_query_string,
        encoded=True,
    )
