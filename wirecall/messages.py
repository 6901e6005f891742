# SPDX-License-Identifier: Apache-2.0
"""Wire-level request and response envelopes shared by actions and transports."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from multidict import CIMultiDict, CIMultiDictProxy
from yarl import URL

HeaderInput = Union[Mapping[str, str], Iterable[Tuple[str, str]], None]


def _freeze_headers(headers: HeaderInput) -> CIMultiDictProxy[str]:
    if isinstance(headers, CIMultiDictProxy):
        return headers
    return CIMultiDictProxy(CIMultiDict(headers or ()))


@dataclass(frozen=True, slots=True)
class WireRequest:
    """One outgoing HTTP request.

    Immutable: every helper returns a new request, so a request can be shared
    between concurrent dispatches and authentication strategies cannot mutate
    what an action built.
    """

    method: str
    target: URL
    headers: CIMultiDictProxy[str] = field(default_factory=lambda: _freeze_headers(None))
    body: Optional[bytes] = None

    @classmethod
    def of(
        cls,
        method: str,
        target: Union[str, URL],
        headers: HeaderInput = None,
        body: Optional[bytes] = None,
    ) -> "WireRequest":
        return cls(
            method=method.upper(),
            target=target if isinstance(target, URL) else URL(target),
            headers=_freeze_headers(headers),
            body=ensure_bytes(body) if body is not None else None,
        )

    def with_header(self, name: str, value: str) -> "WireRequest":
        """Set ``name`` to a single value, replacing any existing values."""
        headers = CIMultiDict(self.headers)
        headers[name] = value
        return replace(self, headers=CIMultiDictProxy(headers))

    def add_header(self, name: str, value: str) -> "WireRequest":
        headers = CIMultiDict(self.headers)
        headers.add(name, value)
        return replace(self, headers=CIMultiDictProxy(headers))

    def with_default_headers(self, defaults: Mapping[str, str]) -> "WireRequest":
        """Add each default header the request does not already carry."""
        missing = [(k, v) for k, v in defaults.items() if k not in self.headers]
        if not missing:
            return self
        headers = CIMultiDict(self.headers)
        headers.extend(missing)
        return replace(self, headers=CIMultiDictProxy(headers))

    def with_body(self, body: Optional[bytes]) -> "WireRequest":
        return replace(self, body=ensure_bytes(body) if body is not None else None)

    def with_target(self, target: Union[str, URL]) -> "WireRequest":
        return replace(self, target=target if isinstance(target, URL) else URL(target))


@dataclass(frozen=True, slots=True)
class WireResponse:
    status: int
    headers: CIMultiDictProxy[str] = field(default_factory=lambda: _freeze_headers(None))
    body: bytes = b""

    @classmethod
    def of(cls, status: int, body: Union[bytes, str] = b"", headers: HeaderInput = None) -> "WireResponse":
        if isinstance(body, str):
            body = body.encode("utf-8")
        return cls(status=int(status), headers=_freeze_headers(headers), body=ensure_bytes(body))

    @property
    def successful(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def ensure_bytes(data: Any) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, bytearray):
        return bytes(data)
    raise TypeError(f"cannot convert {type(data)} to bytes")
