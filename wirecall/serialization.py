# SPDX-License-Identifier: Apache-2.0
"""Codecs converting typed payloads to and from wire bytes.

Each payload type declares its own pair of functions; nothing here inspects
types at runtime.
"""
from __future__ import annotations

import base64
import json
from typing import Any, Callable, Dict, Generic, Mapping, Protocol, TypeVar
from urllib.parse import parse_qsl, urlencode

from .errors import ConfigurationError, DecodeError

T = TypeVar("T")


class Codec(Protocol[T]):
    content_type: str

    def encode(self, value: T) -> bytes:  # pragma: no cover - interface
        ...

    def decode(self, data: bytes) -> T:  # pragma: no cover - interface
        ...


def _identity(value: Any) -> Any:
    return value


class JsonCodec(Generic[T]):
    """JSON text with explicit conversion functions for the payload type.

    ``from_json`` receives the parsed document and may raise ``AttributeError``,
    ``KeyError``, ``TypeError`` or ``ValueError`` on a shape mismatch; those become
    :class:`DecodeError`.
    """

    def __init__(
        self,
        from_json: Callable[[Any], T] = _identity,
        to_json: Callable[[T], Any] = _identity,
        *,
        content_type: str = "application/json",
    ):
        self.from_json = from_json
        self.to_json = to_json
        self.content_type = content_type

    def encode(self, value: T) -> bytes:
        return json.dumps(self.to_json(value), separators=(",", ":")).encode("utf-8")

    def decode(self, data: bytes) -> T:
        try:
            document = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeError(f"invalid JSON: {exc}") from exc
        try:
            return self.from_json(document)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise DecodeError(f"unexpected JSON shape: {exc!r}") from exc


class FormCodec:
    content_type = "application/x-www-form-urlencoded"

    def encode(self, value: Mapping[str, Any]) -> bytes:
        return urlencode(list(value.items()), doseq=True).encode("utf-8")

    def decode(self, data: bytes) -> Dict[str, str]:
        try:
            return dict(parse_qsl(data.decode("utf-8"), keep_blank_values=True, strict_parsing=bool(data)))
        except (UnicodeDecodeError, ValueError) as exc:
            raise DecodeError(f"invalid form body: {exc}") from exc


class TextCodec:
    content_type = "text/plain; charset=utf-8"

    def encode(self, value: str) -> bytes:
        return value.encode("utf-8")

    def decode(self, data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"body is not UTF-8: {exc}") from exc


class RawCodec:
    content_type = "application/octet-stream"

    def encode(self, value: bytes) -> bytes:
        return bytes(value)

    def decode(self, data: bytes) -> bytes:
        return data


class Base64Codec:
    """Bytes carried as base64 text, as some gateways return binary records."""

    content_type = "text/plain"

    def encode(self, value: bytes) -> bytes:
        return base64.b64encode(value)

    def decode(self, data: bytes) -> bytes:
        try:
            return base64.b64decode(data, validate=True)
        except ValueError as exc:
            raise DecodeError(f"invalid base64: {exc}") from exc


CODECS: dict[str, Callable[[], Codec]] = {}


def register(name: str, factory: Callable[[], Codec]) -> None:
    CODECS[name] = factory


def get_codec(name: str) -> Codec:
    fmt = name.lower()
    if fmt not in CODECS:
        raise ConfigurationError(f"unknown codec '{name}'")
    return CODECS[fmt]()


register("json", JsonCodec)
register("aws-json", lambda: JsonCodec(content_type="application/x-amz-json-1.1"))
register("form", FormCodec)
register("text", TextCodec)
register("raw", RawCodec)
register("base64", Base64Codec)
