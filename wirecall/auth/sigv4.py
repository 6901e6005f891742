# SPDX-License-Identifier: Apache-2.0
"""AWS Signature Version 4 request signing.

The signature covers the method, path, sorted query, every header present on
the request (plus ``host`` and ``x-amz-date``) and the SHA-256 of the body. The
timestamp comes from an injectable clock so that signing is reproducible in
tests while real dispatches always carry a fresh ``X-Amz-Date``.
"""
from __future__ import annotations

import hashlib
import hmac
import logging
from datetime import datetime, timezone
from typing import Callable, List, Tuple
from urllib.parse import quote, unquote

from yarl import URL

from wirecall.errors import ConfigurationError
from wirecall.messages import WireRequest

from .base import AuthenticationContext, AuthStrategy, CredentialsProvider

log = logging.getLogger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"
UNSIGNED_HEADERS = {"authorization", "user-agent", "expect"}

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def _uri_encode(value: str) -> str:
    return quote(value, safe="-_.~")


def _host_header(url: URL) -> str:
    host = url.raw_host or ""
    if url.port is not None and not url.is_default_port():
        return f"{host}:{url.port}"
    return host


def canonical_path(url: URL, *, double_encode: bool = False) -> str:
    """Re-encode each path segment; every service except S3 wants it encoded twice."""
    segments = [_uri_encode(unquote(segment)) for segment in (url.raw_path or "/").split("/")]
    if double_encode:
        segments = [_uri_encode(segment) for segment in segments]
    return "/".join(segments) or "/"


def canonical_query(url: URL) -> str:
    # Parsed from the raw query: a literal "+" is signed as %2B, never as a space.
    pairs = []
    for part in url.raw_query_string.split("&"):
        if not part:
            continue
        key, _, value = part.partition("=")
        pairs.append((_uri_encode(unquote(key)), _uri_encode(unquote(value))))
    return "&".join(f"{k}={v}" for k, v in sorted(pairs))


def canonical_headers(request: WireRequest) -> Tuple[str, str]:
    """Return (canonical header block, signed header list)."""
    grouped: dict[str, List[str]] = {}
    for name, value in request.headers.items():
        key = name.lower()
        if key in UNSIGNED_HEADERS:
            continue
        grouped.setdefault(key, []).append(" ".join(value.strip().split()))
    names = sorted(grouped)
    block = "".join(f"{name}:{','.join(grouped[name])}\n" for name in names)
    return block, ";".join(names)


def canonical_request(
    request: WireRequest, payload_hash: str, *, double_encode_path: bool = False
) -> Tuple[str, str]:
    header_block, signed = canonical_headers(request)
    parts = [
        request.method,
        canonical_path(request.target, double_encode=double_encode_path),
        canonical_query(request.target),
        header_block,
        signed,
        payload_hash,
    ]
    return "\n".join(parts), signed


def signing_key(secret: str, date_stamp: str, region: str, service: str) -> bytes:
    k_date = _hmac(f"AWS4{secret}".encode("utf-8"), date_stamp)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, service)
    return _hmac(k_service, "aws4_request")


class AwsSigV4Auth(AuthStrategy):
    name = "aws_sigv4"

    def __init__(self, credentials: CredentialsProvider, *, clock: Clock = utc_now):
        self._credentials = credentials
        self._clock = clock

    def apply(self, request: WireRequest) -> WireRequest:
        ctx = self._credentials()
        _require(ctx)
        now = self._clock().astimezone(timezone.utc)
        amz_date = now.strftime("%Y%m%dT%H%M%SZ")
        date_stamp = now.strftime("%Y%m%d")
        payload_hash = _sha256_hex(request.body or b"")

        signed = request.with_header("Host", _host_header(request.target)).with_header("X-Amz-Date", amz_date)
        if ctx.service == "s3":
            signed = signed.with_header("X-Amz-Content-Sha256", payload_hash)
        if ctx.session_token:
            signed = signed.with_header("X-Amz-Security-Token", ctx.session_token)

        creq, signed_headers = canonical_request(signed, payload_hash, double_encode_path=ctx.service != "s3")
        scope = f"{date_stamp}/{ctx.region}/{ctx.service}/aws4_request"
        string_to_sign = "\n".join([ALGORITHM, amz_date, scope, _sha256_hex(creq.encode("utf-8"))])
        key = signing_key(ctx.secret_access_key, date_stamp, ctx.region, ctx.service)
        signature = hmac.new(key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()
        log.debug("signed %s %s scope=%s headers=%s", request.method, request.target, scope, signed_headers)
        return signed.with_header(
            "Authorization",
            f"{ALGORITHM} Credential={ctx.access_key_id}/{scope}, SignedHeaders={signed_headers}, Signature={signature}",
        )


def _require(ctx: AuthenticationContext) -> None:
    missing = [
        name
        for name in ("access_key_id", "secret_access_key", "service", "region")
        if not getattr(ctx, name)
    ]
    if missing:
        raise ConfigurationError(f"AWS signing requires {', '.join(missing)}")
