# SPDX-License-Identifier: Apache-2.0
"""Turn completed responses into results.

These helpers never raise for a completed response: a non-2xx status and an
undecodable 2xx body both end up as ``Failure(RemoteFailure)``.
"""
from __future__ import annotations

import logging
from typing import Optional, TypeVar, Union

from yarl import URL

from .errors import DecodeError
from .messages import WireResponse
from .result import Failure, RemoteFailure, Result, Success
from .serialization import Codec

log = logging.getLogger(__name__)

T = TypeVar("T")


def as_remote_failure(
    method: str, target: Union[str, URL], response: WireResponse, message: Optional[str] = None
) -> RemoteFailure:
    return RemoteFailure(
        method=method.upper(),
        target=str(target),
        status=response.status,
        body=response.text(),
        message=message,
        raw=response.body,
    )


def classify(method: str, target: Union[str, URL], response: WireResponse) -> Optional[RemoteFailure]:
    """Return a failure for any status outside 2xx, ``None`` otherwise."""
    if response.successful:
        return None
    return as_remote_failure(method, target, response)


def decode_with(
    codec: Codec[T],
    method: str,
    target: Union[str, URL],
    response: WireResponse,
    *,
    empty_body: Optional[bytes] = None,
) -> Result[T, RemoteFailure]:
    """Decode a successful body with ``codec``.

    ``empty_body`` substitutes for a zero-length success body (some gateways
    answer ``200`` with nothing where an empty object is meant).
    """
    failure = classify(method, target, response)
    if failure is not None:
        return Failure(failure)
    data = response.body
    if not data and empty_body is not None:
        data = empty_body
    try:
        return Success(codec.decode(data))
    except DecodeError as exc:
        log.warning("undecodable %s response from %s %s: %s", response.status, method, target, exc)
        return Failure(as_remote_failure(method, target, response, message=str(exc)))


def no_content(method: str, target: Union[str, URL], response: WireResponse) -> Result[None, RemoteFailure]:
    failure = classify(method, target, response)
    if failure is not None:
        return Failure(failure)
    return Success(None)
