# SPDX-License-Identifier: Apache-2.0
"""Action primitives: one declarative operation against a remote API."""
from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

from wirecall.classifier import decode_with, no_content
from wirecall.messages import WireRequest, WireResponse
from wirecall.result import RemoteFailure, Result
from wirecall.serialization import Codec, RawCodec

R = TypeVar("R")


class Action(abc.ABC, Generic[R]):
    """Builds exactly one request and interprets its response.

    Concrete actions are frozen dataclasses, so ``build_request`` depends only
    on the action's own fields and an action may be dispatched many times.
    """

    @abc.abstractmethod
    def build_request(self) -> WireRequest:  # pragma: no cover - interface
        raise NotImplementedError

    @abc.abstractmethod
    def decode_response(self, response: WireResponse) -> Result[R, RemoteFailure]:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(frozen=True)
class Call(Action[Any]):
    """Ad hoc action used by the CLI and for endpoints without a typed action."""

    method: str
    target: str
    body: Optional[bytes] = None
    headers: Dict[str, str] = field(default_factory=dict)
    codec: Codec = field(default_factory=RawCodec)
    expect_content: bool = True

    def build_request(self) -> WireRequest:
        headers = dict(self.headers)
        if self.body is not None:
            headers.setdefault("Content-Type", self.codec.content_type)
        return WireRequest.of(self.method, self.target, headers, self.body)

    def decode_response(self, response: WireResponse) -> Result[Any, RemoteFailure]:
        if not self.expect_content:
            return no_content(self.method, self.target, response)
        return decode_with(self.codec, self.method, self.target, response)
