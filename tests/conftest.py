# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures for dispatch tests."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from wirecall.actions.base import Action
from wirecall.auth.base import AuthenticationContext
from wirecall.classifier import decode_with
from wirecall.messages import WireRequest, WireResponse
from wirecall.result import RemoteFailure, Result
from wirecall.serialization import JsonCodec


class StubTransport:
    """Transport used in tests to capture requests and replay canned responses."""

    def __init__(self, *responses: WireResponse, error: Optional[Exception] = None):
        self._responses = list(responses)
        self._error = error
        self.requests: List[WireRequest] = []

    async def __call__(self, request: WireRequest) -> WireResponse:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]

    @property
    def calls(self) -> int:
        return len(self.requests)


@dataclass(frozen=True, slots=True)
class Item:
    id: int
    name: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Item":
        return cls(id=int(data["id"]), name=str(data["name"]))


@dataclass(frozen=True)
class GetItem(Action[Item]):
    item_id: int
    codec = JsonCodec(Item.from_json)

    @property
    def target(self) -> str:
        return f"/items/{self.item_id}"

    def build_request(self) -> WireRequest:
        return WireRequest.of("GET", self.target)

    def decode_response(self, response: WireResponse) -> Result[Item, RemoteFailure]:
        return decode_with(self.codec, "GET", self.target, response)


class Clock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> Clock:
    return Clock(datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def aws_context() -> AuthenticationContext:
    return AuthenticationContext(
        scheme="AWS4-HMAC-SHA256",
        access_key_id="AKIDEXAMPLE",
        secret_access_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
        service="s3",
        region="eu-west-1",
    )
