# SPDX-License-Identifier: Apache-2.0
"""Authentication strategies decorate a built request with credentials."""
from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Callable, Optional

from wirecall.messages import WireRequest


@dataclass(frozen=True, slots=True)
class AuthenticationContext:
    """Credential material resolved from the environment at dispatch time."""

    scheme: str
    token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token: Optional[str] = None
    service: Optional[str] = None
    region: Optional[str] = None

    def __repr__(self) -> str:
        return f"AuthenticationContext(scheme={self.scheme!r}, service={self.service!r}, region={self.region!r})"


CredentialsProvider = Callable[[], AuthenticationContext]


class AuthStrategy(abc.ABC):
    """Adds or overrides authentication headers; never removes anything else."""

    name = "abstract"

    @abc.abstractmethod
    def apply(self, request: WireRequest) -> WireRequest:  # pragma: no cover - interface
        raise NotImplementedError


class NoAuth(AuthStrategy):
    name = "none"

    def apply(self, request: WireRequest) -> WireRequest:
        return request
