# SPDX-License-Identifier: Apache-2.0
"""Token based authentication."""
from __future__ import annotations

import base64

from wirecall.errors import ConfigurationError
from wirecall.messages import WireRequest

from .base import AuthStrategy, CredentialsProvider


class BearerAuth(AuthStrategy):
    """``Authorization: <scheme> <token>``.

    The scheme comes from the context, so GitHub's ``token`` prefix and the
    usual ``Bearer`` share one implementation.
    """

    name = "bearer"

    def __init__(self, credentials: CredentialsProvider):
        self._credentials = credentials

    def apply(self, request: WireRequest) -> WireRequest:
        ctx = self._credentials()
        if not ctx.token:
            raise ConfigurationError("bearer authentication requires a token")
        return request.with_header("Authorization", f"{ctx.scheme} {ctx.token}")


class BasicAuth(AuthStrategy):
    name = "basic"

    def __init__(self, credentials: CredentialsProvider):
        self._credentials = credentials

    def apply(self, request: WireRequest) -> WireRequest:
        ctx = self._credentials()
        if ctx.username is None or ctx.password is None:
            raise ConfigurationError("basic authentication requires a username and password")
        encoded = base64.b64encode(f"{ctx.username}:{ctx.password}".encode("utf-8")).decode("ascii")
        return request.with_header("Authorization", f"Basic {encoded}")
