# SPDX-License-Identifier: Apache-2.0
"""Exception types raised by the dispatch layer.

Remote failures are values (see :mod:`wirecall.result`); only misconfiguration,
transport problems and explicit unwrapping raise.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .result import RemoteFailure


class WirecallError(Exception):
    """Base exception for wirecall."""


class ConfigurationError(WirecallError):
    """Raised before any network call when credentials or settings are missing."""


class TransportError(WirecallError):
    """Raised when no response was received (connect refused, timeout, TLS)."""

    def __init__(self, method: str, target: str, reason: str):
        super().__init__(f"{method} {target} failed: {reason}")
        self.method = method
        self.target = target
        self.reason = reason


class DecodeError(WirecallError):
    """Raised by a codec when bytes cannot be turned into the expected payload."""


class RemoteFailureError(WirecallError):
    """Raised by ``success_value()`` when a result holds a failure."""

    def __init__(self, failure: "RemoteFailure"):
        super().__init__(str(failure))
        self.failure = failure
