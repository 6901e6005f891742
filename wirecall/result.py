# SPDX-License-Identifier: Apache-2.0
"""Two-variant outcome of a completed dispatch."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, TypeVar, Union

from .errors import RemoteFailureError

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class RemoteFailure:
    """Evidence of a call that completed without producing a usable value.

    ``body`` is the response text as received, decoded as UTF-8; ``raw`` keeps
    the exact bytes for bodies that are not valid UTF-8. ``message`` is only
    set when a success-range response could not be decoded.
    """

    method: str
    target: str
    status: int
    body: str
    message: Optional[str] = None
    raw: bytes = field(default=b"", compare=False, repr=False)

    @property
    def is_decode_failure(self) -> bool:
        return 200 <= self.status < 300

    def __str__(self) -> str:
        detail = f" ({self.message})" if self.message else ""
        return f"{self.method} {self.target} -> {self.status}{detail}: {self.body[:200]}"


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True

    def map(self, fn: Callable[[T], U]) -> "Success[U]":
        return Success(fn(self.value))

    def success_value(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure(Generic[E]):
    error: E

    @property
    def is_success(self) -> bool:
        return False

    def map(self, fn: Callable[..., object]) -> "Failure[E]":
        return self

    def success_value(self):
        raise RemoteFailureError(self.error)


Result = Union[Success[T], Failure[E]]
