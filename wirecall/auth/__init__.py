# SPDX-License-Identifier: Apache-2.0
"""Authentication strategy factory."""
from __future__ import annotations

from typing import Any, Callable, Dict

from wirecall.errors import ConfigurationError

from . import credentials
from .base import AuthenticationContext, AuthStrategy, NoAuth
from .bearer import BasicAuth, BearerAuth
from .sigv4 import AwsSigV4Auth

AUTH_TYPES: dict[str, Callable[[Dict[str, Any]], AuthStrategy]] = {}


def register(auth_type: str, factory: Callable[[Dict[str, Any]], AuthStrategy]) -> None:
    AUTH_TYPES[auth_type] = factory


def create_strategy(auth_type: str, options: Dict[str, Any]) -> AuthStrategy:
    if auth_type not in AUTH_TYPES:
        raise ConfigurationError(f"unknown auth type '{auth_type}'")
    return AUTH_TYPES[auth_type](options)


def _bearer(options: Dict[str, Any]) -> AuthStrategy:
    scheme = options.get("scheme", "Bearer")
    if "token" in options:
        return BearerAuth(credentials.static(AuthenticationContext(scheme=scheme, token=str(options["token"]))))
    if "token_env" not in options:
        raise ConfigurationError("bearer auth needs 'token' or 'token_env'")
    return BearerAuth(credentials.env_token(options["token_env"], scheme=scheme))


def _basic(options: Dict[str, Any]) -> AuthStrategy:
    return BasicAuth(
        credentials.env_basic(
            options.get("username_env", "WIRECALL_USERNAME"),
            options.get("password_env", "WIRECALL_PASSWORD"),
        )
    )


def _aws_sigv4(options: Dict[str, Any]) -> AuthStrategy:
    if "service" not in options:
        raise ConfigurationError("aws_sigv4 auth needs a 'service'")
    return AwsSigV4Auth(credentials.env_aws(options["service"], options.get("region")))


register("none", lambda options: NoAuth())
register("bearer", _bearer)
register("basic", _basic)
register("aws_sigv4", _aws_sigv4)

__all__ = [
    "AUTH_TYPES",
    "AuthStrategy",
    "AuthenticationContext",
    "AwsSigV4Auth",
    "BasicAuth",
    "BearerAuth",
    "NoAuth",
    "create_strategy",
    "register",
]
