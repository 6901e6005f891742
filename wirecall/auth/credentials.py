# SPDX-License-Identifier: Apache-2.0
"""Credential providers reading the process environment on every call."""
from __future__ import annotations

import os
from typing import Mapping, Optional

from wirecall.errors import ConfigurationError

from .base import AuthenticationContext, CredentialsProvider


def static(context: AuthenticationContext) -> CredentialsProvider:
    return lambda: context


def env_token(var: str, *, scheme: str = "Bearer", environ: Optional[Mapping[str, str]] = None) -> CredentialsProvider:
    def provider() -> AuthenticationContext:
        env = os.environ if environ is None else environ
        token = env.get(var, "").strip()
        if not token:
            raise ConfigurationError(f"environment variable {var} is not set")
        return AuthenticationContext(scheme=scheme, token=token)

    return provider


def env_basic(
    username_var: str, password_var: str, *, environ: Optional[Mapping[str, str]] = None
) -> CredentialsProvider:
    def provider() -> AuthenticationContext:
        env = os.environ if environ is None else environ
        missing = [var for var in (username_var, password_var) if var not in env]
        if missing:
            raise ConfigurationError(f"environment variables not set: {', '.join(missing)}")
        return AuthenticationContext(scheme="Basic", username=env[username_var], password=env[password_var])

    return provider


def env_aws(
    service: str,
    region: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> CredentialsProvider:
    """AWS keys from the standard ``AWS_*`` variables.

    ``region`` falls back to ``AWS_REGION`` then ``AWS_DEFAULT_REGION``.
    """

    def provider() -> AuthenticationContext:
        env = os.environ if environ is None else environ
        access_key = env.get("AWS_ACCESS_KEY_ID")
        secret_key = env.get("AWS_SECRET_ACCESS_KEY")
        if not access_key or not secret_key:
            raise ConfigurationError("AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set")
        resolved_region = region or env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION")
        if not resolved_region:
            raise ConfigurationError(f"no region configured for AWS service '{service}'")
        return AuthenticationContext(
            scheme="AWS4-HMAC-SHA256",
            access_key_id=access_key,
            secret_access_key=secret_key,
            session_token=env.get("AWS_SESSION_TOKEN") or None,
            service=service,
            region=resolved_region,
        )

    return provider
