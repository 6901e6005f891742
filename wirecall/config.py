"""Configuration loader for connector dispatchers."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .actions.dispatcher import Dispatcher, DispatcherConfig
from .auth import create_strategy
from .errors import ConfigurationError
from .serialization import get_codec
from .transport import AiohttpTransport, Transport


@dataclass(slots=True)
class AuthConfig:
    type: str = "none"
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ConnectorConfig:
    name: str
    base_url: Optional[str] = None
    codec: str = "json"
    timeout_s: float = 30.0
    headers: Dict[str, str] = field(default_factory=dict)
    auth: AuthConfig = field(default_factory=AuthConfig)


@dataclass(slots=True)
class WirecallConfig:
    version: int
    connectors: Dict[str, ConnectorConfig]
    metrics_port: int = 0

    def connector(self, name: str) -> ConnectorConfig:
        if name not in self.connectors:
            raise ConfigurationError(f"connector '{name}' is not configured")
        return self.connectors[name]


def _parse_auth(data: Dict[str, Any] | None) -> AuthConfig:
    if not data:
        return AuthConfig()
    if not isinstance(data, dict):
        raise ConfigurationError("auth must be a mapping")
    return AuthConfig(type=data.get("type", "none"), options={k: v for k, v in data.items() if k != "type"})


def _parse_connectors(items: Dict[str, Any]) -> Dict[str, ConnectorConfig]:
    connectors: Dict[str, ConnectorConfig] = {}
    for name, payload in items.items():
        if not isinstance(payload, dict):
            raise ConfigurationError(f"connector '{name}' must be a mapping")
        connectors[name] = ConnectorConfig(
            name=name,
            base_url=payload.get("base_url"),
            codec=payload.get("codec", "json"),
            timeout_s=float(payload.get("timeout_s", 30.0)),
            headers={str(k): str(v) for k, v in (payload.get("headers") or {}).items()},
            auth=_parse_auth(payload.get("auth")),
        )
    return connectors


def load_config(path: str | Path) -> WirecallConfig:
    raw = yaml.safe_load(Path(path).read_text()) or {}
    version = int(raw.get("version", 1))
    connectors = _parse_connectors(raw.get("connectors", {}) or {})
    metrics_port = int(raw.get("metrics_port", 0))
    return WirecallConfig(version=version, connectors=connectors, metrics_port=metrics_port)


def build_dispatcher(cfg: ConnectorConfig, *, transport: Transport | None = None) -> Dispatcher:
    """Create a dispatcher for one configured connector.

    Strategy and codec errors surface here as :class:`ConfigurationError`;
    missing credentials surface on the first dispatch.
    """
    return Dispatcher(
        DispatcherConfig(
            transport=transport or AiohttpTransport(timeout_s=cfg.timeout_s),
            auth=create_strategy(cfg.auth.type, cfg.auth.options),
            base_url=cfg.base_url,
            headers=dict(cfg.headers),
            codec=get_codec(cfg.codec),
            name=cfg.name,
        )
    )
