# SPDX-License-Identifier: Apache-2.0
"""Helpers for the command line runner."""
from __future__ import annotations

import importlib
from typing import Dict, Iterable, Type

from wirecall.actions.base import Action

CONNECTOR_PACKAGE = "wirecall.connectors"


def _split(qualname: str) -> tuple[str, str]:
    if ":" in qualname:
        module_name, _, attr = qualname.partition(":")
        return module_name, attr
    module_name, _, attr = qualname.rpartition(".")
    if not module_name:
        raise ValueError(f"'{qualname}' must name a module and a class, e.g. github.GetCommit")
    if not module_name.startswith("wirecall."):
        module_name = f"{CONNECTOR_PACKAGE}.{module_name}"
    return module_name, attr


def resolve_action(qualname: str) -> Type[Action]:
    """Resolve an action class from a dotted path.

    ``github.GetCommit`` is looked up under ``wirecall.connectors``; any other
    module can be named as ``package.module:ClassName``.
    """
    module_name, attr = _split(qualname)
    module = importlib.import_module(module_name)
    try:
        target = getattr(module, attr)
    except AttributeError as exc:
        raise AttributeError(f"'{attr}' not found in module '{module_name}'") from exc
    if not (isinstance(target, type) and issubclass(target, Action)):
        raise TypeError(f"'{qualname}' is not an action class")
    return target


def parse_params(items: Iterable[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"expected key=value, got '{item}'")
        params[key] = value
    return params
