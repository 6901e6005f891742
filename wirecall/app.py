"""Command line runner dispatching a single action."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Optional

from prometheus_client import start_http_server

from wirecall.actions.base import Action, Call
from wirecall.actions.dispatcher import Dispatcher
from wirecall.config import WirecallConfig, build_dispatcher, load_config
from wirecall.errors import ConfigurationError, TransportError
from wirecall.result import Failure
from wirecall.transport import Transport
from wirecall.utils import parse_params, resolve_action

log = logging.getLogger("wirecall")

EXIT_SUCCESS = 0
EXIT_REMOTE_FAILURE = 1
EXIT_TRANSPORT_ERROR = 2
EXIT_CONFIG_ERROR = 3


def build_action(args: argparse.Namespace, dispatcher: Dispatcher) -> Action[Any]:
    if args.action:
        try:
            factory = resolve_action(args.action)
            params = parse_params(args.param)
        except (ImportError, AttributeError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"bad --action: {exc}") from exc
        try:
            return factory(**params)
        except TypeError as exc:
            raise ConfigurationError(f"cannot build {args.action} from {sorted(params)}: {exc}") from exc
    if not args.method or not args.target:
        raise ConfigurationError("either --action or METHOD TARGET is required")
    body = args.data.encode("utf-8") if args.data is not None else None
    return Call(method=args.method, target=args.target, body=body, codec=dispatcher.config.codec)


def _render(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        return value
    return repr(value) if value is not None else "ok"


async def run(config: WirecallConfig, args: argparse.Namespace, *, transport: Optional[Transport] = None) -> int:
    dispatcher = build_dispatcher(config.connector(args.connector), transport=transport)
    try:
        action = build_action(args, dispatcher)
        result = await dispatcher(action)
    finally:
        close = getattr(dispatcher.config.transport, "close", None)
        if close is not None:
            await close()
    if isinstance(result, Failure):
        print(str(result.error), file=sys.stderr)
        return EXIT_REMOTE_FAILURE
    print(_render(result.value))
    return EXIT_SUCCESS


async def main_async(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    if config.metrics_port:
        start_http_server(config.metrics_port)
    try:
        return await run(config, args)
    except TransportError as exc:
        log.error("%s", exc)
        return EXIT_TRANSPORT_ERROR


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dispatch one action against a configured connector")
    parser.add_argument("--config", default="config/connectors.yaml")
    parser.add_argument("--connector", required=True)
    parser.add_argument("--action", help="dotted path to an action class, e.g. github.GetCommit")
    parser.add_argument("--param", action="append", default=[], help="action field as key=value")
    parser.add_argument("--data", help="request body for METHOD TARGET calls")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("method", nargs="?")
    parser.add_argument("target", nargs="?")
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        code = asyncio.run(main_async(args))
    except ConfigurationError as exc:
        log.error("configuration error: %s", exc)
        code = EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
