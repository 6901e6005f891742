# SPDX-License-Identifier: Apache-2.0
"""End-to-end dispatch over aiohttp against a stub HTTP API."""
from __future__ import annotations

import argparse
import asyncio
import socket
from contextlib import asynccontextmanager

import pytest
from aiohttp import web

from conftest import GetItem, Item
from wirecall import app as cli
from wirecall.actions.base import Call
from wirecall.actions.dispatcher import Dispatcher, DispatcherConfig
from wirecall.auth import BearerAuth
from wirecall.auth.base import AuthenticationContext
from wirecall.auth.credentials import static
from wirecall.config import load_config
from wirecall.errors import TransportError
from wirecall.result import Failure, Success
from wirecall.transport import AiohttpTransport


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class StubApi:
    """Minimal HTTP API serving /items for tests."""

    def __init__(self):
        self.seen = []
        self.app = web.Application()
        self.app.router.add_get("/items/{item_id}", self._get_item)
        self.app.router.add_delete("/items/{item_id}", self._delete_item)
        self.app.router.add_get("/slow", self._slow)

    async def _get_item(self, request: web.Request) -> web.Response:
        self.seen.append(dict(request.headers))
        if request.headers.get("Authorization") != "Bearer s3cret":
            return web.json_response({"error": "unauthorised"}, status=401)
        item_id = request.match_info["item_id"]
        if item_id == "42":
            return web.Response(text='{"id":42,"name":"widget"}', content_type="application/json")
        if item_id == "broken":
            return web.Response(text="not-json", content_type="application/json")
        return web.Response(text='{"error":"not found"}', status=404, content_type="application/json")

    async def _delete_item(self, request: web.Request) -> web.Response:
        return web.Response(status=204)

    async def _slow(self, request: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.Response(text="late")


@asynccontextmanager
async def serve(api: StubApi):
    runner = web.AppRunner(api.app)
    await runner.setup()
    port = _free_port()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


def _dispatcher(base_url: str, transport: AiohttpTransport, token: str = "s3cret") -> Dispatcher:
    auth = BearerAuth(static(AuthenticationContext(scheme="Bearer", token=token)))
    return Dispatcher(DispatcherConfig(transport=transport, auth=auth, base_url=base_url, name="items"))


@pytest.mark.asyncio
async def test_end_to_end_outcomes():
    api = StubApi()
    async with serve(api) as base_url, AiohttpTransport(timeout_s=5) as transport:
        dispatcher = _dispatcher(base_url, transport)

        ok, missing, broken, denied = await asyncio.gather(
            dispatcher(GetItem(42)),
            dispatcher(GetItem(7)),
            dispatcher(GetItem("broken")),
            _dispatcher(base_url, transport, token="wrong")(GetItem(42)),
        )

    assert ok == Success(Item(id=42, name="widget"))
    assert isinstance(missing, Failure)
    assert (missing.error.method, missing.error.target, missing.error.status) == ("GET", "/items/7", 404)
    assert missing.error.body == '{"error":"not found"}'
    assert broken.error.status == 200 and broken.error.body == "not-json"
    assert denied.error.status == 401
    assert len(api.seen) == 4


@pytest.mark.asyncio
async def test_connection_refused_is_transport_error():
    port = _free_port()
    async with AiohttpTransport(timeout_s=2) as transport:
        dispatcher = _dispatcher(f"http://127.0.0.1:{port}", transport)
        with pytest.raises(TransportError) as info:
            await dispatcher(GetItem(42))
    assert info.value.method == "GET"
    assert info.value.target.endswith("/items/42")


@pytest.mark.asyncio
async def test_timeout_is_transport_error():
    api = StubApi()
    async with serve(api) as base_url, AiohttpTransport(timeout_s=0.2) as transport:
        with pytest.raises(TransportError, match="timeout"):
            await _dispatcher(base_url, transport)(Call(method="GET", target="/slow"))


@pytest.mark.asyncio
async def test_cli_run(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("ITEMS_TOKEN", "s3cret")
    api = StubApi()
    async with serve(api) as base_url:
        path = tmp_path / "connectors.yaml"
        path.write_text(
            "\n".join(
                [
                    "version: 1",
                    "connectors:",
                    "  items:",
                    f"    base_url: {base_url}",
                    "    codec: text",
                    "    auth:",
                    "      type: bearer",
                    "      token_env: ITEMS_TOKEN",
                ]
            )
        )
        config = load_config(path)
        ok = await cli.run(config, cli.parse_args(["--connector", "items", "GET", "/items/42"]))
        missing = await cli.run(config, cli.parse_args(["--connector", "items", "GET", "/items/9"]))

    out, err = capsys.readouterr()
    assert ok == cli.EXIT_SUCCESS
    assert missing == cli.EXIT_REMOTE_FAILURE
    assert '{"id":42,"name":"widget"}' in out
    assert "404" in err


def test_cli_requires_action_or_call():
    args = cli.parse_args(["--connector", "items"])
    assert isinstance(args, argparse.Namespace)
    assert args.method is None and args.action is None
