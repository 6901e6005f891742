# SPDX-License-Identifier: Apache-2.0
"""Dispatcher behaviour: one attempt, auth before send, two error channels."""
from __future__ import annotations

import pytest

from conftest import GetItem, Item, StubTransport
from wirecall.actions.base import Call
from wirecall.actions.dispatcher import Dispatcher, DispatcherConfig
from wirecall.auth import BearerAuth
from wirecall.auth.base import AuthenticationContext
from wirecall.auth.credentials import env_token, static
from wirecall.errors import ConfigurationError, TransportError
from wirecall.messages import WireResponse
from wirecall.result import Failure, RemoteFailure, Success
from wirecall.serialization import TextCodec


def _dispatcher(transport, **kwargs) -> Dispatcher:
    auth = BearerAuth(static(AuthenticationContext(scheme="Bearer", token="s3cret")))
    return Dispatcher(DispatcherConfig(transport=transport, auth=auth, **kwargs))


@pytest.mark.asyncio
async def test_token_auth_success():
    transport = StubTransport(WireResponse.of(200, '{"id":42,"name":"widget"}'))
    result = await _dispatcher(transport)(GetItem(42))

    assert result == Success(Item(id=42, name="widget"))
    request = transport.requests[0]
    assert request.method == "GET"
    assert str(request.target) == "/items/42"
    assert request.body is None
    assert request.headers["authorization"] == "Bearer s3cret"


@pytest.mark.asyncio
async def test_remote_rejection():
    transport = StubTransport(WireResponse.of(404, '{"error":"not found"}'))
    result = await _dispatcher(transport)(GetItem(42))

    assert result == Failure(RemoteFailure(method="GET", target="/items/42", status=404, body='{"error":"not found"}'))


@pytest.mark.asyncio
async def test_malformed_success_body_is_a_failure():
    transport = StubTransport(WireResponse.of(200, "not-json"))
    result = await _dispatcher(transport)(GetItem(42))

    assert isinstance(result, Failure)
    assert result.error.status == 200
    assert result.error.body == "not-json"
    assert result.error.is_decode_failure
    assert result.error.message


@pytest.mark.asyncio
async def test_exactly_one_transport_call_even_on_failure():
    transport = StubTransport(WireResponse.of(503, "busy"), WireResponse.of(200, '{"id":1,"name":"x"}'))
    result = await _dispatcher(transport)(GetItem(1))

    assert not result.is_success
    assert transport.calls == 1


@pytest.mark.asyncio
async def test_transport_error_propagates_without_decoding(monkeypatch):
    transport = StubTransport(error=TransportError("GET", "/items/42", "connection refused"))
    decoded = []
    monkeypatch.setattr(GetItem, "decode_response", lambda self, response: decoded.append(response))

    with pytest.raises(TransportError):
        await _dispatcher(transport)(GetItem(42))
    assert decoded == []
    assert transport.calls == 1


@pytest.mark.asyncio
async def test_missing_credentials_fail_before_any_network_call(monkeypatch):
    monkeypatch.delenv("WIRECALL_TEST_TOKEN", raising=False)
    transport = StubTransport(WireResponse.of(200, "{}"))
    dispatcher = Dispatcher(DispatcherConfig(transport=transport, auth=BearerAuth(env_token("WIRECALL_TEST_TOKEN"))))

    with pytest.raises(ConfigurationError):
        await dispatcher(GetItem(42))
    assert transport.calls == 0


@pytest.mark.asyncio
async def test_credentials_are_read_at_dispatch_time(monkeypatch):
    transport = StubTransport(WireResponse.of(200, '{"id":1,"name":"a"}'))
    dispatcher = Dispatcher(DispatcherConfig(transport=transport, auth=BearerAuth(env_token("WIRECALL_TEST_TOKEN"))))

    monkeypatch.setenv("WIRECALL_TEST_TOKEN", "first")
    await dispatcher(GetItem(1))
    monkeypatch.setenv("WIRECALL_TEST_TOKEN", "second")
    await dispatcher(GetItem(1))

    assert [r.headers["Authorization"] for r in transport.requests] == ["Bearer first", "Bearer second"]


@pytest.mark.asyncio
async def test_base_url_and_default_headers():
    transport = StubTransport(WireResponse.of(200, '{"id":7,"name":"b"}'))
    dispatcher = _dispatcher(
        transport,
        base_url="https://api.example.com/v1/",
        headers={"Accept": "application/json", "X-Trace": "default"},
    )
    action = Call(method="GET", target="/items/7?expand=true", headers={"X-Trace": "explicit"})

    await dispatcher(action)
    request = transport.requests[0]
    assert str(request.target) == "https://api.example.com/v1/items/7?expand=true"
    assert request.headers["Accept"] == "application/json"
    assert request.headers.getall("X-Trace") == ["explicit"]


@pytest.mark.asyncio
async def test_encoded_query_is_sent_as_built():
    transport = StubTransport(WireResponse.of(200, '{"id":1,"name":"a"}'))
    dispatcher = _dispatcher(transport, base_url="https://api.example.com")

    await dispatcher(Call(method="GET", target="/search?q=a%26b&x=1%2B2"))
    request = transport.requests[0]
    assert str(request.target) == "https://api.example.com/search?q=a%26b&x=1%2B2"
    assert request.target.query["q"] == "a&b"
    assert request.target.query["x"] == "1+2"


@pytest.mark.asyncio
async def test_failure_keeps_action_target_not_resolved_url():
    transport = StubTransport(WireResponse.of(500, "boom"))
    result = await _dispatcher(transport, base_url="https://api.example.com")(GetItem(42))

    assert result.error.target == "/items/42"
    assert str(transport.requests[0].target) == "https://api.example.com/items/42"


@pytest.mark.asyncio
async def test_call_action_uses_codec_and_no_content_mode():
    transport = StubTransport(WireResponse.of(200, "hello"), WireResponse.of(204, ""))
    dispatcher = _dispatcher(transport)

    text = await dispatcher(Call(method="post", target="/echo", body=b"hi", codec=TextCodec()))
    gone = await dispatcher(Call(method="DELETE", target="/echo/1", expect_content=False))

    assert text == Success("hello")
    assert gone == Success(None)
    assert transport.requests[0].method == "POST"
    assert transport.requests[0].headers["Content-Type"] == TextCodec.content_type


@pytest.mark.asyncio
async def test_actions_are_reusable():
    transport = StubTransport(WireResponse.of(200, '{"id":3,"name":"c"}'))
    dispatcher = _dispatcher(transport)
    action = GetItem(3)

    first = await dispatcher(action)
    second = await dispatcher(action)

    assert first == second
    assert transport.requests[0] == transport.requests[1]
