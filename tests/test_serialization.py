# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import pytest

from wirecall.errors import ConfigurationError, DecodeError
from wirecall.serialization import Base64Codec, FormCodec, JsonCodec, RawCodec, TextCodec, get_codec


def test_json_codec_uses_explicit_conversion_functions():
    codec = JsonCodec(lambda d: (d["a"], d["b"]), lambda t: {"a": t[0], "b": t[1]})

    assert codec.encode((1, "two")) == b'{"a":1,"b":"two"}'
    assert codec.decode(b'{"b": "two", "a": 1}') == (1, "two")


def test_json_codec_escapes_instead_of_concatenating():
    body = JsonCodec().encode({"message": 'say "hi"\n'})

    assert body == b'{"message":"say \\"hi\\"\\n"}'


@pytest.mark.parametrize("data", [b"not-json", b"", b"{", b'{"a": 1}'])
def test_json_codec_decode_errors(data):
    codec = JsonCodec(lambda d: d["missing"])
    with pytest.raises(DecodeError):
        codec.decode(data)


def test_json_codec_wraps_attribute_errors_from_conversion():
    codec = JsonCodec(lambda d: d.get("Attributes"))
    with pytest.raises(DecodeError):
        codec.decode(b"[]")


def test_form_codec():
    codec = FormCodec()
    assert codec.encode({"Action": "ListUsers", "tags": ["a", "b"]}) == b"Action=ListUsers&tags=a&tags=b"
    assert codec.decode(b"a=1&b=") == {"a": "1", "b": ""}
    with pytest.raises(DecodeError):
        codec.decode(b"no-equals-sign")


def test_text_raw_and_base64_codecs():
    assert TextCodec().decode("zażółć".encode("utf-8")) == "zażółć"
    with pytest.raises(DecodeError):
        TextCodec().decode(b"\xff")
    assert RawCodec().decode(b"\x00\x01") == b"\x00\x01"
    assert Base64Codec().decode(Base64Codec().encode(b"\x00bin")) == b"\x00bin"
    with pytest.raises(DecodeError):
        Base64Codec().decode(b"***")


def test_codec_registry():
    assert get_codec("JSON").content_type == "application/json"
    assert get_codec("aws-json").content_type == "application/x-amz-json-1.1"
    with pytest.raises(ConfigurationError):
        get_codec("msgpack")
