"""
Envelope codec: encode/decode keyed by operation name, over every operation
in the catalog.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from capwire import (CodecError, EnvelopeCodec, InvalidValue, MalformedInput,
                     RangeError, SchemaMismatch, UnknownOperation,
                     decode_request, decode_response, encode_request,
                     encode_response)
from capwire.config import CodecLimits, Config
from capwire.registry import OperationRegistry, default_registry
from capwire.schema.core import Empty
from capwire.schema.http import HttpResponse
from capwire.schema.keyvalue import GetRequest, GetResponse, SetRequest
from capwire.schema.logs import LogEntry, LogLevel
from capwire.wire import encode

OPERATIONS = default_registry().names()

SET_BYTES = b"\x83\xa3key\xa1a\xa5value\xc4\x03\x01\x02\x03\xa7expires\x00"


def test_keyvalue_set_request_bytes():
    data = encode_request("KeyValue.Set", SetRequest(key="a", value=b"\x01\x02\x03"))
    assert data == SET_BYTES
    assert decode_request("KeyValue.Set", data) == SetRequest(key="a", value=b"\x01\x02\x03")


@pytest.mark.parametrize("name", OPERATIONS)
def test_request_roundtrip(name):
    op = default_registry().resolve(name)
    value = op.request.sample()
    assert decode_request(name, encode_request(name, value)) == value


@pytest.mark.parametrize("name", OPERATIONS)
def test_response_roundtrip(name):
    op = default_registry().resolve(name)
    value = op.response.sample()
    assert decode_response(name, encode_response(name, value)) == value


@pytest.mark.parametrize("name", OPERATIONS)
def test_truncated_payload_is_malformed(name):
    op = default_registry().resolve(name)
    request = encode_request(name, op.request.sample())
    response = encode_response(name, op.response.sample())
    with pytest.raises(MalformedInput):
        decode_request(name, request[:-1])
    with pytest.raises(MalformedInput):
        decode_response(name, response[:-1])


def test_unknown_enum_member_is_schema_mismatch():
    data = encode({"level": "unknown-value", "text": "x"})
    with pytest.raises(SchemaMismatch):
        decode_request("Logging.WriteLog", data)


def test_log_entry_roundtrip():
    entry = LogEntry(level=LogLevel.DEBUG, text="hello")
    assert encode_request("Logging.WriteLog", entry) == b"\x82\xa5level\xa5debug\xa4text\xa5hello"


def test_wrong_schema_type_on_encode():
    with pytest.raises(SchemaMismatch):
        encode_request("KeyValue.Set", GetRequest(key="a"))
    with pytest.raises(SchemaMismatch):
        encode_response("KeyValue.Get", Empty())
    with pytest.raises(SchemaMismatch):
        encode_request("KeyValue.Get", {"key": "a"})  # type: ignore[arg-type]


def test_out_of_width_field_is_range_error():
    data = encode({"key": "a", "value": b"", "expires": 2**32})
    with pytest.raises(RangeError):
        decode_request("KeyValue.Set", data)


def test_forward_compatible_decode():
    data = encode({"exists": True, "value": b"v", "ttl": 30, "meta": {"a": [1]}})
    assert decode_response("KeyValue.Get", data) == GetResponse(value=b"v", exists=True)


def test_well_formed_but_wrong_shape():
    with pytest.raises(SchemaMismatch):
        decode_request("KeyValue.Get", encode(["key"]))
    with pytest.raises(MalformedInput):
        decode_request("KeyValue.Get", b"\xc1")


def test_unknown_operation():
    with pytest.raises(UnknownOperation):
        encode_request("KeyValue.Nope", GetRequest(key="a"))
    with pytest.raises(UnknownOperation):
        decode_response("Nope", b"\x80")


def test_codec_with_private_registry_and_limits():
    reg = OperationRegistry()
    reg.register("Test.Set", SetRequest, Empty)
    reg.freeze()
    codec = EnvelopeCodec(reg, Config(limits=CodecLimits(max_payload_bytes=1024)))

    assert codec.decode_request("Test.Set", SET_BYTES) == SetRequest(key="a", value=b"\x01\x02\x03")
    big = encode_request("KeyValue.Set", SetRequest(key="a", value=b"\x00" * 4096))
    with pytest.raises(MalformedInput):
        codec.decode_request("Test.Set", big)
    with pytest.raises(UnknownOperation):
        codec.decode_request("KeyValue.Set", SET_BYTES)


def test_oversized_payload_rejected_on_encode():
    codec = EnvelopeCodec(config=Config(limits=CodecLimits(max_payload_bytes=1024)))
    with pytest.raises(RangeError) as ei:
        codec.encode_request("KeyValue.Set", SetRequest(key="a", value=b"\x00" * 2048))
    assert ei.value.kind == "payload"

    body = b"\x00" * (17 * 1024 * 1024)
    with pytest.raises(RangeError):
        encode_response("HttpServer.HandleRequest", HttpResponse(status=200, body=body))


def test_payload_at_limit_roundtrips():
    codec = EnvelopeCodec(config=Config(limits=CodecLimits(max_payload_bytes=1024)))
    # map header + "key" + "a" + "value" + bin16 header, "expires" + 0
    overhead = 1 + 4 + 2 + 6 + 3 + 8 + 1
    msg = SetRequest(key="a", value=b"\x00" * (1024 - overhead))
    data = codec.encode_request("KeyValue.Set", msg)
    assert len(data) == 1024
    assert codec.decode_request("KeyValue.Set", data) == msg


def test_unencodable_string_is_a_codec_error():
    with pytest.raises(InvalidValue):
        encode_request("KeyValue.Get", GetRequest(key="\ud800"))
    with pytest.raises(CodecError):
        encode_request("Logging.WriteLog", LogEntry(level=LogLevel.INFO, text="bad \udfff"))


def test_shared_codec_across_threads():
    codec = EnvelopeCodec()
    names = list(OPERATIONS) * 8

    def _roundtrip(name):
        op = codec.registry.resolve(name)
        data = codec.encode_request(name, op.request.sample())
        return name, data, codec.decode_request(name, data)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(_roundtrip, names))

    expected = {
        name: encode_request(name, default_registry().resolve(name).request.sample())
        for name in OPERATIONS
    }
    for name, data, decoded in results:
        assert data == expected[name]
        assert decoded == default_registry().resolve(name).request.sample()
