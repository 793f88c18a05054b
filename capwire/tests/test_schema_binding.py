"""
Field binding between schema types and wire Values: presence rules, key
naming, width checks and error paths.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from capwire.errors import InvalidValue, RangeError, SchemaMismatch
from capwire.schema.base import ANY, F32, F64, STR, Message, wire
from capwire.schema.blobstore import UploadChunk
from capwire.schema.eventstreams import Event, StreamQuery, StreamResults, TimeRange
from capwire.schema.extras import RandomRequest
from capwire.schema.http import HttpRequest
from capwire.schema.keyvalue import (AtomicOp, GetRequest, GetResponse, ListRangeRequest,
                                     SetRequest, SetUnionRequest)
from capwire.schema.logs import LogEntry, LogLevel
from capwire.schema.messaging import PublishMessage, RequestMessage
from capwire.wire import Float32, encode, unpackb


@dataclass(frozen=True, kw_only=True)
class _Reading(Message):
    ratio: float = wire(F32)
    mean: float = wire(F64, default=0.0)


@dataclass(frozen=True, kw_only=True)
class _Note(Message):
    tag: str = wire(STR)
    extra: Any = wire(ANY, optional=True)


# ----------------------------
# Presence
# ----------------------------


def test_unknown_keys_are_ignored():
    v = {"key": "a", "value": b"\x01", "expires": 0, "addedLater": [1, 2]}
    assert SetRequest.from_value(v) == SetRequest(key="a", value=b"\x01")


def test_missing_optional_binds_to_none():
    assert GetResponse.from_value({"exists": True}) == GetResponse(exists=True)


def test_nil_optional_binds_to_none():
    msg = PublishMessage.from_value({"subject": "s", "replyTo": None})
    assert msg.reply_to is None
    assert msg.body == b""


def test_absent_optional_is_omitted_on_encode():
    assert PublishMessage(subject="s").to_value() == {"subject": "s", "body": b""}
    assert GetResponse(exists=False).to_value() == {"exists": False}


def test_missing_required_field():
    with pytest.raises(SchemaMismatch) as ei:
        GetResponse.from_value({"value": b"x"})
    assert ei.value.field == "GetResponse.exists"
    assert ei.value.schema == "GetResponse"


def test_nil_is_not_a_required_value():
    with pytest.raises(SchemaMismatch):
        GetRequest.from_value({"key": None})


def test_missing_defaulted_fields_take_defaults():
    req = HttpRequest.from_value({"method": "GET", "path": "/"})
    assert req.query_string == ""
    assert req.headers == {}
    assert req.body == b""


def test_nil_is_not_a_defaulted_value():
    with pytest.raises(SchemaMismatch):
        HttpRequest.from_value({"method": "GET", "path": "/", "body": None})


@pytest.mark.parametrize("value", [None, [], "key", b"\x80", 3])
def test_top_level_must_be_a_mapping(value):
    with pytest.raises(SchemaMismatch):
        GetRequest.from_value(value)


# ----------------------------
# Kinds
# ----------------------------


def test_bool_is_not_an_integer():
    with pytest.raises(SchemaMismatch):
        SetRequest.from_value({"key": "a", "value": b"", "expires": True})
    with pytest.raises(SchemaMismatch):
        GetResponse.from_value({"exists": 1})


def test_str_is_not_bytes():
    with pytest.raises(SchemaMismatch):
        SetRequest.from_value({"key": "a", "value": "text"})
    with pytest.raises(SchemaMismatch):
        GetRequest.from_value({"key": b"a"})


def test_integer_is_not_a_float():
    with pytest.raises(SchemaMismatch):
        _Reading.from_value({"ratio": 1})


@pytest.mark.parametrize(
    "schema, value, field",
    [
        (SetRequest, {"key": "a", "value": b"", "expires": 2**32}, "SetRequest.expires"),
        (SetRequest, {"key": "a", "value": b"", "expires": -1}, "SetRequest.expires"),
        (RandomRequest, {"min": 0, "max": 2**32}, "RandomRequest.max"),
        (AtomicOp, {"key": "n", "delta": 2**63}, "AtomicOp.delta"),
        (ListRangeRequest, {"key": "l", "start": -(2**31) - 1, "stop": 0}, "ListRangeRequest.start"),
    ],
)
def test_integer_outside_declared_width(schema, value, field):
    with pytest.raises(RangeError) as ei:
        schema.from_value(value)
    assert ei.value.field == field


def test_integer_width_boundaries_accepted():
    assert SetRequest.from_value({"key": "a", "value": b"", "expires": 2**32 - 1}).expires == 2**32 - 1
    assert AtomicOp.from_value({"key": "n", "delta": -(2**63)}).delta == -(2**63)


def test_width_checked_on_encode_too():
    with pytest.raises(RangeError):
        SetRequest(key="a", value=b"", expires=-1).to_value()


def test_f32_field_narrows_to_float32():
    v = _Reading(ratio=0.5, mean=0.1).to_value()
    assert isinstance(v["ratio"], Float32)
    assert encode(v["ratio"]) == b"\xca\x3f\x00\x00\x00"
    assert encode(v["mean"])[:1] == b"\xcb"


def test_f32_field_rejects_lossy_values():
    with pytest.raises(RangeError):
        _Reading(ratio=0.1).to_value()
    with pytest.raises(RangeError):
        _Reading(ratio=1e300).to_value()


def test_list_field_requires_list():
    with pytest.raises(SchemaMismatch) as ei:
        SetUnionRequest(keys=("a", "b")).to_value()
    assert ei.value.field == "SetUnionRequest.keys"
    msg = SetUnionRequest(keys=["a", "b"])
    assert SetUnionRequest.from_value(unpackb(encode(msg.to_value()))) == msg


def test_any_field_carries_arbitrary_values():
    note = _Note(tag="t", extra={"n": [1, None, b"x", {"deep": Float32(0.5)}]})
    assert _Note.from_value(unpackb(encode(note.to_value()))) == note
    assert _Note.from_value({"tag": "t"}).extra is None
    assert _Note.describe()[1]["kind"] == "any"


def test_any_field_still_validated_by_codec():
    with pytest.raises(InvalidValue):
        encode(_Note(tag="t", extra=object()).to_value())


def test_enum_field():
    assert LogEntry(level=LogLevel.WARN, text="x").to_value() == {"level": "warn", "text": "x"}
    assert LogEntry.from_value({"level": "error", "text": "x"}).level is LogLevel.ERROR


def test_enum_field_rejects_unknown_member():
    with pytest.raises(SchemaMismatch) as ei:
        LogEntry.from_value({"level": "unknown-value", "text": "x"})
    assert ei.value.field == "LogEntry.level"


def test_nested_error_path():
    with pytest.raises(SchemaMismatch) as ei:
        StreamResults.from_value({"events": [{"eventId": "1", "stream": 5}]})
    assert ei.value.field == "StreamResults.events[0].stream"
    assert ei.value.schema == "StreamResults"


def test_map_item_error_path():
    with pytest.raises(SchemaMismatch) as ei:
        HttpRequest.from_value({"method": "GET", "path": "/", "headers": {"accept": 1}})
    assert ei.value.field == "HttpRequest.headers.accept"


def test_nested_struct_roundtrip():
    q = StreamQuery(stream_id="s", range=TimeRange(min_time=1, max_time=2), count=10)
    assert StreamQuery.from_value(q.to_value()) == q
    assert StreamQuery.from_value({"streamId": "s", "count": 1}).range is None


# ----------------------------
# Wire keys
# ----------------------------


def test_keys_are_camel_case_in_declaration_order():
    msg = PublishMessage(subject="s", reply_to="r", body=b"b")
    assert list(msg.to_value()) == ["subject", "replyTo", "body"]
    assert list(Event.sample().to_value()) == ["eventId", "stream", "payload", "values"]


def test_explicit_wire_keys():
    assert "timeout" in RequestMessage.sample().to_value()
    assert list(UploadChunk.sample().to_value()) == ["uploadId", "chunkIndex", "bytes"]


def test_describe_lists_field_layout():
    assert SetRequest.describe() == [
        {"field": "key", "key": "key", "kind": "str", "presence": "required"},
        {"field": "value", "key": "value", "kind": "bytes", "presence": "required"},
        {"field": "expires", "key": "expires", "kind": "u32", "presence": "defaulted"},
    ]


def test_schema_types_are_immutable():
    msg = GetRequest(key="a")
    with pytest.raises(AttributeError):
        msg.key = "b"  # type: ignore[misc]
