"""
Catalog types: every registered schema round-trips its sample through the
wire, plus the helpers carried by individual domains.
"""
from __future__ import annotations

import json

import pytest

from capwire.errors import SchemaMismatch
from capwire.registry import default_registry
from capwire.schema.core import (CapabilityDescriptor, Empty, OperationDescriptor,
                                 OperationDirection)
from capwire.schema.http import HttpResponse
from capwire.wire import encode, unpackb


def _schemas():
    seen = {}
    for op in default_registry().operations():
        seen.setdefault(op.request.__name__, op.request)
        seen.setdefault(op.response.__name__, op.response)
    return sorted(seen.items())


@pytest.mark.parametrize("name, schema", _schemas(), ids=[n for n, _ in _schemas()])
def test_sample_roundtrips_through_wire(name, schema):
    sample = schema.sample()
    data = encode(sample.to_value())
    assert schema.from_value(unpackb(data)) == sample
    # encoding is a function of the value alone
    assert encode(schema.from_value(unpackb(data)).to_value()) == data


def test_empty_encodes_as_empty_map():
    assert encode(Empty().to_value()) == b"\x80"
    assert Empty.from_value({"anything": 1}) == Empty()


def test_descriptor_uses_snake_case_keys():
    v = CapabilityDescriptor.sample().to_value()
    assert list(v) == [
        "id",
        "name",
        "version",
        "revision",
        "long_description",
        "supported_operations",
    ]
    assert v["supported_operations"] == [
        {"name": "KeyValue.Get", "direction": "to_provider", "doctext": "Retrieve a value"}
    ]


def test_descriptor_fields_all_defaulted():
    assert CapabilityDescriptor.from_value({}) == CapabilityDescriptor()


def test_descriptor_builder_is_immutable():
    base = CapabilityDescriptor.builder().id("capwire:test").name("Test")
    a = base.with_operation("Test.A", OperationDirection.TO_ACTOR, "a").build()
    b = base.with_operation("Test.B", OperationDirection.BOTH, "b").build()
    assert [o.name for o in a.supported_operations] == ["Test.A"]
    assert [o.name for o in b.supported_operations] == ["Test.B"]
    assert base.build().supported_operations == []
    assert a.id == b.id == "capwire:test"


def test_operation_direction_rejects_unknown():
    with pytest.raises(SchemaMismatch):
        OperationDescriptor.from_value({"name": "X.Y", "direction": "sideways"})


def test_http_response_json():
    resp = HttpResponse.json({"a": 1, "b": [True]}, status=201, reason="Created")
    assert resp.status == 201
    assert resp.headers == {"content-type": "application/json"}
    assert json.loads(resp.body) == {"a": 1, "b": [True]}
    assert resp.body == b'{"a":1,"b":[true]}'


@pytest.mark.parametrize(
    "resp, status",
    [
        (HttpResponse.ok(), 200),
        (HttpResponse.not_found(), 404),
        (HttpResponse.bad_request(), 400),
        (HttpResponse.internal_server_error("boom"), 500),
    ],
)
def test_http_response_helpers(resp, status):
    assert resp.status == status
    assert HttpResponse.from_value(resp.to_value()) == resp


def test_internal_server_error_carries_message():
    assert HttpResponse.internal_server_error("boom").body == b"boom"
