"""
Interop with an independent MessagePack implementation.

msgspec is used as the oracle: on the Value subset both sides support
(no float32, no ext types) the bytes must be identical in both directions.
"""
from __future__ import annotations

import pytest

msgspec = pytest.importorskip("msgspec")
hypothesis = pytest.importorskip("hypothesis")

from hypothesis import given, settings  # noqa: E402
from hypothesis import strategies as st  # noqa: E402

from capwire.wire import Float32, encode, unpackb  # noqa: E402

_scalars = (
    st.none()
    | st.booleans()
    | st.integers(min_value=-(2**63), max_value=2**64 - 1)
    | st.floats(allow_nan=False)
    | st.text(max_size=300)
    | st.binary(max_size=300)
)

values = st.recursive(
    _scalars,
    lambda children: st.lists(children, max_size=20)
    | st.dictionaries(st.text(max_size=40), children, max_size=20),
    max_leaves=60,
)


@settings(max_examples=300, deadline=None)
@given(values)
def test_encode_matches_msgspec(v):
    assert encode(v) == msgspec.msgpack.encode(v)


@settings(max_examples=300, deadline=None)
@given(values)
def test_decode_msgspec_output(v):
    assert unpackb(msgspec.msgpack.encode(v)) == v


@settings(max_examples=300, deadline=None)
@given(values)
def test_msgspec_decodes_our_output(v):
    assert msgspec.msgpack.decode(encode(v)) == v


@settings(max_examples=200, deadline=None)
@given(st.floats(width=32, allow_nan=False))
def test_float32_readable_by_msgspec(f):
    assert msgspec.msgpack.decode(encode(Float32(f))) == f


@pytest.mark.parametrize(
    "v",
    [
        2**64 - 1,
        -(2**63),
        "x" * 70000,
        b"\x00" * 70000,
        list(range(70000)),
        {str(i): i for i in range(70000)},
    ],
)
def test_wide_headers_match_msgspec(v):
    assert encode(v) == msgspec.msgpack.encode(v)
