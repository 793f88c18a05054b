"""
capwire.wire
------------

Primitive codec for the Value space (nil, bool, int, float32/64, str, bytes,
sequences, string-keyed mappings).

Public API:
- encode(value) -> bytes             : deterministic, shortest-width encoder
- decode(data, offset) -> (value, n) : strict decoder, reports bytes consumed
- unpackb(data) -> value             : decode exactly one Value
- Float32, ValueKind, value_kind

Aliases:
- packb = encode
"""

from .codec import decode, encode, packb, unpackb
from .values import Float32, Value, ValueKind, value_kind

__all__ = [
    "encode",
    "decode",
    "packb",
    "unpackb",
    "Float32",
    "Value",
    "ValueKind",
    "value_kind",
]
