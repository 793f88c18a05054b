"""
capwire.wire.values
===================

The Value space carried by the primitive codec.

A Value is one of:

=========  ==========================  ===================================
Kind       Python representation       Wire tags (see capwire.wire.codec)
=========  ==========================  ===================================
NIL        ``None``                    nil
BOOL       ``bool``                    false / true
INT        ``int`` (-2**63 .. 2**64-1) fixint, uint8..64, int8..64
FLOAT32    :class:`Float32`            float32
FLOAT64    ``float``                   float64
STR        ``str``                     fixstr, str8/16/32
BYTES      ``bytes``                   bin8/16/32
ARRAY      ``list``                    fixarray, array16/32
MAP        ``dict`` (str keys)         fixmap, map16/32
=========  ==========================  ===================================

``Float32`` is a ``float`` subclass so single-precision numbers keep their
width across a decode/encode cycle while still comparing equal to plain
floats. On encode, ``tuple`` is accepted as ARRAY and ``bytearray`` /
``memoryview`` as BYTES.
"""

from __future__ import annotations

import struct
from enum import Enum
from typing import Any, Dict, List, Union

from ..errors import InvalidValue, RangeError

INT_MIN = -(2**63)
UINT_MAX = 2**64 - 1


class Float32(float):
    """A float that is encoded with the 32-bit float tag."""

    __slots__ = ()

    def __new__(cls, x: Any = 0.0) -> "Float32":
        try:
            packed = struct.pack(">f", float(x))
        except OverflowError as e:
            raise RangeError(value=x, kind="f32") from e
        return super().__new__(cls, struct.unpack(">f", packed)[0])

    def __repr__(self) -> str:
        return f"Float32({float(self)!r})"


Value = Union[None, bool, int, float, str, bytes, List[Any], Dict[str, Any]]


class ValueKind(str, Enum):
    NIL = "nil"
    BOOL = "bool"
    INT = "int"
    FLOAT32 = "f32"
    FLOAT64 = "f64"
    STR = "str"
    BYTES = "bytes"
    ARRAY = "array"
    MAP = "map"


def value_kind(v: Any) -> ValueKind:
    """
    Return the kind tag of `v`. Raises InvalidValue for objects outside the
    Value space. Integer range is not checked here (the encoder does that).
    """
    if v is None:
        return ValueKind.NIL
    # bool before int: bool is an int subclass
    if isinstance(v, bool):
        return ValueKind.BOOL
    if isinstance(v, int):
        return ValueKind.INT
    if isinstance(v, Float32):
        return ValueKind.FLOAT32
    if isinstance(v, float):
        return ValueKind.FLOAT64
    if isinstance(v, str):
        return ValueKind.STR
    if isinstance(v, (bytes, bytearray, memoryview)):
        return ValueKind.BYTES
    if isinstance(v, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(v, dict):
        return ValueKind.MAP
    raise InvalidValue(
        f"unsupported type for wire encoding: {type(v).__name__}",
        details={"type": type(v).__name__},
    )


__all__ = ["Float32", "Value", "ValueKind", "value_kind", "INT_MIN", "UINT_MAX"]
