"""
capwire.wire.codec
==================

Primitive codec: Value <-> bytes, using the MessagePack subset below.
All multi-byte lengths and numbers are big-endian.

========================  ======================================
Kind                      Tag bytes
========================  ======================================
nil                       0xc0
false / true              0xc2 / 0xc3
positive fixint 0..127    0x00 - 0x7f
negative fixint -32..-1   0xe0 - 0xff
uint8/16/32/64            0xcc 0xcd 0xce 0xcf
int8/16/32/64             0xd0 0xd1 0xd2 0xd3
float32 / float64         0xca / 0xcb
str fix/8/16/32           0xa0 - 0xbf, 0xd9, 0xda, 0xdb
bin 8/16/32               0xc4, 0xc5, 0xc6
array fix/16/32           0x90 - 0x9f, 0xdc, 0xdd
map fix/16/32             0x80 - 0x8f, 0xde, 0xdf
========================  ======================================

0xc1 (never used) and the ext family (0xc7-0xc9, 0xd4-0xd8) are rejected.

Encoding rules:

- Integers use the shortest representation. Non-negative values use the
  positive fixint / unsigned tags, negative values the negative fixint /
  signed tags.
- ``float`` is always float64; :class:`Float32` is always float32.
- Strings and byte strings use the shortest length prefix.
- Map keys are strings and are written in insertion order (no sorting).

Public API:
- encode(value) -> bytes               (alias: packb)
- decode(data, offset=0) -> (value, n) n = number of bytes consumed
- unpackb(data) -> value               exactly one Value, no trailing bytes
"""

from __future__ import annotations

import struct
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import DEFAULT_CONFIG, Config
from ..errors import InvalidValue, MalformedInput, RangeError
from .values import INT_MIN, UINT_MAX, Float32

BytesLike = Union[bytes, bytearray, memoryview]

# ------------------------
# Tags
# ------------------------

NIL = 0xC0
FALSE = 0xC2
TRUE = 0xC3
BIN8, BIN16, BIN32 = 0xC4, 0xC5, 0xC6
FLOAT32, FLOAT64 = 0xCA, 0xCB
UINT8, UINT16, UINT32, UINT64 = 0xCC, 0xCD, 0xCE, 0xCF
INT8, INT16, INT32, INT64 = 0xD0, 0xD1, 0xD2, 0xD3
STR8, STR16, STR32 = 0xD9, 0xDA, 0xDB
ARRAY16, ARRAY32 = 0xDC, 0xDD
MAP16, MAP32 = 0xDE, 0xDF

_FIXSTR = 0xA0
_FIXARRAY = 0x90
_FIXMAP = 0x80

_LEN_MAX = 0xFFFFFFFF

# tag -> (struct format, byte width) for fixed-width numbers and length prefixes
_UINT_FMT = {1: ">B", 2: ">H", 4: ">I", 8: ">Q"}
_INT_FMT = {1: ">b", 2: ">h", 4: ">i", 8: ">q"}

_UINT_TAGS = {UINT8: 1, UINT16: 2, UINT32: 4, UINT64: 8}
_INT_TAGS = {INT8: 1, INT16: 2, INT32: 4, INT64: 8}
_STR_TAGS = {STR8: 1, STR16: 2, STR32: 4}
_BIN_TAGS = {BIN8: 1, BIN16: 2, BIN32: 4}

# ------------------------
# Encoder
# ------------------------


def _encode_int(n: int, out: bytearray) -> None:
    if n >= 0:
        if n <= 0x7F:
            out.append(n)
        elif n <= 0xFF:
            out += struct.pack(">BB", UINT8, n)
        elif n <= 0xFFFF:
            out += struct.pack(">BH", UINT16, n)
        elif n <= 0xFFFFFFFF:
            out += struct.pack(">BI", UINT32, n)
        elif n <= UINT_MAX:
            out += struct.pack(">BQ", UINT64, n)
        else:
            raise RangeError(value=n, kind="u64")
    else:
        if n >= -32:
            out += struct.pack(">b", n)
        elif n >= -0x80:
            out += struct.pack(">Bb", INT8, n)
        elif n >= -0x8000:
            out += struct.pack(">Bh", INT16, n)
        elif n >= -0x80000000:
            out += struct.pack(">Bi", INT32, n)
        elif n >= INT_MIN:
            out += struct.pack(">Bq", INT64, n)
        else:
            raise RangeError(value=n, kind="i64")


def _encode_len(n: int, fix_base: Optional[int], fix_max: int, tags: Tuple[int, ...], out: bytearray) -> None:
    """
    Write a length header. `tags` lists the 8/16/32-bit tags (8-bit may be
    absent for arrays and maps, which have no 8-bit form).
    """
    if fix_base is not None and n <= fix_max:
        out.append(fix_base | n)
        return
    widths = (1, 2, 4)[-len(tags):]
    for tag, width in zip(tags, widths):
        if n < (1 << (8 * width)):
            out.append(tag)
            out += struct.pack(_UINT_FMT[width], n)
            return
    raise RangeError(value=n, kind="length", details={"max": _LEN_MAX})


def _encode_obj(obj: Any, out: bytearray, depth: int, max_depth: int) -> None:
    if obj is None:
        out.append(NIL)
    elif obj is True:
        out.append(TRUE)
    elif obj is False:
        out.append(FALSE)
    elif isinstance(obj, int):
        _encode_int(obj, out)
    elif isinstance(obj, Float32):
        out += struct.pack(">Bf", FLOAT32, obj)
    elif isinstance(obj, float):
        out += struct.pack(">Bd", FLOAT64, obj)
    elif isinstance(obj, str):
        try:
            b = obj.encode("utf-8", "strict")
        except UnicodeEncodeError as e:
            raise InvalidValue(
                f"string is not valid UTF-8: {e.reason}",
                details={"position": e.start},
            ) from e
        _encode_len(len(b), _FIXSTR, 31, (STR8, STR16, STR32), out)
        out += b
    elif isinstance(obj, (bytes, bytearray, memoryview)):
        b = bytes(obj)
        _encode_len(len(b), None, -1, (BIN8, BIN16, BIN32), out)
        out += b
    elif isinstance(obj, (list, tuple)):
        if depth >= max_depth:
            raise InvalidValue("nesting too deep", details={"max_depth": max_depth})
        _encode_len(len(obj), _FIXARRAY, 15, (ARRAY16, ARRAY32), out)
        for item in obj:
            _encode_obj(item, out, depth + 1, max_depth)
    elif isinstance(obj, dict):
        if depth >= max_depth:
            raise InvalidValue("nesting too deep", details={"max_depth": max_depth})
        _encode_len(len(obj), _FIXMAP, 15, (MAP16, MAP32), out)
        for k, v in obj.items():
            if not isinstance(k, str):
                raise InvalidValue(
                    f"mapping keys must be str, got {type(k).__name__}",
                    details={"key": repr(k)},
                )
            _encode_obj(k, out, depth + 1, max_depth)
            _encode_obj(v, out, depth + 1, max_depth)
    else:
        raise InvalidValue(
            f"unsupported type for wire encoding: {type(obj).__name__}",
            details={"type": type(obj).__name__},
        )


def encode(value: Any, *, config: Optional[Config] = None) -> bytes:
    """
    Encode a Value to bytes. Deterministic: the same Value always yields the
    same bytes, with sequence and mapping order taken from the caller.

    Output larger than the configured payload limit raises RangeError.
    """
    cfg = config or DEFAULT_CONFIG
    out = bytearray()
    _encode_obj(value, out, 0, cfg.limits.max_depth)
    if len(out) > cfg.limits.max_payload_bytes:
        raise RangeError(
            f"encoded payload of {len(out)} bytes exceeds configured limit",
            value=len(out),
            kind="payload",
            details={"max": cfg.limits.max_payload_bytes},
        )
    return bytes(out)


# ------------------------
# Decoder (strict)
# ------------------------


class _Buf:
    __slots__ = ("b", "i", "n")

    def __init__(self, b: BytesLike, offset: int):
        self.b = memoryview(b).cast("B") if isinstance(b, memoryview) else memoryview(b)
        self.n = len(self.b)
        if offset < 0 or offset > self.n:
            raise MalformedInput("offset outside buffer", offset=offset)
        self.i = offset

    def get(self, k: int) -> bytes:
        if self.i + k > self.n:
            raise MalformedInput(
                "truncated input",
                offset=self.i,
                details={"needed": k, "remaining": self.n - self.i},
            )
        out = self.b[self.i : self.i + k].tobytes()
        self.i += k
        return out

    def get1(self) -> int:
        if self.i >= self.n:
            raise MalformedInput("truncated input", offset=self.i)
        v = self.b[self.i]
        self.i += 1
        return int(v)

    def uint(self, width: int) -> int:
        return struct.unpack(_UINT_FMT[width], self.get(width))[0]


def _decode_str(buf: _Buf, n: int) -> str:
    start = buf.i
    data = buf.get(n)
    try:
        return data.decode("utf-8", "strict")
    except UnicodeDecodeError as e:
        raise MalformedInput(f"invalid UTF-8 in string: {e.reason}", offset=start) from e


def _decode_array(buf: _Buf, n: int, depth: int, max_depth: int) -> List[Any]:
    if depth >= max_depth:
        raise MalformedInput("nesting too deep", offset=buf.i, details={"max_depth": max_depth})
    return [_decode(buf, depth + 1, max_depth) for _ in range(n)]


def _decode_map(buf: _Buf, n: int, depth: int, max_depth: int) -> Dict[str, Any]:
    if depth >= max_depth:
        raise MalformedInput("nesting too deep", offset=buf.i, details={"max_depth": max_depth})
    out: Dict[str, Any] = {}
    for _ in range(n):
        key_at = buf.i
        key = _decode(buf, depth + 1, max_depth)
        if not isinstance(key, str):
            raise MalformedInput(
                f"mapping key must be a string, got {type(key).__name__}", offset=key_at
            )
        if key in out:
            raise MalformedInput(f"duplicate mapping key {key!r}", offset=key_at)
        out[key] = _decode(buf, depth + 1, max_depth)
    return out


def _decode(buf: _Buf, depth: int, max_depth: int) -> Any:
    at = buf.i
    t = buf.get1()

    if t <= 0x7F:
        return t
    if t >= 0xE0:
        return t - 0x100
    if 0xA0 <= t <= 0xBF:
        return _decode_str(buf, t & 0x1F)
    if 0x90 <= t <= 0x9F:
        return _decode_array(buf, t & 0x0F, depth, max_depth)
    if 0x80 <= t <= 0x8F:
        return _decode_map(buf, t & 0x0F, depth, max_depth)

    if t == NIL:
        return None
    if t == FALSE:
        return False
    if t == TRUE:
        return True
    if t in _UINT_TAGS:
        return buf.uint(_UINT_TAGS[t])
    if t in _INT_TAGS:
        width = _INT_TAGS[t]
        return struct.unpack(_INT_FMT[width], buf.get(width))[0]
    if t == FLOAT32:
        return Float32(struct.unpack(">f", buf.get(4))[0])
    if t == FLOAT64:
        return struct.unpack(">d", buf.get(8))[0]
    if t in _STR_TAGS:
        return _decode_str(buf, buf.uint(_STR_TAGS[t]))
    if t in _BIN_TAGS:
        return buf.get(buf.uint(_BIN_TAGS[t]))
    if t == ARRAY16:
        return _decode_array(buf, buf.uint(2), depth, max_depth)
    if t == ARRAY32:
        return _decode_array(buf, buf.uint(4), depth, max_depth)
    if t == MAP16:
        return _decode_map(buf, buf.uint(2), depth, max_depth)
    if t == MAP32:
        return _decode_map(buf, buf.uint(4), depth, max_depth)

    # 0xc1 and the ext family
    raise MalformedInput(f"unsupported tag byte 0x{t:02x}", offset=at)


def decode(
    data: BytesLike, offset: int = 0, *, config: Optional[Config] = None
) -> Tuple[Any, int]:
    """
    Decode one Value starting at `offset`. Returns (value, bytes consumed).
    Bytes after the Value are left alone.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidValue("decode() expects bytes-like input")
    cfg = config or DEFAULT_CONFIG
    buf = _Buf(data, offset)
    value = _decode(buf, 0, cfg.limits.max_depth)
    return value, buf.i - offset


def unpackb(data: BytesLike, *, config: Optional[Config] = None) -> Any:
    """
    Decode a buffer holding exactly one Value. Raises MalformedInput on
    trailing bytes or when the buffer exceeds the configured payload limit.
    """
    cfg = config or DEFAULT_CONFIG
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidValue("unpackb() expects bytes-like input")
    size = memoryview(data).nbytes
    if size > cfg.limits.max_payload_bytes:
        raise MalformedInput(
            "payload exceeds configured limit",
            details={"size": size, "max": cfg.limits.max_payload_bytes},
        )
    value, consumed = decode(data, 0, config=cfg)
    if consumed != size:
        raise MalformedInput(
            "trailing bytes after value",
            offset=consumed,
            details={"trailing": size - consumed},
        )
    return value


# Friendly alias
packb = encode

__all__ = ["encode", "decode", "packb", "unpackb"]
