"""
capwire.schema.base
===================

Field binding between schema types and wire Values.

A schema type is a frozen, keyword-only dataclass deriving from
:class:`Message`. Each field is declared with :func:`wire`, which records the
field kind (``U32``, ``STR``, ``list_of(BYTES)``, ...) and its presence:

- required   no Python default; must be present on decode.
- optional   ``wire(KIND, optional=True)``; defaults to ``None``, omitted on
             encode when ``None``, bound to ``None`` when absent on decode.
- defaulted  ``wire(KIND, default=...)`` / ``default_factory=...``; always
             encoded, bound to the default when absent on decode.

Example::

    @dataclass(frozen=True, kw_only=True)
    class GetResponse(Message):
        value: Optional[bytes] = wire(BYTES, optional=True)
        exists: bool = wire(BOOL)

    GetResponse(exists=False).to_value()          # {"exists": False}
    GetResponse.from_value({"exists": True, "value": b"x", "later": 1})

Binding rules:
- Field declaration order is the encoding order.
- Wire keys are the camelCase form of the attribute name unless the class
  sets ``wire_case = "snake"`` or the field passes ``key=...``.
- Unknown keys in the input mapping are ignored.
- Kind mismatches (including bool vs int and int vs float) raise
  SchemaMismatch; integers outside the declared width raise RangeError.
- Errors carry the dotted field path, e.g. ``StreamResults.events[0].stream``.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import MISSING, dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type, TypeVar

from ..errors import RangeError, SchemaMismatch
from ..wire.values import Float32

M = TypeVar("M", bound="Message")


def _mismatch(path: str, message: str, **details: Any) -> SchemaMismatch:
    return SchemaMismatch(
        f"{path}: {message}",
        schema=path.split(".", 1)[0].split("[", 1)[0],
        field=path,
        details=details or None,
    )


def _type_name(v: Any) -> str:
    return "nil" if v is None else type(v).__name__


# ----------------------------
# Field kinds
# ----------------------------


class FieldKind:
    """Converts one field between its Python form and its wire Value."""

    name: str = "?"

    def to_value(self, v: Any, path: str) -> Any:
        raise NotImplementedError

    def from_value(self, v: Any, path: str) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.name


class _Bool(FieldKind):
    name = "bool"

    def to_value(self, v: Any, path: str) -> Any:
        if not isinstance(v, bool):
            raise _mismatch(path, f"expected bool, got {_type_name(v)}")
        return v

    from_value = to_value


class _Int(FieldKind):
    def __init__(self, name: str, lo: int, hi: int) -> None:
        self.name = name
        self.lo = lo
        self.hi = hi

    def to_value(self, v: Any, path: str) -> Any:
        if isinstance(v, bool) or not isinstance(v, int):
            raise _mismatch(path, f"expected {self.name}, got {_type_name(v)}")
        if not self.lo <= v <= self.hi:
            raise RangeError(
                f"{path}: {v} out of range for {self.name}",
                value=v,
                kind=self.name,
                field=path,
                details={"min": self.lo, "max": self.hi},
            )
        return int(v)

    from_value = to_value


class _F64(FieldKind):
    name = "f64"

    def to_value(self, v: Any, path: str) -> Any:
        if not isinstance(v, float):
            raise _mismatch(path, f"expected f64, got {_type_name(v)}")
        return float(v)

    from_value = to_value


class _F32(FieldKind):
    name = "f32"

    def to_value(self, v: Any, path: str) -> Any:
        if not isinstance(v, float):
            raise _mismatch(path, f"expected f32, got {_type_name(v)}")
        if isinstance(v, Float32):
            return v
        try:
            narrowed = Float32(v)
        except RangeError as e:
            raise RangeError(value=v, kind="f32", field=path) from e
        if not math.isnan(v) and float(narrowed) != v:
            raise RangeError(
                f"{path}: {v!r} is not representable as f32",
                value=v,
                kind="f32",
                field=path,
            )
        return narrowed

    from_value = to_value


class _Str(FieldKind):
    name = "str"

    def to_value(self, v: Any, path: str) -> Any:
        if not isinstance(v, str):
            raise _mismatch(path, f"expected str, got {_type_name(v)}")
        return str(v)

    from_value = to_value


class _Bytes(FieldKind):
    name = "bytes"

    def to_value(self, v: Any, path: str) -> Any:
        if not isinstance(v, (bytes, bytearray, memoryview)):
            raise _mismatch(path, f"expected bytes, got {_type_name(v)}")
        return bytes(v)

    def from_value(self, v: Any, path: str) -> Any:
        if not isinstance(v, bytes):
            raise _mismatch(path, f"expected bytes, got {_type_name(v)}")
        return v


class _Any(FieldKind):
    """An untyped Value; the primitive codec validates it on encode."""

    name = "any"

    def to_value(self, v: Any, path: str) -> Any:
        return v

    from_value = to_value


class ListOf(FieldKind):
    def __init__(self, item: FieldKind) -> None:
        self.item = item
        self.name = f"list<{item.name}>"

    # list only: a tuple would not compare equal to its decoded form
    def _bind(self, v: Any, path: str, conv: str) -> Any:
        if not isinstance(v, list):
            raise _mismatch(path, f"expected {self.name}, got {_type_name(v)}")
        return [getattr(self.item, conv)(x, f"{path}[{i}]") for i, x in enumerate(v)]

    def to_value(self, v: Any, path: str) -> Any:
        return self._bind(v, path, "to_value")

    def from_value(self, v: Any, path: str) -> Any:
        return self._bind(v, path, "from_value")


class MapOf(FieldKind):
    """Mapping from str to `item`. Insertion order is kept."""

    def __init__(self, item: FieldKind) -> None:
        self.item = item
        self.name = f"map<str,{item.name}>"

    def _bind(self, v: Any, path: str, conv: str) -> Dict[str, Any]:
        if not isinstance(v, dict):
            raise _mismatch(path, f"expected {self.name}, got {_type_name(v)}")
        out: Dict[str, Any] = {}
        for k, x in v.items():
            if not isinstance(k, str):
                raise _mismatch(path, f"mapping keys must be str, got {_type_name(k)}")
            out[k] = getattr(self.item, conv)(x, f"{path}.{k}")
        return out

    def to_value(self, v: Any, path: str) -> Any:
        return self._bind(v, path, "to_value")

    def from_value(self, v: Any, path: str) -> Any:
        return self._bind(v, path, "from_value")


class StructOf(FieldKind):
    def __init__(self, schema: Type["Message"]) -> None:
        self.schema = schema
        self.name = schema.__name__

    def to_value(self, v: Any, path: str) -> Any:
        if not isinstance(v, self.schema):
            raise _mismatch(path, f"expected {self.name}, got {_type_name(v)}")
        return v.to_value()

    def from_value(self, v: Any, path: str) -> Any:
        return self.schema.from_value(v, path=path)


class EnumOf(FieldKind):
    """A closed set of string values, bound to a ``str``-valued Enum."""

    def __init__(self, enum: Type[Enum]) -> None:
        self.enum = enum
        self.name = f"enum<{enum.__name__}>"

    def _allowed(self) -> List[str]:
        return [m.value for m in self.enum]

    def to_value(self, v: Any, path: str) -> Any:
        if isinstance(v, self.enum):
            return v.value
        return self.from_value(v, path).value

    def from_value(self, v: Any, path: str) -> Any:
        if not isinstance(v, str):
            raise _mismatch(path, f"expected {self.name}, got {_type_name(v)}")
        try:
            return self.enum(v)
        except ValueError:
            raise _mismatch(
                path, f"{v!r} is not one of {self._allowed()}", allowed=self._allowed()
            ) from None


BOOL = _Bool()
U8 = _Int("u8", 0, 2**8 - 1)
U16 = _Int("u16", 0, 2**16 - 1)
U32 = _Int("u32", 0, 2**32 - 1)
U64 = _Int("u64", 0, 2**64 - 1)
I8 = _Int("i8", -(2**7), 2**7 - 1)
I16 = _Int("i16", -(2**15), 2**15 - 1)
I32 = _Int("i32", -(2**31), 2**31 - 1)
I64 = _Int("i64", -(2**63), 2**63 - 1)
F32 = _F32()
F64 = _F64()
STR = _Str()
BYTES = _Bytes()
ANY = _Any()


def list_of(item: FieldKind) -> ListOf:
    return ListOf(item)


def map_of(item: FieldKind) -> MapOf:
    return MapOf(item)


def struct(schema: Type["Message"]) -> StructOf:
    return StructOf(schema)


def enum_of(enum: Type[Enum]) -> EnumOf:
    return EnumOf(enum)


# ----------------------------
# Field declaration
# ----------------------------

REQUIRED = "required"
OPTIONAL = "optional"
DEFAULTED = "defaulted"


@dataclass(frozen=True)
class WireSpec:
    kind: FieldKind
    presence: str
    key: Optional[str] = None


def wire(
    kind: FieldKind,
    *,
    key: Optional[str] = None,
    optional: bool = False,
    default: Any = MISSING,
    default_factory: Any = MISSING,
) -> Any:
    """Declare a schema field. See the module docstring for presence rules."""
    if optional:
        if default is not MISSING or default_factory is not MISSING:
            raise TypeError("optional fields always default to None")
        spec = WireSpec(kind, OPTIONAL, key)
        return dataclasses.field(default=None, metadata={"wire": spec})
    if default is not MISSING or default_factory is not MISSING:
        spec = WireSpec(kind, DEFAULTED, key)
        return dataclasses.field(
            default=default, default_factory=default_factory, metadata={"wire": spec}
        )
    return dataclasses.field(metadata={"wire": WireSpec(kind, REQUIRED, key)})


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


# ----------------------------
# Message base
# ----------------------------


class Message:
    """Base class for every schema type."""

    # "camel" or "snake": how attribute names map to wire keys
    wire_case: ClassVar[str] = "camel"

    @classmethod
    def wire_fields(cls) -> Tuple[Tuple[str, str, WireSpec], ...]:
        """(attribute, wire key, spec) for every wire field, in encoding order."""
        out = []
        for f in dataclasses.fields(cls):  # type: ignore[arg-type]
            spec = f.metadata.get("wire")
            if spec is None:
                continue
            key = spec.key or (f.name if cls.wire_case == "snake" else _camel(f.name))
            out.append((f.name, key, spec))
        return tuple(out)

    def to_value(self) -> Dict[str, Any]:
        """Mapping of wire key -> Value, skipping absent optional fields."""
        name = type(self).__name__
        out: Dict[str, Any] = {}
        for attr, key, spec in self.wire_fields():
            v = getattr(self, attr)
            if v is None and spec.presence == OPTIONAL:
                continue
            out[key] = spec.kind.to_value(v, f"{name}.{key}")
        return out

    @classmethod
    def from_value(cls: Type[M], value: Any, *, path: Optional[str] = None) -> M:
        """
        Bind a decoded Value into this schema. Unknown keys are ignored;
        missing optional fields bind to None, missing defaulted fields to
        their default, missing required fields raise SchemaMismatch.
        """
        name = path or cls.__name__
        if not isinstance(value, dict):
            raise _mismatch(name, f"expected a mapping, got {_type_name(value)}")

        kwargs: Dict[str, Any] = {}
        for attr, key, spec in cls.wire_fields():
            fpath = f"{name}.{key}"
            if key not in value:
                if spec.presence == REQUIRED:
                    raise _mismatch(fpath, "missing required field")
                # optional -> None, defaulted -> dataclass default
                continue
            v = value[key]
            if v is None and spec.presence == OPTIONAL:
                continue
            kwargs[attr] = spec.kind.from_value(v, fpath)
        return cls(**kwargs)

    @classmethod
    def describe(cls) -> List[Dict[str, str]]:
        """Field layout for documentation tooling."""
        return [
            {"field": attr, "key": key, "kind": spec.kind.name, "presence": spec.presence}
            for attr, key, spec in cls.wire_fields()
        ]

    @classmethod
    def sample(cls: Type[M]) -> M:
        """A representative instance. Types with required fields override this."""
        return cls()


__all__ = [
    "FieldKind",
    "ListOf",
    "MapOf",
    "StructOf",
    "EnumOf",
    "BOOL",
    "U8",
    "U16",
    "U32",
    "U64",
    "I8",
    "I16",
    "I32",
    "I64",
    "F32",
    "F64",
    "STR",
    "BYTES",
    "ANY",
    "list_of",
    "map_of",
    "struct",
    "enum_of",
    "REQUIRED",
    "OPTIONAL",
    "DEFAULTED",
    "WireSpec",
    "wire",
    "Message",
]
