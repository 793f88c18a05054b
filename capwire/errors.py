"""
capwire.errors
--------------

Exception hierarchy for the capwire codec.

Every failure surfaced by the primitive codec, the schema binding layer, the
operation registry and the envelope codec derives from :class:`CodecError`.
Callers (providers, actors, the host) are expected to report these as
operation failures to their own caller; nothing in this package retries or
substitutes default values after a failure.

Stable codes
~~~~~~~~~~~~
- MALFORMED_INPUT      bytes do not parse as a Value (truncated, bad tag, bad UTF-8)
- SCHEMA_MISMATCH      a well-formed Value does not satisfy a schema
- RANGE_ERROR          a numeric value does not fit the declared width
- INVALID_VALUE        an object outside the Value space was handed to the encoder
- UNKNOWN_OPERATION    operation name not registered
- DUPLICATE_OPERATION  operation name registered twice (startup only)
- REGISTRY_FROZEN      registration attempted after the registry was frozen

Distinguishing MALFORMED_INPUT from SCHEMA_MISMATCH lets a caller tell
"the bytes are corrupt" from "the bytes are fine but the wrong shape".
"""

from __future__ import annotations

from typing import Any, Dict, Optional


def _truncate(data: Any, max_len: int = 128) -> Any:
    """
    Truncate large strings/bytes for safe inclusion in diagnostics.
    Containers (list/tuple/dict) are shallowly summarized.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        data = bytes(data)
        if len(data) <= max_len:
            return data
        return data[:max_len] + b"..."
    if isinstance(data, str):
        if len(data) <= max_len:
            return data
        return data[:max_len] + "..."
    if isinstance(data, (list, tuple)):
        return [_truncate(x, max_len) for x in data[:16]] + (
            ["..."] if len(data) > 16 else []
        )
    if isinstance(data, dict):
        out: Dict[str, Any] = {}
        for i, (k, v) in enumerate(data.items()):
            if i >= 16:
                out["..."] = "truncated"
                break
            out[str(k)] = _truncate(v, max_len)
        return out
    return data


class CodecError(Exception):
    """
    Base class for codec errors.

    Attributes
    ----------
    code : str
        Stable, upper-snake ASCII identifier (e.g., 'SCHEMA_MISMATCH').
    message : str
        Human-friendly explanation (single line preferred).
    details : dict
        Structured data safe to log or return across the call boundary.
    retryable : bool
        Always False for codec errors; kept so the payload shape matches
        the error payloads the transport layer already carries.
    """

    code: str = "CODEC_ERROR"

    def __init__(
        self,
        message: str = "codec error",
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = _truncate(details or {})
        self.retryable = False

    def to_dict(self) -> Dict[str, Any]:
        """
        Structured representation safe for logs/RPC.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.code}: {self.message}"


class MalformedInput(CodecError, ValueError):
    """
    Raised when bytes cannot be parsed as a Value: truncated buffers, declared
    lengths that run past the end of input, unknown or unsupported tag bytes,
    invalid UTF-8 in a string, non-string map keys or trailing garbage.
    """

    code = "MALFORMED_INPUT"

    def __init__(
        self,
        message: str = "malformed input",
        *,
        offset: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        dd: Dict[str, Any] = {}
        if offset is not None:
            dd["offset"] = int(offset)
        if details:
            dd.update(details)
        super().__init__(message, details=dd)
        self.offset = offset


class SchemaMismatch(CodecError, ValueError):
    """
    Raised when a well-formed Value does not satisfy a schema: the top-level
    Value is not a mapping, a required field is missing, or a field carries
    the wrong kind of Value. Also raised when a value handed to the envelope
    codec is not an instance of the operation's schema type.
    """

    code = "SCHEMA_MISMATCH"

    def __init__(
        self,
        message: str = "value does not match schema",
        *,
        schema: Optional[str] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        dd: Dict[str, Any] = {"schema": schema, "field": field}
        if details:
            dd.update(details)
        super().__init__(message, details=dd)
        self.schema = schema
        self.field = field


class RangeError(CodecError, ValueError):
    """
    Raised when a numeric value is present but does not fit the declared width
    of its field (or, for the primitive encoder, does not fit in 64 bits).
    """

    code = "RANGE_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        value: Any = None,
        kind: Optional[str] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        msg = message or f"value {value!r} out of range for {kind}"
        dd: Dict[str, Any] = {"value": repr(value), "kind": kind, "field": field}
        if details:
            dd.update(details)
        super().__init__(msg, details=dd)
        self.value = value
        self.kind = kind
        self.field = field


class InvalidValue(CodecError, TypeError):
    """
    Raised by the primitive encoder for objects outside the Value space
    (custom objects, non-string mapping keys, ...).
    """

    code = "INVALID_VALUE"


class UnknownOperation(CodecError, LookupError):
    """
    Raised when an operation name is not registered. This is a routing error;
    callers must not retry it.
    """

    code = "UNKNOWN_OPERATION"

    def __init__(self, name: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        dd: Dict[str, Any] = {"operation": name}
        if details:
            dd.update(details)
        super().__init__(f"unknown operation {name!r}", details=dd)
        self.name = name


class DuplicateOperation(CodecError):
    """
    Raised when an operation name is registered twice. Only happens while the
    registry is being populated; it indicates an inconsistent catalog and must
    abort initialization.
    """

    code = "DUPLICATE_OPERATION"

    def __init__(self, name: str) -> None:
        super().__init__(
            f"operation {name!r} is already registered", details={"operation": name}
        )
        self.name = name


class RegistryFrozen(CodecError):
    """Raised when registering into a registry that has been frozen."""

    code = "REGISTRY_FROZEN"

    def __init__(self, name: str) -> None:
        super().__init__(
            f"cannot register {name!r}: registry is frozen",
            details={"operation": name},
        )
        self.name = name


__all__ = [
    "CodecError",
    "MalformedInput",
    "SchemaMismatch",
    "RangeError",
    "InvalidValue",
    "UnknownOperation",
    "DuplicateOperation",
    "RegistryFrozen",
]
