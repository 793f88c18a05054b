"""
capwire.envelope
================

Top-level encode/decode keyed by operation name.

    codec = EnvelopeCodec()
    data = codec.encode_request("KeyValue.Set", SetRequest(key="a", value=b"\\x01"))
    req = codec.decode_request("KeyValue.Set", data)       # SetRequest

The operation name is not written into the payload; the transport carries it
alongside the bytes. Failures:

- UnknownOperation  the name is not registered
- SchemaMismatch    the value is not the operation's schema type, or the
                    decoded Value does not satisfy it
- RangeError        a numeric field does not fit its declared width
- MalformedInput    the bytes are not a well-formed Value

Every call is independent: nothing here writes process-wide state.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type

from .config import DEFAULT_CONFIG, Config
from .errors import CodecError, SchemaMismatch
from .registry import Operation, OperationRegistry, default_registry
from .schema.base import Message
from .wire import codec as wire

log = logging.getLogger("capwire.envelope")

REQUEST = "request"
RESPONSE = "response"


class EnvelopeCodec:
    """
    Encodes/decodes operation payloads against a registry. Holds no mutable
    state; one instance may be shared by any number of threads.
    """

    def __init__(
        self,
        registry: Optional[OperationRegistry] = None,
        config: Optional[Config] = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.config = config or DEFAULT_CONFIG

    # ---- requests ----

    def encode_request(self, operation: str, value: Message) -> bytes:
        op = self.registry.resolve(operation)
        return self._encode(op, REQUEST, op.request, value)

    def decode_request(self, operation: str, data: bytes) -> Any:
        op = self.registry.resolve(operation)
        return self._decode(op, REQUEST, op.request, data)

    # ---- responses ----

    def encode_response(self, operation: str, value: Message) -> bytes:
        op = self.registry.resolve(operation)
        return self._encode(op, RESPONSE, op.response, value)

    def decode_response(self, operation: str, data: bytes) -> Any:
        op = self.registry.resolve(operation)
        return self._decode(op, RESPONSE, op.response, data)

    # ---- internals ----

    def _encode(self, op: Operation, side: str, schema: Type[Message], value: Any) -> bytes:
        if not isinstance(value, schema):
            raise SchemaMismatch(
                f"{op.name} {side} must be {schema.__name__}, got {type(value).__name__}",
                schema=schema.__name__,
                details={"operation": op.name, "side": side},
            )
        return wire.encode(value.to_value(), config=self.config)

    def _decode(self, op: Operation, side: str, schema: Type[Message], data: bytes) -> Any:
        try:
            return schema.from_value(wire.unpackb(data, config=self.config))
        except CodecError as e:
            log.debug(
                "decode_failed",
                extra={
                    "operation": op.name,
                    "side": side,
                    "schema": schema.__name__,
                    "code": e.code,
                    "error": e.message,
                },
            )
            raise


# Module-level shortcuts over the process-wide registry. Hosts should call
# default_registry() during startup so the first request does not build it.


def encode_request(operation: str, value: Message) -> bytes:
    return EnvelopeCodec().encode_request(operation, value)


def decode_request(operation: str, data: bytes) -> Any:
    return EnvelopeCodec().decode_request(operation, data)


def encode_response(operation: str, value: Message) -> bytes:
    return EnvelopeCodec().encode_response(operation, value)


def decode_response(operation: str, data: bytes) -> Any:
    return EnvelopeCodec().decode_response(operation, data)


__all__ = [
    "EnvelopeCodec",
    "encode_request",
    "decode_request",
    "encode_response",
    "decode_response",
]
