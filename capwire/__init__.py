"""
capwire
-------

Shared wire schema and codec for the host runtime, capability providers and
actor modules.

A logical operation ("KeyValue.Get", "Messaging.Publish", ...) has a fixed
request/response schema pair. Both sides encode and decode payloads through
the same catalog, so independently built components agree byte-for-byte on
every message.

Layers (leaf first):
- capwire.wire      primitive codec for the Value space (MessagePack subset)
- capwire.schema    schema types per capability domain
- capwire.registry  operation name -> (request, response) schemas
- capwire.envelope  encode/decode keyed by operation name

Example:

    from capwire import decode_request, encode_request
    from capwire.schema.keyvalue import SetRequest

    data = encode_request("KeyValue.Set", SetRequest(key="a", value=b"\\x01\\x02"))
    req = decode_request("KeyValue.Set", data)
"""

from __future__ import annotations

from .envelope import (EnvelopeCodec, decode_request, decode_response,
                       encode_request, encode_response)
from .errors import (CodecError, DuplicateOperation, InvalidValue,
                     MalformedInput, RangeError, RegistryFrozen,
                     SchemaMismatch, UnknownOperation)
from .registry import (Operation, OperationRegistry, build_registry,
                       default_registry, resolve)
from .schema.core import SYSTEM_ACTOR
from .version import __version__

__all__ = [
    "__version__",
    "SYSTEM_ACTOR",
    "EnvelopeCodec",
    "encode_request",
    "decode_request",
    "encode_response",
    "decode_response",
    "Operation",
    "OperationRegistry",
    "build_registry",
    "default_registry",
    "resolve",
    "CodecError",
    "MalformedInput",
    "SchemaMismatch",
    "RangeError",
    "InvalidValue",
    "UnknownOperation",
    "DuplicateOperation",
    "RegistryFrozen",
]
