"""
capwire.schema
--------------

Schema type catalog: one module per capability domain, each exposing its
message types, its operation-name constants and a ``register(registry)``
hook that adds its operations to an OperationRegistry.

Domains:
- core          host <-> actor/provider control messages
- messaging     publish / request / subscribe
- http          HTTP server and HTTP client
- keyvalue      key-value, list and set operations
- blobstore     containers and chunked blob transfer
- extras        GUIDs, random numbers, sequences
- eventstreams  append-only event streams
- logs          actor log output
"""

from .base import Message, wire

# Registration order of the catalog; also the order of registry listings.
CATALOG_MODULES = (
    "capwire.schema.core",
    "capwire.schema.messaging",
    "capwire.schema.http",
    "capwire.schema.keyvalue",
    "capwire.schema.blobstore",
    "capwire.schema.extras",
    "capwire.schema.eventstreams",
    "capwire.schema.logs",
)

__all__ = ["Message", "wire", "CATALOG_MODULES"]
