"""
capwire.schema.keyvalue
=======================

Key-value store operations (capability id ``capwire:keyvalue``). Values are
opaque bytes; lists and sets are collections of such values stored under a
key.

- "KeyValue.Get"          GetRequest -> GetResponse
- "KeyValue.Set"          SetRequest -> Empty
- "KeyValue.Del"          DelRequest -> DelResponse
- "KeyValue.Exists"       KeyExistsRequest -> GetResponse (value omitted)
- "KeyValue.Add"          AtomicOp -> AtomicResponse
- "KeyValue.Clear"        ClearRequest -> DelResponse
- "KeyValue.List"         ListRequest -> ListResponse
- "KeyValue.ListRange"    ListRangeRequest -> ListResponse
- "KeyValue.ListPush"     ListPushRequest -> ListResultResponse
- "KeyValue.ListDelItem"  ListDelItemRequest -> ListResultResponse
- "KeyValue.SetAdd"       SetAddRequest -> SetOperationResponse
- "KeyValue.SetRemove"    SetRemoveRequest -> SetOperationResponse
- "KeyValue.SetUnion"     SetUnionRequest -> SetQueryResponse
- "KeyValue.SetIntersect" SetIntersectionRequest -> SetQueryResponse
- "KeyValue.SetQuery"     SetQueryRequest -> SetQueryResponse
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from .base import BOOL, BYTES, I32, I64, STR, U32, U64, Message, list_of, wire
from .core import Empty, OperationDirection

if TYPE_CHECKING:  # pragma: no cover
    from ..registry import OperationRegistry

CAPABILITY_ID = "capwire:keyvalue"

OP_GET = "KeyValue.Get"
OP_SET = "KeyValue.Set"
OP_DEL = "KeyValue.Del"
OP_EXISTS = "KeyValue.Exists"
OP_ADD = "KeyValue.Add"
OP_CLEAR = "KeyValue.Clear"
OP_LIST = "KeyValue.List"
OP_LIST_RANGE = "KeyValue.ListRange"
OP_LIST_PUSH = "KeyValue.ListPush"
OP_LIST_DEL_ITEM = "KeyValue.ListDelItem"
OP_SET_ADD = "KeyValue.SetAdd"
OP_SET_REMOVE = "KeyValue.SetRemove"
OP_SET_UNION = "KeyValue.SetUnion"
OP_SET_INTERSECT = "KeyValue.SetIntersect"
OP_SET_QUERY = "KeyValue.SetQuery"


@dataclass(frozen=True, kw_only=True)
class GetRequest(Message):
    key: str = wire(STR)

    @classmethod
    def sample(cls) -> "GetRequest":
        return cls(key="user:42")


@dataclass(frozen=True, kw_only=True)
class GetResponse(Message):
    value: Optional[bytes] = wire(BYTES, optional=True)
    exists: bool = wire(BOOL)

    @classmethod
    def sample(cls) -> "GetResponse":
        return cls(value=b"\x01\x02\x03", exists=True)


@dataclass(frozen=True, kw_only=True)
class SetRequest(Message):
    key: str = wire(STR)
    value: bytes = wire(BYTES)
    # seconds until expiry; 0 keeps the key forever
    expires: int = wire(U32, default=0)

    @classmethod
    def sample(cls) -> "SetRequest":
        return cls(key="a", value=b"\x01\x02\x03")


@dataclass(frozen=True, kw_only=True)
class DelRequest(Message):
    key: str = wire(STR)

    @classmethod
    def sample(cls) -> "DelRequest":
        return cls(key="user:42")


@dataclass(frozen=True, kw_only=True)
class DelResponse(Message):
    key: str = wire(STR)

    @classmethod
    def sample(cls) -> "DelResponse":
        return cls(key="user:42")


@dataclass(frozen=True, kw_only=True)
class KeyExistsRequest(Message):
    key: str = wire(STR)

    @classmethod
    def sample(cls) -> "KeyExistsRequest":
        return cls(key="user:42")


@dataclass(frozen=True, kw_only=True)
class ClearRequest(Message):
    key: str = wire(STR)

    @classmethod
    def sample(cls) -> "ClearRequest":
        return cls(key="queue:jobs")


@dataclass(frozen=True, kw_only=True)
class AtomicOp(Message):
    """Atomically add `delta` (may be negative) to the integer stored at `key`."""

    key: str = wire(STR)
    delta: int = wire(I64)

    @classmethod
    def sample(cls) -> "AtomicOp":
        return cls(key="counter", delta=-5)


@dataclass(frozen=True, kw_only=True)
class AtomicResponse(Message):
    value: int = wire(I64)

    @classmethod
    def sample(cls) -> "AtomicResponse":
        return cls(value=37)


@dataclass(frozen=True, kw_only=True)
class ListRequest(Message):
    key: str = wire(STR)

    @classmethod
    def sample(cls) -> "ListRequest":
        return cls(key="queue:jobs")


@dataclass(frozen=True, kw_only=True)
class ListRangeRequest(Message):
    # inclusive; negative indices count from the end of the list
    key: str = wire(STR)
    start: int = wire(I32)
    stop: int = wire(I32)

    @classmethod
    def sample(cls) -> "ListRangeRequest":
        return cls(key="queue:jobs", start=0, stop=-1)


@dataclass(frozen=True, kw_only=True)
class ListResponse(Message):
    values: List[bytes] = wire(list_of(BYTES), default_factory=list)

    @classmethod
    def sample(cls) -> "ListResponse":
        return cls(values=[b"job-1", b"job-2"])


@dataclass(frozen=True, kw_only=True)
class ListPushRequest(Message):
    key: str = wire(STR)
    value: bytes = wire(BYTES)

    @classmethod
    def sample(cls) -> "ListPushRequest":
        return cls(key="queue:jobs", value=b"job-3")


@dataclass(frozen=True, kw_only=True)
class ListDelItemRequest(Message):
    key: str = wire(STR)
    value: bytes = wire(BYTES)

    @classmethod
    def sample(cls) -> "ListDelItemRequest":
        return cls(key="queue:jobs", value=b"job-1")


@dataclass(frozen=True, kw_only=True)
class ListResultResponse(Message):
    new_count: int = wire(U64)

    @classmethod
    def sample(cls) -> "ListResultResponse":
        return cls(new_count=2)


@dataclass(frozen=True, kw_only=True)
class SetAddRequest(Message):
    key: str = wire(STR)
    value: bytes = wire(BYTES)

    @classmethod
    def sample(cls) -> "SetAddRequest":
        return cls(key="tags", value=b"blue")


@dataclass(frozen=True, kw_only=True)
class SetRemoveRequest(Message):
    key: str = wire(STR)
    value: bytes = wire(BYTES)

    @classmethod
    def sample(cls) -> "SetRemoveRequest":
        return cls(key="tags", value=b"blue")


@dataclass(frozen=True, kw_only=True)
class SetUnionRequest(Message):
    keys: List[str] = wire(list_of(STR))

    @classmethod
    def sample(cls) -> "SetUnionRequest":
        return cls(keys=["tags:a", "tags:b"])


@dataclass(frozen=True, kw_only=True)
class SetIntersectionRequest(Message):
    keys: List[str] = wire(list_of(STR))

    @classmethod
    def sample(cls) -> "SetIntersectionRequest":
        return cls(keys=["tags:a", "tags:b"])


@dataclass(frozen=True, kw_only=True)
class SetQueryRequest(Message):
    key: str = wire(STR)

    @classmethod
    def sample(cls) -> "SetQueryRequest":
        return cls(key="tags")


@dataclass(frozen=True, kw_only=True)
class SetOperationResponse(Message):
    new_count: int = wire(U64)

    @classmethod
    def sample(cls) -> "SetOperationResponse":
        return cls(new_count=4)


@dataclass(frozen=True, kw_only=True)
class SetQueryResponse(Message):
    values: List[bytes] = wire(list_of(BYTES), default_factory=list)

    @classmethod
    def sample(cls) -> "SetQueryResponse":
        return cls(values=[b"blue", b"green"])


_OPERATIONS = (
    (OP_GET, GetRequest, GetResponse, "Retrieve the value stored at a key"),
    (OP_SET, SetRequest, Empty, "Store a value, optionally with an expiry"),
    (OP_DEL, DelRequest, DelResponse, "Delete a key"),
    (OP_EXISTS, KeyExistsRequest, GetResponse, "Check whether a key exists"),
    (OP_ADD, AtomicOp, AtomicResponse, "Atomically add to an integer value"),
    (OP_CLEAR, ClearRequest, DelResponse, "Remove every item from a list or set"),
    (OP_LIST, ListRequest, ListResponse, "Return every item of a list"),
    (OP_LIST_RANGE, ListRangeRequest, ListResponse, "Return a slice of a list"),
    (OP_LIST_PUSH, ListPushRequest, ListResultResponse, "Append an item to a list"),
    (OP_LIST_DEL_ITEM, ListDelItemRequest, ListResultResponse, "Delete an item from a list"),
    (OP_SET_ADD, SetAddRequest, SetOperationResponse, "Add a member to a set"),
    (OP_SET_REMOVE, SetRemoveRequest, SetOperationResponse, "Remove a member from a set"),
    (OP_SET_UNION, SetUnionRequest, SetQueryResponse, "Union of several sets"),
    (OP_SET_INTERSECT, SetIntersectionRequest, SetQueryResponse, "Intersection of several sets"),
    (OP_SET_QUERY, SetQueryRequest, SetQueryResponse, "Return every member of a set"),
)


def register(registry: "OperationRegistry") -> None:
    reg = registry.for_capability(CAPABILITY_ID)
    for name, request, response, doc in _OPERATIONS:
        reg.register(name, request, response, direction=OperationDirection.TO_PROVIDER, doc=doc)


__all__ = [
    "CAPABILITY_ID",
    "OP_GET",
    "OP_SET",
    "OP_DEL",
    "OP_EXISTS",
    "OP_ADD",
    "OP_CLEAR",
    "OP_LIST",
    "OP_LIST_RANGE",
    "OP_LIST_PUSH",
    "OP_LIST_DEL_ITEM",
    "OP_SET_ADD",
    "OP_SET_REMOVE",
    "OP_SET_UNION",
    "OP_SET_INTERSECT",
    "OP_SET_QUERY",
    "GetRequest",
    "GetResponse",
    "SetRequest",
    "DelRequest",
    "DelResponse",
    "KeyExistsRequest",
    "ClearRequest",
    "AtomicOp",
    "AtomicResponse",
    "ListRequest",
    "ListRangeRequest",
    "ListResponse",
    "ListPushRequest",
    "ListDelItemRequest",
    "ListResultResponse",
    "SetAddRequest",
    "SetRemoveRequest",
    "SetUnionRequest",
    "SetIntersectionRequest",
    "SetQueryRequest",
    "SetOperationResponse",
    "SetQueryResponse",
    "register",
]
