"""
capwire.schema.eventstreams
===========================

Append-only event stream operations (capability id ``capwire:eventstreams``):

- "EventStreams.AppendEvent"  AppendEventRequest -> WriteResponse
- "EventStreams.Read"         ReadRequest -> StreamResults   (by index)
- "EventStreams.QueryStream"  StreamQuery -> StreamResults   (by time range)
- "EventStreams.DeliverEvent" Event -> Empty                 (provider -> actor)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional

from .base import BYTES, STR, U64, Message, list_of, map_of, struct, wire
from .core import Empty, OperationDirection

if TYPE_CHECKING:  # pragma: no cover
    from ..registry import OperationRegistry

CAPABILITY_ID = "capwire:eventstreams"

OP_APPEND_EVENT = "EventStreams.AppendEvent"
OP_READ = "EventStreams.Read"
OP_QUERY_STREAM = "EventStreams.QueryStream"
OP_DELIVER_EVENT = "EventStreams.DeliverEvent"


@dataclass(frozen=True, kw_only=True)
class Event(Message):
    event_id: str = wire(STR)
    stream: str = wire(STR)
    payload: bytes = wire(BYTES, default=b"")
    values: Dict[str, str] = wire(map_of(STR), default_factory=dict)

    @classmethod
    def sample(cls) -> "Event":
        return cls(
            event_id="1700000000000-0",
            stream="stream1",
            payload=b"\x0a\x0b",
            values={"kind": "created"},
        )


@dataclass(frozen=True, kw_only=True)
class AppendEventRequest(Message):
    stream: str = wire(STR)
    payload: bytes = wire(BYTES)
    values: Dict[str, str] = wire(map_of(STR), default_factory=dict)

    @classmethod
    def sample(cls) -> "AppendEventRequest":
        return cls(stream="stream1", payload=b"\x0a\x0b", values={"kind": "created"})


@dataclass(frozen=True, kw_only=True)
class WriteResponse(Message):
    event_id: str = wire(STR)

    @classmethod
    def sample(cls) -> "WriteResponse":
        return cls(event_id="1700000000000-0")


@dataclass(frozen=True, kw_only=True)
class ReadRequest(Message):
    stream: str = wire(STR)
    start_index: int = wire(U64)
    # 0 returns as many events as the provider allows
    count: int = wire(U64, default=0)

    @classmethod
    def sample(cls) -> "ReadRequest":
        return cls(stream="stream1", start_index=10, count=100)


@dataclass(frozen=True, kw_only=True)
class TimeRange(Message):
    # seconds since the epoch
    min_time: int = wire(U64)
    max_time: int = wire(U64)

    @classmethod
    def sample(cls) -> "TimeRange":
        return cls(min_time=0, max_time=1000)


@dataclass(frozen=True, kw_only=True)
class StreamQuery(Message):
    stream_id: str = wire(STR)
    range: Optional[TimeRange] = wire(struct(TimeRange), optional=True)
    # 0 returns as many events as the provider allows; providers document their cap
    count: int = wire(U64)

    @classmethod
    def sample(cls) -> "StreamQuery":
        return cls(stream_id="stream1", range=TimeRange.sample(), count=42)


@dataclass(frozen=True, kw_only=True)
class StreamResults(Message):
    events: List[Event] = wire(list_of(struct(Event)), default_factory=list)

    @classmethod
    def sample(cls) -> "StreamResults":
        return cls(events=[Event.sample()])


def register(registry: "OperationRegistry") -> None:
    reg = registry.for_capability(CAPABILITY_ID)
    to_provider = OperationDirection.TO_PROVIDER
    reg.register(OP_APPEND_EVENT, AppendEventRequest, WriteResponse,
                 direction=to_provider, doc="Append an event to a stream")
    reg.register(OP_READ, ReadRequest, StreamResults,
                 direction=to_provider, doc="Read events starting at an index")
    reg.register(OP_QUERY_STREAM, StreamQuery, StreamResults,
                 direction=to_provider, doc="Query events, optionally within a time range")
    reg.register(OP_DELIVER_EVENT, Event, Empty,
                 direction=OperationDirection.TO_ACTOR, doc="Deliver a stream event to an actor")


__all__ = [
    "CAPABILITY_ID",
    "OP_APPEND_EVENT",
    "OP_READ",
    "OP_QUERY_STREAM",
    "OP_DELIVER_EVENT",
    "Event",
    "AppendEventRequest",
    "WriteResponse",
    "ReadRequest",
    "TimeRange",
    "StreamQuery",
    "StreamResults",
    "register",
]
