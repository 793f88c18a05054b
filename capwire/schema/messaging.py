"""
capwire.schema.messaging
========================

Message broker operations (capability id ``capwire:messaging``):

- "Messaging.Publish"         PublishMessage -> PublishResponse
- "Messaging.DeliverMessage"  PublishMessage -> Empty        (provider -> actor)
- "Messaging.Request"         RequestMessage -> PublishMessage (the reply)
- "Messaging.Subscribe"       SubscribeRequest -> SubscribeResponse
- "Messaging.Unsubscribe"     UnsubscribeRequest -> Empty
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .base import BOOL, BYTES, I64, STR, Message, wire
from .core import Empty, OperationDirection

if TYPE_CHECKING:  # pragma: no cover
    from ..registry import OperationRegistry

CAPABILITY_ID = "capwire:messaging"

OP_PUBLISH = "Messaging.Publish"
OP_DELIVER_MESSAGE = "Messaging.DeliverMessage"
OP_REQUEST = "Messaging.Request"
OP_SUBSCRIBE = "Messaging.Subscribe"
OP_UNSUBSCRIBE = "Messaging.Unsubscribe"


@dataclass(frozen=True, kw_only=True)
class PublishMessage(Message):
    """A broker message. Body encoding is agreed by applications out of band."""

    subject: str = wire(STR)
    reply_to: Optional[str] = wire(STR, optional=True)
    body: bytes = wire(BYTES, default=b"")

    @classmethod
    def sample(cls) -> "PublishMessage":
        return cls(subject="user.profile.175", reply_to="_INBOX.7f3a", body=b"hello")


@dataclass(frozen=True, kw_only=True)
class PublishResponse(Message):
    published: bool = wire(BOOL)

    @classmethod
    def sample(cls) -> "PublishResponse":
        return cls(published=True)


@dataclass(frozen=True, kw_only=True)
class RequestMessage(Message):
    subject: str = wire(STR)
    body: bytes = wire(BYTES, default=b"")
    # milliseconds to wait for a reply
    timeout_ms: int = wire(I64, key="timeout")

    @classmethod
    def sample(cls) -> "RequestMessage":
        return cls(subject="user.profile.175", body=b"raw query bytes", timeout_ms=100)


@dataclass(frozen=True, kw_only=True)
class SubscribeRequest(Message):
    subject: str = wire(STR)
    queue_group: Optional[str] = wire(STR, optional=True)

    @classmethod
    def sample(cls) -> "SubscribeRequest":
        return cls(subject="orders.>", queue_group="workers")


@dataclass(frozen=True, kw_only=True)
class SubscribeResponse(Message):
    subscription_id: str = wire(STR)

    @classmethod
    def sample(cls) -> "SubscribeResponse":
        return cls(subscription_id="sub-1")


@dataclass(frozen=True, kw_only=True)
class UnsubscribeRequest(Message):
    subscription_id: str = wire(STR)

    @classmethod
    def sample(cls) -> "UnsubscribeRequest":
        return cls(subscription_id="sub-1")


def register(registry: "OperationRegistry") -> None:
    reg = registry.for_capability(CAPABILITY_ID)
    to_provider = OperationDirection.TO_PROVIDER
    reg.register(OP_PUBLISH, PublishMessage, PublishResponse,
                 direction=to_provider, doc="Publish a message on a subject")
    reg.register(OP_DELIVER_MESSAGE, PublishMessage, Empty,
                 direction=OperationDirection.TO_ACTOR, doc="Deliver a subscribed message to an actor")
    reg.register(OP_REQUEST, RequestMessage, PublishMessage,
                 direction=to_provider, doc="Publish a request and wait for one reply")
    reg.register(OP_SUBSCRIBE, SubscribeRequest, SubscribeResponse,
                 direction=to_provider, doc="Subscribe to a subject, optionally in a queue group")
    reg.register(OP_UNSUBSCRIBE, UnsubscribeRequest, Empty,
                 direction=to_provider, doc="Cancel a subscription")


__all__ = [
    "CAPABILITY_ID",
    "OP_PUBLISH",
    "OP_DELIVER_MESSAGE",
    "OP_REQUEST",
    "OP_SUBSCRIBE",
    "OP_UNSUBSCRIBE",
    "PublishMessage",
    "PublishResponse",
    "RequestMessage",
    "SubscribeRequest",
    "SubscribeResponse",
    "UnsubscribeRequest",
    "register",
]
