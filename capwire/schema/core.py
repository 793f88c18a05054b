"""
capwire.schema.core
===================

Messages exchanged between the host runtime and actors / capability providers
that are not specific to any one capability: binding configuration, health
checks, live updates and capability self-description.

Operations (capability id ``capwire:core``):

- "Core.Initialize"               CapabilityConfiguration -> Empty
- "Core.BindActor"                CapabilityConfiguration -> Empty
- "Core.RemoveActor"              CapabilityConfiguration -> Empty
- "Core.HealthRequest"            HealthRequest -> HealthResponse
- "Core.PerformLiveUpdate"        LiveUpdate -> Empty
- "Core.GetCapabilityDescriptor"  Empty -> CapabilityDescriptor

CapabilityDescriptor and OperationDescriptor keep snake_case wire keys.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

from .base import (BOOL, BYTES, STR, U32, Message, enum_of, list_of, map_of,
                   struct, wire)

if TYPE_CHECKING:  # pragma: no cover
    from ..registry import OperationRegistry

CAPABILITY_ID = "capwire:core"

# Originator of messages dispatched by the host runtime itself
SYSTEM_ACTOR = "system"

OP_INITIALIZE = "Core.Initialize"
OP_BIND_ACTOR = "Core.BindActor"
OP_REMOVE_ACTOR = "Core.RemoveActor"
OP_HEALTH_REQUEST = "Core.HealthRequest"
OP_PERFORM_LIVE_UPDATE = "Core.PerformLiveUpdate"
OP_GET_CAPABILITY_DESCRIPTOR = "Core.GetCapabilityDescriptor"

# Keys the host adds to CapabilityConfiguration.values when binding an actor,
# carrying the actor's signed claims.
CONFIG_CLAIMS_ISSUER = "__claims_issuer"
CONFIG_CLAIMS_CAPABILITIES = "__claims_capabilities"
CONFIG_CLAIMS_NAME = "__claims_name"
CONFIG_CLAIMS_EXPIRES = "__claims_expires"
CONFIG_CLAIMS_TAGS = "__claims_tags"


class OperationDirection(str, Enum):
    TO_ACTOR = "to_actor"
    TO_PROVIDER = "to_provider"
    BOTH = "both"


@dataclass(frozen=True, kw_only=True)
class Empty(Message):
    """A message with no fields; encodes as an empty mapping."""


@dataclass(frozen=True, kw_only=True)
class LiveUpdate(Message):
    """
    Sent from the system actor when a module is being replaced. The bytes, if
    valid, replace the running actor.
    """

    new_module: bytes = wire(BYTES)

    @classmethod
    def sample(cls) -> "LiveUpdate":
        return cls(new_module=b"\x00asm\x01\x00\x00\x00")


@dataclass(frozen=True, kw_only=True)
class HealthRequest(Message):
    """
    Passed to an actor to check it is responsive. More fields may be added
    later for finer-grained checks.
    """

    placeholder: bool = wire(BOOL, default=False)


@dataclass(frozen=True, kw_only=True)
class HealthResponse(Message):
    healthy: bool = wire(BOOL)
    message: Optional[str] = wire(STR, optional=True)

    @classmethod
    def sample(cls) -> "HealthResponse":
        return cls(healthy=True, message="ok")


@dataclass(frozen=True, kw_only=True)
class CapabilityConfiguration(Message):
    """
    Per-actor configuration handed to a provider. `module` is the actor's
    public key and should be treated as an opaque lookup key.
    """

    module: str = wire(STR)
    values: Dict[str, str] = wire(map_of(STR), default_factory=dict)

    @classmethod
    def sample(cls) -> "CapabilityConfiguration":
        return cls(
            module="MB4OLDIC3TCZ4Q4TGGOVAZC43VXFE2JQVRAXQMQFXUCREOOFEKOKZTY2",
            values={"URL": "nats://127.0.0.1:4222", CONFIG_CLAIMS_NAME: "echo"},
        )


@dataclass(frozen=True, kw_only=True)
class OperationDescriptor(Message):
    wire_case = "snake"

    name: str = wire(STR)
    direction: OperationDirection = wire(enum_of(OperationDirection))
    doctext: str = wire(STR, default="")

    @classmethod
    def sample(cls) -> "OperationDescriptor":
        return cls(
            name="KeyValue.Get",
            direction=OperationDirection.TO_PROVIDER,
            doctext="Retrieve a value",
        )


@dataclass(frozen=True, kw_only=True)
class CapabilityDescriptor(Message):
    """Self-description returned by a provider for Core.GetCapabilityDescriptor."""

    wire_case = "snake"

    id: str = wire(STR, default="")
    name: str = wire(STR, default="")
    version: str = wire(STR, default="")
    revision: int = wire(U32, default=0)
    long_description: str = wire(STR, default="")
    supported_operations: List[OperationDescriptor] = wire(
        list_of(struct(OperationDescriptor)), default_factory=list
    )

    @staticmethod
    def builder() -> "CapabilityDescriptorBuilder":
        return CapabilityDescriptorBuilder()

    @classmethod
    def sample(cls) -> "CapabilityDescriptor":
        return (
            cls.builder()
            .id("capwire:keyvalue")
            .name("Sample key-value provider")
            .version("0.1.0")
            .revision(3)
            .long_description("In-memory key-value store")
            .with_operation("KeyValue.Get", OperationDirection.TO_PROVIDER, "Retrieve a value")
            .build()
        )


class CapabilityDescriptorBuilder:
    """Fluent builder; every setter returns a new builder."""

    def __init__(self, descriptor: Optional[CapabilityDescriptor] = None) -> None:
        self._d = descriptor or CapabilityDescriptor()

    def id(self, capid: str) -> "CapabilityDescriptorBuilder":
        return CapabilityDescriptorBuilder(replace(self._d, id=capid))

    def name(self, name: str) -> "CapabilityDescriptorBuilder":
        return CapabilityDescriptorBuilder(replace(self._d, name=name))

    def version(self, ver: str) -> "CapabilityDescriptorBuilder":
        return CapabilityDescriptorBuilder(replace(self._d, version=ver))

    def revision(self, rev: int) -> "CapabilityDescriptorBuilder":
        return CapabilityDescriptorBuilder(replace(self._d, revision=rev))

    def long_description(self, desc: str) -> "CapabilityDescriptorBuilder":
        return CapabilityDescriptorBuilder(replace(self._d, long_description=desc))

    def with_operation(
        self, name: str, direction: OperationDirection, doctext: str
    ) -> "CapabilityDescriptorBuilder":
        op = OperationDescriptor(name=name, direction=direction, doctext=doctext)
        ops = [*self._d.supported_operations, op]
        return CapabilityDescriptorBuilder(replace(self._d, supported_operations=ops))

    def build(self) -> CapabilityDescriptor:
        return self._d


def register(registry: "OperationRegistry") -> None:
    reg = registry.for_capability(CAPABILITY_ID)
    to_provider = OperationDirection.TO_PROVIDER
    reg.register(OP_INITIALIZE, CapabilityConfiguration, Empty,
                 direction=to_provider, doc="Provider-wide configuration at host start")
    reg.register(OP_BIND_ACTOR, CapabilityConfiguration, Empty,
                 direction=to_provider, doc="Bind an actor to a provider with its configuration")
    reg.register(OP_REMOVE_ACTOR, CapabilityConfiguration, Empty,
                 direction=to_provider, doc="Release all resources held for an actor")
    reg.register(OP_HEALTH_REQUEST, HealthRequest, HealthResponse,
                 direction=OperationDirection.BOTH, doc="Liveness check")
    reg.register(OP_PERFORM_LIVE_UPDATE, LiveUpdate, Empty,
                 direction=OperationDirection.TO_ACTOR, doc="Replace a running actor module")
    reg.register(OP_GET_CAPABILITY_DESCRIPTOR, Empty, CapabilityDescriptor,
                 direction=to_provider, doc="Describe the provider and its operations")


__all__ = [
    "CAPABILITY_ID",
    "SYSTEM_ACTOR",
    "OP_INITIALIZE",
    "OP_BIND_ACTOR",
    "OP_REMOVE_ACTOR",
    "OP_HEALTH_REQUEST",
    "OP_PERFORM_LIVE_UPDATE",
    "OP_GET_CAPABILITY_DESCRIPTOR",
    "CONFIG_CLAIMS_ISSUER",
    "CONFIG_CLAIMS_CAPABILITIES",
    "CONFIG_CLAIMS_NAME",
    "CONFIG_CLAIMS_EXPIRES",
    "CONFIG_CLAIMS_TAGS",
    "OperationDirection",
    "Empty",
    "LiveUpdate",
    "HealthRequest",
    "HealthResponse",
    "CapabilityConfiguration",
    "OperationDescriptor",
    "CapabilityDescriptor",
    "CapabilityDescriptorBuilder",
    "register",
]
