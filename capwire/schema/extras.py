"""
capwire.schema.extras
=====================

Small utilities a sandboxed actor cannot produce itself (capability id
``capwire:extras``):

- "Extras.RequestGuid"      GenerateGuidRequest -> GenerateGuidResponse
- "Extras.RequestRandom"    RandomRequest -> RandomResponse  (min..max inclusive)
- "Extras.RequestSequence"  SequenceRequest -> SequenceResponse
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .base import STR, U32, U64, Message, wire
from .core import OperationDirection

if TYPE_CHECKING:  # pragma: no cover
    from ..registry import OperationRegistry

CAPABILITY_ID = "capwire:extras"

OP_REQUEST_GUID = "Extras.RequestGuid"
OP_REQUEST_RANDOM = "Extras.RequestRandom"
OP_REQUEST_SEQUENCE = "Extras.RequestSequence"


@dataclass(frozen=True, kw_only=True)
class GenerateGuidRequest(Message):
    pass


@dataclass(frozen=True, kw_only=True)
class GenerateGuidResponse(Message):
    value: str = wire(STR)

    @classmethod
    def sample(cls) -> "GenerateGuidResponse":
        return cls(value="4f7c1d2e-93b3-4c61-8f0e-7a0b5c9d2e11")


@dataclass(frozen=True, kw_only=True)
class RandomRequest(Message):
    min: int = wire(U32)
    max: int = wire(U32)

    @classmethod
    def sample(cls) -> "RandomRequest":
        return cls(min=1, max=6)


@dataclass(frozen=True, kw_only=True)
class RandomResponse(Message):
    value: int = wire(U32)

    @classmethod
    def sample(cls) -> "RandomResponse":
        return cls(value=4)


@dataclass(frozen=True, kw_only=True)
class SequenceRequest(Message):
    pass


@dataclass(frozen=True, kw_only=True)
class SequenceResponse(Message):
    value: int = wire(U64)

    @classmethod
    def sample(cls) -> "SequenceResponse":
        return cls(value=1001)


def register(registry: "OperationRegistry") -> None:
    reg = registry.for_capability(CAPABILITY_ID)
    to_provider = OperationDirection.TO_PROVIDER
    reg.register(OP_REQUEST_GUID, GenerateGuidRequest, GenerateGuidResponse,
                 direction=to_provider, doc="Generate a GUID")
    reg.register(OP_REQUEST_RANDOM, RandomRequest, RandomResponse,
                 direction=to_provider, doc="Random number within an inclusive range")
    reg.register(OP_REQUEST_SEQUENCE, SequenceRequest, SequenceResponse,
                 direction=to_provider, doc="Next value of a monotonically increasing sequence")


__all__ = [
    "CAPABILITY_ID",
    "OP_REQUEST_GUID",
    "OP_REQUEST_RANDOM",
    "OP_REQUEST_SEQUENCE",
    "GenerateGuidRequest",
    "GenerateGuidResponse",
    "RandomRequest",
    "RandomResponse",
    "SequenceRequest",
    "SequenceResponse",
    "register",
]
