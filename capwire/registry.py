"""
capwire.registry
================

Operation registry: maps a stable operation name (e.g. "KeyValue.Get") to its
request/response schema pair.

Lifecycle
---------
A registry is populated once, single-threaded, at process start and then
frozen. After :meth:`OperationRegistry.freeze` the lookup table is a
read-only mapping, so any number of threads may call :meth:`resolve`
concurrently without coordination.

    reg = build_registry()                  # every catalog domain, frozen
    op = reg.resolve("KeyValue.Set")
    op.request, op.response                 # SetRequest, Empty

Populating
----------
Each catalog module (see capwire.schema.CATALOG_MODULES) exposes
``register(registry)``. Registering the same name twice raises
DuplicateOperation, which aborts population: it means two catalog modules
disagree and the build is inconsistent.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from threading import Lock
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Type

from .errors import DuplicateOperation, RegistryFrozen, UnknownOperation
from .schema import CATALOG_MODULES
from .schema.base import Message
from .schema.core import CapabilityDescriptor, OperationDirection

log = logging.getLogger("capwire.registry")


@dataclass(frozen=True)
class Operation:
    """
    Descriptor for one operation.

    Attributes:
        name:        Globally unique operation name ("Domain.Action").
        request:     Schema type of the request payload.
        response:    Schema type of the response payload.
        capability:  Capability id of the owning domain (e.g. "capwire:keyvalue").
        direction:   Who receives the request (actor, provider, or both).
        doc:         One-line documentation string.
    """

    name: str
    request: Type[Message]
    response: Type[Message]
    capability: str = ""
    direction: OperationDirection = OperationDirection.TO_PROVIDER
    doc: str = ""

    @property
    def domain(self) -> str:
        return self.name.split(".", 1)[0]


class _CapabilityScope:
    """Registration helper that stamps every operation with one capability id."""

    def __init__(self, registry: "OperationRegistry", capability: str) -> None:
        self._registry = registry
        self._capability = capability

    def register(
        self,
        name: str,
        request: Type[Message],
        response: Type[Message],
        *,
        direction: OperationDirection = OperationDirection.TO_PROVIDER,
        doc: str = "",
    ) -> Operation:
        return self._registry.register(
            name,
            request,
            response,
            capability=self._capability,
            direction=direction,
            doc=doc,
        )


class OperationRegistry:
    """
    Name -> Operation lookup. Mutable until frozen, read-only afterwards.
    """

    def __init__(self) -> None:
        self._ops: Dict[str, Operation] = {}
        self._view: Optional[Mapping[str, Operation]] = None

    # ---- registration API ----

    def register(
        self,
        name: str,
        request: Type[Message],
        response: Type[Message],
        *,
        capability: str = "",
        direction: OperationDirection = OperationDirection.TO_PROVIDER,
        doc: str = "",
    ) -> Operation:
        """
        Register `name` with its request/response schema pair.

        Raises DuplicateOperation if the name exists and RegistryFrozen once
        the registry has been frozen.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("operation name must be a non-empty string")
        for schema in (request, response):
            if not (isinstance(schema, type) and issubclass(schema, Message)):
                raise TypeError(f"{name}: schema {schema!r} is not a Message type")
        if self._view is not None:
            raise RegistryFrozen(name)
        if name in self._ops:
            raise DuplicateOperation(name)

        op = Operation(
            name=name,
            request=request,
            response=response,
            capability=capability,
            direction=OperationDirection(direction),
            doc=doc,
        )
        self._ops[name] = op
        log.debug(
            "operation_registered",
            extra={
                "operation": name,
                "request": request.__name__,
                "response": response.__name__,
                "capability": capability,
            },
        )
        return op

    def for_capability(self, capability: str) -> _CapabilityScope:
        return _CapabilityScope(self, capability)

    def freeze(self) -> "OperationRegistry":
        """Make the registry read-only. Idempotent; returns self."""
        if self._view is None:
            self._view = MappingProxyType(self._ops)
            log.info("registry_frozen", extra={"operations": len(self._ops)})
        return self

    @property
    def frozen(self) -> bool:
        return self._view is not None

    # ---- lookup API ----

    def resolve(self, name: str) -> Operation:
        """Return the descriptor for `name` or raise UnknownOperation."""
        try:
            return self._ops[name]
        except (KeyError, TypeError):
            raise UnknownOperation(str(name)) from None

    def names(self) -> Tuple[str, ...]:
        return tuple(self._ops.keys())

    def operations(self, capability: Optional[str] = None) -> Tuple[Operation, ...]:
        """All operations in registration order, optionally for one capability id."""
        ops: Iterable[Operation] = self._ops.values()
        if capability is not None:
            ops = (op for op in ops if op.capability == capability)
        return tuple(ops)

    def capabilities(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for op in self._ops.values():
            seen.setdefault(op.capability, None)
        return tuple(seen)

    def capability_descriptor(
        self,
        capability: str,
        *,
        name: str = "",
        version: str = "",
        revision: int = 0,
        description: str = "",
    ) -> CapabilityDescriptor:
        """
        Build a CapabilityDescriptor listing every operation registered under
        `capability`, suitable as a Core.GetCapabilityDescriptor response.
        """
        ops = self.operations(capability)
        if not ops:
            raise UnknownOperation(capability, details={"capability": capability})
        builder = (
            CapabilityDescriptor.builder()
            .id(capability)
            .name(name or capability)
            .version(version)
            .revision(revision)
            .long_description(description)
        )
        for op in ops:
            builder = builder.with_operation(op.name, op.direction, op.doc)
        return builder.build()

    def __contains__(self, name: object) -> bool:
        return name in self._ops

    def __len__(self) -> int:
        return len(self._ops)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ops)


# ----------------------------
# Startup population
# ----------------------------


def build_registry(modules: Iterable[str] = CATALOG_MODULES) -> OperationRegistry:
    """
    Populate a fresh registry from the catalog modules and freeze it.
    A missing module or a DuplicateOperation propagates and aborts startup.
    """
    reg = OperationRegistry()
    for modname in modules:
        mod = importlib.import_module(modname)
        register_fn = getattr(mod, "register", None)
        if not callable(register_fn):
            raise TypeError(f"catalog module {modname} has no register(registry) hook")
        register_fn(reg)
    return reg.freeze()


_REGISTRY: Optional[OperationRegistry] = None
_REGISTRY_LOCK = Lock()


def default_registry() -> OperationRegistry:
    """Return the process-wide registry, building it on first use."""
    global _REGISTRY
    if _REGISTRY is None:
        with _REGISTRY_LOCK:
            if _REGISTRY is None:
                _REGISTRY = build_registry()
    return _REGISTRY


def resolve(name: str) -> Operation:
    """Shortcut for ``default_registry().resolve(name)``."""
    return default_registry().resolve(name)


__all__ = [
    "Operation",
    "OperationRegistry",
    "build_registry",
    "default_registry",
    "resolve",
]
