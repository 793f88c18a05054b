"""
capwire.samples
===============

Golden sample bundles for cross-checking independently built components.

One side writes a bundle with :func:`generate_bundle`; the other side reads
it with :func:`validate_bundle`, which binds every entry into its schema and
compares it with its own ``sample()``. Any difference means the two builds
disagree about the wire layout of that operation.

Bundle layout (a single wire mapping)::

    {
      "version": "0.1.0",
      "KeyValue.Get": {"request": {...}, "response": {...}},
      ...
    }

Operations present in the bundle but unknown to the reader are ignored, so an
older reader can validate a bundle written by a newer catalog.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import CodecError, SchemaMismatch
from .registry import OperationRegistry, default_registry
from .version import __version__
from .wire import codec as wire

log = logging.getLogger("capwire.samples")


def generate_bundle(registry: Optional[OperationRegistry] = None) -> bytes:
    reg = registry if registry is not None else default_registry()
    bundle: Dict[str, Any] = {"version": __version__}
    for op in reg.operations():
        bundle[op.name] = {
            "request": op.request.sample().to_value(),
            "response": op.response.sample().to_value(),
        }
    return wire.encode(bundle)


def validate_bundle(
    data: bytes, registry: Optional[OperationRegistry] = None
) -> List[str]:
    """
    Return the names of operations whose entries are missing or do not bind
    to values equal to the local samples. An empty list means full agreement.
    Raises MalformedInput if `data` is not a wire Value at all.
    """
    reg = registry if registry is not None else default_registry()
    bundle = wire.unpackb(data)
    if not isinstance(bundle, dict):
        raise SchemaMismatch("sample bundle must be a mapping", schema="bundle")

    log.info(
        "validating_sample_bundle",
        extra={"writer_version": bundle.get("version"), "reader_version": __version__},
    )
    failed: List[str] = []
    for op in reg.operations():
        entry = bundle.get(op.name)
        if not isinstance(entry, dict):
            log.warning("sample_missing", extra={"operation": op.name})
            failed.append(op.name)
            continue
        try:
            request = op.request.from_value(entry.get("request"))
            response = op.response.from_value(entry.get("response"))
        except CodecError as e:
            log.warning(
                "sample_unbindable",
                extra={"operation": op.name, "code": e.code, "error": e.message},
            )
            failed.append(op.name)
            continue
        if request != op.request.sample() or response != op.response.sample():
            log.warning("sample_differs", extra={"operation": op.name})
            failed.append(op.name)

    unknown = [k for k in bundle if k != "version" and k not in reg]
    if unknown:
        log.debug("sample_bundle_unknown_operations", extra={"operations": unknown})
    return failed


def write_bundle(path: Union[str, Path], registry: Optional[OperationRegistry] = None) -> Path:
    p = Path(path)
    p.write_bytes(generate_bundle(registry))
    return p


def read_bundle(path: Union[str, Path], registry: Optional[OperationRegistry] = None) -> List[str]:
    return validate_bundle(Path(path).read_bytes(), registry)


__all__ = ["generate_bundle", "validate_bundle", "write_bundle", "read_bundle"]
