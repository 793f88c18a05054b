"""
capwire.schema.http
===================

HTTP request/response messages shared by two capabilities:

- ``capwire:http_server``  "HttpServer.HandleRequest"  HttpRequest -> HttpResponse
  (provider -> actor: an inbound request for the actor to answer)
- ``capwire:http_client``  "HttpClient.PerformRequest" HttpRequest -> HttpResponse
  (actor -> provider: an outbound request)

HttpResponse carries shortcut constructors for the common statuses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from .base import BYTES, STR, U32, Message, map_of, wire
from .core import OperationDirection

if TYPE_CHECKING:  # pragma: no cover
    from ..registry import OperationRegistry

SERVER_CAPABILITY_ID = "capwire:http_server"
CLIENT_CAPABILITY_ID = "capwire:http_client"

OP_HANDLE_REQUEST = "HttpServer.HandleRequest"
OP_PERFORM_REQUEST = "HttpClient.PerformRequest"


def _sample_headers() -> Dict[str, str]:
    return {"accept": "application/json", "dummy": "value"}


@dataclass(frozen=True, kw_only=True)
class HttpRequest(Message):
    # e.g. GET, PUT, DELETE
    method: str = wire(STR)
    # path (server) or full URL (client); leading slashes are not trimmed
    path: str = wire(STR)
    query_string: str = wire(STR, default="")
    headers: Dict[str, str] = wire(map_of(STR), default_factory=dict)
    body: bytes = wire(BYTES, default=b"")

    @classmethod
    def sample(cls) -> "HttpRequest":
        return cls(
            method="GET",
            path="/foo",
            query_string="a=1&b=2",
            headers=_sample_headers(),
            body=b"This is the body of a request",
        )


@dataclass(frozen=True, kw_only=True)
class HttpResponse(Message):
    status: int = wire(U32)
    # reason phrase, e.g. "OK"
    reason: Optional[str] = wire(STR, optional=True)
    headers: Dict[str, str] = wire(map_of(STR), default_factory=dict)
    body: bytes = wire(BYTES, default=b"")

    @classmethod
    def sample(cls) -> "HttpResponse":
        return cls(
            status=200,
            reason="OK",
            headers=_sample_headers(),
            body=b"This is the body of a response",
        )

    @classmethod
    def json(cls, payload: Any, status: int = 200, reason: str = "OK") -> "HttpResponse":
        """A response whose body is `payload` serialized as JSON."""
        return cls(
            status=status,
            reason=reason,
            headers={"content-type": "application/json"},
            body=json.dumps(payload, separators=(",", ":")).encode("utf-8"),
        )

    @classmethod
    def ok(cls) -> "HttpResponse":
        return cls(status=200, reason="OK")

    @classmethod
    def not_found(cls) -> "HttpResponse":
        return cls(status=404, reason="Not Found")

    @classmethod
    def bad_request(cls) -> "HttpResponse":
        return cls(status=400, reason="Bad Request")

    @classmethod
    def internal_server_error(cls, msg: str) -> "HttpResponse":
        return cls(status=500, reason="Internal Server Error", body=msg.encode("utf-8"))


def register(registry: "OperationRegistry") -> None:
    registry.for_capability(SERVER_CAPABILITY_ID).register(
        OP_HANDLE_REQUEST, HttpRequest, HttpResponse,
        direction=OperationDirection.TO_ACTOR, doc="Handle an inbound HTTP request",
    )
    registry.for_capability(CLIENT_CAPABILITY_ID).register(
        OP_PERFORM_REQUEST, HttpRequest, HttpResponse,
        direction=OperationDirection.TO_PROVIDER, doc="Perform an outbound HTTP request",
    )


__all__ = [
    "SERVER_CAPABILITY_ID",
    "CLIENT_CAPABILITY_ID",
    "OP_HANDLE_REQUEST",
    "OP_PERFORM_REQUEST",
    "HttpRequest",
    "HttpResponse",
    "register",
]
