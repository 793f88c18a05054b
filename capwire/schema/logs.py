"""
capwire.schema.logs
===================

Actor log output (capability id ``capwire:logging``):

- "Logging.WriteLog"  LogEntry -> Empty
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .base import STR, Message, enum_of, wire
from .core import Empty, OperationDirection

if TYPE_CHECKING:  # pragma: no cover
    from ..registry import OperationRegistry

CAPABILITY_ID = "capwire:logging"

OP_WRITE_LOG = "Logging.WriteLog"


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True, kw_only=True)
class LogEntry(Message):
    level: LogLevel = wire(enum_of(LogLevel))
    text: str = wire(STR)

    @classmethod
    def sample(cls) -> "LogEntry":
        return cls(level=LogLevel.DEBUG, text="This is a debug message")


def register(registry: "OperationRegistry") -> None:
    registry.for_capability(CAPABILITY_ID).register(
        OP_WRITE_LOG, LogEntry, Empty,
        direction=OperationDirection.TO_PROVIDER, doc="Write a log entry",
    )


__all__ = ["CAPABILITY_ID", "OP_WRITE_LOG", "LogLevel", "LogEntry", "register"]
