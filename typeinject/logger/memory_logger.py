from dataclasses import dataclass, field
from typing import Any

from typeinject.logger.interface import LoggingInterface


@dataclass(frozen=True)
class LogEntry:
    level: str
    msg: str
    ctx: dict[str, Any] = field(default_factory=dict)


class MemoryLogger(LoggingInterface):
    """Keeps registry events in a list so tests can assert on them."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def debug(self, msg: str, **ctx: Any) -> None:
        self.entries.append(LogEntry("DEBUG", msg, ctx))

    def warn(self, msg: str, **ctx: Any) -> None:
        self.entries.append(LogEntry("WARN", msg, ctx))

    @property
    def messages(self) -> list[str]:
        return [e.msg for e in self.entries]

    def at_level(self, level: str) -> list[LogEntry]:
        return [e for e in self.entries if e.level == level]
