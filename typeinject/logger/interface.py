from abc import ABC, abstractmethod
from typing import Any


class LoggingInterface(ABC):
    """Sink for registry events: state changes at debug, failed lookups at warn.

    Context travels as keyword arguments, e.g. ``warn("value not found", type="Clock")``.
    """

    @abstractmethod
    def debug(self, msg: str, **ctx: Any) -> None: ...

    @abstractmethod
    def warn(self, msg: str, **ctx: Any) -> None: ...
