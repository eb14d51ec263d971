from typing import Any

from typeinject.logger.interface import LoggingInterface


class NoopLogger(LoggingInterface):
    """Discards everything. Default for registries built without a logger."""

    def debug(self, msg: str, **ctx: Any) -> None:
        pass

    def warn(self, msg: str, **ctx: Any) -> None:
        pass
