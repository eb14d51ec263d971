import sys
import time
from typing import Any, TextIO

from typeinject.logger.interface import LoggingInterface

_DIM = "\033[2m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"


class PrettyLogger(LoggingInterface):
    """One colored line per registry event, for tracing resolution by hand.

    Writes to *stream*, or to stderr as it is at call time.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def debug(self, msg: str, **ctx: Any) -> None:
        self._write(_DIM, "debug", msg, ctx)

    def warn(self, msg: str, **ctx: Any) -> None:
        self._write(_YELLOW, "warn", msg, ctx)

    def _write(self, color: str, level: str, msg: str, ctx: dict[str, Any]) -> None:
        fields = " ".join(f"{k}={v!r}" for k, v in ctx.items())
        line = f"{color}{time.strftime('%H:%M:%S')} inject {level:<5}{_RESET} {msg}"
        if fields:
            line = f"{line} {fields}"
        print(line, file=self._stream or sys.stderr)
