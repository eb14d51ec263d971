"""Root-level pytest fixtures shared by every test package."""

from __future__ import annotations

import pytest

from typeinject.logger.memory_logger import MemoryLogger
from typeinject.registry import Registry


@pytest.fixture
def memory_logger() -> MemoryLogger:
    return MemoryLogger()


@pytest.fixture
def registry(memory_logger: MemoryLogger) -> Registry:
    """Empty registry whose log entries land in ``memory_logger``."""
    return Registry(logger=memory_logger)
