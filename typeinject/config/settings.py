from __future__ import annotations

import os
from pathlib import Path

from typeinject.config.env_loader import load_env_file

LOG_IMPL_KEY = "INJECT_LOG_IMPL"
DEFAULT_LOG_IMPL = "noop"


class InjectConfig:
    """Environment-based configuration with optional overrides."""

    def __init__(self, overrides: dict[str, str] | None = None) -> None:
        self._env = dict(os.environ)
        if overrides:
            self._env.update(overrides)

    @classmethod
    def from_env_file(
        cls,
        env_name: str,
        project_root: Path | None = None,
        overrides: dict[str, str] | None = None,
    ) -> InjectConfig:
        """Layer .env/<env_name>.env over the process environment.

        Explicit *overrides* win over file values.
        """
        merged = load_env_file(env_name, project_root=project_root)
        if overrides:
            merged.update(overrides)
        return cls(overrides=merged)

    def get(self, key: str, default: str = "") -> str:
        return self._env.get(key, default)

    @property
    def log_impl(self) -> str:
        return self.get(LOG_IMPL_KEY) or DEFAULT_LOG_IMPL

    def __repr__(self) -> str:
        return f"InjectConfig(log_impl={self.log_impl!r})"
