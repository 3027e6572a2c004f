"""Configuration for the servicebox container.

Provides resolution limits and locking behaviour, loadable from the
environment or an env file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "SERVICEBOX_"
DEFAULT_MAX_DEPTH = 64


@dataclass
class ContainerConfig:
    """Container configuration.

    Args:
        max_depth: Maximum nesting of resolutions before giving up
        thread_safe: Serialize resolve-once construction per service id
        detect_cycles: Fail when a service re-enters its own resolution
        log_level: Level used when configuring logging from this config
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    thread_safe: bool = True
    detect_cycles: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        if self.max_depth < 1:
            raise ValueError("max_depth must be >= 1")

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> ContainerConfig:
        """Load configuration from environment variables.

        Values in ``env_file`` are read first; the process environment
        overrides them.

        Args:
            env_file: Optional KEY=VALUE file

        Returns:
            ContainerConfig instance
        """
        values: dict[str, str] = {}
        if env_file is not None:
            values.update(cls._load_env_file(env_file))
        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX):
                values[key] = value

        return cls(
            max_depth=cls._parse_int(values.get(f"{ENV_PREFIX}MAX_DEPTH"), DEFAULT_MAX_DEPTH),
            thread_safe=cls._parse_bool(values.get(f"{ENV_PREFIX}THREAD_SAFE"), True),
            detect_cycles=cls._parse_bool(values.get(f"{ENV_PREFIX}DETECT_CYCLES"), True),
            log_level=values.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
        )

    @staticmethod
    def _load_env_file(path: Path) -> dict[str, str]:
        """Load a KEY=VALUE env file."""
        if not path.exists():
            return {}

        values: dict[str, str] = {}
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[7:]
            if "=" in line:
                key, value = line.split("=", 1)
                values[key.strip()] = value.strip().strip('"').strip("'")

        return values

    @staticmethod
    def _parse_int(raw: str | None, default: int) -> int:
        if raw is None:
            return default
        try:
            value = int(raw)
        except ValueError:
            return default
        return value if value >= 1 else default

    @staticmethod
    def _parse_bool(raw: str | None, default: bool) -> bool:
        if raw is None:
            return default
        return raw.strip().lower() in ("1", "true", "yes")
