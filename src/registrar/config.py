"""Configuration loading for Registrar."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DB_PATH = "registrar.db"
DEFAULT_LOCK_TIMEOUT = 5.0


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class Settings:
    """Registrar runtime settings.

    Attributes:
        db_path: SQLite database file, or ":memory:".
        lock_timeout: Seconds a unit of work waits for the write lock before
            failing with TransactionConflictError.
        rules_file: Optional YAML rule set applied at startup.
    """

    db_path: str = DEFAULT_DB_PATH
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    rules_file: Path | None = None

    def __post_init__(self) -> None:
        if not self.db_path:
            raise ConfigError("db_path must not be empty")
        if self.lock_timeout <= 0:
            raise ConfigError(f"lock_timeout must be positive, got {self.lock_timeout}")

    @classmethod
    def from_env(cls) -> Settings:
        """Create settings from REGISTRAR_* environment variables.

        Raises:
            ConfigError: If a variable holds an invalid value.
        """
        raw_timeout = os.environ.get("REGISTRAR_LOCK_TIMEOUT", str(DEFAULT_LOCK_TIMEOUT))
        try:
            lock_timeout = float(raw_timeout)
        except ValueError as e:
            raise ConfigError(
                f"REGISTRAR_LOCK_TIMEOUT must be a number, got '{raw_timeout}'"
            ) from e

        rules_file = os.environ.get("REGISTRAR_RULES_FILE")
        return cls(
            db_path=os.environ.get("REGISTRAR_DB_PATH", DEFAULT_DB_PATH),
            lock_timeout=lock_timeout,
            rules_file=Path(rules_file) if rules_file else None,
        )
