"""Runtime settings, read from the environment (and an optional ``.env``)."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[2] / "data"

ENV_PREFIX = "ORDERDESK_"


def _default_database_url() -> str:
    return f"sqlite:///{_DATA_DIR / 'orderdesk.db'}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    order_max_attempts: int = 5
    retry_base_delay: float = 0.05
    retry_max_delay: float = 1.0
    order_timeout: float | None = 10.0
    sqlite_busy_timeout: float = 5.0
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``ORDERDESK_*`` variables.

        A ``.env`` file in the working directory is loaded first when no
        explicit mapping is given; real environment variables win.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        def get(name: str, default: str) -> str:
            return environ.get(ENV_PREFIX + name, default).strip()

        timeout = _to_float("ORDER_TIMEOUT", get("ORDER_TIMEOUT", "10"))
        settings = cls(
            database_url=get("DATABASE_URL", "") or _default_database_url(),
            order_max_attempts=_to_int("ORDER_MAX_ATTEMPTS", get("ORDER_MAX_ATTEMPTS", "5")),
            retry_base_delay=_to_float("RETRY_BASE_DELAY", get("RETRY_BASE_DELAY", "0.05")),
            retry_max_delay=_to_float("RETRY_MAX_DELAY", get("RETRY_MAX_DELAY", "1.0")),
            order_timeout=timeout if timeout > 0 else None,
            sqlite_busy_timeout=_to_float(
                "SQLITE_BUSY_TIMEOUT", get("SQLITE_BUSY_TIMEOUT", "5")
            ),
            log_level=get("LOG_LEVEL", "INFO").upper(),
            log_json=get("LOG_JSON", "false").lower() in ("1", "true", "yes", "y"),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.order_max_attempts < 1:
            raise ValueError(f"{ENV_PREFIX}ORDER_MAX_ATTEMPTS must be at least 1")
        if self.retry_base_delay < 0 or self.retry_max_delay < 0:
            raise ValueError("Retry delays cannot be negative")
        if self.sqlite_busy_timeout < 0:
            raise ValueError(f"{ENV_PREFIX}SQLITE_BUSY_TIMEOUT cannot be negative")
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def sqlite_path(self) -> Path | None:
        prefix = "sqlite:///"
        if not self.database_url.startswith(prefix):
            return None
        path = self.database_url[len(prefix):]
        return Path(path) if path and path != ":memory:" else None


def _to_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


def _to_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from exc
