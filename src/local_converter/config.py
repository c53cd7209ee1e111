"""Environment-driven runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import platformdirs

from local_converter.types import MEGABYTE

APP_NAME = "local-converter"

ENV_DATA_DIR = "LOCAL_CONVERTER_DATA_DIR"
ENV_STORAGE_QUOTA_MB = "LOCAL_CONVERTER_STORAGE_QUOTA_MB"
ENV_LOG_LEVEL = "LOCAL_CONVERTER_LOG_LEVEL"


@dataclass(frozen=True)
class AppConfig:
    """Where and how the application keeps its local state.

    Parameters
    ----------
    data_dir : Path
        Directory holding settings, history and artifacts.
    storage_quota_bytes : int | None, default=None
        Upper bound for everything kept in ``data_dir``. ``None`` disables it.
    log_level : str, default="WARNING"
        Default logging level for the CLI.
    """

    data_dir: Path
    storage_quota_bytes: int | None = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> AppConfig:
        """Build configuration from ``LOCAL_CONVERTER_*`` environment variables."""
        raw_dir = os.getenv(ENV_DATA_DIR, "").strip()
        data_dir = Path(raw_dir) if raw_dir else Path(platformdirs.user_data_dir(APP_NAME))
        return cls(
            data_dir=data_dir.expanduser().resolve(),
            storage_quota_bytes=_parse_quota(os.getenv(ENV_STORAGE_QUOTA_MB)),
            log_level=os.getenv(ENV_LOG_LEVEL, "WARNING").strip().upper() or "WARNING",
        )


def _parse_quota(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        megabytes = float(value)
    except ValueError as exc:
        raise ValueError(f"{ENV_STORAGE_QUOTA_MB} must be a number of megabytes") from exc
    if megabytes <= 0:
        raise ValueError(f"{ENV_STORAGE_QUOTA_MB} must be positive")
    return int(megabytes * MEGABYTE)
