"""Configuration objects and constants for the downloader."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger("json_shake")

DEFAULT_TIMEOUT = 30.0
DOWNLOAD_DIR_ENV = "JSON_SHAKE_DOWNLOAD_DIR"


def limit_to_bytes(limit_mb: float) -> int:
    """Convert a megabyte limit into a byte budget (0 means unlimited).

    Non-finite limits are unlimited; any positive limit is at least one byte.
    """
    if not math.isfinite(limit_mb) or limit_mb <= 0:
        return 0
    return max(1, int(limit_mb * 1024 * 1024))


@dataclass
class DownloadConfig:
    """Settings that control fetching and re-encoding for one run."""

    output_dir: Path
    limit_mb: float = 0.0
    timeout: float = DEFAULT_TIMEOUT

    @property
    def limit_bytes(self) -> int:
        return limit_to_bytes(self.limit_mb)


def _resolve_env_override() -> Optional[Path]:
    override = os.getenv(DOWNLOAD_DIR_ENV)
    if not override:
        return None
    override_path = Path(override).expanduser()
    if override_path.is_dir():
        logger.debug("%s override detected at %s", DOWNLOAD_DIR_ENV, override_path)
        return override_path
    logger.warning(
        "%s is set to %s but the directory does not exist; falling back to ~/Downloads",
        DOWNLOAD_DIR_ENV,
        override_path,
    )
    return None


def resolve_download_dir() -> Path:
    """Return the directory under which per-document folders are created."""
    env_override = _resolve_env_override()
    if env_override:
        return env_override
    return Path.home() / "Downloads"
