"""
Runtime configuration for timeotp.

Values come from the environment once per process:

    TIMEOTP_BACKEND         cryptography (default) | hashlib
    TIMEOTP_VERIFY_WORKERS  thread pool size for verification (0/1 = in-thread)
    TIMEOTP_LOG_LEVEL       level name used by :func:`configure_logging`
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

# ── Defaults ──────────────────────────────────────────────────────────────────

DEFAULT_ALGORITHM = "SHA-1"
DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30
DEFAULT_DELTA = 1
MAX_DIGITS = 10
MAX_DELTA = 10

DEFAULT_BACKEND = "cryptography"
DEFAULT_VERIFY_WORKERS = 4

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"


# ── Settings ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read-only once built."""

    backend: str = DEFAULT_BACKEND
    verify_workers: int = DEFAULT_VERIFY_WORKERS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from ``environ`` (defaults to ``os.environ``).

        Raises:
            ValueError: If ``TIMEOTP_VERIFY_WORKERS`` is not a non-negative integer.
        """
        env = os.environ if environ is None else environ

        raw_workers = env.get("TIMEOTP_VERIFY_WORKERS", str(DEFAULT_VERIFY_WORKERS))
        try:
            workers = int(raw_workers)
        except ValueError:
            raise ValueError(
                f"TIMEOTP_VERIFY_WORKERS must be an integer, got '{raw_workers}'."
            )
        if workers < 0:
            raise ValueError("TIMEOTP_VERIFY_WORKERS must be >= 0.")

        return cls(
            backend=env.get("TIMEOTP_BACKEND", DEFAULT_BACKEND).strip().lower(),
            verify_workers=workers,
            log_level=env.get("TIMEOTP_LOG_LEVEL", "INFO").strip().upper(),
        )


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return the settings for this process (read from the environment once)."""
    return Settings.from_env()


# ── Logging setup ─────────────────────────────────────────────────────────────

def configure_logging(level: Optional[str] = None) -> None:
    """
    Install the standard log format on the root logger.

    Args:
        level: Level name; falls back to ``Settings.log_level``.
    """
    logging.basicConfig(
        level=level or get_settings().log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
    # Keep secret-adjacent debug output out of the logs
    logging.getLogger("timeotp.crypto").setLevel(logging.WARNING)
