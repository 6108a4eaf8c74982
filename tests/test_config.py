"""Tests for timeotp.config."""

import logging

import pytest

from timeotp.config import (
    DEFAULT_BACKEND,
    DEFAULT_VERIFY_WORKERS,
    Settings,
    configure_logging,
    get_settings,
)


# ── Settings ──────────────────────────────────────────────────────────────────

def test_settings_defaults() -> None:
    settings = Settings.from_env({})
    assert settings.backend == DEFAULT_BACKEND
    assert settings.verify_workers == DEFAULT_VERIFY_WORKERS
    assert settings.log_level == "INFO"


def test_settings_from_env() -> None:
    settings = Settings.from_env({
        "TIMEOTP_BACKEND": " Hashlib ",
        "TIMEOTP_VERIFY_WORKERS": "0",
        "TIMEOTP_LOG_LEVEL": "debug",
    })
    assert settings.backend == "hashlib"
    assert settings.verify_workers == 0
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("workers", ["many", "-1"])
def test_settings_invalid_workers(workers: str) -> None:
    with pytest.raises(ValueError, match="TIMEOTP_VERIFY_WORKERS"):
        Settings.from_env({"TIMEOTP_VERIFY_WORKERS": workers})


def test_settings_are_frozen() -> None:
    with pytest.raises(AttributeError):
        Settings().backend = "hashlib"  # type: ignore[misc]


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


# ── Logging ───────────────────────────────────────────────────────────────────

def test_configure_logging_quiets_crypto_logger() -> None:
    configure_logging("DEBUG")
    assert logging.getLogger("timeotp.crypto").level == logging.WARNING
