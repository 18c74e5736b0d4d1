"""
app/config.py

Environment-driven settings for storage and reconciliation.

    ADPROFIT_BLOB_BACKEND           memory | file | database   (default file)
    ADPROFIT_BLOB_DIR               directory for the file backend
    ADPROFIT_SNAPSHOTS_KEY          blob key holding the snapshot list
    ADPROFIT_SETTINGS_KEY           blob key holding user settings
    ADPROFIT_DEFAULT_EXCHANGE_RATE  rate used until one is saved
    ADPROFIT_TREND_MONTHS           month buckets kept by the monthly trend
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_EXCHANGE_RATE: float = 87.0
"""Source-currency units per one target-currency unit."""

BLOB_BACKENDS: frozenset[str] = frozenset({"memory", "file", "database"})


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _env(name: str) -> str | None:
    """
    Return the stripped value of *name*, or ``None`` when unset or blank.
    """

    _load_env_once()
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_int(name: str, default: int, *, minimum: int) -> int:
    raw_value = _env(name)
    try:
        value = int(raw_value) if raw_value is not None else default
    except ValueError:
        return default
    return max(minimum, value)


def _env_positive_float(name: str, default: float) -> float:
    raw_value = _env(name)
    if raw_value is None:
        return default
    try:
        value = float(raw_value)
    except ValueError:
        return default
    return value if math.isfinite(value) and value > 0 else default


@dataclass(frozen=True)
class StorageSettings:
    """
    Where snapshots and settings are persisted.
    """

    backend: str = "file"
    blob_dir: str = "data/blobs"
    snapshots_key: str = "adprofit_snapshots_v3"
    settings_key: str = "adprofit_settings_v1"


@dataclass(frozen=True)
class AdProfitSettings:
    default_exchange_rate: float = DEFAULT_EXCHANGE_RATE
    trend_months: int = 12


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """
    Return cached storage settings. An unknown backend name falls back to
    ``file``; startup validation in ``app.main`` reports it separately.
    """

    defaults = StorageSettings()
    backend = (_env("ADPROFIT_BLOB_BACKEND") or defaults.backend).lower()
    return StorageSettings(
        backend=backend if backend in BLOB_BACKENDS else defaults.backend,
        blob_dir=_env("ADPROFIT_BLOB_DIR") or defaults.blob_dir,
        snapshots_key=_env("ADPROFIT_SNAPSHOTS_KEY") or defaults.snapshots_key,
        settings_key=_env("ADPROFIT_SETTINGS_KEY") or defaults.settings_key,
    )


@lru_cache(maxsize=1)
def get_adprofit_settings() -> AdProfitSettings:
    return AdProfitSettings(
        default_exchange_rate=_env_positive_float(
            "ADPROFIT_DEFAULT_EXCHANGE_RATE", DEFAULT_EXCHANGE_RATE
        ),
        trend_months=_env_int("ADPROFIT_TREND_MONTHS", 12, minimum=1),
    )
