"""
app/repositories/settings_repository.py

Persisted user settings (the exchange rate) stored as one JSON blob.
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, Field, ValidationError

from db.repositories.blob_store import BlobStore
from db.repositories.errors import BlobDecodeError

logger = logging.getLogger(__name__)


class StoredSettings(BaseModel):
    exchange_rate: float = Field(..., gt=0, allow_inf_nan=False)


class SettingsRepository:
    """
    Reads and writes :class:`StoredSettings`; falls back to *default_exchange_rate*
    until a rate has been saved.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        *,
        key: str = "adprofit_settings_v1",
        default_exchange_rate: float = 87.0,
    ) -> None:
        self._blob_store = blob_store
        self._key = key
        self._default_exchange_rate = default_exchange_rate

    def load(self) -> StoredSettings:
        raw = self._blob_store.get(self._key)
        if not raw:
            return StoredSettings(exchange_rate=self._default_exchange_rate)
        try:
            return StoredSettings.model_validate_json(raw)
        except ValidationError as exc:
            raise BlobDecodeError("Stored settings could not be decoded.") from exc

    def get_exchange_rate(self) -> float:
        return self.load().exchange_rate

    def set_exchange_rate(self, rate: float) -> StoredSettings:
        """
        Persist a new rate. Existing snapshots keep the rate they were built with.

        Raises
        ------
        ValueError: when *rate* is not a positive finite number.
        """
        if not math.isfinite(rate) or rate <= 0:
            raise ValueError(f"Exchange rate must be a positive number, got {rate!r}.")
        settings = StoredSettings(exchange_rate=rate)
        self._blob_store.set(self._key, settings.model_dump_json())
        logger.info("Exchange rate updated rate=%s", rate)
        return settings
