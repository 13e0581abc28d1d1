"""Persisted city settings.

The store owns the ``CitySettings`` snapshot. Calculations receive the
snapshot (or values read from it) and never mutate it; every change goes
through one of the ``set_*`` / ``reset_*`` methods, which build a new
snapshot, write it to disk and only then make it current.

On disk the settings live in a JSON key-value document under a fixed key, so
other entries of the same document survive a save.
"""

from __future__ import annotations

import json
import math
import os
from pathlib import Path
from typing import Any

from immofind.core.exceptions import InvalidParameterError, SettingsError
from immofind.core.logging import get_logger
from immofind.core.settings import get_settings
from immofind.domain.models.city_settings import (
    DEFAULT_RENT_RATES,
    CitySettings,
    LoanDefaultKey,
    LoanDefaults,
)

log = get_logger(__name__)

STORAGE_KEY = "immo-find-city-settings"


class SettingsStore:
    """Load, hand out and persist the city settings snapshot."""

    def __init__(self, path: str | Path | None = None):
        """Initialize the store and load the persisted snapshot.

        Args:
            path: Settings document. Defaults to ``AppSettings.settings_file``.
        """
        self.path = Path(path) if path is not None else get_settings().settings_file
        self._snapshot = self._load()

    @property
    def snapshot(self) -> CitySettings:
        return self._snapshot

    def get_rent_rate(self, city: str) -> float:
        return self._snapshot.get_rent_rate(city)

    def get_loan_defaults(self) -> LoanDefaults:
        return self._snapshot.get_loan_defaults()

    # --- Mutations ---

    def set_rent_rate(self, city: str, rent_per_sqm: float) -> CitySettings:
        """Set a city's rent per m² and persist.

        Raises:
            InvalidParameterError: Empty city or a rate that is not a positive number.
            SettingsError: The settings document could not be written.
        """
        if not city or not city.strip():
            raise InvalidParameterError("city", city, "city name must not be empty")
        if not _is_finite_number(rent_per_sqm) or rent_per_sqm <= 0:
            raise InvalidParameterError("rent_per_sqm", rent_per_sqm, "must be a positive number")

        updated = self._snapshot.with_rent_rate(city.strip(), float(rent_per_sqm))
        self._commit(updated)
        log.info("rent_rate_updated", city=city.strip(), rent_per_sqm=float(rent_per_sqm))
        return updated

    def set_loan_default(self, key: LoanDefaultKey, value: float) -> CitySettings:
        """Set the default interest or repayment rate (in percent) and persist."""
        if key not in LoanDefaults.model_fields:
            raise InvalidParameterError("key", key, "unknown loan default")
        if not _is_finite_number(value) or not 0 <= value <= 100:
            raise InvalidParameterError(key, value, "must be a percentage between 0 and 100")

        updated = self._snapshot.with_loan_default(key, float(value))
        self._commit(updated)
        log.info("loan_default_updated", key=key, value=float(value))
        return updated

    def reset_rent_rates(self) -> CitySettings:
        """Restore the shipped rent rates; loan defaults and extra cities stay."""
        updated = self._snapshot
        for city, rate in DEFAULT_RENT_RATES.items():
            updated = updated.with_rent_rate(city, rate)
        self._commit(updated)
        log.info("rent_rates_reset", cities=list(DEFAULT_RENT_RATES))
        return updated

    # --- Persistence ---

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.error("settings_read_failed", path=str(self.path), error=str(e))
            return {}
        if not isinstance(document, dict):
            log.error("settings_document_invalid", path=str(self.path), type=type(document).__name__)
            return {}
        return document

    def _load(self) -> CitySettings:
        payload = self._read_document().get(STORAGE_KEY)
        if isinstance(payload, dict):
            snapshot = CitySettings.from_storage(payload)
            log.debug("settings_loaded", path=str(self.path), cities=snapshot.city_names)
            return snapshot
        return CitySettings()

    def _commit(self, snapshot: CitySettings) -> None:
        document = self._read_document()
        document[STORAGE_KEY] = snapshot.to_storage()
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            log.error("settings_save_failed", path=str(self.path), error=str(e))
            raise SettingsError(f"Could not save settings to {self.path}: {e}") from e

        self._snapshot = snapshot


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
