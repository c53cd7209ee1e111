"""Durable settings store."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from local_converter.application.ports import KeyValueStore
from local_converter.errors import StorageError
from local_converter.schemas import AppSettings

logger = logging.getLogger(__name__)

SETTINGS_KEY = "app_settings"

DEFAULT_SETTINGS = AppSettings()


class SettingsStore:
    """Hold the single settings record.

    Reads always produce a complete ``AppSettings``: nothing stored, or
    something unreadable, yields the defaults.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get(self) -> AppSettings:
        try:
            raw = self._store.get(SETTINGS_KEY)
        except StorageError as exc:
            logger.warning("settings unreadable, using defaults: %s", exc)
            return DEFAULT_SETTINGS
        if raw is None:
            return DEFAULT_SETTINGS
        try:
            return AppSettings.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("stored settings are invalid, using defaults: %s", exc)
            return DEFAULT_SETTINGS

    def set(self, settings: AppSettings) -> None:
        self._store.set(SETTINGS_KEY, settings.model_dump_json(by_alias=True))
        logger.info("settings saved")

    def reset(self) -> None:
        self.set(DEFAULT_SETTINGS)
        logger.info("settings reset to defaults")
