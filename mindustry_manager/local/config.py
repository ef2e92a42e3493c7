import json
import logging
from pathlib import Path
from typing import Any

import mindustry_manager.settings as default_settings

log = logging.getLogger(__name__)


class MergedSettings:
    """
    A singleton class that merges default settings with JSON/env overrides.

    This class provides a unified, attribute-based access point for all
    application configuration. It follows a clear precedence:
    1. Base values from `settings.py`.
    2. Overrides from `.env` file (handled by `python-dotenv` in settings.py).
    3. Overrides from `overrides.json` for settings in `MODIFIABLE_SETTINGS`.
    """

    def __init__(self, overrides_path: Path = default_settings.OVERRIDES_JSON_PATH) -> None:
        """Initializes the settings object by loading defaults and overrides."""
        self.OVERRIDES_JSON_PATH: Path = overrides_path

        self._load_defaults()
        self._load_overrides()

    def _load_defaults(self) -> None:
        """Loads all uppercase attributes from the settings.py module as defaults."""
        for key in dir(default_settings):
            if key.isupper() and key != "OVERRIDES_JSON_PATH":
                setattr(self, key, getattr(default_settings, key))

    def _load_overrides(self) -> None:
        """
        Loads and applies settings from the `overrides.json` file.

        It will only apply overrides for keys that are explicitly listed in
        the `MODIFIABLE_SETTINGS` set in `settings.py`.
        """
        if not self.OVERRIDES_JSON_PATH.exists():
            return

        try:
            with self.OVERRIDES_JSON_PATH.open('r') as f:
                overrides = json.load(f)

            if not isinstance(overrides, dict):
                log.error(f"Overrides file '{self.OVERRIDES_JSON_PATH}' must contain a JSON object. Ignoring.")
                return

            log.info(f"Loading runtime configuration overrides from {self.OVERRIDES_JSON_PATH}")
            for key, value in overrides.items():
                if not hasattr(self, key):
                    log.warning(f"Override setting '{key}' not found in default settings. Ignoring.")
                    continue
                if key not in self.MODIFIABLE_SETTINGS:
                    log.warning(f"Attempted to override non-modifiable setting '{key}'. Ignoring.")
                    continue

                try:
                    self.set(key, value)
                except (ValueError, TypeError) as e:
                    log.error(f"Invalid value {value!r} for setting '{key}': {e}. Keeping default.")
                    continue
                log.debug(f"Overridden setting: {key} = {value}")
        except (json.JSONDecodeError, IOError) as e:
            log.error(f"Failed to load or parse overrides file '{self.OVERRIDES_JSON_PATH}': {e}")

    def set(self, key: str, value: Any) -> None:
        """
        Sets a setting, coercing the value to the type of the default.

        :param key: The uppercase setting name.
        :param value: The new value, usually a string or JSON scalar.
        :raises ValueError: If the value cannot be converted to the type of the default.
        """
        original_value = getattr(self, key, None)
        if isinstance(original_value, Path):
            value = Path(value)
        elif isinstance(original_value, bool):
            value = str(value).lower() in ('true', '1', 't', 'yes', 'y')
        elif original_value is not None:
            value = type(original_value)(value)
        setattr(self, key, value)

# Create a singleton instance to be imported by other modules
effective_settings = MergedSettings()
