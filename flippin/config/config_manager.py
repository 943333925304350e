"""Persistent key-value settings with JSON storage and environment fallback."""

import copy
import json
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from .settings import Config

logger = logging.getLogger(__name__)


class SettingsManager:
    """
    Manages user settings with JSON persistence.

    Settings are loaded from a JSON file with fallback to environment
    variables (``FLIPPIN_<KEY>``). Changes are persisted to disk immediately.
    One instance is constructed at app start and passed to the services that
    need it.

    Usage:
        settings = SettingsManager("data/settings.json")
        theme = settings.get("color_theme")
        settings.set("did_show_onboarding", True)
    """

    ENV_PREFIX: str = "FLIPPIN_"

    DEFAULTS: Dict[str, Any] = {
        # Languages (None until first detection)
        "user_language": None,
        "target_language": None,
        "filter_by_language": False,

        # Appearance
        "color_theme": "blue",
        "background_style": "gradient",

        # Onboarding
        "did_show_onboarding": False,

        # Persisted filter selection
        "selected_filter_tag": "",
        "favorite_filter_on": False,
        "difficult_filter_on": False,

        # Audio
        "tts_provider": Config.TTS_PROVIDER,
    }

    def __init__(self, settings_file: Optional[str] = None) -> None:
        """
        Initialize the settings manager.

        Args:
            settings_file: Path to the settings JSON file.
                          Defaults to Config.SETTINGS_FILE.
        """
        self._settings_file: Path = Path(settings_file or Config.SETTINGS_FILE)
        self._settings: Dict[str, Any] = {}
        self._file_lock: Lock = Lock()

        self._load_settings()

    @property
    def path(self) -> Path:
        return self._settings_file

    def _load_settings(self) -> None:
        """Load settings from JSON file with environment variable fallback."""
        self._settings = copy.deepcopy(self.DEFAULTS)

        if self._settings_file.exists():
            try:
                with open(self._settings_file, "r", encoding="utf-8") as f:
                    file_settings = json.load(f)
                if isinstance(file_settings, dict):
                    self._settings.update(file_settings)
                else:
                    logger.warning("Ignoring settings file %s: not a JSON object", self._settings_file)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning("Could not load settings file %s: %s", self._settings_file, e)

        # Environment variables win over the file
        for key in self.DEFAULTS:
            env_value = os.environ.get(self.ENV_PREFIX + key.upper())
            if env_value is not None:
                self._settings[key] = self._parse_env_value(env_value, key)

    def _parse_env_value(self, value: str, key: str) -> Any:
        """
        Parse environment variable value to appropriate type.

        Args:
            value: The string value from environment
            key: The setting key (used to infer expected type)

        Returns:
            Parsed value in appropriate type
        """
        default = self.DEFAULTS.get(key)

        if isinstance(default, bool):
            return value.lower() in ("true", "1", "yes", "on")
        elif isinstance(default, int):
            try:
                return int(value)
            except ValueError:
                return default
        elif isinstance(default, float):
            try:
                return float(value)
            except ValueError:
                return default
        return value

    def _save_settings(self) -> None:
        """Save current settings to JSON file."""
        with self._file_lock:
            try:
                self._settings_file.parent.mkdir(parents=True, exist_ok=True)
                with open(self._settings_file, "w", encoding="utf-8") as f:
                    json.dump(self._settings, f, indent=2, ensure_ascii=False)
            except IOError as e:
                logger.warning("Could not save settings file %s: %s", self._settings_file, e)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value.

        Returns a deep copy for mutable objects (dict, list).

        Args:
            key: The setting key
            default: Default value if key not found

        Returns:
            The setting value, or default if not found
        """
        value = self._settings.get(key, default)
        if value is None:
            return default
        if isinstance(value, (dict, list)):
            return copy.deepcopy(value)
        return value

    def set(self, key: str, value: Any, persist: bool = True) -> None:
        """
        Set a setting value and persist it to disk.

        Args:
            key: The setting key
            value: The value to set
            persist: Write the file immediately
        """
        self._settings[key] = value
        if persist:
            self._save_settings()

    def get_all(self) -> Dict[str, Any]:
        """Get a copy of all current settings."""
        return copy.deepcopy(self._settings)

    def reset(self, key: Optional[str] = None) -> None:
        """
        Reset settings to defaults.

        Args:
            key: Specific key to reset. If None, resets all settings.
        """
        if key is not None:
            if key in self.DEFAULTS:
                self._settings[key] = copy.deepcopy(self.DEFAULTS[key])
        else:
            self._settings = copy.deepcopy(self.DEFAULTS)

        self._save_settings()

    def reload(self) -> None:
        """Reload settings from disk."""
        self._load_settings()
