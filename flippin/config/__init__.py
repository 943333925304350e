"""Configuration module for Flippin."""

from .settings import Config
from .languages import LANG_CONFIG, Language
from .config_manager import SettingsManager

__all__ = [
    'Config',
    'LANG_CONFIG',
    'Language',
    'SettingsManager',
]
