"""Flippin - language flashcards with live translation."""

__version__ = "1.0.0"
__author__ = "Flippin Team"

from .config import Config, LANG_CONFIG, Language, SettingsManager
from .models import Card, CardPerformance, FilterState, LanguageGroup, Tag
from .app import FlippinApp

__all__ = [
    'Config',
    'LANG_CONFIG',
    'Language',
    'SettingsManager',
    'Card',
    'CardPerformance',
    'FilterState',
    'LanguageGroup',
    'Tag',
    'FlippinApp',
]
