"""Data models for Flippin."""

from .card import Card, CardPerformance, LanguageGroup, Tag
from .filters import FilterState
from .preset import PresetCategory, PresetCollection, PresetPhrase

__all__ = [
    'Card',
    'CardPerformance',
    'FilterState',
    'LanguageGroup',
    'PresetCategory',
    'PresetCollection',
    'PresetPhrase',
    'Tag',
]
