"""Fetchers module - speech audio providers."""

from .base import BaseFetcher
from .audio import EdgeTTSFetcher, GoogleTTSFetcher
from .registry import FetcherRegistry

__all__ = [
    'BaseFetcher',
    'EdgeTTSFetcher',
    'GoogleTTSFetcher',
    'FetcherRegistry',
]
