"""
Audio Cache - speech audio for card text, fetched once per text and language.

Files are named ``{provider}_{language}_{hash}.mp3`` so a provider switch
never serves audio produced by another voice.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from ..config import Config, Language
from ..errors import AudioFetchError
from ..fetchers import BaseFetcher, FetcherRegistry
from ..utils.helpers import ensure_dir, get_file_size_mb, short_hash
from .analytics import AnalyticsEvent, AnalyticsService

logger = logging.getLogger(__name__)


class AudioCacheService:
    """
    On-disk cache in front of a TTS fetcher.

    Usage:
        async with AudioCacheService() as cache:
            path = await cache.get_audio("Hola", Language.SPANISH)
    """

    def __init__(
        self,
        cache_dir: Optional[str] = None,
        provider: Optional[str] = None,
        fetcher: Optional[BaseFetcher] = None,
        analytics: Optional[AnalyticsService] = None,
    ):
        """
        Initialize audio cache.

        Args:
            cache_dir: Directory for cached MP3 files (default: Config.AUDIO_CACHE_DIR)
            provider: Registered provider name (default: Config.TTS_PROVIDER)
            fetcher: Fetcher instance overriding the registry lookup
            analytics: Optional analytics side channel
        """
        self.cache_dir = Path(cache_dir or Config.AUDIO_CACHE_DIR)
        self.provider = provider or Config.TTS_PROVIDER
        self._fetcher = fetcher
        self._analytics = analytics

    @property
    def fetcher(self) -> BaseFetcher:
        if self._fetcher is None:
            self._fetcher = FetcherRegistry.get_audio_fetcher(self.provider)
        return self._fetcher

    def cache_key(self, text: str, language: Language) -> str:
        return f"{self.provider}_{language.code}_{short_hash(text)}.mp3"

    def cached_path(self, text: str, language: Language) -> Path:
        return self.cache_dir / self.cache_key(text, language)

    def is_cached(self, text: str, language: Language) -> bool:
        return self.cached_path(text, language).exists()

    async def get_audio(self, text: str, language: Language) -> str:
        """
        Path of the spoken text, fetching it on a cache miss.

        Raises:
            AudioFetchError: Blank text or the provider produced nothing
        """
        if not text or not text.strip():
            raise AudioFetchError("Nothing to speak")

        path = self.cached_path(text, language)
        if path.exists():
            return str(path)

        ensure_dir(str(self.cache_dir))
        ok = await self.fetcher.fetch(text, str(path), language)
        if not ok:
            error = AudioFetchError(
                f"{self.provider} produced no audio",
                details=f"language={language.code}",
            )
            if self._analytics:
                self._analytics.track_error(
                    AnalyticsEvent.AUDIO_FAILED, error, provider=self.provider, language=language.code
                )
            raise error

        logger.debug("Cached audio %s", path.name)
        return str(path)

    def clear(self) -> int:
        """Delete every cached file. Returns the number removed."""
        if not self.cache_dir.exists():
            return 0
        removed = 0
        for entry in self.cache_dir.glob("*.mp3"):
            os.remove(entry)
            removed += 1
        logger.info("Cleared %d cached audio files", removed)
        return removed

    def cache_size(self) -> float:
        """Total cache size in megabytes."""
        if not self.cache_dir.exists():
            return 0.0
        return sum(get_file_size_mb(str(entry)) for entry in self.cache_dir.glob("*.mp3"))

    async def close(self) -> None:
        if self._fetcher is not None:
            await self._fetcher.close()

    async def __aenter__(self) -> "AudioCacheService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
