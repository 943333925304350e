"""
Fetcher Registry - maps TTS provider names to fetcher classes.

Providers are selected at runtime from settings, so new ones can be added
without touching the audio cache.
"""

from typing import Callable, Dict, List, Optional, Type

from .base import BaseFetcher


class FetcherRegistry:
    """
    Registry of audio fetchers.

    Usage:
        FetcherRegistry.register_audio("edge-tts", EdgeTTSFetcher)
        fetcher = FetcherRegistry.get_audio_fetcher("edge-tts")
    """

    _audio_fetchers: Dict[str, Type[BaseFetcher]] = {}
    _audio_factories: Dict[str, Callable[[], BaseFetcher]] = {}
    _default_audio: str = "google"

    @classmethod
    def register_audio(
        cls,
        name: str,
        fetcher_class: Type[BaseFetcher],
        factory: Optional[Callable[[], BaseFetcher]] = None,
        set_default: bool = False,
    ) -> None:
        """
        Register an audio fetcher provider.

        Args:
            name: Provider name (e.g., "edge-tts", "google")
            fetcher_class: Class implementing BaseFetcher
            factory: Optional factory function for custom instantiation
            set_default: If True, set this as the default provider
        """
        cls._audio_fetchers[name] = fetcher_class
        if factory:
            cls._audio_factories[name] = factory
        else:
            cls._audio_factories.pop(name, None)
        if set_default:
            cls._default_audio = name

    @classmethod
    def unregister_audio(cls, name: str) -> None:
        cls._audio_fetchers.pop(name, None)
        cls._audio_factories.pop(name, None)

    @classmethod
    def get_audio_fetcher(cls, name: Optional[str] = None) -> BaseFetcher:
        """
        Get an audio fetcher instance.

        Raises:
            KeyError: If provider not found
        """
        provider = name or cls._default_audio

        if provider not in cls._audio_fetchers:
            available = list(cls._audio_fetchers.keys())
            raise KeyError(f"Audio provider '{provider}' not found. Available: {available}")

        if provider in cls._audio_factories:
            return cls._audio_factories[provider]()
        return cls._audio_fetchers[provider]()

    @classmethod
    def list_audio_providers(cls) -> List[str]:
        return list(cls._audio_fetchers.keys())

    @classmethod
    def get_default_audio_provider(cls) -> str:
        return cls._default_audio

    @classmethod
    def set_default_audio_provider(cls, name: str) -> None:
        if name not in cls._audio_fetchers:
            raise KeyError(f"Audio provider '{name}' not registered")
        cls._default_audio = name


def _register_default_fetchers() -> None:
    """Register built-in fetchers on module load."""
    from .audio import EdgeTTSFetcher, GoogleTTSFetcher

    FetcherRegistry.register_audio("google", GoogleTTSFetcher, set_default=True)
    FetcherRegistry.register_audio("edge-tts", EdgeTTSFetcher)


_register_default_fetchers()
