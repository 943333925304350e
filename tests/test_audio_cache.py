"""Tests for the audio cache and fetcher registry."""

import asyncio
import os

import pytest

from flippin.config import Language
from flippin.errors import AudioFetchError
from flippin.fetchers import BaseFetcher, EdgeTTSFetcher, FetcherRegistry, GoogleTTSFetcher
from flippin.services import AnalyticsEvent, AudioCacheService


class FakeFetcher(BaseFetcher):
    name = "fake"

    def __init__(self, succeed=True):
        self.succeed = succeed
        self.requests = []
        self.closed = False

    async def fetch(self, source, output_path, language):
        self.requests.append((source, language))
        if not self.succeed:
            return False
        with open(output_path, "wb") as f:
            f.write(b"ID3" + b"\x00" * 200)
        return True

    async def close(self):
        self.closed = True


class TestAudioCache:

    def test_cache_key_format(self, tmp_path):
        cache = AudioCacheService(str(tmp_path), provider="google", fetcher=FakeFetcher())
        key = cache.cache_key("Hola", Language.SPANISH)

        prefix, lang, digest = key[:-len(".mp3")].split("_")
        assert key.endswith(".mp3")
        assert (prefix, lang) == ("google", "es")
        assert len(digest) == 16

    def test_fetch_on_miss_then_hit(self, tmp_path):
        fetcher = FakeFetcher()
        cache = AudioCacheService(str(tmp_path / "audio"), provider="fake", fetcher=fetcher)

        async def scenario():
            first = await cache.get_audio("Hola", Language.SPANISH)
            second = await cache.get_audio("Hola", Language.SPANISH)
            return first, second

        first, second = asyncio.run(scenario())

        assert first == second
        assert os.path.exists(first)
        assert fetcher.requests == [("Hola", Language.SPANISH)]
        assert cache.is_cached("Hola", Language.SPANISH)
        assert not cache.is_cached("Hola", Language.FRENCH)

    def test_failure_raises_and_tracks(self, tmp_path, analytics, events):
        cache = AudioCacheService(str(tmp_path), provider="fake", fetcher=FakeFetcher(succeed=False), analytics=analytics)

        with pytest.raises(AudioFetchError):
            asyncio.run(cache.get_audio("Hola", Language.SPANISH))

        assert events[-1].event is AnalyticsEvent.AUDIO_FAILED
        assert events[-1].params["provider"] == "fake"

    def test_blank_text_rejected(self, tmp_path):
        fetcher = FakeFetcher()
        cache = AudioCacheService(str(tmp_path), fetcher=fetcher)
        with pytest.raises(AudioFetchError):
            asyncio.run(cache.get_audio("  ", Language.SPANISH))
        assert fetcher.requests == []

    def test_clear_and_size(self, tmp_path):
        cache = AudioCacheService(str(tmp_path / "audio"), provider="fake", fetcher=FakeFetcher())
        assert cache.cache_size() == 0.0
        assert cache.clear() == 0

        asyncio.run(cache.get_audio("uno", Language.SPANISH))
        asyncio.run(cache.get_audio("dos", Language.SPANISH))

        assert cache.cache_size() > 0
        assert cache.clear() == 2
        assert not cache.is_cached("uno", Language.SPANISH)

    def test_close_closes_fetcher(self, tmp_path):
        fetcher = FakeFetcher()

        async def scenario():
            async with AudioCacheService(str(tmp_path), fetcher=fetcher):
                pass

        asyncio.run(scenario())
        assert fetcher.closed


class TestFetcherRegistry:

    def test_builtin_providers(self):
        assert {"google", "edge-tts"} <= set(FetcherRegistry.list_audio_providers())
        assert isinstance(FetcherRegistry.get_audio_fetcher("edge-tts"), EdgeTTSFetcher)
        assert isinstance(FetcherRegistry.get_audio_fetcher("google"), GoogleTTSFetcher)

    def test_unknown_provider(self):
        with pytest.raises(KeyError):
            FetcherRegistry.get_audio_fetcher("nope")

    def test_register_custom_provider(self, tmp_path):
        FetcherRegistry.register_audio("fake", FakeFetcher)
        try:
            cache = AudioCacheService(str(tmp_path), provider="fake")
            assert isinstance(cache.fetcher, FakeFetcher)
        finally:
            FetcherRegistry.unregister_audio("fake")
        assert "fake" not in FetcherRegistry.list_audio_providers()


class StubResponse:
    def __init__(self, status, body):
        self.status = status
        self.body = body

    async def read(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class StubSession:
    def __init__(self, response):
        self.response = response
        self.requests = []
        self.closed = False

    def get(self, url, params=None):
        self.requests.append((url, params))
        return self.response


class TestGoogleTTSFetcher:

    def test_download_written_atomically(self, tmp_path):
        session = StubSession(StubResponse(200, b"ID3" + b"\x01" * 500))
        fetcher = GoogleTTSFetcher(session=session)
        target = tmp_path / "out" / "hola.mp3"

        ok = asyncio.run(fetcher.fetch("Hola", str(target), Language.SPANISH))

        assert ok
        assert target.read_bytes().startswith(b"ID3")
        assert [p.name for p in target.parent.iterdir()] == ["hola.mp3"]
        assert session.requests[0][1]["tl"] == "es-us"
        assert session.requests[0][1]["q"] == "Hola"

    def test_error_status(self, tmp_path):
        fetcher = GoogleTTSFetcher(session=StubSession(StubResponse(503, b"")))
        target = tmp_path / "hola.mp3"
        assert not asyncio.run(fetcher.fetch("Hola", str(target), Language.SPANISH))
        assert not target.exists()

    def test_tiny_body_rejected(self, tmp_path):
        fetcher = GoogleTTSFetcher(session=StubSession(StubResponse(200, b"<html>")))
        target = tmp_path / "hola.mp3"
        assert not asyncio.run(fetcher.fetch("Hola", str(target), Language.SPANISH))
        assert list(tmp_path.iterdir()) == []
