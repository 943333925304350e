"""Audio fetchers - speech synthesis for card text."""

import asyncio
import logging
import os
import uuid
from typing import Optional

import aiofiles
import aiohttp
import edge_tts

from ..config import Config, Language
from ..utils.parsing import TextParser
from .base import BaseFetcher

logger = logging.getLogger(__name__)

# Anything smaller is an error page, not speech
MIN_AUDIO_BYTES = 100


def _temp_path_for(output_path: str) -> str:
    return f"{output_path}.{uuid.uuid4().hex[:8]}.tmp"


def _discard(temp_path: Optional[str]) -> None:
    if temp_path and os.path.exists(temp_path):
        try:
            os.remove(temp_path)
        except OSError as e:
            logger.debug("Could not remove %s: %s", temp_path, e)


class EdgeTTSFetcher(BaseFetcher):
    """Speech via Edge TTS neural voices."""

    name = "edge-tts"

    def __init__(self, volume: str = "+0%"):
        self.volume = volume

    async def fetch(self, source: str, output_path: str, language: Language) -> bool:
        """
        Generate audio with the language's Edge voice.

        Uses atomic write pattern: write to temp file, then rename.
        """
        clean_text = TextParser.clean_for_tts(source)
        if not clean_text:
            return False

        temp_path = None
        try:
            os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
            temp_path = _temp_path_for(output_path)

            communicate = edge_tts.Communicate(clean_text, language.voice, volume=self.volume)
            await communicate.save(temp_path)

            if os.path.exists(temp_path) and os.path.getsize(temp_path) > MIN_AUDIO_BYTES:
                os.replace(temp_path, output_path)
                temp_path = None
                return True
            logger.warning("Edge TTS returned no audio for %r", clean_text[:50])
            return False

        except Exception as e:
            error_msg = str(e)
            if "429" in error_msg or "Too Many Requests" in error_msg:
                logger.warning("Edge TTS rate limit hit (429): %s", error_msg[:80])
            else:
                logger.warning("Error generating audio: %s", error_msg[:80])
            return False

        finally:
            _discard(temp_path)


class GoogleTTSFetcher(BaseFetcher):
    """Speech via the public Google translate TTS endpoint, with session pooling."""

    name = "google"

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session
        self._owns_session = session is None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create a shared aiohttp session."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                headers = {"User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"}
                timeout = aiohttp.ClientTimeout(total=Config.TTS_TIMEOUT)
                self._session = aiohttp.ClientSession(headers=headers, timeout=timeout)
                self._owns_session = True
            return self._session

    async def close(self) -> None:
        async with self._session_lock:
            if self._owns_session and self._session and not self._session.closed:
                await self._session.close()
            self._session = None

    async def fetch(self, source: str, output_path: str, language: Language) -> bool:
        """Download the spoken text as MP3."""
        clean_text = TextParser.clean_for_tts(source)
        if not clean_text:
            return False

        params = {
            "ie": "UTF-8",
            "client": "tw-ob",
            "tl": language.voice_over_code,
            "q": clean_text,
        }
        session = await self._get_session()
        temp_path = None
        try:
            async with session.get(Config.GOOGLE_TTS_URL, params=params) as response:
                if response.status != 200:
                    logger.warning("Google TTS failed with HTTP %s", response.status)
                    return False
                content = await response.read()

            if len(content) <= MIN_AUDIO_BYTES:
                logger.warning("Google TTS returned %d bytes for %r", len(content), clean_text[:50])
                return False

            os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
            temp_path = _temp_path_for(output_path)
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(content)
            os.replace(temp_path, output_path)
            temp_path = None
            return True

        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.warning("Error downloading audio: %s", str(e)[:80])
            return False

        finally:
            _discard(temp_path)
