"""Translation client for the public Google translate endpoint."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from ..config import Config, Language
from ..errors import TranslationError

logger = logging.getLogger(__name__)


@dataclass
class TranslationResult:
    """Translated text plus the language the provider detected."""
    text: str
    detected_language: Optional[str] = None


class TranslationClient:
    """
    Async translation client with a shared session.

    Usage:
        async with TranslationClient() as client:
            result = await client.translate("Hello", Language.ENGLISH, Language.SPANISH)
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, api_url: Optional[str] = None):
        """
        Initialize translation client.

        Args:
            session: Externally owned session; created lazily when omitted
            api_url: Override of Config.TRANSLATION_API_URL
        """
        self.api_url = api_url or Config.TRANSLATION_API_URL
        self._session = session
        self._owns_session = session is None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the shared aiohttp session."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                timeout = aiohttp.ClientTimeout(total=Config.TRANSLATION_TIMEOUT)
                self._session = aiohttp.ClientSession(timeout=timeout)
                self._owns_session = True
            return self._session

    async def close(self) -> None:
        """Close the session if this client created it."""
        async with self._session_lock:
            if self._owns_session and self._session and not self._session.closed:
                await self._session.close()
            self._session = None

    async def __aenter__(self) -> "TranslationClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def translate(self, text: str, source: Language, target: Language) -> TranslationResult:
        """
        Translate text once, without retries.

        Args:
            text: Text to translate
            source: Language of ``text``
            target: Language to translate into

        Returns:
            TranslationResult

        Raises:
            TranslationError: Network failure, non-200 status or an
                              unexpected response shape
        """
        params = {
            "client": "gtx",
            "sl": source.code,
            "tl": target.code,
            "dt": "t",
            "q": text,
        }
        session = await self._get_session()

        try:
            async with session.get(self.api_url, params=params) as response:
                if response.status != 200:
                    raise TranslationError(
                        f"Translation request failed with HTTP {response.status}",
                        status=response.status,
                    )
                data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise TranslationError("Translation request timed out", details=str(e)) from e
        except aiohttp.ClientError as e:
            raise TranslationError("Translation request failed", details=str(e)) from e
        except ValueError as e:
            raise TranslationError("Translation response is not JSON", details=str(e)) from e

        result = self.parse_response(data)
        logger.debug("Translated %r (%s->%s) as %r", text, source.code, target.code, result.text)
        return result

    @staticmethod
    def parse_response(data: Any) -> TranslationResult:
        """
        Extract the translation from the provider's nested arrays.

        The translation is the first string of the first sentence entry; the
        detected source language is the third top-level element.
        """
        try:
            translated = data[0][0][0]
        except (IndexError, KeyError, TypeError) as e:
            raise TranslationError("Unexpected translation response", details=repr(data)[:200]) from e
        if not isinstance(translated, str):
            raise TranslationError("Unexpected translation response", details=repr(data)[:200])

        detected = None
        if isinstance(data, list) and len(data) > 2 and isinstance(data[2], str):
            detected = data[2]
        return TranslationResult(text=translated, detected_language=detected)
