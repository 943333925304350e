"""Text parsing utilities for consistent text processing across the application."""

import html
import re
import unicodedata
from typing import Iterable, List


class TextParser:
    """
    Centralized text parsing utilities.

    Single source of truth for trimming, Unicode normalization, tag name
    cleanup and TTS text preparation.
    """

    # HTML tag removal pattern
    HTML_TAG_PATTERN = re.compile(r'<[^>]+>')

    # Whitespace normalization pattern
    WHITESPACE_PATTERN = re.compile(r'\s+')

    @classmethod
    def normalize_unicode(cls, text: str) -> str:
        """
        Normalize text to NFC form for consistent Unicode handling.

        Prevents issues with characters like é being represented as
        either a single codepoint (NFC) or base + combining accent (NFD).

        Args:
            text: Input text

        Returns:
            NFC-normalized text
        """
        if not text:
            return ""
        return unicodedata.normalize('NFC', str(text))

    @classmethod
    def clean_field(cls, text: str) -> str:
        """Trim surrounding whitespace of a card text field; the rest is kept verbatim."""
        if text is None:
            return ""
        return str(text).strip()

    @classmethod
    def clean_tags(cls, tags: Iterable[str]) -> List[str]:
        """
        Trim tag names, drop blanks and duplicates, keep first-seen order.

        Args:
            tags: Raw tag names

        Returns:
            Cleaned tag names
        """
        seen = set()
        cleaned = []
        for tag in tags or []:
            name = cls.clean_field(tag)
            if name and name not in seen:
                seen.add(name)
                cleaned.append(name)
        return cleaned

    @classmethod
    def split_tags(cls, text: str) -> List[str]:
        """Split a space-separated tag column into clean tag names."""
        if not text or str(text).lower() == 'nan':
            return []
        return cls.clean_tags(str(text).split())

    @classmethod
    def clean_for_tts(cls, text: str) -> str:
        """
        Clean text for TTS processing.

        Removes HTML, normalizes whitespace.

        Args:
            text: Raw text

        Returns:
            Cleaned text ready for TTS
        """
        if not text:
            return ""

        text = html.unescape(str(text))
        text = cls.HTML_TAG_PATTERN.sub('', text)
        text = cls.WHITESPACE_PATTERN.sub(' ', text).strip()
        return cls.normalize_unicode(text)
