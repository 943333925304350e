"""Supported languages and their per-language settings."""

import locale
from enum import Enum
from typing import Optional

LANG_CONFIG = {
    "en": {"display_name": "English", "voice_over_code": "en-us", "voice": "en-US-AriaNeural"},
    "es": {"display_name": "Spanish", "voice_over_code": "es-us", "voice": "es-ES-ElviraNeural"},
    "fr": {"display_name": "French", "voice_over_code": "fr", "voice": "fr-FR-DeniseNeural"},
    "de": {"display_name": "German", "voice_over_code": "de", "voice": "de-DE-ConradNeural"},
    "it": {"display_name": "Italian", "voice_over_code": "it", "voice": "it-IT-ElsaNeural"},
    "pt": {"display_name": "Portuguese", "voice_over_code": "pt", "voice": "pt-BR-FranciscaNeural"},
    "nl": {"display_name": "Dutch", "voice_over_code": "nl", "voice": "nl-NL-ColetteNeural"},
    "sv": {"display_name": "Swedish", "voice_over_code": "sv", "voice": "sv-SE-SofieNeural"},
    "zh": {"display_name": "Chinese", "voice_over_code": "zh", "voice": "zh-CN-XiaoxiaoNeural"},
    "ja": {"display_name": "Japanese", "voice_over_code": "ja", "voice": "ja-JP-NanamiNeural"},
    "ko": {"display_name": "Korean", "voice_over_code": "ko", "voice": "ko-KR-SunHiNeural"},
    "vi": {"display_name": "Vietnamese", "voice_over_code": "vi", "voice": "vi-VN-HoaiMyNeural"},
    "ru": {"display_name": "Russian", "voice_over_code": "ru", "voice": "ru-RU-SvetlanaNeural"},
    "ar": {"display_name": "Arabic", "voice_over_code": "ar", "voice": "ar-SA-ZariyahNeural"},
    "hi": {"display_name": "Hindi", "voice_over_code": "hi", "voice": "hi-IN-SwaraNeural"},
    "hr": {"display_name": "Croatian", "voice_over_code": "hr", "voice": "hr-HR-GabrijelaNeural"},
    "uk": {"display_name": "Ukrainian", "voice_over_code": "uk", "voice": "uk-UA-PolinaNeural"},
}


class Language(Enum):
    """Closed set of languages a card side can be written in."""

    ENGLISH = "en"
    SPANISH = "es"
    FRENCH = "fr"
    GERMAN = "de"
    ITALIAN = "it"
    PORTUGUESE = "pt"
    DUTCH = "nl"
    SWEDISH = "sv"
    CHINESE = "zh"
    JAPANESE = "ja"
    KOREAN = "ko"
    VIETNAMESE = "vi"
    RUSSIAN = "ru"
    ARABIC = "ar"
    HINDI = "hi"
    CROATIAN = "hr"
    UKRAINIAN = "uk"

    @property
    def code(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return LANG_CONFIG[self.value]["display_name"]

    @property
    def voice_over_code(self) -> str:
        return LANG_CONFIG[self.value]["voice_over_code"]

    @property
    def voice(self) -> str:
        """Edge TTS neural voice used for this language."""
        return LANG_CONFIG[self.value]["voice"]

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["Language"]:
        """
        Look up a language by its code.

        Args:
            code: Two-letter code such as "es"; region suffixes are ignored

        Returns:
            Matching Language or None for unknown codes
        """
        if not code:
            return None
        base = str(code).strip().lower().replace("_", "-").split("-")[0]
        try:
            return cls(base)
        except ValueError:
            return None

    @classmethod
    def from_system_locale(cls) -> "Language":
        """Detect the language of the process locale, falling back to English."""
        try:
            code = locale.getlocale()[0]
        except ValueError:
            code = None
        return cls.from_code(code) or cls.ENGLISH
