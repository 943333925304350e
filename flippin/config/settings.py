"""Global settings and configuration."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)

_BASE_DIR = Path(__file__).parent.parent.parent.resolve()
_DATA_DIR = Path(os.environ.get("FLIPPIN_DATA_DIR", str(_BASE_DIR / "data")))

logger = logging.getLogger(__name__)


def env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to ``default``."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default


@dataclass
class Config:
    """Application-wide configuration."""

    # Translation provider
    TRANSLATION_API_URL: str = "https://translate.googleapis.com/translate_a/single"
    TRANSLATION_TIMEOUT: int = 30

    # Text-to-speech
    GOOGLE_TTS_URL: str = "https://translate.google.com/translate_tts"
    TTS_PROVIDER: str = os.environ.get("FLIPPIN_TTS_PROVIDER", "google")
    TTS_TIMEOUT: int = 30

    # Translation debounce
    DEBOUNCE_SECONDS: float = 1.0
    DEBOUNCE_SKIP_INITIAL: int = 2

    # Card rules
    MAX_TAGS_PER_CARD: int = 5
    FREE_CARD_LIMIT: int = env_int("FLIPPIN_FREE_CARD_LIMIT", 100)
    DIFFICULT_LEVEL: int = 4

    # Card stack geometry (points)
    SWIPE_THRESHOLD: float = 100.0
    STACK_VISIBLE_COUNT: int = 3
    STACK_OFFSET_STEP_X: float = 20.0
    STACK_OFFSET_STEP_Y: float = 10.0
    STACK_SCALE_STEP: float = 0.05

    # Paths
    BASE_DIR: Path = _BASE_DIR
    DATA_DIR: str = str(_DATA_DIR)
    DB_FILE: str = str(_DATA_DIR / "flippin.db")
    SETTINGS_FILE: str = str(_DATA_DIR / "settings.json")
    AUDIO_CACHE_DIR: str = str(_DATA_DIR / "audio_cache")
    LOG_FILE: str = str(_DATA_DIR / "flippin.log")
