"""Services layer for business logic separation."""

from .analytics import AnalyticsEvent, AnalyticsService, TrackedEvent
from .observable import ChangeNotifier
from .repository import BaseRepository, SQLiteRepository
from .tag_manager import TagManager
from .language_manager import LanguageManager
from .learning_analytics import LearningAnalyticsService
from .card_store import CardStore
from .card_filter import CardFilter, SearchTracker
from .translation import TranslationClient, TranslationResult
from .debounce import TranslationDebouncer
from .card_editor import CardEditor
from .audio_cache import AudioCacheService
from .preset_collections import PresetCollectionService

__all__ = [
    "AnalyticsEvent",
    "AnalyticsService",
    "TrackedEvent",
    "ChangeNotifier",
    "BaseRepository",
    "SQLiteRepository",
    "TagManager",
    "LanguageManager",
    "LearningAnalyticsService",
    "CardStore",
    "CardFilter",
    "SearchTracker",
    "TranslationClient",
    "TranslationResult",
    "TranslationDebouncer",
    "CardEditor",
    "AudioCacheService",
    "PresetCollectionService",
]
