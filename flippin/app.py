"""
Application container.

Builds every service explicitly and wires their change notifications, so
there are no module-level singletons.
"""

import logging
import os
from typing import Optional, Tuple

from .config import Config, SettingsManager
from .models import Card, FilterState
from .services import (
    AnalyticsService,
    AudioCacheService,
    CardEditor,
    CardFilter,
    CardStore,
    LanguageManager,
    LearningAnalyticsService,
    PresetCollectionService,
    SQLiteRepository,
    TagManager,
    TranslationClient,
)
from .stack import CardStack

logger = logging.getLogger(__name__)


class FlippinApp:
    """
    Owns the services of one application session.

    Usage:
        async with FlippinApp() as app:
            app.store.add_card("Hola", "Hello", Language.SPANISH, Language.ENGLISH)
            cards = app.visible_cards()
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        card_limit: Optional[int] = None,
        translation_client: Optional[TranslationClient] = None,
    ):
        """
        Initialize the container.

        Args:
            data_dir: Directory for database, settings and audio cache
                      (default: Config.DATA_DIR)
            card_limit: Override of Config.FREE_CARD_LIMIT
            translation_client: Preconfigured client, mainly for tests
        """
        self.data_dir = data_dir or Config.DATA_DIR
        if data_dir:
            settings_file = os.path.join(data_dir, "settings.json")
            db_path = os.path.join(data_dir, "flippin.db")
            audio_dir = os.path.join(data_dir, "audio_cache")
        else:
            settings_file, db_path, audio_dir = Config.SETTINGS_FILE, Config.DB_FILE, Config.AUDIO_CACHE_DIR

        self.settings = SettingsManager(settings_file)
        self.repository = SQLiteRepository(db_path)
        self.analytics = AnalyticsService()

        self.tags = TagManager(self.repository, self.settings, self.analytics)
        self.languages = LanguageManager(self.settings, self.analytics)
        self.learning = LearningAnalyticsService(self.repository, self.analytics)
        self.store = CardStore(self.repository, self.tags, self.analytics, card_limit=card_limit)
        self.card_filter = CardFilter(self.languages, self.tags, self.learning, self.analytics)
        self.presets = PresetCollectionService(self.store, analytics=self.analytics)

        self.translator = translation_client or TranslationClient()
        self.audio = AudioCacheService(
            audio_dir,
            provider=self.settings.get("tts_provider", Config.TTS_PROVIDER),
            analytics=self.analytics,
        )

        self.stack = CardStack()
        self.search_text = ""
        self._seeded_ids: Tuple[str, ...] = ()
        self._started = False

        self.store.on_change(self._forget_deleted_reviews)
        for notifier in (self.store, self.tags, self.languages):
            notifier.on_change(self.refresh_stack)

    # ==================== Lifecycle ====================

    def start(self) -> bool:
        """Load persisted state. Returns False if the database could not be opened."""
        if self._started:
            return True
        ok = self.store.load()
        self._started = ok
        return ok

    async def close(self) -> None:
        """Close network resources."""
        await self.translator.close()
        await self.audio.close()
        self._started = False

    async def __aenter__(self) -> "FlippinApp":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ==================== Views ====================

    def card_filter_state(self) -> FilterState:
        """Snapshot of the current filter selection."""
        return self.card_filter.state_from_settings(self.search_text)

    def set_search_text(self, text: str) -> None:
        self.search_text = text or ""
        self.refresh_stack()

    def visible_cards(self):
        return self.card_filter.apply(self.store.cards, self.card_filter_state())

    def language_groups(self):
        return self.card_filter.group(self.store.cards, self.card_filter_state())

    def refresh_stack(self) -> None:
        """
        Re-seed the card stack when the filtered set changes.

        Edits that leave the filtered ids as they were only refresh the card
        objects, so the swipe position and any shuffle survive.
        """
        order = self.card_filter.stack_order(self.store.cards, self.card_filter_state())
        ids = tuple(card.id for card in order)
        if ids == self._seeded_ids:
            self.stack.refresh(order)
            return
        self._seeded_ids = ids
        self.stack.reset(order)

    def _forget_deleted_reviews(self) -> None:
        dropped = self.learning.retain(card.id for card in self.store.cards)
        if dropped:
            logger.debug("Dropped review statistics of %d deleted cards", dropped)

    def new_editor(self, card: Optional[Card] = None) -> CardEditor:
        return CardEditor(self.store, self.languages, self.translator, self.analytics, card=card)
