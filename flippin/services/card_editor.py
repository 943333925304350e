"""
Card Editor - state behind the add / edit card screen.

Typing into the native text debounces a translation into the target text.
The editor is created for a new card or for an existing one and must be
closed when the screen goes away.
"""

import logging
from typing import List, Optional

from ..config import Config, Language
from ..errors import TranslationError
from ..models import Card
from ..utils.parsing import TextParser
from .analytics import AnalyticsService
from .card_store import CardStore
from .debounce import TranslationDebouncer
from .language_manager import LanguageManager
from .translation import TranslationClient

logger = logging.getLogger(__name__)


class CardEditor:
    """
    Edit session for one card.

    Usage:
        editor = CardEditor(store, languages, client, analytics)
        editor.native_text = "Good night"   # target_text follows after the quiet period
        await editor.wait_for_translation()
        card = editor.save()
        editor.close()
    """

    def __init__(
        self,
        store: CardStore,
        languages: LanguageManager,
        client: TranslationClient,
        analytics: Optional[AnalyticsService] = None,
        card: Optional[Card] = None,
        quiet_period: float = Config.DEBOUNCE_SECONDS,
    ):
        self._store = store
        self._client = client
        self.card = card

        if card is not None:
            self.source_language: Language = card.back_language
            self.target_language: Language = card.front_language
            self._native_text = card.back_text
            self.target_text = card.front_text
            self.notes = card.notes
            self.selected_tags: List[str] = list(card.tags)
        else:
            self.source_language = languages.user_language
            self.target_language = languages.target_language
            self._native_text = ""
            self.target_text = ""
            self.notes = ""
            self.selected_tags = []

        self.last_error: Optional[TranslationError] = None
        # Edits come only from the user, so nothing is skipped
        self._debouncer = TranslationDebouncer(
            self._translate,
            on_result=self._apply_translation,
            on_error=self._record_error,
            quiet_period=quiet_period,
            skip_initial=0,
            analytics=analytics,
        )

    @property
    def is_editing(self) -> bool:
        return self.card is not None

    @property
    def is_translating(self) -> bool:
        return self._debouncer.in_flight

    @property
    def native_text(self) -> str:
        return self._native_text

    @native_text.setter
    def native_text(self, text: str) -> None:
        self._native_text = text
        self._debouncer.submit(text)

    # ==================== Tags ====================

    def add_tag(self, name: str) -> bool:
        """Select a tag; refused when blank, already selected or at the cap."""
        name = TextParser.clean_field(name)
        if not name or name in self.selected_tags:
            return False
        if len(self.selected_tags) >= Config.MAX_TAGS_PER_CARD:
            return False
        self.selected_tags.append(name)
        return True

    def remove_tag(self, name: str) -> bool:
        if name in self.selected_tags:
            self.selected_tags.remove(name)
            return True
        return False

    # ==================== Lifecycle ====================

    def save(self) -> Card:
        """
        Create or update the card.

        Raises:
            CardValidationError: Empty text or too many tags
            CardLimitError: The card limit is reached (new cards only)
        """
        if self.card is None:
            self.card = self._store.add_card(
                self.target_text,
                self._native_text,
                self.target_language,
                self.source_language,
                notes=self.notes,
                tags=self.selected_tags,
            )
        else:
            self.card = self._store.update_card(
                self.card.id,
                front_text=self.target_text,
                back_text=self._native_text,
                notes=self.notes,
                tags=self.selected_tags,
            )
        return self.card

    async def wait_for_translation(self) -> None:
        await self._debouncer.wait_idle()

    def close(self) -> None:
        """Cancel pending work; a running translation is ignored."""
        self._debouncer.cancel()

    # ==================== Translation ====================

    async def _translate(self, text: str) -> str:
        result = await self._client.translate(text, self.source_language, self.target_language)
        return result.text

    def _apply_translation(self, text: str) -> None:
        self.last_error = None
        self.target_text = text

    def _record_error(self, error: BaseException) -> None:
        if isinstance(error, TranslationError):
            self.last_error = error
        else:
            self.last_error = TranslationError("Translation failed", details=str(error))
