"""
Card Store - owner of the flashcard collection.

All card mutations go through this service. After each mutation the
registered change callbacks run in registration order, so derived views
(filtered lists, language groups, the card stack) can recompute.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from ..config import Config, Language
from ..errors import CardLimitError, CardValidationError, StorageError
from ..models import Card
from ..utils.parsing import TextParser
from .analytics import AnalyticsEvent, AnalyticsService
from .observable import ChangeNotifier
from .repository import SQLiteRepository
from .tag_manager import TagManager

logger = logging.getLogger(__name__)


class CardStore(ChangeNotifier):
    """
    Service for managing flashcards.

    Provides CRUD operations and validation on top of the repository.

    Usage:
        store = CardStore(repository)
        store.load()
        card = store.add_card("Hola", "Hello", Language.SPANISH, Language.ENGLISH)
    """

    def __init__(
        self,
        repository: SQLiteRepository,
        tag_manager: Optional[TagManager] = None,
        analytics: Optional[AnalyticsService] = None,
        card_limit: Optional[int] = None,
        max_tags: int = Config.MAX_TAGS_PER_CARD,
    ):
        """
        Initialize card store.

        Args:
            repository: Card storage
            tag_manager: Creates tags on demand when given
            analytics: Optional analytics side channel
            card_limit: Maximum number of cards (0 or None disables the cap;
                        defaults to Config.FREE_CARD_LIMIT)
            max_tags: Maximum number of tags per card
        """
        super().__init__()
        self._repository = repository
        self._tag_manager = tag_manager
        self._analytics = analytics
        self.card_limit = Config.FREE_CARD_LIMIT if card_limit is None else card_limit
        self.max_tags = max_tags
        self._cards: List[Card] = []
        self._loaded = False

        if tag_manager is not None:
            tag_manager.on_change(self._drop_deleted_tags)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def cards(self) -> Tuple[Card, ...]:
        """Snapshot of all cards, oldest first."""
        return tuple(self._cards)

    @property
    def count(self) -> int:
        return len(self._cards)

    @property
    def is_at_limit(self) -> bool:
        return bool(self.card_limit) and len(self._cards) >= self.card_limit

    def load(self) -> bool:
        """
        Load cards from storage.

        Returns:
            True if loaded successfully
        """
        if not self._repository.load():
            self._cards = []
            return False

        self._cards = self._repository.get_all_cards()
        self._loaded = True
        logger.info("Loaded %d cards from %s", len(self._cards), self._repository.db_path)
        self._notify_change()
        return True

    def get(self, card_id: str) -> Optional[Card]:
        for card in self._cards:
            if card.id == card_id:
                return card
        return None

    def add_card(
        self,
        front_text: str,
        back_text: str,
        front_language: Language,
        back_language: Language,
        notes: str = "",
        tags: Iterable[str] = (),
        is_favorite: bool = False,
        timestamp: Optional[datetime] = None,
    ) -> Card:
        """
        Validate and store a new card.

        Args:
            front_text: Text in the target language
            back_text: Text in the user's language
            front_language: Language of the front side
            back_language: Language of the back side
            notes: Optional notes
            tags: Tag names; created on demand
            is_favorite: Initial favorite flag
            timestamp: Creation time (defaults to now)

        Returns:
            The stored card

        Raises:
            CardValidationError: Empty text or too many tags
            CardLimitError: The card limit is reached
        """
        front, back, clean_notes, clean_tags = self._validate(front_text, back_text, notes, tags)

        if self.is_at_limit:
            if self._analytics:
                self._analytics.track(AnalyticsEvent.CARD_LIMIT_REACHED, limit=self.card_limit)
            raise CardLimitError(self.card_limit, len(self._cards))

        card = Card(
            front_text=front,
            back_text=back,
            front_language=front_language,
            back_language=back_language,
            notes=clean_notes,
            tags=clean_tags,
            is_favorite=is_favorite,
        )
        if timestamp is not None:
            card.timestamp = timestamp

        if self._tag_manager and clean_tags:
            self._tag_manager.find_or_create(clean_tags)
        self._repository.add_card(card)
        self._cards.append(card)
        self._cards.sort(key=lambda c: c.timestamp)

        if self._analytics:
            self._analytics.track(
                AnalyticsEvent.CARD_ADDED,
                card_language=front_language.code,
                has_tags=bool(clean_tags),
                tag_count=len(clean_tags),
            )
        self._notify_change()
        return card

    def update_card(
        self,
        card_id: str,
        front_text: Optional[str] = None,
        back_text: Optional[str] = None,
        notes: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        audio_path: Optional[str] = None,
    ) -> Card:
        """
        Edit an existing card; omitted fields keep their value.

        Raises:
            CardValidationError: Unknown card, empty text or too many tags
        """
        card = self.get(card_id)
        if card is None:
            raise CardValidationError(f"Card not found: {card_id}")

        front, back, clean_notes, clean_tags = self._validate(
            card.front_text if front_text is None else front_text,
            card.back_text if back_text is None else back_text,
            card.notes if notes is None else notes,
            card.tags if tags is None else tags,
        )

        card.front_text = front
        card.back_text = back
        card.notes = clean_notes
        card.tags = clean_tags
        if audio_path is not None:
            card.audio_path = audio_path

        if self._tag_manager and clean_tags:
            self._tag_manager.find_or_create(clean_tags)
        if not self._repository.update_card(card):
            raise StorageError(f"Card vanished from storage: {card_id}")

        if self._analytics:
            self._analytics.track(
                AnalyticsEvent.CARD_EDITED,
                card_language=card.front_language.code,
                has_tags=bool(clean_tags),
                tag_count=len(clean_tags),
            )
        self._notify_change()
        return card

    def delete_card(self, card_id: str) -> bool:
        """
        Delete a card by id.

        Returns:
            True if a card was removed
        """
        card = self.get(card_id)
        if card is None:
            return False

        self._repository.delete_card(card_id)
        self._cards.remove(card)
        if self._analytics:
            self._analytics.track(AnalyticsEvent.CARD_DELETED, card_language=card.front_language.code)
        self._notify_change()
        return True

    def delete_all(self) -> int:
        """Delete every card. Tags are kept."""
        removed = self._repository.delete_all_cards()
        self._cards = []
        if self._analytics:
            self._analytics.track(AnalyticsEvent.ALL_CARDS_DELETED, count=removed)
        self._notify_change()
        return removed

    def toggle_favorite(self, card_id: str) -> bool:
        """
        Flip the favorite flag.

        Returns:
            The new flag value

        Raises:
            CardValidationError: Unknown card
        """
        card = self.get(card_id)
        if card is None:
            raise CardValidationError(f"Card not found: {card_id}")

        card.is_favorite = not card.is_favorite
        self._repository.update_card(card)
        if self._analytics:
            event = AnalyticsEvent.CARD_FAVORITED if card.is_favorite else AnalyticsEvent.CARD_UNFAVORITED
            self._analytics.track(event, card_language=card.front_language.code, has_tags=bool(card.tags))
        self._notify_change()
        return card.is_favorite

    # ==================== CSV interchange ====================

    def import_csv(self, csv_path: str) -> int:
        """
        Import cards from a pipe-separated CSV file.

        Invalid rows are skipped; the import stops at the card limit.

        Returns:
            Number of cards imported
        """
        imported = 0
        for parsed in self._repository.read_csv(csv_path):
            try:
                self.add_card(
                    parsed.front_text,
                    parsed.back_text,
                    parsed.front_language,
                    parsed.back_language,
                    notes=parsed.notes,
                    tags=parsed.tags[:self.max_tags],
                    is_favorite=parsed.is_favorite,
                    timestamp=parsed.timestamp,
                )
                imported += 1
            except CardValidationError as e:
                logger.warning("Skipping CSV row %r: %s", parsed.front_text, e)
            except CardLimitError as e:
                logger.warning("Import stopped: %s", e)
                break

        if self._analytics:
            self._analytics.track(AnalyticsEvent.CARDS_IMPORTED, count=imported)
        return imported

    def export_csv(self, csv_path: str) -> int:
        """Export all cards to a pipe-separated CSV file."""
        return self._repository.export_to_csv(csv_path)

    def _drop_deleted_tags(self) -> None:
        """Remove tags that no longer exist from the in-memory cards."""
        existing = set(self._tag_manager.available_tags)
        changed = False
        for card in self._cards:
            kept = [name for name in card.tags if name in existing]
            if kept != card.tags:
                card.tags = kept
                changed = True
        if changed:
            self._notify_change()

    # ==================== Validation ====================

    def _validate(
        self, front_text: str, back_text: str, notes: str, tags: Iterable[str]
    ) -> Tuple[str, str, str, List[str]]:
        front = TextParser.clean_field(front_text)
        back = TextParser.clean_field(back_text)
        if not front or not back:
            raise CardValidationError("Front and back text are required")

        clean_tags = TextParser.clean_tags(tags)
        if len(clean_tags) > self.max_tags:
            raise CardValidationError(
                f"A card can have at most {self.max_tags} tags",
                details=f"got {len(clean_tags)}",
            )
        return front, back, TextParser.clean_field(notes), clean_tags
