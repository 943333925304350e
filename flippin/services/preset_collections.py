"""
Preset Collections - built-in phrase sets per language pair.

Collections live in ``flippin/data/presets.json``. Each phrase carries its
text per language code; a collection is offered for a language pair when at
least one of its phrases is written in both languages.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from ..config import Language
from ..errors import CardLimitError, CardValidationError
from ..models import Card, PresetCategory, PresetCollection, PresetPhrase
from .analytics import AnalyticsEvent, AnalyticsService
from .card_store import CardStore

logger = logging.getLogger(__name__)

PRESETS_FILE = Path(__file__).parent.parent / "data" / "presets.json"


class PresetCollectionService:
    """
    Offers the built-in collections and imports them into the card store.

    Usage:
        presets = PresetCollectionService(store)
        for collection in presets.get_collections(Language.ENGLISH, Language.SPANISH):
            print(collection.name, collection.card_count)
        presets.import_collection("essential_phrases", Language.ENGLISH, Language.SPANISH)
    """

    FEATURED_COUNT = 2

    def __init__(
        self,
        store: CardStore,
        data_file: Optional[str] = None,
        analytics: Optional[AnalyticsService] = None,
    ):
        self._store = store
        self._data_file = Path(data_file) if data_file else PRESETS_FILE
        self._analytics = analytics
        self._collections: Optional[List[PresetCollection]] = None

    @property
    def collections(self) -> List[PresetCollection]:
        """All collections in the data file, loaded on first access."""
        if self._collections is None:
            self._collections = self._load_collections()
        return self._collections

    def _load_collections(self) -> List[PresetCollection]:
        try:
            with open(self._data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("Could not load preset collections from %s: %s", self._data_file, e)
            return []

        collections = []
        for raw in data.get("collections", []):
            try:
                collections.append(PresetCollection(
                    id=raw["id"],
                    name=raw["name"],
                    description=raw.get("description", ""),
                    category=PresetCategory(raw["category"]),
                    phrases=[
                        PresetPhrase(
                            text=dict(phrase["text"]),
                            notes=phrase.get("notes", ""),
                            tags=list(phrase.get("tags", [])),
                        )
                        for phrase in raw.get("phrases", [])
                    ],
                ))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed preset collection %r: %s", raw.get("id"), e)

        logger.info("Loaded %d preset collections", len(collections))
        return collections

    def get_collections(self, user_language: Language, target_language: Language) -> List[PresetCollection]:
        """
        Collections available for a language pair.

        Args:
            user_language: Language the user speaks
            target_language: Language being learned

        Returns:
            Collections reduced to the phrases written in both languages;
            collections without such phrases are left out
        """
        available = []
        for collection in self.collections:
            phrases = [p for p in collection.phrases if p.supports(user_language, target_language)]
            if phrases:
                available.append(PresetCollection(
                    id=collection.id,
                    name=collection.name,
                    description=collection.description,
                    category=collection.category,
                    phrases=phrases,
                ))
        return available

    def get_featured_collections(self, user_language: Language, target_language: Language) -> List[PresetCollection]:
        return self.get_collections(user_language, target_language)[:self.FEATURED_COUNT]

    def get_collection(
        self,
        collection_id: str,
        user_language: Language,
        target_language: Language,
    ) -> Optional[PresetCollection]:
        for collection in self.get_collections(user_language, target_language):
            if collection.id == collection_id:
                return collection
        return None

    @staticmethod
    def to_cards(collection: PresetCollection, user_language: Language, target_language: Language) -> List[Card]:
        """Unsaved cards for a collection: target language on the front."""
        return [
            Card(
                front_text=phrase.text_for(target_language),
                back_text=phrase.text_for(user_language),
                front_language=target_language,
                back_language=user_language,
                notes=phrase.notes,
                tags=list(phrase.tags),
            )
            for phrase in collection.phrases
            if phrase.supports(user_language, target_language)
        ]

    def import_collection(self, collection_id: str, user_language: Language, target_language: Language) -> int:
        """
        Add the cards of a collection to the store.

        Invalid phrases are skipped; the import stops at the card limit.

        Returns:
            Number of cards added

        Raises:
            KeyError: No such collection for the language pair
        """
        collection = self.get_collection(collection_id, user_language, target_language)
        if collection is None:
            raise KeyError(
                f"No preset collection {collection_id!r} for "
                f"{user_language.code}->{target_language.code}"
            )

        imported = 0
        for card in self.to_cards(collection, user_language, target_language):
            try:
                self._store.add_card(
                    card.front_text,
                    card.back_text,
                    card.front_language,
                    card.back_language,
                    notes=card.notes,
                    tags=card.tags[:self._store.max_tags],
                )
                imported += 1
            except CardValidationError as e:
                logger.warning("Skipping preset phrase %r: %s", card.front_text, e)
            except CardLimitError as e:
                logger.warning("Preset import stopped: %s", e)
                break

        if self._analytics:
            self._analytics.track(
                AnalyticsEvent.CARDS_IMPORTED,
                count=imported,
                source="preset",
                collection=collection.id,
            )
        return imported
