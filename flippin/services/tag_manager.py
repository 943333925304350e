"""
Tag Manager - user-defined tags and the persisted filter selection.

Tags are created on demand and are never removed implicitly: a tag whose
last card was deleted stays available until the user removes it or calls
``prune_unused_tags``.
"""

import logging
from typing import Iterable, List, Optional, Set

from ..config import SettingsManager
from ..models import Card
from ..utils.parsing import TextParser
from .analytics import AnalyticsEvent, AnalyticsService
from .observable import ChangeNotifier
from .repository import BaseRepository

logger = logging.getLogger(__name__)


class TagManager(ChangeNotifier):
    """Service for tags and the tag / favorite / difficulty filter flags."""

    def __init__(
        self,
        repository: BaseRepository,
        settings: SettingsManager,
        analytics: Optional[AnalyticsService] = None,
    ):
        """
        Initialize tag manager.

        Args:
            repository: Card and tag storage
            settings: Key-value settings holding the filter selection
            analytics: Optional analytics side channel
        """
        super().__init__()
        self._repository = repository
        self._settings = settings
        self._analytics = analytics

    # ==================== Tags ====================

    @property
    def available_tags(self) -> List[str]:
        """All tag names, sorted."""
        return sorted(tag.name for tag in self._repository.get_all_tags())

    def add_tag(self, name: str) -> Optional[str]:
        """
        Create a tag if it does not exist yet.

        Args:
            name: Raw tag name; surrounding whitespace is trimmed

        Returns:
            The stored tag name, or None for a blank name
        """
        trimmed = TextParser.clean_field(name)
        if not trimmed:
            return None
        tag = self._repository.find_or_create_tag(trimmed)
        self._notify_change()
        return tag.name

    def find_or_create(self, names: Iterable[str]) -> List[str]:
        """Ensure every tag in ``names`` exists. Returns the cleaned names."""
        cleaned = TextParser.clean_tags(names)
        existing = set(self.available_tags)
        created = False
        for name in cleaned:
            if name not in existing:
                self._repository.find_or_create_tag(name)
                created = True
        if created:
            self._notify_change()
        return cleaned

    def remove_tag(self, name: str) -> bool:
        """Delete a tag everywhere; clears the tag filter if it was selected."""
        removed = self._repository.delete_tag(name)
        if not removed:
            return False

        if self.selected_tag == name:
            self._settings.set("selected_filter_tag", "")
        if self._analytics:
            self._analytics.track(
                AnalyticsEvent.TAG_DELETED, tag_name=name, tag_count=len(self.available_tags)
            )
        self._notify_change()
        return True

    def unused_tags(self) -> List[str]:
        """Names of tags that no card carries."""
        return [tag.name for tag in self._repository.get_unused_tags()]

    def prune_unused_tags(self) -> List[str]:
        """Delete every orphan tag. Returns the removed names."""
        removed = []
        for name in self.unused_tags():
            if self._repository.delete_tag(name):
                removed.append(name)
        if removed:
            logger.info("Pruned %d unused tags", len(removed))
            if self.selected_tag in removed:
                self._settings.set("selected_filter_tag", "")
            self._notify_change()
        return removed

    # ==================== Filter selection ====================

    @property
    def selected_tag(self) -> Optional[str]:
        return self._settings.get("selected_filter_tag") or None

    @selected_tag.setter
    def selected_tag(self, name: Optional[str]) -> None:
        self._settings.set("selected_filter_tag", TextParser.clean_field(name or ""))
        self._notify_change()

    @property
    def favorite_filter_on(self) -> bool:
        return bool(self._settings.get("favorite_filter_on", False))

    @favorite_filter_on.setter
    def favorite_filter_on(self, value: bool) -> None:
        self._settings.set("favorite_filter_on", bool(value))
        self._notify_change()

    @property
    def difficult_filter_on(self) -> bool:
        return bool(self._settings.get("difficult_filter_on", False))

    @difficult_filter_on.setter
    def difficult_filter_on(self, value: bool) -> None:
        self._settings.set("difficult_filter_on", bool(value))
        self._notify_change()

    def clear_filter(self) -> None:
        """Reset the tag, favorite and difficulty filters."""
        self._settings.set("selected_filter_tag", "", persist=False)
        self._settings.set("favorite_filter_on", False, persist=False)
        self._settings.set("difficult_filter_on", False)
        self._notify_change()

    # ==================== Filtering ====================

    @staticmethod
    def filter_cards(cards: Iterable[Card], tag: Optional[str]) -> List[Card]:
        """Keep cards carrying ``tag``; no tag keeps everything."""
        if not tag:
            return list(cards)
        return [card for card in cards if card.has_tag(tag)]

    @staticmethod
    def filter_by_favorite(cards: Iterable[Card], enabled: bool = True) -> List[Card]:
        if not enabled:
            return list(cards)
        return [card for card in cards if card.is_favorite]

    @staticmethod
    def filter_by_difficulty(
        cards: Iterable[Card], difficult_ids: Set[str], enabled: bool = True
    ) -> List[Card]:
        if not enabled:
            return list(cards)
        return [card for card in cards if card.id in difficult_ids]
