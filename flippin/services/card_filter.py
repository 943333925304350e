"""
Card Filter - derives the visible card list from the store.

Filters are conjunctive and always applied in the same order:
search, language pair, tag, favorite, difficulty.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..config import Language
from ..models import Card, FilterState, LanguageGroup
from .analytics import AnalyticsEvent, AnalyticsService
from .language_manager import LanguageManager
from .learning_analytics import LearningAnalyticsService
from .tag_manager import TagManager

logger = logging.getLogger(__name__)


class SearchTracker:
    """Reports each distinct search term once, and once when it is cleared."""

    def __init__(self, analytics: Optional[AnalyticsService] = None):
        self._analytics = analytics
        self._last_term = ""

    @property
    def last_term(self) -> str:
        return self._last_term

    def observe(self, term: str, result_count: int = 0) -> Optional[AnalyticsEvent]:
        """
        Record the current search term.

        Returns:
            The event reported for this term, or None
        """
        term = (term or "").strip()
        if term == self._last_term:
            return None

        event = AnalyticsEvent.SEARCH_PERFORMED if term else AnalyticsEvent.SEARCH_CLEARED
        self._last_term = term
        if self._analytics:
            if term:
                self._analytics.track(event, search_term=term, result_count=result_count)
            else:
                self._analytics.track(event)
        return event


class CardFilter:
    """
    Applies a FilterState to a card collection.

    Usage:
        card_filter = CardFilter(languages, tags, learning)
        visible = card_filter.apply(store.cards, state)
        groups = card_filter.group(store.cards, state)
    """

    def __init__(
        self,
        language_manager: LanguageManager,
        tag_manager: Optional[TagManager] = None,
        learning_analytics: Optional[LearningAnalyticsService] = None,
        analytics: Optional[AnalyticsService] = None,
    ):
        self._languages = language_manager
        self._tags = tag_manager
        self._learning = learning_analytics
        self.search_tracker = SearchTracker(analytics)

    def apply(self, cards: Iterable[Card], state: FilterState) -> List[Card]:
        """
        Filter cards, keeping their input order.

        Args:
            cards: Cards in store order
            state: Active filter selection

        Returns:
            Cards satisfying every active filter
        """
        term = state.search_term
        result = [card for card in cards if card.matches(term)]
        result = self._languages.filter_cards(result, enabled=state.by_language)
        result = TagManager.filter_cards(result, state.tag)
        result = TagManager.filter_by_favorite(result, state.favorites_only)
        if state.difficult_only:
            difficult = self._learning.difficult_card_ids() if self._learning else set()
            result = TagManager.filter_by_difficulty(result, difficult)

        self.search_tracker.observe(term, len(result))
        return result

    def group(self, cards: Iterable[Card], state: FilterState) -> List[LanguageGroup]:
        """
        Filter and section cards for display.

        With the language-pair filter on the result is a single group, newest
        first. Otherwise cards are grouped by front language (oldest first
        within a group) and groups are ordered by language display name.
        """
        filtered = self.apply(cards, state)
        if state.by_language:
            if not filtered:
                return []
            ordered = sorted(filtered, key=lambda c: c.timestamp, reverse=True)
            return [LanguageGroup(self._languages.target_language, ordered)]

        by_language: Dict[Language, List[Card]] = {}
        for card in filtered:
            by_language.setdefault(card.front_language, []).append(card)

        groups = [
            LanguageGroup(language, sorted(group_cards, key=lambda c: c.timestamp))
            for language, group_cards in by_language.items()
        ]
        groups.sort(key=lambda g: g.title)
        return groups

    def stack_order(self, cards: Iterable[Card], state: FilterState) -> List[Card]:
        """Flattened display order, used to seed the card stack."""
        return [card for group in self.group(cards, state) for card in group.cards]

    def state_from_settings(self, search_text: str = "") -> FilterState:
        """Build a FilterState from the persisted selections."""
        return FilterState(
            search_text=search_text,
            tag=self._tags.selected_tag if self._tags else None,
            favorites_only=self._tags.favorite_filter_on if self._tags else False,
            difficult_only=self._tags.difficult_filter_on if self._tags else False,
            by_language=self._languages.filter_by_language,
        )
