"""
Learning Analytics - per-card review statistics.

Every review updates the card's mastery (0-100), difficulty (1-5) and the
next spaced-repetition review date. Cards at ``Config.DIFFICULT_LEVEL`` or
above feed the "difficult only" filter.
"""

import logging
from collections import Counter
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set

from ..config import Config
from ..models import Card, CardPerformance
from .analytics import AnalyticsEvent, AnalyticsService
from .repository import SQLiteRepository

logger = logging.getLogger(__name__)


class LearningAnalyticsService:
    """Records reviews and answers questions about card difficulty."""

    def __init__(self, repository: SQLiteRepository, analytics: Optional[AnalyticsService] = None):
        self._repository = repository
        self._analytics = analytics
        self._performances: Optional[Dict[str, CardPerformance]] = None

    @property
    def performances(self) -> Dict[str, CardPerformance]:
        """Lazy-load review statistics."""
        if self._performances is None:
            self._performances = self._repository.get_all_performances()
        return self._performances

    def reload(self) -> None:
        self._performances = None

    def get_performance(self, card_id: str) -> Optional[CardPerformance]:
        return self.performances.get(card_id)

    def retain(self, card_ids: Iterable[str]) -> int:
        """
        Drop cached statistics of cards that no longer exist.

        The database removes their rows through the foreign key cascade.

        Args:
            card_ids: Ids of the cards still in the store

        Returns:
            Number of entries dropped
        """
        if self._performances is None:
            return 0
        keep = set(card_ids)
        stale = [card_id for card_id in self._performances if card_id not in keep]
        for card_id in stale:
            del self._performances[card_id]
        return len(stale)

    def record_review(
        self,
        card_id: str,
        was_correct: bool,
        time_spent: float,
        now: Optional[datetime] = None,
    ) -> CardPerformance:
        """
        Record one answer for a card.

        Args:
            card_id: Reviewed card
            was_correct: Whether the user knew the answer
            time_spent: Seconds spent on the card
            now: Review time (defaults to current time)

        Returns:
            Updated statistics
        """
        now = now or datetime.now()
        existing = self.performances.get(card_id)
        if existing is None:
            perf = CardPerformance(card_id=card_id, created_at=now)
        else:
            perf = replace(existing)

        previous_total = perf.total_reviews
        perf.total_reviews += 1
        perf.time_spent += time_spent
        perf.last_reviewed = now
        perf.average_response_time = (
            perf.average_response_time * previous_total + time_spent
        ) / perf.total_reviews

        if was_correct:
            perf.correct_reviews += 1
            perf.consecutive_correct += 1
            perf.consecutive_incorrect = 0
        else:
            perf.incorrect_reviews += 1
            perf.consecutive_incorrect += 1
            perf.consecutive_correct = 0

        self._update_mastery(perf)
        self._update_difficulty(perf, now)
        self._update_next_review_date(perf, now)

        self._repository.save_performance(perf)
        self.performances[card_id] = perf
        if self._analytics:
            self._analytics.track(
                AnalyticsEvent.CARD_REVIEWED,
                card_id=card_id,
                correct=was_correct,
                difficulty=perf.difficulty_level,
            )
        return perf

    def difficult_card_ids(self, min_level: Optional[int] = None) -> Set[str]:
        """Ids of cards whose difficulty is at least ``min_level``."""
        level = Config.DIFFICULT_LEVEL if min_level is None else min_level
        return {
            card_id for card_id, perf in self.performances.items()
            if perf.difficulty_level >= level
        }

    def cards_needing_review(self, cards: Iterable[Card], now: Optional[datetime] = None) -> List[Card]:
        """Cards never reviewed or past their next review date."""
        result = []
        for card in cards:
            perf = self.performances.get(card.id)
            if perf is None or perf.needs_review(now):
                result.append(card)
        return result

    def difficulty_distribution(self) -> Dict[int, int]:
        """Number of reviewed cards per difficulty level 1-5."""
        counts = Counter(perf.difficulty_level for perf in self.performances.values())
        return {level: counts.get(level, 0) for level in range(1, 6)}

    # ==================== Scoring ====================

    @staticmethod
    def _update_mastery(perf: CardPerformance) -> None:
        mastery = int(perf.accuracy_rate * 100)

        # Not enough data yet for full mastery
        if perf.total_reviews < 3:
            mastery = min(mastery, 50)
        elif perf.total_reviews < 5:
            mastery = min(mastery, 75)

        if perf.total_reviews >= 3:
            if perf.consecutive_correct >= 5:
                mastery += 15
            elif perf.consecutive_correct >= 3:
                mastery += 10

        if perf.consecutive_incorrect >= 2:
            mastery -= 20
        elif perf.consecutive_incorrect >= 1:
            mastery -= 10

        perf.mastery_level = max(0, min(100, mastery))

    def _update_difficulty(self, perf: CardPerformance, now: datetime) -> None:
        score = 0.0

        # Performance: 60%
        score += (1.0 - perf.accuracy_rate) * 0.6 * 0.4
        score += min(1.0, perf.average_response_time / 10.0) * 0.6 * 0.3
        score += min(1.0, perf.consecutive_incorrect / 5.0) * 0.6 * 0.3

        # Content: 30%, newer and frequently reviewed cards count as harder
        days = max(0, (now - perf.created_at).days)
        score += max(0.0, min(1.0, 1.0 - days / 30.0)) * 0.3 * 0.5
        frequency = perf.total_reviews / max(1, days)
        score += min(1.0, frequency / 2.0) * 0.3 * 0.5

        # User: 10%, relative to the user's average accuracy
        score += max(0.0, self._average_accuracy(perf) - perf.accuracy_rate) * 0.1

        perf.difficulty_level = int(max(1, min(5, round(score * 5))))

    def _average_accuracy(self, current: CardPerformance) -> float:
        perfs = [p for card_id, p in self.performances.items() if card_id != current.card_id]
        perfs.append(current)
        return sum(p.accuracy_rate for p in perfs) / len(perfs)

    @staticmethod
    def _update_next_review_date(perf: CardPerformance, now: datetime) -> None:
        accuracy = perf.accuracy_rate
        streak = perf.consecutive_correct

        if accuracy >= 0.9 and streak >= 3:
            days = min(30, 7 + streak * 2)
        elif accuracy >= 0.7:
            days = min(7, 3 + streak)
        else:
            days = max(1, 3 - streak)

        perf.next_review_date = now + timedelta(days=days)
