"""Data models for Flippin."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from ..config.languages import Language


def _new_id() -> str:
    return str(uuid.uuid4()).upper()


@dataclass
class Tag:
    """User-defined label attached to any number of cards."""

    name: str
    id: str = field(default_factory=_new_id)


@dataclass
class Card:
    """A single flashcard."""

    # Content
    front_text: str
    back_text: str
    front_language: Language = Language.SPANISH
    back_language: Language = Language.ENGLISH
    notes: str = ""

    # Metadata
    tags: List[str] = field(default_factory=list)
    is_favorite: bool = False
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_new_id)

    # Files
    audio_path: Optional[str] = None
    image_path: Optional[str] = None

    @property
    def language_pair(self) -> Tuple[Language, Language]:
        return self.front_language, self.back_language

    def has_tag(self, name: str) -> bool:
        return name in self.tags

    def matches(self, term: str) -> bool:
        """
        Case-insensitive substring search over the card's text.

        Args:
            term: Search term; an empty term matches every card

        Returns:
            True if the term appears in the front, back, notes or a tag name
        """
        if not term:
            return True
        needle = term.casefold()
        haystack = [self.front_text, self.back_text, self.notes or ""] + list(self.tags)
        return any(needle in text.casefold() for text in haystack)


@dataclass
class CardPerformance:
    """Review statistics of one card."""

    card_id: str
    total_reviews: int = 0
    correct_reviews: int = 0
    incorrect_reviews: int = 0
    consecutive_correct: int = 0
    consecutive_incorrect: int = 0
    time_spent: float = 0.0
    average_response_time: float = 0.0
    difficulty_level: int = 3  # 1-5 scale
    mastery_level: int = 0  # 0-100 scale
    last_reviewed: Optional[datetime] = None
    next_review_date: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def accuracy_rate(self) -> float:
        if self.total_reviews <= 0:
            return 0.0
        return self.correct_reviews / self.total_reviews

    @property
    def is_mastered(self) -> bool:
        return self.mastery_level >= 90

    def needs_review(self, now: Optional[datetime] = None) -> bool:
        if self.next_review_date is None:
            return True
        return (now or datetime.now()) >= self.next_review_date


@dataclass
class LanguageGroup:
    """Section of the card list holding cards of one front language."""

    language: Language
    cards: List[Card] = field(default_factory=list)

    @property
    def title(self) -> str:
        return self.language.display_name
