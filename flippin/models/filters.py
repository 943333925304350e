"""Transient filter selection applied to the card list."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class FilterState:
    """
    Current filter selection.

    Every active filter applies: search AND language pair AND tag AND
    favorites AND difficulty.
    """

    search_text: str = ""
    tag: Optional[str] = None
    favorites_only: bool = False
    difficult_only: bool = False
    by_language: bool = False

    @property
    def search_term(self) -> str:
        return self.search_text or ""

    @property
    def is_empty(self) -> bool:
        return not (
            self.search_term
            or self.tag
            or self.favorites_only
            or self.difficult_only
            or self.by_language
        )
