"""Built-in phrase collections."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..config.languages import Language


class PresetCategory(Enum):
    BASICS = "basics"
    TRAVEL = "travel"
    LEISURE = "leisure"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    FOOD = "food"
    BUSINESS = "business"
    EDUCATION = "education"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


@dataclass
class PresetPhrase:
    """One phrase of a collection, written out per language code."""

    text: Dict[str, str]
    notes: str = ""
    tags: List[str] = field(default_factory=list)

    def text_for(self, language: Language) -> Optional[str]:
        return self.text.get(language.code)

    def supports(self, user_language: Language, target_language: Language) -> bool:
        return bool(self.text_for(user_language)) and bool(self.text_for(target_language))


@dataclass
class PresetCollection:
    """A themed set of phrases that can be imported as cards."""

    id: str
    name: str
    description: str
    category: PresetCategory
    phrases: List[PresetPhrase] = field(default_factory=list)

    @property
    def card_count(self) -> int:
        return len(self.phrases)
