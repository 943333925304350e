"""Language Manager - the user's native / target language pair."""

import logging
from typing import Iterable, List, Optional

from ..config import Language, SettingsManager
from ..models import Card
from .analytics import AnalyticsEvent, AnalyticsService
from .observable import ChangeNotifier

logger = logging.getLogger(__name__)


class LanguageManager(ChangeNotifier):
    """
    Tracks the native (user) and target language and the language-pair filter.

    On first run the user language comes from the system locale and the
    target language defaults to Spanish (English for Spanish speakers).
    """

    def __init__(self, settings: SettingsManager, analytics: Optional[AnalyticsService] = None):
        super().__init__()
        self._settings = settings
        self._analytics = analytics

        user = Language.from_code(settings.get("user_language"))
        if user is None:
            user = Language.from_system_locale()
            settings.set("user_language", user.code)
        self._user_language = user

        target = Language.from_code(settings.get("target_language"))
        if target is None:
            target = Language.ENGLISH if user is Language.SPANISH else Language.SPANISH
            settings.set("target_language", target.code)
        self._target_language = target

    @property
    def user_language(self) -> Language:
        return self._user_language

    @property
    def target_language(self) -> Language:
        return self._target_language

    @property
    def filter_by_language(self) -> bool:
        return bool(self._settings.get("filter_by_language", False))

    @filter_by_language.setter
    def filter_by_language(self, value: bool) -> None:
        self._settings.set("filter_by_language", bool(value))
        self._notify_change()

    def set_user_language(self, language: Language) -> None:
        old = self._user_language
        self._user_language = language
        self._settings.set("user_language", language.code)
        self._track_change("user", old, language)
        self._notify_change()

    def set_target_language(self, language: Language) -> None:
        old = self._target_language
        self._target_language = language
        self._settings.set("target_language", language.code)
        self._track_change("target", old, language)
        self._notify_change()

    def swap_languages(self) -> None:
        """Exchange native and target language."""
        user, target = self._user_language, self._target_language
        self._user_language, self._target_language = target, user
        self._settings.set("user_language", target.code, persist=False)
        self._settings.set("target_language", user.code)
        self._notify_change()

    def reset_to_system_language(self) -> None:
        self.set_user_language(Language.from_system_locale())

    def filter_cards(self, cards: Iterable[Card], enabled: Optional[bool] = None) -> List[Card]:
        """
        Keep cards of the current language pair.

        Args:
            cards: Cards to filter
            enabled: Override of the persisted filter flag

        Returns:
            Cards whose front is in the target language and back in the
            user language; all cards when the filter is off
        """
        active = self.filter_by_language if enabled is None else enabled
        if not active:
            return list(cards)
        return [
            card for card in cards
            if card.front_language is self._target_language
            and card.back_language is self._user_language
        ]

    def _track_change(self, side: str, old: Language, new: Language) -> None:
        logger.debug("%s language %s -> %s", side, old.code, new.code)
        if self._analytics and old is not new:
            self._analytics.track(
                AnalyticsEvent.LANGUAGE_CHANGED, side=side, old_value=old.code, new_value=new.code
            )
