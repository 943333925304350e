"""Shared fixtures for the Flippin test suite."""

from typing import List

import pytest

from flippin.config import Language, SettingsManager
from flippin.services import (
    AnalyticsService,
    CardFilter,
    CardStore,
    LanguageManager,
    LearningAnalyticsService,
    SQLiteRepository,
    TagManager,
    TrackedEvent,
)


@pytest.fixture
def settings(tmp_path):
    manager = SettingsManager(str(tmp_path / "settings.json"))
    manager.set("user_language", Language.ENGLISH.code)
    manager.set("target_language", Language.SPANISH.code)
    return manager


@pytest.fixture
def repository(tmp_path):
    repo = SQLiteRepository(str(tmp_path / "flippin.db"))
    assert repo.load()
    return repo


@pytest.fixture
def events() -> List[TrackedEvent]:
    return []


@pytest.fixture
def analytics(events):
    service = AnalyticsService()
    service.add_sink(events.append)
    return service


@pytest.fixture
def tag_manager(repository, settings, analytics):
    return TagManager(repository, settings, analytics)


@pytest.fixture
def languages(settings, analytics):
    return LanguageManager(settings, analytics)


@pytest.fixture
def learning(repository, analytics):
    return LearningAnalyticsService(repository, analytics)


@pytest.fixture
def store(repository, tag_manager, analytics):
    card_store = CardStore(repository, tag_manager, analytics, card_limit=0)
    card_store.load()
    return card_store


@pytest.fixture
def card_filter(languages, tag_manager, learning, analytics):
    return CardFilter(languages, tag_manager, learning, analytics)
