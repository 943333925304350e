"""Tests for filtering, grouping and search tracking."""

from datetime import datetime, timedelta

import pytest
from hypothesis import given, settings as hyp_settings, strategies as st

from flippin.config import Language
from flippin.models import Card, FilterState
from flippin.services import AnalyticsEvent, CardFilter, SearchTracker, TagManager

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def make_card(front, back="x", front_language=Language.SPANISH, back_language=Language.ENGLISH,
              tags=(), minutes=0, favorite=False, notes=""):
    return Card(
        front_text=front,
        back_text=back,
        front_language=front_language,
        back_language=back_language,
        tags=list(tags),
        notes=notes,
        is_favorite=favorite,
        timestamp=BASE_TIME + timedelta(minutes=minutes),
    )


class _AllLanguages:
    """Language manager stand-in with the pair filter switched off."""

    target_language = Language.SPANISH
    filter_by_language = False

    def filter_cards(self, cards, enabled=None):
        return list(cards)


class TestFarewellScenario:

    def test_tag_filter_keeps_only_tagged_card(self, card_filter):
        cards = [
            make_card("Hola", tags=["greeting"]),
            make_card("Adiós", tags=["greeting", "farewell"], minutes=1),
        ]

        result = card_filter.apply(cards, FilterState(tag="farewell"))

        assert [c.front_text for c in result] == ["Adiós"]


class TestApply:

    def test_search_matches_front_back_notes_and_tags(self, card_filter):
        cards = [
            make_card("Perro", "Dog"),
            make_card("Gato", "Cat", notes="domestic animal"),
            make_card("Casa", "House", tags=["Animals"]),
            make_card("Mesa", "Table"),
        ]

        result = card_filter.apply(cards, FilterState(search_text="ANIMAL"))
        assert [c.front_text for c in result] == ["Gato", "Casa"]

        result = card_filter.apply(cards, FilterState(search_text="dog"))
        assert [c.front_text for c in result] == ["Perro"]

    def test_language_pair_filter(self, card_filter):
        cards = [
            make_card("Hola"),
            make_card("Bonjour", front_language=Language.FRENCH),
            make_card("Hello", "Hola", Language.ENGLISH, Language.SPANISH),
        ]

        result = card_filter.apply(cards, FilterState(by_language=True))

        assert [c.front_text for c in result] == ["Hola"]

    def test_favorites_only(self, card_filter):
        cards = [make_card("a"), make_card("b", favorite=True)]
        result = card_filter.apply(cards, FilterState(favorites_only=True))
        assert [c.front_text for c in result] == ["b"]

    def test_filters_are_conjunctive(self, card_filter):
        cards = [
            make_card("Hola amigo", tags=["people"], favorite=True),
            make_card("Hola", tags=["people"]),
            make_card("Amigo", tags=["other"], favorite=True),
        ]
        state = FilterState(search_text="amigo", tag="people", favorites_only=True)

        assert [c.front_text for c in card_filter.apply(cards, state)] == ["Hola amigo"]

    def test_difficult_only(self, store, learning, card_filter):
        hard = store.add_card("Desafortunadamente", "Unfortunately", Language.SPANISH, Language.ENGLISH)
        easy = store.add_card("Sí", "Yes", Language.SPANISH, Language.ENGLISH)
        now = datetime(2024, 5, 1, 9, 0)
        for _ in range(5):
            learning.record_review(hard.id, was_correct=False, time_spent=20.0, now=now)
            learning.record_review(easy.id, was_correct=True, time_spent=1.0, now=now)

        result = card_filter.apply(store.cards, FilterState(difficult_only=True))

        assert [c.id for c in result] == [hard.id]

    def test_empty_state_keeps_everything(self, card_filter):
        cards = [make_card("a"), make_card("b")]
        assert FilterState().is_empty
        assert card_filter.apply(cards, FilterState()) == cards


class TestGroup:

    def test_groups_by_front_language_sorted_by_name(self, card_filter):
        cards = [
            make_card("Hola", minutes=3),
            make_card("Bonjour", front_language=Language.FRENCH, minutes=2),
            make_card("Adiós", minutes=1),
            make_card("Hallo", front_language=Language.GERMAN, minutes=0),
        ]

        groups = card_filter.group(cards, FilterState())

        assert [g.title for g in groups] == ["French", "German", "Spanish"]
        assert [c.front_text for c in groups[2].cards] == ["Adiós", "Hola"]

    def test_language_filter_gives_single_list_newest_first(self, card_filter):
        cards = [make_card("old", minutes=0), make_card("new", minutes=5), make_card("mid", minutes=2)]

        groups = card_filter.group(cards, FilterState(by_language=True))

        assert len(groups) == 1
        assert [c.front_text for c in groups[0].cards] == ["new", "mid", "old"]

    def test_no_cards_no_groups(self, card_filter):
        assert card_filter.group([], FilterState()) == []
        assert card_filter.group([], FilterState(by_language=True)) == []

    def test_stack_order_flattens_groups(self, card_filter):
        cards = [
            make_card("Hola", minutes=1),
            make_card("Bonjour", front_language=Language.FRENCH, minutes=0),
        ]
        order = card_filter.stack_order(cards, FilterState())
        assert [c.front_text for c in order] == ["Bonjour", "Hola"]


class TestSearchTracker:

    def test_reports_each_term_once_and_clear_once(self, analytics, events):
        tracker = SearchTracker(analytics)

        observed = [tracker.observe(t) for t in ["", "h", "h", "ho", "", ""]]

        assert observed == [
            None,
            AnalyticsEvent.SEARCH_PERFORMED,
            None,
            AnalyticsEvent.SEARCH_PERFORMED,
            AnalyticsEvent.SEARCH_CLEARED,
            None,
        ]
        assert [e.event for e in events] == [
            AnalyticsEvent.SEARCH_PERFORMED,
            AnalyticsEvent.SEARCH_PERFORMED,
            AnalyticsEvent.SEARCH_CLEARED,
        ]
        assert events[1].params["search_term"] == "ho"

    def test_apply_feeds_tracker(self, card_filter, events):
        cards = [make_card("Hola")]
        card_filter.apply(cards, FilterState(search_text="ho"))
        card_filter.apply(cards, FilterState(search_text="ho"))

        searches = [e for e in events if e.event is AnalyticsEvent.SEARCH_PERFORMED]
        assert len(searches) == 1
        assert searches[0].params["result_count"] == 1


# ==================== Properties ====================

tag_names = st.sampled_from(["food", "travel", "verbs", "greeting", "farewell"])
languages = st.sampled_from([Language.SPANISH, Language.FRENCH, Language.GERMAN, Language.ITALIAN])


@st.composite
def card_lists(draw):
    count = draw(st.integers(min_value=0, max_value=15))
    cards = []
    for i in range(count):
        cards.append(make_card(
            front=draw(st.text(alphabet="abcdeñé ", min_size=1, max_size=8)),
            back=draw(st.text(alphabet="xyzABC ", min_size=1, max_size=8)),
            front_language=draw(languages),
            tags=draw(st.lists(tag_names, max_size=3, unique=True)),
            minutes=draw(st.integers(min_value=0, max_value=3)),
        ))
    return cards


class TestFilterProperties:

    @pytest.mark.property
    @hyp_settings(max_examples=60)
    @given(cards=card_lists(), tag=tag_names)
    def test_tag_filter_sound_and_complete(self, cards, tag):
        result = TagManager.filter_cards(cards, tag)

        assert all(tag in c.tags for c in result)
        assert [c for c in cards if tag in c.tags] == result

    @pytest.mark.property
    @hyp_settings(max_examples=60)
    @given(cards=card_lists(), term=st.text(alphabet="abcxyzAB", min_size=1, max_size=3))
    def test_search_results_contain_term(self, cards, term):
        card_filter = CardFilter(_AllLanguages())
        result = card_filter.apply(cards, FilterState(search_text=term))

        needle = term.casefold()
        for card in result:
            fields = [card.front_text, card.back_text, card.notes] + card.tags
            assert any(needle in f.casefold() for f in fields)

    @pytest.mark.property
    @hyp_settings(max_examples=60)
    @given(cards=card_lists())
    def test_grouping_is_stable(self, cards):
        card_filter = CardFilter(_AllLanguages())

        groups = card_filter.group(cards, FilterState())

        assert card_filter.group(cards, FilterState()) == groups
        assert [g.title for g in groups] == sorted(g.title for g in groups)
        assert sorted(c.id for g in groups for c in g.cards) == sorted(c.id for c in cards)
        for group in groups:
            assert all(c.front_language is group.language for c in group.cards)
            expected = sorted(
                [c for c in cards if c.front_language is group.language],
                key=lambda c: c.timestamp,
            )
            assert group.cards == expected
