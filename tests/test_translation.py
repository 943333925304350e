"""Tests for the translation client and the card editor that uses it."""

import asyncio

import aiohttp
import pytest

from flippin.config import Config, Language
from flippin.errors import CardValidationError, TranslationError
from flippin.services import CardEditor, TranslationClient, TranslationResult


class StubResponse:
    def __init__(self, status=200, payload=None):
        self.status = status
        self.payload = payload

    async def json(self, content_type=None):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class StubSession:
    """Minimal stand-in for aiohttp.ClientSession."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []
        self.closed = False

    def get(self, url, params=None):
        self.requests.append((url, params))
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


GOOD_PAYLOAD = [[["Buenas noches", "Good night", None, None, 10]], None, "en"]


def _translate(session, text="Good night"):
    client = TranslationClient(session=session)
    return asyncio.run(client.translate(text, Language.ENGLISH, Language.SPANISH))


class TestTranslationClient:

    def test_successful_translation(self):
        session = StubSession(StubResponse(payload=GOOD_PAYLOAD))

        result = _translate(session)

        assert result == TranslationResult(text="Buenas noches", detected_language="en")
        url, params = session.requests[0]
        assert url == Config.TRANSLATION_API_URL
        assert params == {"client": "gtx", "sl": "en", "tl": "es", "dt": "t", "q": "Good night"}

    def test_missing_detected_language(self):
        session = StubSession(StubResponse(payload=[[["Hola"]]]))
        assert _translate(session, "Hello").detected_language is None

    def test_non_200_status(self):
        session = StubSession(StubResponse(status=429, payload=GOOD_PAYLOAD))

        with pytest.raises(TranslationError) as exc_info:
            _translate(session)

        assert exc_info.value.status == 429
        assert len(session.requests) == 1

    @pytest.mark.parametrize("payload", [[], [[]], [[[]]], {"text": "x"}, [[[None]]], None, [[[42, "x"]]]])
    def test_unexpected_shape(self, payload):
        session = StubSession(StubResponse(payload=payload))
        with pytest.raises(TranslationError):
            _translate(session)

    def test_invalid_json(self):
        session = StubSession(StubResponse(payload=ValueError("Expecting value")))
        with pytest.raises(TranslationError):
            _translate(session)

    def test_network_error(self):
        session = StubSession(error=aiohttp.ClientConnectionError("connection refused"))
        with pytest.raises(TranslationError):
            _translate(session)

    def test_timeout(self):
        session = StubSession(error=asyncio.TimeoutError())
        with pytest.raises(TranslationError):
            _translate(session)

    def test_external_session_left_open(self):
        session = StubSession(StubResponse(payload=GOOD_PAYLOAD))

        async def scenario():
            async with TranslationClient(session=session) as client:
                await client.translate("Good night", Language.ENGLISH, Language.SPANISH)

        asyncio.run(scenario())
        assert not session.closed


class FakeClient:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    async def translate(self, text, source, target):
        self.calls.append((text, source, target))
        if self.fail:
            raise TranslationError("HTTP 503", status=503)
        return TranslationResult(text=f"{target.code}:{text}", detected_language=source.code)

    async def close(self):
        pass


class TestCardEditor:

    def test_typing_translates_and_saves(self, store, languages):
        client = FakeClient()

        async def scenario():
            editor = CardEditor(store, languages, client, quiet_period=0.01)
            editor.native_text = "Good"
            editor.native_text = "Good night"
            await editor.wait_for_translation()
            editor.add_tag("phrases")
            card = editor.save()
            editor.close()
            return editor, card

        editor, card = asyncio.run(scenario())

        assert client.calls == [("Good night", Language.ENGLISH, Language.SPANISH)]
        assert editor.target_text == "es:Good night"
        assert card.front_text == "es:Good night"
        assert card.back_text == "Good night"
        assert card.front_language is Language.SPANISH
        assert card.back_language is Language.ENGLISH
        assert card.tags == ["phrases"]
        assert store.count == 1

    def test_failed_translation_keeps_target(self, store, languages):
        client = FakeClient(fail=True)

        async def scenario():
            editor = CardEditor(store, languages, client, quiet_period=0.01)
            editor.target_text = "manual"
            editor.native_text = "Good night"
            await editor.wait_for_translation()
            return editor

        editor = asyncio.run(scenario())

        assert editor.target_text == "manual"
        assert editor.last_error is not None
        assert editor.last_error.status == 503

    def test_editing_existing_card(self, store, languages):
        card = store.add_card("Hola", "Hello", Language.SPANISH, Language.ENGLISH, tags=["greeting"])
        client = FakeClient()

        async def scenario():
            editor = CardEditor(store, languages, client, card=card, quiet_period=0.01)
            assert editor.native_text == "Hello"
            assert editor.target_text == "Hola"
            editor.notes = "informal"
            return editor.save()

        saved = asyncio.run(scenario())

        assert client.calls == []
        assert saved.id == card.id
        assert saved.notes == "informal"
        assert saved.tags == ["greeting"]
        assert store.count == 1

    def test_tag_cap(self, store, languages):
        editor = CardEditor(store, languages, FakeClient())
        for name in ["a", "b", "c", "d", "e"]:
            assert editor.add_tag(name)
        assert not editor.add_tag("f")
        assert not editor.add_tag("a")
        assert editor.remove_tag("a")
        assert editor.add_tag("f")

    def test_save_validation_propagates(self, store, languages):
        editor = CardEditor(store, languages, FakeClient())
        editor.target_text = "Hola"
        with pytest.raises(CardValidationError):
            editor.save()
