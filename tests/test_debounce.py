"""Tests for the translation debounce pipeline."""

import asyncio

import pytest
from hypothesis import given, settings as hyp_settings, strategies as st

from flippin.errors import TranslationError
from flippin.services import AnalyticsEvent, TranslationDebouncer


class Recorder:
    """Fake translator recording calls and their loop time."""

    def __init__(self, fail_with=None):
        self.calls = []
        self.times = []
        self.fail_with = fail_with

    async def translate(self, text):
        self.calls.append(text)
        self.times.append(asyncio.get_running_loop().time())
        if self.fail_with is not None:
            raise self.fail_with
        return f"<{text}>"


class TestTimingScenario:

    def test_one_second_window(self):
        """Edits at 0, 200 and 900 ms translate "Hol" once, about 1900 ms in."""
        recorder = Recorder()
        results = []

        async def scenario():
            debouncer = TranslationDebouncer(recorder.translate, results.append, quiet_period=1.0, skip_initial=0)
            start = asyncio.get_running_loop().time()
            debouncer.submit("H")
            await asyncio.sleep(0.2)
            debouncer.submit("Ho")
            await asyncio.sleep(0.7)
            debouncer.submit("Hol")
            await debouncer.wait_idle()
            return start

        start = asyncio.run(scenario())

        assert recorder.calls == ["Hol"]
        assert results == ["<Hol>"]
        assert 1.85 <= recorder.times[0] - start < 2.5

    def test_scaled_window(self):
        recorder = Recorder()

        async def scenario():
            debouncer = TranslationDebouncer(recorder.translate, lambda r: None, quiet_period=0.1, skip_initial=0)
            start = asyncio.get_running_loop().time()
            debouncer.submit("H")
            await asyncio.sleep(0.02)
            debouncer.submit("Ho")
            await asyncio.sleep(0.07)
            debouncer.submit("Hol")
            await debouncer.wait_idle()
            return start

        start = asyncio.run(scenario())

        assert recorder.calls == ["Hol"]
        assert recorder.times[0] - start >= 0.18


class TestPipelineStages:

    def _run(self, steps, recorder=None, **kwargs):
        recorder = recorder or Recorder()
        quiet_period = kwargs.pop("quiet_period", 0.01)
        results = []
        errors = []

        async def scenario():
            debouncer = TranslationDebouncer(
                recorder.translate, results.append, errors.append, quiet_period=quiet_period, **kwargs
            )
            await steps(debouncer)
            await debouncer.wait_idle()

        asyncio.run(scenario())
        return recorder, results, errors

    def test_initial_submissions_skipped(self):
        async def steps(d):
            d.submit("initial")
            d.submit("loaded")
            await asyncio.sleep(0.05)
            d.submit("typed")

        recorder, results, _ = self._run(steps, skip_initial=2)

        assert recorder.calls == ["typed"]
        assert results == ["<typed>"]

    def test_blank_text_dropped(self):
        async def steps(d):
            d.submit("   ")

        recorder, results, _ = self._run(steps, skip_initial=0)
        assert recorder.calls == []
        assert results == []

    def test_duplicate_dropped(self):
        async def steps(d):
            d.submit("Hola")
            await d.wait_idle()
            d.submit("Hola")

        recorder, _, _ = self._run(steps, skip_initial=0)
        assert recorder.calls == ["Hola"]

    def test_whitespace_change_is_not_a_duplicate(self):
        async def steps(d):
            d.submit("Hola")
            await d.wait_idle()
            d.submit("Hola ")

        recorder, _, _ = self._run(steps, skip_initial=0)
        assert recorder.calls == ["Hola", "Hola "]

    def test_new_text_after_duplicate_translates(self):
        async def steps(d):
            d.submit("Hola")
            await d.wait_idle()
            d.submit("Hola amigo")

        recorder, _, _ = self._run(steps, skip_initial=0)
        assert recorder.calls == ["Hola", "Hola amigo"]

    def test_failure_reported_and_not_retried(self, analytics, events):
        recorder = Recorder(fail_with=TranslationError("HTTP 500", status=500))

        async def steps(d):
            d.submit("Hola")

        _, results, errors = self._run(steps, recorder=recorder, skip_initial=0, analytics=analytics)

        assert recorder.calls == ["Hola"]
        assert results == []
        assert len(errors) == 1 and isinstance(errors[0], TranslationError)
        assert events[-1].event is AnalyticsEvent.TRANSLATION_FAILED
        assert events[-1].params["error_type"] == "TranslationError"

    def test_cancel_stops_pending_timer(self):
        async def steps(d):
            d.submit("Hola")
            assert d.pending
            d.cancel()
            assert not d.pending
            await asyncio.sleep(0.05)

        recorder, _, _ = self._run(steps, skip_initial=0)
        assert recorder.calls == []


class TestInFlight:

    def test_submission_dropped_while_in_flight(self):
        calls = []
        results = []

        async def scenario():
            gate = asyncio.Event()

            async def slow_translate(text):
                calls.append(text)
                await gate.wait()
                return text.upper()

            debouncer = TranslationDebouncer(slow_translate, results.append, quiet_period=0.01, skip_initial=0)
            debouncer.submit("uno")
            await asyncio.sleep(0.05)
            assert debouncer.in_flight

            debouncer.submit("dos")
            await asyncio.sleep(0.05)
            assert calls == ["uno"]

            gate.set()
            await debouncer.wait_idle()

        asyncio.run(scenario())

        assert calls == ["uno"]
        assert results == ["UNO"]

    def test_result_dropped_after_cancel(self):
        results = []

        async def scenario():
            gate = asyncio.Event()

            async def slow_translate(text):
                await gate.wait()
                return text

            debouncer = TranslationDebouncer(slow_translate, results.append, quiet_period=0.01, skip_initial=0)
            debouncer.submit("uno")
            await asyncio.sleep(0.05)
            debouncer.cancel()
            # The request is not cancelled, only ignored
            assert debouncer.in_flight
            gate.set()
            await debouncer.wait_idle()

        asyncio.run(scenario())
        assert results == []


class TestCoalescingProperty:

    @pytest.mark.property
    @hyp_settings(max_examples=20, deadline=None)
    @given(st.lists(st.text(alphabet="abc ", max_size=6), min_size=1, max_size=12))
    def test_rapid_edits_issue_at_most_one_call_with_final_text(self, edits):
        recorder = Recorder()

        async def scenario():
            debouncer = TranslationDebouncer(recorder.translate, lambda r: None, quiet_period=0.01, skip_initial=0)
            for text in edits:
                debouncer.submit(text)
            await debouncer.wait_idle()

        asyncio.run(scenario())

        assert len(recorder.calls) <= 1
        if edits[-1].strip():
            assert recorder.calls == [edits[-1]]
        else:
            assert recorder.calls == []
