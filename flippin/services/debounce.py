"""
Translation debounce pipeline.

Text edits restart a cancellable quiet-period timer. When the timer fires
without having been superseded, the text is translated once:

    submit -> skip first N -> quiet period -> drop blank -> drop duplicate
           -> drop while a translation is in flight -> translate -> on_result
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from ..config import Config
from .analytics import AnalyticsEvent, AnalyticsService

logger = logging.getLogger(__name__)


class TranslationDebouncer:
    """
    Coalesces rapid text edits into at most one translation per quiet period.

    Must be driven from a running event loop.

    Usage:
        debouncer = TranslationDebouncer(translate, on_result=set_target)
        debouncer.submit("Hol")
        await debouncer.wait_idle()
    """

    def __init__(
        self,
        translate: Callable[[str], Awaitable[Any]],
        on_result: Callable[[Any], None],
        on_error: Optional[Callable[[BaseException], None]] = None,
        quiet_period: float = Config.DEBOUNCE_SECONDS,
        skip_initial: int = Config.DEBOUNCE_SKIP_INITIAL,
        analytics: Optional[AnalyticsService] = None,
    ):
        """
        Initialize debouncer.

        Args:
            translate: Coroutine function performing the translation
            on_result: Receives each successful translation
            on_error: Receives each translation failure
            quiet_period: Seconds without input before translating
            skip_initial: Number of leading submissions to ignore
            analytics: Optional analytics side channel
        """
        self._translate = translate
        self._on_result = on_result
        self._on_error = on_error
        self.quiet_period = quiet_period
        self.skip_initial = skip_initial
        self._analytics = analytics

        self._submissions = 0
        self._generation = 0
        self._epoch = 0
        self._last_fired: Optional[str] = None
        self._timer: Optional[asyncio.Task] = None
        self._request: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        """A quiet-period timer is running."""
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> bool:
        """A translation request is running."""
        return self._request is not None and not self._request.done()

    def submit(self, text: str) -> None:
        """Register a text edit, restarting the quiet period."""
        self._submissions += 1
        if self._submissions <= self.skip_initial:
            return

        self._generation += 1
        if self.pending:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.create_task(self._wait_and_fire(self._generation, text))

    def cancel(self) -> None:
        """
        Stop the pipeline for the owning screen.

        The pending timer is cancelled. A request already in flight runs to
        completion but its result is dropped.
        """
        if self.pending:
            self._timer.cancel()
        self._timer = None
        self._generation += 1
        self._epoch += 1

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and no request is in flight."""
        while self.pending or self.in_flight:
            tasks = [t for t in (self._timer, self._request) if t is not None and not t.done()]
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _wait_and_fire(self, generation: int, text: str) -> None:
        await asyncio.sleep(self.quiet_period)
        if generation != self._generation:
            return

        if not text.strip():
            return
        value = text
        if value == self._last_fired:
            logger.debug("Skipping duplicate translation of %r", value)
            return
        self._last_fired = value

        if self.in_flight:
            logger.debug("Translation in flight, dropping %r", value)
            return

        loop = asyncio.get_running_loop()
        self._request = loop.create_task(self._run(value, self._epoch))

    async def _run(self, value: str, epoch: int) -> None:
        try:
            result = await self._translate(value)
        except Exception as e:
            logger.warning("Translation of %r failed: %s", value, e)
            if self._analytics:
                self._analytics.track_error(AnalyticsEvent.TRANSLATION_FAILED, e, text_length=len(value))
            if self._on_error and epoch == self._epoch:
                self._on_error(e)
            return

        if epoch != self._epoch:
            logger.debug("Dropping translation of %r for a cancelled editor", value)
            return
        self._on_result(result)
