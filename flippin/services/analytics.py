"""
Analytics Service - side channel for usage and error events.

Events never influence behaviour: they are logged and handed to any
registered sinks (a remote reporter, a test recorder).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class AnalyticsEvent(Enum):
    """Kinds of events reported through the analytics side channel."""
    CARD_ADDED = "card_added"
    CARD_EDITED = "card_edited"
    CARD_DELETED = "card_deleted"
    ALL_CARDS_DELETED = "all_cards_deleted"
    CARD_FAVORITED = "card_favorited"
    CARD_UNFAVORITED = "card_unfavorited"
    CARDS_IMPORTED = "cards_imported"
    TAG_DELETED = "tag_deleted"
    SEARCH_PERFORMED = "search_performed"
    SEARCH_CLEARED = "search_cleared"
    LANGUAGE_CHANGED = "language_changed"
    TRANSLATION_FAILED = "translation_failed"
    CARD_LIMIT_REACHED = "card_limit_reached"
    CARD_REVIEWED = "card_reviewed"
    AUDIO_FAILED = "audio_failed"


@dataclass
class TrackedEvent:
    """One reported event."""
    event: AnalyticsEvent
    params: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


EventSink = Callable[[TrackedEvent], None]


class AnalyticsService:
    """
    Fan-out of analytics events to registered sinks.

    Usage:
        analytics = AnalyticsService()
        analytics.add_sink(my_reporter)
        analytics.track(AnalyticsEvent.CARD_ADDED, card_language="es")
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._sinks: List[EventSink] = []

    def add_sink(self, sink: EventSink) -> None:
        """Register a callable receiving every tracked event."""
        self._sinks.append(sink)

    def remove_sink(self, sink: EventSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def track(self, event: AnalyticsEvent, **params: Any) -> None:
        """
        Report an event.

        Args:
            event: Event kind
            **params: Event parameters
        """
        if not self.enabled:
            return

        tracked = TrackedEvent(event=event, params=params)
        logger.info("analytics %s %s", event.value, params)

        for sink in list(self._sinks):
            try:
                sink(tracked)
            except Exception:
                logger.exception("Analytics sink %r failed for %s", sink, event.value)

    def track_error(self, event: AnalyticsEvent, error: BaseException, **params: Any) -> None:
        """Report a failure event carrying the error message."""
        self.track(event, error_message=str(error), error_type=type(error).__name__, **params)
