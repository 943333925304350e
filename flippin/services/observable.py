"""Change notification shared by the stateful services."""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


class ChangeNotifier:
    """
    Synchronous observer list.

    Callbacks run in registration order after each state change. A failing
    callback is logged and the remaining ones still run.
    """

    def __init__(self) -> None:
        self._change_callbacks: List[Callable[[], None]] = []

    def on_change(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback for state changes.

        Args:
            callback: Function to call when state changes

        Returns:
            A function that unregisters the callback
        """
        self._change_callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._change_callbacks:
                self._change_callbacks.remove(callback)

        return unsubscribe

    def _notify_change(self) -> None:
        """Notify all registered callbacks of a state change."""
        for callback in list(self._change_callbacks):
            try:
                callback()
            except Exception:
                logger.exception("Change callback %r failed", callback)
