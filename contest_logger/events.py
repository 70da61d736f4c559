"""Per-event listener registries.

Each event kind (row added, row selected, workmode changed) gets its own
`Listeners` instance parameterized with the event payload type, so delivery
never has to inspect what kind of listener it is talking to.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, Tuple, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Listeners(Generic[T]):
    """An ordered collection of callbacks for one event kind."""

    def __init__(self, event: str) -> None:
        self.event = event
        self._listeners: List[Callable[[T], object]] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, listener: Callable[[T], object]) -> None:
        self._listeners.append(listener)

    def clear(self) -> None:
        self._listeners = []

    def emit(self, payload: T) -> List[Tuple[Callable[[T], object], Exception]]:
        """Call every listener in registration order.

        A failing listener does not stop delivery to the ones after it. The
        failures are logged and returned to the caller as (listener, error)
        pairs.
        """
        failures = []
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception as e:
                logger.error("Error on %s: %r, %s", self.event, listener, e)
                failures.append((listener, e))
        return failures
