"""Observer plumbing for state owners.

Owners of mutable collections (the product repository, the view-state
coordinator) publish complete immutable snapshots through a
``Publisher``. Subscribers never see a partially built value: each
notification carries an object that is already fully assembled.
"""

from typing import Callable, Generic, TypeVar

import structlog

logger = structlog.get_logger()

E = TypeVar("E")

Listener = Callable[[E], None]


class Subscription:
    """Handle returned by ``Publisher.subscribe``."""

    def __init__(self, publisher: "Publisher", listener: Listener) -> None:
        self._publisher = publisher
        self._listener = listener
        self.active = True

    def cancel(self) -> None:
        """Detach the listener. Safe to call more than once."""
        if self.active:
            self._publisher._remove(self._listener)
            self.active = False


class Publisher(Generic[E]):
    """Synchronous fan-out of events to registered listeners.

    A listener that raises is logged and skipped; the remaining
    listeners are still notified.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Subscription:
        """Register a listener.

        Args:
            listener: Callable invoked with every published event.

        Returns:
            Subscription that detaches the listener when cancelled.
        """
        self._listeners.append(listener)
        return Subscription(self, listener)

    def publish(self, event: E) -> None:
        """Deliver an event to every listener registered at call time.

        Args:
            event: Immutable event value.
        """
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.exception(
                    "Listener failed",
                    publisher=self.name,
                    error=str(e),
                )

    @property
    def listener_count(self) -> int:
        """Number of registered listeners."""
        return len(self._listeners)

    def _remove(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
