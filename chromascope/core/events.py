"""Event bus for engine-to-UI communication.

The session publishes an event whenever a result is replaced, so that a
presentation layer can re-render without polling. Callbacks are invoked
after the session lock has been released.
"""

import logging
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Events emitted by a Session."""

    FILE_OPENED = "file_opened"  # new run file ready
    SESSION_RESET = "session_reset"  # file closed, derived data dropped
    SERIES_CHANGED = "series_changed"  # chromatogram/plot series replaced
    SPECTRUM_CHANGED = "spectrum_changed"  # mass spectrum replaced


class EventBus:
    """Simple publish-subscribe event bus.

    Usage:
        bus = EventBus()
        bus.subscribe(EventType.SERIES_CHANGED, lambda **kw: redraw(kw["plot_series"]))
        bus.emit(EventType.SERIES_CHANGED, plot_series=series)

    Thread Safety:
        Subscriptions are not synchronized. Subscribe before handing the
        session to a worker thread.
    """

    def __init__(self):
        self._subscribers: dict[str, list[Callable]] = {}

    def subscribe(self, event_type: str, callback: Callable) -> Callable:
        """Subscribe to an event type.

        Args:
            event_type: Event identifier (an EventType or its string value)
            callback: Function to call when event is emitted. Receives **kwargs.

        Returns:
            The callback function (for easy unsubscribe later)
        """
        self._subscribers.setdefault(EventType(event_type).value, []).append(callback)
        return callback

    def unsubscribe(self, event_type: str, callback: Callable) -> None:
        """Unsubscribe a callback from an event type."""
        key = EventType(event_type).value
        if key in self._subscribers:
            self._subscribers[key] = [cb for cb in self._subscribers[key] if cb != callback]

    def emit(self, event_type: str, **kwargs) -> None:
        """Emit an event to all subscribers.

        Exceptions in callbacks are logged so that one failing renderer
        does not stop the others from being notified.

        Args:
            event_type: Event identifier
            **kwargs: Data to pass to subscribers
        """
        key = EventType(event_type).value
        for callback in list(self._subscribers.get(key, [])):
            try:
                callback(**kwargs)
            except Exception:
                logger.exception("Event handler error for %s", key)

    def clear(self, event_type: str | None = None) -> None:
        """Clear all subscribers for an event type, or all events if None."""
        if event_type is None:
            self._subscribers.clear()
        else:
            self._subscribers.pop(EventType(event_type).value, None)

    def has_subscribers(self, event_type: str) -> bool:
        """Check if an event type has any subscribers."""
        return bool(self._subscribers.get(EventType(event_type).value))
