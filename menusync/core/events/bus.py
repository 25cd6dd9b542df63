"""
EventBus - typed publish/subscribe for UI state changes.

Delivery is synchronous on the publisher's thread, in registration order per
event kind. Subscriber failures are isolated: they are logged and the next
subscriber still receives the event. The bus keeps no history, so a late
subscriber never sees events published before it subscribed.

Collaborators that change state off the UI thread use post(), which hands the
event to the bus's owning thread through a queued Qt signal.
"""
import itertools
from typing import Callable, Dict

from loguru import logger
from PySide6.QtCore import QObject, Qt, Signal

from .constants import EventKind
from .models import Event

SubscriptionToken = int
EventHandler = Callable[[Event], None]


class EventBus(QObject):
    """
    Usage:
        bus = EventBus()
        token = bus.subscribe(EventKind.DOCUMENT_CHANGED, on_document)
        bus.publish(Event.document_changed(doc))
        bus.unsubscribe(token)
    """

    # Cross-thread hand-off used by post()
    _posted = Signal(object)

    def __init__(self, parent: QObject = None):
        super().__init__(parent)
        self._subscribers: Dict[EventKind, Dict[SubscriptionToken, EventHandler]] = {}
        self._kind_of: Dict[SubscriptionToken, EventKind] = {}
        self._tokens = itertools.count(1)
        self._posted.connect(self.publish, Qt.ConnectionType.QueuedConnection)

    def subscribe(self, kind: EventKind, handler: EventHandler) -> SubscriptionToken:
        """
        Register handler for events of one kind.

        Args:
            kind: Event kind to listen for
            handler: Called with the Event on the publishing thread

        Returns:
            Token for unsubscribe()
        """
        token = next(self._tokens)
        self._subscribers.setdefault(kind, {})[token] = handler
        self._kind_of[token] = kind
        logger.debug(f"Subscribed to {kind.value}: {getattr(handler, '__qualname__', handler)!s} (#{token})")
        return token

    def unsubscribe(self, token: SubscriptionToken) -> None:
        """Remove a subscription. Unknown or already removed tokens are ignored."""
        kind = self._kind_of.pop(token, None)
        if kind is None:
            return
        handlers = self._subscribers.get(kind, {})
        handlers.pop(token, None)
        if not handlers:
            self._subscribers.pop(kind, None)
        logger.debug(f"Unsubscribed from {kind.value} (#{token})")

    def publish(self, event: Event) -> int:
        """
        Deliver an event to every current subscriber of its kind.

        Returns:
            Number of subscribers that handled the event without raising
        """
        # Snapshot so handlers may (un)subscribe while we iterate
        handlers = list(self._subscribers.get(event.kind, {}).items())
        delivered = 0
        for token, handler in handlers:
            if token not in self._kind_of:
                continue
            try:
                handler(event)
                delivered += 1
            except Exception:
                logger.exception(f"Error in subscriber #{token} for {event.kind.value}")
        return delivered

    def post(self, event: Event) -> None:
        """Thread-safe publish: delivery happens later on the bus's thread."""
        self._posted.emit(event)

    def subscriber_count(self, kind: EventKind) -> int:
        return len(self._subscribers.get(kind, {}))

    def clear(self) -> None:
        """Drop every subscription."""
        self._subscribers.clear()
        self._kind_of.clear()
