"""
Event Bus - domain events out of the ledgers

Front ends subscribe here instead of polling the ledgers.

Author: TM3
Date: 2026-10-19
"""
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)


# Event names
SALE_CREATED = "sale_created"
SALE_STATUS_CHANGED = "sale_status_changed"
SALE_STATUS_REJECTED = "sale_status_rejected"
EXPENSE_ADDED = "expense_added"
EXPENSE_DELETED = "expense_deleted"
PRODUCT_ADDED = "product_added"
PRODUCT_UPDATED = "product_updated"
PRODUCT_DELETED = "product_deleted"
RATE_CHANGED = "rate_changed"
RATE_REFRESH_FAILED = "rate_refresh_failed"
SYNC_STATUS_CHANGED = "sync_status_changed"
SYNC_FAILED = "sync_failed"
SYNC_ROLLED_BACK = "sync_rolled_back"
SYNC_REFETCHED = "sync_refetched"
SYNC_DIVERGED = "sync_diverged"
STATE_IMPORTED = "state_imported"


@dataclass(frozen=True)
class DomainEvent:
    name: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now().astimezone())

    def to_dict(self) -> dict:
        return {'name': self.name, 'payload': self.payload, 'occurred_at': self.occurred_at.isoformat()}


Handler = Callable[[DomainEvent], None]


class EventBus:
    """
    Synchronous publish/subscribe

    Handlers run on the publishing thread (remote-sync events come from
    worker threads). A failing handler is logged and doesn't stop the
    others. The last `history_size` events are kept for late readers.
    """

    def __init__(self, history_size: int = 100):
        self._handlers: List[tuple] = []
        self._history: Deque[DomainEvent] = deque(maxlen=history_size)
        self._lock = threading.Lock()

    def subscribe(self, handler: Handler, name: Optional[str] = None) -> Callable[[], None]:
        """
        Register a handler for one event name, or for all events

        Returns:
            Function that removes the subscription
        """
        entry = (name, handler)
        with self._lock:
            self._handlers.append(entry)

        def unsubscribe():
            with self._lock:
                if entry in self._handlers:
                    self._handlers.remove(entry)

        return unsubscribe

    def publish(self, name: str, **payload) -> DomainEvent:
        event = DomainEvent(name=name, payload=payload)
        with self._lock:
            self._history.append(event)
            handlers = [handler for event_name, handler in self._handlers if event_name in (None, name)]

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.exception(f"Event handler failed for {name}: {e}")

        return event

    def recent(self, limit: int = 50) -> List[DomainEvent]:
        """Most recent events, oldest first"""
        with self._lock:
            events = list(self._history)
        return events[-limit:] if limit else events
