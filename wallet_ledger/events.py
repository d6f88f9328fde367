"""
Event System Module

Publish/subscribe dispatcher used by the ledger to hand applied transaction
records and newly created accounts to collaborators (journals, persistence,
notifications) without those collaborators touching ledger state.
"""

from enum import Enum
from typing import Callable, Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid
from threading import RLock

from .logging_config import get_logger


class LedgerEvent(Enum):
    """Events emitted by the ledger"""
    ACCOUNT_CREATED = "account.created"
    TRANSACTION_APPLIED = "transaction.applied"


@dataclass
class EventPayload:
    """Payload for ledger events"""
    event_type: LedgerEvent
    entity_type: str
    entity_id: str
    data: Dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'event_type': self.event_type.value,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'data': self.data,
            'timestamp': self.timestamp.isoformat(),
            'event_id': self.event_id
        }


EventHandler = Callable[[EventPayload], None]


class EventDispatcher:
    """Central event dispatcher - publish/subscribe pattern"""

    def __init__(self):
        self._handlers: Dict[LedgerEvent, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []
        self._lock = RLock()
        self.logger = get_logger("wallet_ledger.events")

    def subscribe(self, event_type: LedgerEvent, handler: EventHandler) -> None:
        """Subscribe to a specific event type"""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        self.logger.debug(f"Subscribed handler {_name(handler)} to {event_type.value}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to ALL events"""
        with self._lock:
            self._global_handlers.append(handler)
        self.logger.debug(f"Subscribed global handler {_name(handler)}")

    def unsubscribe(self, event_type: LedgerEvent, handler: EventHandler) -> None:
        """Unsubscribe from a specific event type"""
        with self._lock:
            try:
                self._handlers.get(event_type, []).remove(handler)
            except ValueError:
                self.logger.warning(f"Handler {_name(handler)} was not subscribed to {event_type.value}")

    def unsubscribe_all(self, handler: EventHandler) -> None:
        """Unsubscribe a global handler"""
        with self._lock:
            try:
                self._global_handlers.remove(handler)
            except ValueError:
                self.logger.warning(f"Global handler {_name(handler)} was not subscribed")

    def publish(self, event: EventPayload) -> None:
        """
        Publish event to all subscribers

        Handlers run on the publishing thread. A failing handler is logged
        and skipped; it never fails the operation that produced the event.
        """
        with self._lock:
            handlers = list(self._handlers.get(event.event_type, []))
            handlers.extend(self._global_handlers)

        self.logger.debug(f"Publishing event {event.event_type.value} for {event.entity_type}:{event.entity_id}")

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self.logger.error(
                    f"Error in event handler {_name(handler)} for {event.event_type.value}: {e}",
                    exc_info=True
                )

    def clear(self) -> None:
        """Clear all handlers"""
        with self._lock:
            self._handlers.clear()
            self._global_handlers.clear()

    def get_handler_count(self, event_type: Optional[LedgerEvent] = None) -> int:
        """Get count of handlers for a specific event type or all"""
        with self._lock:
            if event_type:
                return len(self._handlers.get(event_type, []))
            total = sum(len(handlers) for handlers in self._handlers.values())
            return total + len(self._global_handlers)


def _name(handler: EventHandler) -> str:
    return getattr(handler, "__name__", repr(handler))
