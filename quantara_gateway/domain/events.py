"""In-process publish/subscribe channel for protocol events"""

import logging
from collections import defaultdict, deque
from typing import Any, Callable, Deque, Dict, List, Optional, Set

from quantara_gateway.domain.models import EventType, ProtocolEvent
from quantara_gateway.utils.date_utils import utc_now
from quantara_gateway.utils.ids import generate_id

logger = logging.getLogger(__name__)

EventHandler = Callable[[ProtocolEvent], None]


class EventBus:
    """
    Typed event channel with per-type and global subscribers.

    Each application instance owns its own bus. Delivery is synchronous; a
    handler that raises is logged and skipped, the remaining handlers still
    receive the event.
    """

    def __init__(
        self,
        max_log_size: int = 1000,
        on_handler_error: Optional[Callable[[EventType, Exception], None]] = None,
    ):
        self._handlers: Dict[EventType, Set[EventHandler]] = defaultdict(set)
        self._global_handlers: Set[EventHandler] = set()
        self._log: Deque[ProtocolEvent] = deque(maxlen=max_log_size)
        self._on_handler_error = on_handler_error

    def subscribe(self, event_type: EventType, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for one event type; returns an unsubscribe callable"""
        event_type = EventType(event_type)
        self._handlers[event_type].add(handler)
        return lambda: self._handlers[event_type].discard(handler)

    def subscribe_all(self, handler: EventHandler) -> Callable[[], None]:
        self._global_handlers.add(handler)
        return lambda: self._global_handlers.discard(handler)

    def publish(self, event_type: EventType, payload: Dict[str, Any] | None = None) -> ProtocolEvent:
        event = ProtocolEvent(
            id=generate_id("EVT"),
            type=EventType(event_type),
            payload=dict(payload or {}),
            timestamp=utc_now(),
        )
        self._log.append(event)

        for handler in [*self._handlers[event.type], *self._global_handlers]:
            self._deliver(handler, event)

        return event

    def get_log(self, limit: int = 100) -> List[ProtocolEvent]:
        """Most recent events, oldest first"""
        if limit <= 0:
            return []
        return list(self._log)[-limit:]

    def get_log_by_type(self, event_type: EventType, limit: int = 50) -> List[ProtocolEvent]:
        if limit <= 0:
            return []
        matching = [e for e in self._log if e.type == EventType(event_type)]
        return matching[-limit:]

    def clear(self) -> None:
        self._handlers.clear()
        self._global_handlers.clear()
        self._log.clear()

    def _deliver(self, handler: EventHandler, event: ProtocolEvent) -> None:
        try:
            handler(event)
        except Exception as e:
            logger.exception(
                "Event handler failed",
                extra={"event_type": event.type.value, "event_id": event.id},
            )
            if self._on_handler_error is not None:
                self._on_handler_error(event.type, e)
