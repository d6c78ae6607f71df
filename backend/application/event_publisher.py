"""
Event Publisher

Application service for publishing domain events to registered handlers.
Keeps logging and other side effects out of the storage and retention code.
"""

import logging
from threading import Lock
from typing import Callable, Dict, List, Type

from domain.events import DomainEvent

logger = logging.getLogger(__name__)


class EventPublisher:
    """
    Event publisher that dispatches domain events to registered handlers.

    Handlers registered for a base class (e.g. DomainEvent) receive every
    subclass as well. Dispatch is synchronous; handler exceptions are caught
    and logged so a broken side effect never fails an upload or a sweep.

    Thread-safe for concurrent event publishing.
    """

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[Callable[[DomainEvent], None]]] = {}
        self._lock = Lock()

    def subscribe(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ) -> None:
        """
        Register a handler for an event type and its subclasses.

        Example:
            publisher = EventPublisher()
            publisher.subscribe(BlobEvictedEvent, audit_eviction)
        """
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            logger.debug(
                f"Registered handler {getattr(handler, '__name__', handler)!s} "
                f"for {event_type.__name__}"
            )

    def publish(self, event: DomainEvent) -> None:
        """
        Publish an event to all matching handlers.

        Args:
            event: The domain event to publish
        """
        with self._lock:
            handlers = [
                handler
                for event_type, registered in self._handlers.items()
                if isinstance(event, event_type)
                for handler in registered
            ]

        if not handlers:
            logger.debug(f"No handlers registered for {type(event).__name__}")
            return

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                # Log but don't fail - side effects should not break core logic
                logger.error(
                    f"Error in handler {getattr(handler, '__name__', handler)!s} "
                    f"for {type(event).__name__}: {e}",
                    exc_info=True
                )

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()
