"""
Dependency Injection Container

Manages service lifecycles and dependency resolution. The container is
where the process-wide guardian state lives: it is registered once as a
singleton so every request shares the same last-check record.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """
    Dependency injection container for managing service lifecycles.

    Every service is a singleton shared across all resolutions.
    Thread-safe for concurrent access.
    """

    def __init__(self):
        self._singletons: Dict[Type, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register a singleton service (single instance shared across all resolutions).

        Example:
            container.register_singleton(RetentionGuardian, guardian)
        """
        with self._lock:
            self._singletons[interface] = implementation
            logger.debug(f"Registered singleton: {interface.__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Resolve a registered service.

        Args:
            interface: The interface or class type to resolve

        Returns:
            The resolved service instance

        Raises:
            DependencyNotFoundError: If the interface is not registered
        """
        with self._lock:
            if interface not in self._singletons:
                raise DependencyNotFoundError(
                    f"No registration found for type: {interface.__name__}"
                )
            return self._singletons[interface]

    def setup_event_handlers(self, event_publisher, event_handler_classes: Optional[List[Type]] = None) -> None:
        """
        Subscribe infrastructure event handlers to the event publisher.

        Args:
            event_publisher: EventPublisher instance to subscribe handlers to
            event_handler_classes: Handler classes to instantiate; defaults to
                [LoggingEventHandler]
        """
        from domain.events import DomainEvent
        from infrastructure.event_handlers.logging_handler import LoggingEventHandler

        if event_handler_classes is None:
            event_handler_classes = [LoggingEventHandler]

        for handler_class in event_handler_classes:
            try:
                if handler_class is LoggingEventHandler:
                    handler = handler_class(logging.getLogger("floppy"))
                else:
                    handler = handler_class()

                event_publisher.subscribe(DomainEvent, handler.handle)
                logger.debug(f"Registered event handler: {handler_class.__name__}")
            except Exception as e:
                # Don't fail initialization if event handler setup fails
                logger.error(f"Failed to register event handler {handler_class.__name__}: {e}")
