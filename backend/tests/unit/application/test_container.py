"""
Unit tests for DependencyContainer.

Tests singleton registration, resolution and event handler wiring.
"""

from unittest.mock import Mock

import pytest

from application.dependency_container import DependencyContainer, DependencyNotFoundError
from application.event_publisher import EventPublisher
from domain.blob_storage import IGuardianStateRepository, InMemoryGuardianState
from domain.events import DomainEvent


class TestRegistration:
    def test_singleton_returns_same_instance(self):
        container = DependencyContainer()
        state = InMemoryGuardianState()
        container.register_singleton(IGuardianStateRepository, state)

        assert container.resolve(IGuardianStateRepository) is state
        assert container.resolve(IGuardianStateRepository) is state

    def test_unregistered_raises(self):
        with pytest.raises(DependencyNotFoundError):
            DependencyContainer().resolve(EventPublisher)

    def test_reregistering_replaces_instance(self):
        container = DependencyContainer()
        container.register_singleton(IGuardianStateRepository, InMemoryGuardianState())
        fake = Mock()

        container.register_singleton(IGuardianStateRepository, fake)

        assert container.resolve(IGuardianStateRepository) is fake


class TestSetupEventHandlers:
    def test_logging_handler_subscribed_to_all_events(self):
        container = DependencyContainer()
        publisher = Mock()

        container.setup_event_handlers(publisher)

        event_type, handler = publisher.subscribe.call_args[0]
        assert event_type is DomainEvent
        assert handler.__self__.__class__.__name__ == "LoggingEventHandler"

    def test_broken_handler_class_does_not_fail_setup(self):
        class Broken:
            def __init__(self):
                raise RuntimeError("cannot build")

        container = DependencyContainer()
        publisher = Mock()

        container.setup_event_handlers(publisher, [Broken])

        publisher.subscribe.assert_not_called()
