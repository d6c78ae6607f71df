"""
Application Services Layer

Orchestrates domain services and coordinates use cases.
"""

from .blob_service import BlobService
from .dependency_container import DependencyContainer, DependencyNotFoundError
from .event_publisher import EventPublisher

__all__ = [
    'BlobService',
    'DependencyContainer',
    'DependencyNotFoundError',
    'EventPublisher',
]
