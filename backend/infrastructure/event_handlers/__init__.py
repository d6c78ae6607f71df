"""
Event Handlers

Infrastructure layer handlers for domain events.
These handlers implement side effects such as logging.
"""

from .logging_handler import LoggingEventHandler

__all__ = [
    "LoggingEventHandler",
]
