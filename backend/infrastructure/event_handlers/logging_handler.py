"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Subscribes to domain events and logs them appropriately.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from domain.events import (
    BlobEvictedEvent,
    BlobStoredEvent,
    DomainEvent,
    SweepCompletedEvent,
    SweepEntryFailedEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, BlobStoredEvent):
                self._handle_blob_stored(event)
            elif isinstance(event, BlobEvictedEvent):
                self._handle_blob_evicted(event)
            elif isinstance(event, SweepEntryFailedEvent):
                self._handle_entry_failed(event)
            elif isinstance(event, SweepCompletedEvent):
                self._handle_sweep_completed(event)
            else:
                self.logger.debug(f"Unhandled event: {event.to_dict()}")
        except Exception as e:
            # Log handler errors but don't fail the operation
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_blob_stored(self, event: BlobStoredEvent) -> None:
        self.logger.info(
            f"Blob stored: key={event.aggregate_id}, size={event.size_bytes} bytes, "
            f"days_remaining={event.days_remaining:g}"
        )

    def _handle_blob_evicted(self, event: BlobEvictedEvent) -> None:
        self.logger.info(
            f"Blob evicted: key={event.aggregate_id}, size={event.size_bytes} bytes, "
            f"created_at={event.created_at.isoformat()}"
        )

    def _handle_entry_failed(self, event: SweepEntryFailedEvent) -> None:
        self.logger.debug(f"Sweep skipped {event.aggregate_id}: {event.error_message}")

    def _handle_sweep_completed(self, event: SweepCompletedEvent) -> None:
        level = logging.WARNING if event.failed else logging.INFO
        self.logger.log(
            level,
            f"Sweep completed - Scanned: {event.scanned}, Evicted: {event.evicted}, "
            f"Skipped: {event.skipped}, Failed: {event.failed}",
        )
