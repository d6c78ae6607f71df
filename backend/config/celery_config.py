"""
Celery Configuration

Configures Celery with Flask integration, Redis broker, and the beat
schedule for the background retention sweep.
"""

import os

from celery import Celery
from kombu import Queue


class CeleryConfig:
    """Celery configuration settings."""

    # Broker settings
    broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")

    # Task settings
    task_serializer = "json"
    accept_content = ["json"]
    result_serializer = "json"
    timezone = "UTC"
    enable_utc = True

    # Worker settings
    worker_prefetch_multiplier = 1
    task_acks_late = True

    # Task routing
    task_routes = {
        "tasks.sweep_expired_blobs": {"queue": "retention_queue"},
    }

    # Queue definitions
    task_default_queue = "default"
    task_queues = (
        Queue("default", routing_key="default"),
        Queue("retention_queue", routing_key="retention"),
    )

    # Beat schedule: the guardian still throttles, so this only guarantees
    # that an idle server gets swept at least once per interval
    beat_schedule = {
        "sweep-expired-blobs": {
            "task": "tasks.sweep_expired_blobs",
            "schedule": float(os.getenv("RETENTION_BEAT_SECONDS", 900)),
        },
    }

    # A sweep touches every entry once; keep generous limits
    task_soft_time_limit = int(os.getenv("CELERY_TASK_SOFT_TIME_LIMIT", 1800))
    task_time_limit = int(os.getenv("CELERY_TASK_TIME_LIMIT", 2100))

    # Result backend settings
    result_expires = 3600  # 1 hour


def make_celery(app):
    """
    Create Celery instance with Flask app context.

    Args:
        app: Flask application instance

    Returns:
        Configured Celery instance
    """
    celery = Celery(
        app.import_name,
        backend=CeleryConfig.result_backend,
        broker=CeleryConfig.broker_url,
    )

    celery.config_from_object(CeleryConfig)

    # Ensure tasks run within Flask app context
    class ContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""

        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    return celery
