"""
Retention Task

Celery beat task that gives the retention guardian a chance to run on an
idle server and removes staging entries orphaned by crashed writers.
"""

import logging

from celery_app import celery_app
from flask import current_app

from config.storage_config import StorageConfig
from domain.blob_storage import RetentionGuardian
from infrastructure.local_blob_store import LocalBlobStore

# Configure logging
logger = logging.getLogger(__name__)

STAGING_MAX_AGE_SECONDS = 3600


@celery_app.task(bind=True, name="tasks.sweep_expired_blobs")
def sweep_expired_blobs(self):
    """
    Periodic retention task.

    Runs on the Celery beat schedule and:
    1. Calls the guardian's throttled check (a no-op if a request-driven
       sweep already ran within the interval)
    2. Removes staging entries older than an hour

    Returns:
        dict: Sweep statistics and errors
    """
    logger.info("Starting retention task")

    stats = {
        "swept": False,
        "staging_files_removed": 0,
        "errors": [],
    }

    try:
        container = current_app.container
        guardian = container.resolve(RetentionGuardian)
        store = container.resolve(LocalBlobStore)
        storage_config = container.resolve(StorageConfig)

        # 1. Throttled guardian check
        try:
            stats["swept"] = guardian.check(storage_config.guardian_interval_minutes)
            if not stats["swept"]:
                logger.info("Guardian interval not elapsed, sweep skipped")
        except Exception as e:
            error_msg = f"Error sweeping expired blobs: {e}"
            stats["errors"].append(error_msg)
            logger.error(error_msg, exc_info=True)

        # 2. Orphaned staging entries
        try:
            stats["staging_files_removed"] = store.purge_staging(STAGING_MAX_AGE_SECONDS)
        except Exception as e:
            error_msg = f"Error removing staging entries: {e}"
            stats["errors"].append(error_msg)
            logger.error(error_msg, exc_info=True)

        logger.info(
            f"Retention task completed - Swept: {stats['swept']}, "
            f"Staging: {stats['staging_files_removed']}, "
            f"Errors: {len(stats['errors'])}"
        )

        if stats["errors"]:
            logger.warning(f"Retention task errors: {stats['errors']}")

        return stats

    except Exception as e:
        error_msg = f"Retention task failed: {e}"
        logger.error(error_msg, exc_info=True)
        return {
            "swept": False,
            "staging_files_removed": 0,
            "errors": [error_msg],
        }
