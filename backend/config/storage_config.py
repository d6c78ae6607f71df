"""
Storage Configuration

Environment-driven settings for the blob store and retention guardian.
Read once at startup by the app factory.
"""

import os

from infrastructure.local_blob_store import DEFAULT_PUBLIC_URL, MAX_BLOB_BYTES

GUARDIAN_BACKENDS = ("memory", "redis")


class StorageConfig:
    """Blob store configuration settings."""

    def __init__(self):
        # Empty means the process working directory
        self.storage_root = os.getenv("SAVE_DIR", "")
        self.public_url = os.getenv("URL", DEFAULT_PUBLIC_URL)
        self.max_blob_bytes = int(os.getenv("MAX_BLOB_BYTES", MAX_BLOB_BYTES))

        # Retention guardian
        self.guardian_interval_minutes = int(os.getenv("GUARDIAN_INTERVAL_MINUTES", 60))
        self.guardian_backend = os.getenv("GUARDIAN_STATE_BACKEND", "memory").lower()
        if self.guardian_backend not in GUARDIAN_BACKENDS:
            raise ValueError(
                f"GUARDIAN_STATE_BACKEND must be one of {GUARDIAN_BACKENDS}, "
                f"got {self.guardian_backend!r}"
            )
