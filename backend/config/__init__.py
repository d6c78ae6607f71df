"""Environment-driven configuration for the blob store, Redis and Celery."""
