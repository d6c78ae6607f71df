"""Celery tasks for background blob retention."""
