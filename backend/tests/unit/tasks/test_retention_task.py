"""
Unit tests for retention_task

Tests that the Celery retention task resolves its collaborators from the
container, calls the guardian's throttled check, purges stale staging files
and handles exceptions gracefully.
"""

from unittest.mock import MagicMock, Mock

import pytest
from flask import Flask

from config.storage_config import StorageConfig
from domain.blob_storage import RetentionGuardian
from infrastructure.local_blob_store import LocalBlobStore


@pytest.fixture
def mock_guardian():
    """Mock RetentionGuardian for testing."""
    mock = Mock()
    mock.check.return_value = True
    return mock


@pytest.fixture
def mock_store():
    """Mock LocalBlobStore for testing."""
    mock = Mock()
    mock.purge_staging.return_value = 2
    return mock


@pytest.fixture
def mock_storage_config():
    mock = Mock()
    mock.guardian_interval_minutes = 45
    return mock


@pytest.fixture
def mock_container(mock_guardian, mock_store, mock_storage_config):
    """Mock DependencyContainer."""
    mock = MagicMock()

    def resolve_side_effect(service_type):
        if service_type is RetentionGuardian:
            return mock_guardian
        if service_type is LocalBlobStore:
            return mock_store
        if service_type is StorageConfig:
            return mock_storage_config
        raise ValueError(f"Unknown service type: {service_type}")

    mock.resolve.side_effect = resolve_side_effect
    return mock


@pytest.fixture
def task_app(mock_container):
    """Bare Flask app carrying the mocked container."""
    app = Flask("retention-task-test")
    app.container = mock_container
    return app


@pytest.fixture
def sweep_task(storage_root, monkeypatch):
    """Import the task with the worker's Flask app on a temporary root."""
    monkeypatch.setenv("SAVE_DIR", str(storage_root))
    from tasks.retention_task import sweep_expired_blobs

    return sweep_expired_blobs


class TestRetentionTask:
    def test_runs_throttled_check_with_configured_interval(self, sweep_task, task_app, mock_guardian):
        # Act
        with task_app.app_context():
            result = sweep_task.run()

        # Assert
        mock_guardian.check.assert_called_once_with(45)
        assert result["swept"] is True
        assert result["errors"] == []

    def test_purges_stale_staging_files(self, sweep_task, task_app, mock_store):
        with task_app.app_context():
            result = sweep_task.run()

        mock_store.purge_staging.assert_called_once_with(3600)
        assert result["staging_files_removed"] == 2

    def test_skipped_sweep_is_reported(self, sweep_task, task_app, mock_guardian):
        mock_guardian.check.return_value = False

        with task_app.app_context():
            result = sweep_task.run()

        assert result["swept"] is False
        assert result["errors"] == []

    def test_guardian_failure_still_purges_staging(self, sweep_task, task_app, mock_guardian, mock_store):
        # Arrange
        mock_guardian.check.side_effect = RuntimeError("storage root unreadable")

        # Act
        with task_app.app_context():
            result = sweep_task.run()

        # Assert
        assert result["swept"] is False
        assert len(result["errors"]) == 1
        assert "storage root unreadable" in result["errors"][0]
        mock_store.purge_staging.assert_called_once()

    def test_container_failure_returns_error_stats(self, sweep_task, task_app, mock_container):
        mock_container.resolve.side_effect = RuntimeError("container broken")

        with task_app.app_context():
            result = sweep_task.run()

        assert result == {
            "swept": False,
            "staging_files_removed": 0,
            "errors": ["Retention task failed: container broken"],
        }
