"""
Shared pytest fixtures and configuration for the floppy backend test suite.

This module provides:
- Hypothesis configuration for property-based testing
- A throwaway storage root with a store and guardian bound to it
- A controllable clock for retention arithmetic
- Helpers for planting entries with arbitrary creation times
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Hypothesis configuration
from hypothesis import settings, HealthCheck, Phase

from domain.blob_storage import BlobKey, InMemoryGuardianState, RetentionGuardian, RetentionPolicy
from infrastructure.local_blob_store import LocalBlobStore
from infrastructure.path_resolver import PathResolver

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.load_profile("default")


# =============================================================================
# Time-related Fixtures
# =============================================================================

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def fixed_datetime() -> datetime:
    """Provide a fixed, timezone-aware datetime for deterministic testing."""
    return FIXED_NOW


@pytest.fixture
def clock() -> FakeClock:
    """Provide a clock frozen at FIXED_NOW."""
    return FakeClock()


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def storage_root(tmp_path) -> Path:
    """Provide an empty storage root."""
    root = tmp_path / "floppy"
    root.mkdir()
    return root


@pytest.fixture
def resolver(storage_root) -> PathResolver:
    return PathResolver(str(storage_root))


@pytest.fixture
def policy() -> RetentionPolicy:
    return RetentionPolicy()


@pytest.fixture
def events() -> list:
    """Collects every domain event emitted by the store and guardian."""
    return []


@pytest.fixture
def store(resolver, policy, clock, events) -> LocalBlobStore:
    """Provide a LocalBlobStore on the temporary root with a frozen clock."""
    return LocalBlobStore(
        resolver,
        base_url="http://test.local/",
        policy=policy,
        clock=clock,
        event_sink=events.append,
    )


@pytest.fixture
def guardian(store, policy, clock, events) -> RetentionGuardian:
    return RetentionGuardian(
        store,
        InMemoryGuardianState(),
        policy=policy,
        clock=clock,
        event_sink=events.append,
    )


def plant_blob(root: Path, content: bytes, created_at: datetime) -> BlobKey:
    """
    Write an entry directly on disk with the given creation time.

    Mirrors the store's layout so tests can age entries without waiting.
    """
    key = BlobKey.derive(content)
    location = root / key.value
    location.mkdir()
    (location / created_at.isoformat()).write_bytes(content)
    return key


@pytest.fixture
def plant(storage_root):
    """Provide plant_blob bound to the temporary storage root."""

    def _plant(content: bytes, created_at: datetime) -> BlobKey:
        return plant_blob(storage_root, content, created_at)

    return _plant


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (real filesystem, optional Redis)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
