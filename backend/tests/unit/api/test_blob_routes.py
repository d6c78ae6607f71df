"""
Unit tests for the HTTP layer.

Runs the real app factory against a temporary storage root and drives it
through Flask's test client: the curl protocol at /, the v1 JSON API and
the health endpoint.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from app_factory import AppConfig, create_app
from application.blob_service import BlobService
from domain.blob_storage import BlobKey, IGuardianStateRepository, InMemoryGuardianState
from domain.errors import StorageInternalError

PUBLIC_URL = "http://floppy.test/"


@pytest.fixture
def flask_app(storage_root, monkeypatch):
    """Create the app on a temporary root with Celery disabled."""
    monkeypatch.setenv("SAVE_DIR", str(storage_root))
    monkeypatch.setenv("URL", PUBLIC_URL)
    monkeypatch.setenv("CELERY_ENABLED", "false")
    monkeypatch.setenv("GUARDIAN_STATE_BACKEND", "memory")

    app = create_app(AppConfig())
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(flask_app):
    """Create test client."""
    return flask_app.test_client()


class TestIndex:
    def test_banner_shows_configured_url(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.mimetype == "text/plain"
        assert f"curl -T ./sample.txt {PUBLIC_URL}" in response.get_data(as_text=True)

    def test_unknown_route_serves_banner_with_404(self, client):
        response = client.get("/no/such/page")

        assert response.status_code == 404
        assert PUBLIC_URL in response.get_data(as_text=True)


class TestUpload:
    def test_put_returns_report(self, client, storage_root):
        # Act
        response = client.put("/", data=b"hello floppy")

        # Assert
        key = BlobKey.derive(b"hello floppy")
        assert response.status_code == 200
        assert response.get_data(as_text=True) == (
            f"\nURL: {PUBLIC_URL}?file={key}\nFile size: 0M\nDays remaining: 30\n"
        )
        assert len(list((storage_root / key.value).iterdir())) == 1

    def test_put_with_name_ignores_name(self, client):
        named = client.put("/sample.txt", data=b"same bytes")
        again = client.put("/other-name.bin", data=b"same bytes")

        assert named.status_code == 200
        assert again.get_data(as_text=True).startswith(
            "Someone has already uploaded this file before. No need to recreate it.\n"
        )

    def test_oversize_upload_gets_advisory(self, flask_app, client, storage_root):
        flask_app.container.resolve(BlobService).store.max_blob_bytes = 8

        response = client.put("/", data=b"nine byte")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "I don't accept fat files. file_size > 150m"
        assert list(storage_root.iterdir()) == []

    def test_internal_error_maps_to_500(self, flask_app, client):
        store = flask_app.container.resolve(BlobService).store
        with patch.object(store, "put", side_effect=StorageInternalError("disk full")):
            response = client.put("/", data=b"x")

        assert response.status_code == 500
        assert response.get_data(as_text=True) == "Internal Error: disk full"


class TestDownload:
    def test_round_trip(self, client):
        client.put("/", data=b"\x00\x01binary\xff")
        key = BlobKey.derive(b"\x00\x01binary\xff")

        response = client.get(f"/?file={key}")

        assert response.status_code == 200
        assert response.mimetype == "application/octet-stream"
        assert response.data == b"\x00\x01binary\xff"
        response.close()

    @pytest.mark.parametrize("key", ["12a3", "../../etc", "123456"])
    def test_bad_or_unknown_key_is_404(self, client, key):
        response = client.get("/", query_string={"file": key})

        assert response.status_code == 404
        assert response.get_data(as_text=True) == "Sorry, no file for you."

    def test_expired_blob_is_410_and_removed(self, flask_app, client, plant, storage_root):
        # Keep the guardian quiet so the read path sees the stale entry
        now = datetime.now(timezone.utc)
        flask_app.container.resolve(IGuardianStateRepository).set_last_check(now)
        key = plant(b"stale", now - timedelta(days=40))

        response = client.get(f"/?file={key}")

        assert response.status_code == 410
        assert response.get_data(as_text=True) == "This file has expired."
        assert not (storage_root / key.value).exists()


class TestBlobInfoApi:
    def test_returns_json_info(self, client):
        client.put("/", data=b"json me")
        key = BlobKey.derive(b"json me")

        response = client.get(f"/api/v1/blobs/{key}")

        assert response.status_code == 200
        body = response.get_json()
        assert body["key"] == key.value
        assert body["url"] == f"{PUBLIC_URL}?file={key}"
        assert body["size_bytes"] == len(b"json me")
        assert body["days_remaining"] == 30.0

    def test_unknown_key_is_structured_404(self, client):
        response = client.get("/api/v1/blobs/999")

        assert response.status_code == 404
        assert response.get_json()["error"] == "not_found"

    def test_expired_blob_is_structured_410(self, flask_app, client, plant):
        now = datetime.now(timezone.utc)
        flask_app.container.resolve(IGuardianStateRepository).set_last_check(now)
        key = plant(b"stale json", now - timedelta(days=40))

        response = client.get(f"/api/v1/blobs/{key}")

        assert response.status_code == 410
        assert response.get_json()["error"] == "expired"


class TestSweepApi:
    def test_sweep_evicts_expired_entries(self, client, plant, storage_root):
        old = datetime.now(timezone.utc) - timedelta(days=31)
        expired = plant(b"old news", old)
        fresh = plant(b"fresh news", datetime.now(timezone.utc))

        response = client.post("/api/v1/blobs/sweep")

        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "completed"
        assert body["evicted"] == 1
        assert not (storage_root / expired.value).exists()
        assert (storage_root / fresh.value).exists()

    def test_sweep_in_progress_is_202(self, flask_app, client):
        service = flask_app.container.resolve(BlobService)
        with patch.object(service.guardian, "sweep_now", return_value=None):
            response = client.post("/api/v1/blobs/sweep")

        assert response.status_code == 202
        assert response.get_json() == {"status": "in_progress"}


class TestHealth:
    def test_healthy(self, client, storage_root):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "ok"
        assert body["storage"] == "writable"
        assert body["celery"] == "unavailable"

    def test_reports_last_check_after_request(self, client):
        client.get("/?file=1")

        assert client.get("/health").get_json()["guardian_last_check"] is not None

    def test_memory_backend_does_not_report_redis(self, client):
        assert "redis" not in client.get("/health").get_json()

    @pytest.mark.parametrize(
        "reachable,expected,status_code",
        [(True, "available", 200), (False, "unavailable", 503)],
    )
    def test_redis_backend_reports_redis(
        self, storage_root, monkeypatch, reachable, expected, status_code
    ):
        # Arrange
        monkeypatch.setenv("SAVE_DIR", str(storage_root))
        monkeypatch.setenv("CELERY_ENABLED", "false")
        monkeypatch.setenv("GUARDIAN_STATE_BACKEND", "redis")
        app = create_app(AppConfig(), guardian_state=InMemoryGuardianState())

        # Act
        with patch("config.redis_config.redis_health_check", return_value=reachable):
            response = app.test_client().get("/health")

        # Assert
        assert response.status_code == status_code
        body = response.get_json()
        assert body["redis"] == expected
        assert body["status"] == ("ok" if reachable else "degraded")
