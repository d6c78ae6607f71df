"""
Application Factory

Creates and configures Flask application with all dependencies.
This factory pattern improves testability by allowing dependency injection
and configuration overrides.
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from application.blob_service import BlobService
from application.dependency_container import DependencyContainer
from application.event_publisher import EventPublisher
from config.storage_config import StorageConfig
from domain.blob_storage import (
    IBlobStore,
    IGuardianStateRepository,
    InMemoryGuardianState,
    RetentionGuardian,
    RetentionPolicy,
)
from infrastructure.local_blob_store import LocalBlobStore
from infrastructure.path_resolver import PathResolver

logger = logging.getLogger(__name__)


class AppConfig:
    """Application configuration."""

    def __init__(self, storage: Optional[StorageConfig] = None):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.celery_enabled = os.getenv("CELERY_ENABLED", "true").lower() == "true"
        self.storage = storage or StorageConfig()


def create_app(
    config: Optional[AppConfig] = None,
    guardian_state: Optional[IGuardianStateRepository] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        guardian_state: Guardian state to share; built from config if None

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    app = Flask(__name__)

    # Uploads are read whole; the store enforces its own size ceiling
    app.config["MAX_CONTENT_LENGTH"] = None

    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "PUT", "POST", "OPTIONS"],
                "allow_headers": ["Content-Type"],
                "max_age": 3600,
            }
        },
    )

    _initialize_services(app, config, guardian_state)
    _initialize_celery(app, config)
    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def _build_guardian_state(config: AppConfig) -> IGuardianStateRepository:
    """
    Build the process-wide guardian state for the configured backend.

    Args:
        config: Application configuration
    """
    if config.storage.guardian_backend == "redis":
        from config.redis_config import RedisConfig, get_redis_repository, init_redis
        from infrastructure.redis_guardian_state import RedisGuardianState

        redis_config = RedisConfig()
        init_redis(redis_config)
        redis_repo = get_redis_repository(f"{redis_config.key_prefix}:guardian")
        logger.info("Guardian state shared through Redis")
        return RedisGuardianState(redis_repo)

    return InMemoryGuardianState()


def _initialize_services(
    app: Flask,
    config: AppConfig,
    guardian_state: Optional[IGuardianStateRepository],
) -> None:
    """
    Build the service graph and attach it to the app through a DependencyContainer.

    Everything is registered as a singleton; in particular the guardian
    state must be created exactly once per process, otherwise every request
    would see a fresh "never swept" state and the throttle would not hold.

    Args:
        app: Flask application
        config: Application configuration
        guardian_state: Optional pre-built guardian state
    """
    container = DependencyContainer()
    storage = config.storage

    event_publisher = EventPublisher()
    container.setup_event_handlers(event_publisher)

    policy = RetentionPolicy()
    resolver = PathResolver(storage.storage_root)
    store = LocalBlobStore(
        resolver,
        base_url=storage.public_url,
        policy=policy,
        max_blob_bytes=storage.max_blob_bytes,
        event_sink=event_publisher.publish,
    )

    if guardian_state is None:
        guardian_state = _build_guardian_state(config)

    guardian = RetentionGuardian(
        store,
        guardian_state,
        policy=policy,
        event_sink=event_publisher.publish,
    )
    blob_service = BlobService(
        store,
        resolver,
        guardian,
        public_url=storage.public_url,
        guardian_interval_minutes=storage.guardian_interval_minutes,
    )

    container.register_singleton(StorageConfig, storage)
    container.register_singleton(EventPublisher, event_publisher)
    container.register_singleton(RetentionPolicy, policy)
    container.register_singleton(PathResolver, resolver)
    container.register_singleton(LocalBlobStore, store)
    container.register_singleton(IBlobStore, store)
    container.register_singleton(IGuardianStateRepository, guardian_state)
    container.register_singleton(RetentionGuardian, guardian)
    container.register_singleton(BlobService, blob_service)

    app.container = container
    logger.info(
        f"Blob store ready at {resolver.storage_root.resolve()} "
        f"(public URL {storage.public_url})"
    )


def _initialize_celery(app: Flask, config: AppConfig) -> None:
    """
    Attach a Celery app for the background retention sweep.

    Celery is optional: without it the guardian still runs on every request.
    """
    app.celery = None
    if not config.celery_enabled:
        logger.info("Celery disabled - retention runs on request traffic only")
        return

    try:
        from config.celery_config import make_celery

        app.celery = make_celery(app)
        logger.info("Celery initialized successfully")
    except Exception as e:
        logger.warning(f"Could not initialize Celery: {e}")


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """
    Register the plain-text protocol and the versioned API.

    Args:
        app: Flask application
        config: Application configuration
    """
    from api.blobs import blobs_bp
    from api.v1 import api_v1_bp

    app.register_blueprint(blobs_bp)
    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of the storage root, the retention guardian and,
    when guardian state is shared, Redis.

    Args:
        app: Flask application instance

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    container = app.container
    resolver = container.resolve(PathResolver)
    guardian = container.resolve(RetentionGuardian)
    root = resolver.storage_root

    health_status = {
        "status": "ok",
        "storage_root": str(root.resolve()),
        "storage": "writable",
        "guardian_last_check": None,
        "celery": "available" if getattr(app, "celery", None) is not None else "unavailable",
    }

    if not (root.is_dir() and os.access(root, os.W_OK)):
        health_status["storage"] = "unwritable"
        health_status["status"] = "degraded"

    if container.resolve(StorageConfig).guardian_backend == "redis":
        from config.redis_config import redis_health_check

        if redis_health_check():
            health_status["redis"] = "available"
        else:
            health_status["redis"] = "unavailable"
            health_status["status"] = "degraded"

    try:
        last_check = guardian.last_check
        health_status["guardian_last_check"] = last_check.isoformat() if last_check else None
    except Exception as e:
        health_status["guardian_last_check"] = f"error: {e}"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns storage and guardian status.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
