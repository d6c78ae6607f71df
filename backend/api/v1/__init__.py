"""
API v1 - Floppy JSON API

Versioned endpoints with OpenAPI/Swagger documentation.
"""

import os

from flask import Blueprint
from flask_restx import Api

# Get API version from environment
API_VERSION = os.getenv("API_VERSION", "v1")

# Create blueprint for API v1
api_v1_bp = Blueprint("api_v1", __name__, url_prefix=f"/api/{API_VERSION}")

# Initialize Flask-RESTX API with Swagger documentation
api = Api(
    api_v1_bp,
    version="1.0",
    title="Floppy API",
    description="Content-addressed blob store with size-dependent retention",
    doc="/docs",  # Swagger UI will be available at /api/v1/docs
    license="MIT",
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import blobs_ns  # noqa: E402

# Register namespaces
api.add_namespace(blobs_ns, path="/blobs")
