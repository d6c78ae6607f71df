"""
API Models for response documentation
"""

from flask_restx import fields

from api.v1 import api

# =============================================================================
# Response Models
# =============================================================================

blob_info_response = api.model(
    "BlobInfo",
    {
        "key": fields.String(description="Digits-only content key", example="8079770645379253334"),
        "url": fields.String(description="Retrieval URL"),
        "size_bytes": fields.Integer(description="Payload size in bytes"),
        "size_mb": fields.Integer(description="Payload size in whole megabytes"),
        "created_at": fields.DateTime(description="Upload time (RFC 3339)"),
        "days_remaining": fields.Float(
            description="Retention left in days (0-30); 0 means eligible for reclamation"
        ),
    },
)

sweep_response = api.model(
    "SweepReport",
    {
        "status": fields.String(description="completed or in_progress"),
        "scanned": fields.Integer(description="Entries evaluated"),
        "evicted": fields.Integer(description="Entries removed"),
        "skipped": fields.Integer(description="Empty or vanished entries"),
        "failed": fields.Integer(description="Entries that could not be evaluated"),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category", example="not_found"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing message"),
        "action": fields.String(description="Suggested next step"),
        "detail": fields.String(description="Technical detail", required=False),
    },
)
