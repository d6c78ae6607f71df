"""
API Namespaces - Organized endpoint groups
"""

from flask import current_app
from flask_restx import Namespace, Resource

from api.v1.models import blob_info_response, error_response, sweep_response
from application.blob_service import BlobService
from domain.errors import BlobError, ErrorCategory, create_error_response

# =============================================================================
# Blob Namespace - Blob information and retention operations
# =============================================================================

blobs_ns = Namespace("blobs", description="Blob information and retention operations")


def _blob_service() -> BlobService:
    return current_app.container.resolve(BlobService)


@blobs_ns.route("/<string:key>")
@blobs_ns.param("key", "The digits-only content key returned by an upload")
class BlobInfo(Resource):
    """Structured info for a stored blob"""

    @blobs_ns.doc("get_blob_info")
    @blobs_ns.response(200, "Success", blob_info_response)
    @blobs_ns.response(404, "Blob Not Found", error_response)
    @blobs_ns.response(410, "Blob Expired", error_response)
    @blobs_ns.response(500, "Internal Server Error", error_response)
    def get(self, key):
        """
        Get size, creation time and remaining retention for a blob

        Same data as the plain-text upload report, as JSON.
        """
        try:
            return _blob_service().describe(key), 200

        except BlobError as e:
            if e.category is ErrorCategory.INTERNAL:
                current_app.logger.exception(f"Error describing blob {key}: {e}")
            return create_error_response(e.category, str(e))
        except Exception as e:
            current_app.logger.exception(f"Unexpected error describing blob {key}: {e}")
            return create_error_response(
                ErrorCategory.INTERNAL,
                f"Unexpected error: {e}",
            )


@blobs_ns.route("/sweep")
class Sweep(Resource):
    """Run the retention guardian now"""

    @blobs_ns.doc("sweep_expired_blobs")
    @blobs_ns.response(200, "Sweep completed", sweep_response)
    @blobs_ns.response(202, "Another sweep is in progress", sweep_response)
    @blobs_ns.response(500, "Internal Server Error", error_response)
    def post(self):
        """
        Sweep expired blobs immediately

        Ignores the guardian interval and resets it. Returns 202 without
        sweeping when another sweep already holds the guardian lock.
        """
        try:
            report = _blob_service().force_sweep()
        except BlobError as e:
            current_app.logger.exception(f"Forced sweep failed: {e}")
            return create_error_response(e.category, str(e))

        if report is None:
            return {"status": "in_progress"}, 202

        data = report.to_dict()
        data["status"] = "completed"
        return data, 200
