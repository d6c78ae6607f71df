"""
Blob Routes - plain-text upload/download protocol

    curl -T ./sample.txt http://localhost:8000/
    curl http://localhost:8000/?file=8079770645379253334

Responses are plain text (or the raw payload); errors are rendered as the
error's display message with a status code mapped from its category.
"""

from flask import Blueprint, Response, current_app, request, send_file

from application.blob_service import BlobService
from domain.errors import BlobError, ErrorCategory

blobs_bp = Blueprint("blobs", __name__)

BANNER = """\
  __ _
 / _| | ___  _ __  _ __  _   _
| |_| |/ _ \\| '_ \\| '_ \\| | | |
|  _| | (_) | |_) | |_) | |_| |
|_| |_|\\___/| .__/| .__/ \\__, |
            |_|   |_|    |___/

PUT:
> $ curl -T ./sample.txt {url}

GET:
> $ curl {url}?file=8079770645379253334

Files are kept for 150 / size-in-MB days (5 MB minimum, 30 days maximum).
"""


def _blob_service() -> BlobService:
    return current_app.container.resolve(BlobService)


def _text(body: str, status: int = 200) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def _error_text(error: BlobError) -> Response:
    if error.category is ErrorCategory.INTERNAL:
        current_app.logger.error(f"[BLOBS] {error}", exc_info=error.original_error)
    else:
        current_app.logger.info(f"[BLOBS] {error.category.value}: {error}")
    return _text(str(error), error.status_code)


def _banner(status: int = 200) -> Response:
    return _text(BANNER.format(url=_blob_service().public_url), status)


@blobs_bp.route("/", methods=["GET"])
def index():
    """Usage banner, or the payload when ?file=<key> is given."""
    key = request.args.get("file")
    if key is None:
        return _banner()

    try:
        download = _blob_service().download(key)
    except BlobError as e:
        return _error_text(e)

    current_app.logger.info(f"[BLOBS] Serving {download.key} ({download.size_bytes} bytes)")
    return send_file(
        download.stream,
        mimetype="application/octet-stream",
        download_name=download.filename,
    )


@blobs_bp.route("/", methods=["PUT"])
@blobs_bp.route("/<name>", methods=["PUT"])
def upload(name=None):
    """Store the raw request body; <name> is accepted for curl -T and ignored."""
    content = request.get_data(cache=False)

    try:
        report = _blob_service().upload(content, name)
    except BlobError as e:
        return _error_text(e)

    return _text(report)


@blobs_bp.app_errorhandler(404)
def not_found(error):
    """Unknown routes get the banner, like the index page."""
    return _banner(404)
