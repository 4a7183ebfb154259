"""Upload handlers for backpaws application."""

import time

from flask import Blueprint, Response, redirect, request, send_file, url_for

from backpaws.errors import StorageError, ValidationError
from backpaws.logging_config import get_logger, log_performance
from backpaws.models.photo import Photo
from backpaws.services.photo_store import clean_filename
from backpaws.web.app import get_state

logger = get_logger(__name__)

upload_bp = Blueprint("upload", __name__)


def send_upload_form() -> Response:
    """Serve the static upload page."""
    template_path = get_state().config.upload_template_path
    if not template_path.is_file():
        raise StorageError(
            f"upload form missing: {template_path}",
            code="upload_form_missing",
            user_message="Upload form unavailable",
            details={"path": str(template_path)},
        )
    return send_file(template_path, mimetype="text/html")


def process_upload() -> Response:
    """
    Save the uploaded photo and record its title and description.

    Form fields: ``title``, ``description`` and the file field ``photo``.
    The photo list entry is written only after the file itself is saved.
    """
    start_time = time.perf_counter()
    state = get_state()

    title = request.form.get("title", "")
    description = request.form.get("description", "")
    uploaded_file = request.files.get("photo")

    if uploaded_file is None or not uploaded_file.filename:
        raise ValidationError("no file in upload", code="missing_file", user_message="Failed to retrieve file")

    filename = clean_filename(uploaded_file.filename)

    path = state.photo_store.save_photo(filename, uploaded_file.stream)
    state.photo_list_store.upsert(Photo(filename=filename, title=title, description=description))

    logger.info("photo_uploaded", filename=filename, title=title, description=description, path=str(path))
    log_performance("photo_upload", time.perf_counter() - start_time, filename=filename)

    return redirect(url_for("gallery.list_photos"), code=303)


@upload_bp.route("/upload", methods=["GET", "POST"])
def upload_photo() -> Response:
    if request.method == "POST":
        return process_upload()
    return send_upload_form()
