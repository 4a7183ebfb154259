"""Gallery listing and photo download handlers."""

from flask import Blueprint, Response, render_template_string, send_file

from backpaws.errors import PhotoListError, ValidationError
from backpaws.logging_config import get_logger
from backpaws.models.photo import PhotoList
from backpaws.web.app import get_state

logger = get_logger(__name__)

gallery_bp = Blueprint("gallery", __name__)

GALLERY_TEMPLATE = """<html><body>
<h1>Photo Gallery</h1>
<a href="{{ url_for('upload.upload_photo') }}">Upload a Photo</a><br><br>
<ul>
{%- for filename in filenames %}
{%- set photo = photos.get(filename) %}
<li><a href="{{ url_for('gallery.serve_photo', name=filename) }}">{{ filename }}</a>
{%- if photo and photo.title %} <strong>{{ photo.title }}</strong>{% endif %}
{%- if photo and photo.description %} &mdash; {{ photo.description }}{% endif %}</li>
{%- endfor %}
</ul>
</body></html>
"""


def load_photo_metadata() -> dict:
    """Photo list entries by filename; an unreadable list shows no metadata."""
    try:
        photo_list = get_state().photo_list_store.load()
    except PhotoListError as e:
        logger.warning("gallery_metadata_unavailable", error=str(e))
        photo_list = PhotoList()
    return {photo.filename: photo for photo in photo_list.photos}


@gallery_bp.get("/")
def list_photos() -> str:
    """HTML page with a link per photo file."""
    filenames = get_state().photo_store.list_photo_files()
    photos = load_photo_metadata()

    logger.debug("gallery_rendered", photo_count=len(filenames))
    return render_template_string(GALLERY_TEMPLATE, filenames=filenames, photos=photos)


@gallery_bp.get("/photos/")
def photo_not_specified() -> Response:
    raise ValidationError("photo not specified", code="photo_not_specified", user_message="Photo not specified")


@gallery_bp.get("/photos/<path:name>")
def serve_photo(name: str) -> Response:
    """Stream one photo; supports conditional and range requests."""
    path = get_state().photo_store.get_photo_path(name)
    return send_file(path, conditional=True)
