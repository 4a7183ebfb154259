"""
Flask application factory for backpaws.

The application state (configuration, photo directory and the locked photo
list) lives in a GalleryState object attached to the Flask app, so handlers
never reach for module-level globals.
"""

from dataclasses import dataclass

from flask import Flask, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from backpaws.config import GalleryConfig
from backpaws.errors import BackPawsError, handle_error
from backpaws.health import perform_health_check
from backpaws.logging_config import get_logger
from backpaws.services.photo_list import PhotoListStore
from backpaws.services.photo_store import PhotoStore

logger = get_logger(__name__)

STATE_KEY = "backpaws"


@dataclass
class GalleryState:
    """Everything a request handler needs."""

    config: GalleryConfig
    photo_store: PhotoStore
    photo_list_store: PhotoListStore

    @classmethod
    def from_config(cls, config: GalleryConfig) -> "GalleryState":
        return cls(
            config=config,
            photo_store=PhotoStore(config.photo_dir, config.allowed_extensions),
            photo_list_store=PhotoListStore(config.photo_list_path),
        )


def get_state() -> GalleryState:
    """GalleryState of the application handling the current request."""
    return current_app.extensions[STATE_KEY]


def plain_text_error(message: str, status: int) -> Response:
    """Plain-text error body, one line."""
    return Response(f"{message}\n", status=status, mimetype="text/plain")


def register_error_handlers(app: Flask) -> None:
    """Map application errors to generic status/message responses."""

    @app.errorhandler(BackPawsError)
    def handle_backpaws_error(error: BackPawsError) -> Response:
        error_info = handle_error(error, {"path": request.path, "method": request.method})
        return plain_text_error(error_info.user_message, error_info.http_status)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception) -> Response | HTTPException:
        # Routing 404s, 405s and 413s keep Werkzeug's responses
        if isinstance(error, HTTPException):
            return error

        # Logged once, with traceback, when handle_error wraps it; always a generic 500
        error_info = handle_error(error, {"path": request.path, "method": request.method, "unhandled": True})
        return plain_text_error(error_info.user_message, error_info.http_status)


def create_app(config: GalleryConfig | None = None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Gallery settings (defaults to GalleryConfig.from_env())

    Returns:
        Configured Flask application
    """
    from backpaws.web.handlers.gallery import gallery_bp
    from backpaws.web.handlers.upload import upload_bp

    config = config or GalleryConfig.from_env()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes
    app.extensions[STATE_KEY] = GalleryState.from_config(config)

    app.register_blueprint(gallery_bp)
    app.register_blueprint(upload_bp)
    register_error_handlers(app)

    @app.get("/health")
    def health() -> tuple[Response, int]:
        health_data = perform_health_check(get_state().config)
        status_code = 200 if health_data["status"] == "healthy" else 503
        return jsonify(health_data), status_code

    logger.info(
        "app_created",
        photo_dir=str(config.photo_dir),
        photo_list_path=str(config.photo_list_path),
        max_upload_bytes=config.max_upload_bytes,
    )
    return app
