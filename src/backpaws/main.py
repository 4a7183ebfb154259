"""
Main entry point for the backpaws web server.

Serves the gallery from the configured photo directory with the Flask
development server (one thread per request).
"""

import sys

from dotenv import load_dotenv

from backpaws.config import GalleryConfig
from backpaws.logging_config import configure_structured_logging, get_logger
from backpaws.web.app import create_app

logger = get_logger(__name__)


def run_server(config: GalleryConfig) -> int:
    """
    Start serving config.photo_dir; blocks until the server stops.

    Returns:
        Process exit code (1 when the photo directory is missing)
    """
    if not config.photo_dir.is_dir():
        logger.error("photo_directory_missing", photo_dir=str(config.photo_dir))
        print(f"Photo directory {config.photo_dir} does not exist", file=sys.stderr)
        return 1

    app = create_app(config)

    logger.info("server_starting", host=config.host, port=config.port)
    print(f"Starting server at http://{config.host}:{config.port}")
    app.run(host=config.host, port=config.port, threaded=True)
    return 0


def main() -> None:
    """Main application entry point."""
    load_dotenv()
    configure_structured_logging()
    sys.exit(run_server(GalleryConfig.from_env()))


if __name__ == "__main__":
    main()
