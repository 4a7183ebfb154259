"""
Web module for backpaws application.

- create_app: Flask application factory
- handlers: gallery listing, photo download and upload views
"""

from .app import GalleryState, create_app, get_state

__all__ = [
    "GalleryState",
    "create_app",
    "get_state",
]
