"""
Models module for backpaws application.

This module contains data models:
- Photo: Metadata for a single photo file
- PhotoList: The photo list document persisted as JSON
"""

from .photo import Photo, PhotoList

__all__ = [
    "Photo",
    "PhotoList",
]
