"""
Services module for backpaws application.

This module contains the classes and functions that handle business logic:
- PhotoStore: Photo directory listing, upload and download
- PhotoListStore: Locked read-modify-write of the photo list JSON file
- Photo list functions: get/write/update/delete on PhotoList documents
"""

from .photo_list import (
    PhotoListStore,
    delete_photo,
    get_photo_list,
    update_or_insert_photo,
    update_or_insert_photos,
    write_photo_list,
)
from .photo_store import PhotoStore, clean_filename, is_valid_photo

__all__ = [
    "PhotoListStore",
    "PhotoStore",
    "clean_filename",
    "delete_photo",
    "get_photo_list",
    "is_valid_photo",
    "update_or_insert_photo",
    "update_or_insert_photos",
    "write_photo_list",
]
