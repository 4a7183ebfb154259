"""
Photo list persistence for backpaws application.

The photo list is a JSON document next to the images that maps filenames to
a title and description. Plain functions cover reading, writing and editing
a list in memory; PhotoListStore wraps them in a lock so that every
load-modify-save cycle on one file happens as a unit.
"""

import json
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from ..errors import PhotoEntryNotFoundError, PhotoListError, PhotoListNotFoundError
from ..logging_config import get_logger
from ..models.photo import Photo, PhotoList

logger = get_logger(__name__)

READ_FAILED_MESSAGE = "Failed to retrieve photo list"
WRITE_FAILED_MESSAGE = "Failed to update photo list"


def get_photo_list(path: str | Path) -> PhotoList:
    """
    Read and decode the photo list at path.

    Args:
        path: Location of the photo list JSON file

    Returns:
        Decoded PhotoList

    Raises:
        PhotoListNotFoundError: If the file does not exist
        PhotoListError: If the file cannot be read or decoded
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        photo_list = PhotoList.from_dict(data)
    except FileNotFoundError as e:
        raise PhotoListNotFoundError(
            f"cannot open photo list {path}: {e}", details={"path": str(path)}, original_exception=e
        ) from e
    except OSError as e:
        raise PhotoListError(
            f"cannot open photo list {path}: {e}",
            user_message=READ_FAILED_MESSAGE,
            details={"path": str(path)},
            original_exception=e,
        ) from e
    # JSONDecodeError and UnicodeDecodeError are both ValueErrors
    except ValueError as e:
        raise PhotoListError(
            f"failed to decode photo list from {path}: {e}",
            code="photo_list_corrupt",
            user_message=READ_FAILED_MESSAGE,
            details={"path": str(path)},
            original_exception=e,
        ) from e

    logger.debug("photo_list_loaded", path=str(path), entries=len(photo_list))
    return photo_list


def write_photo_list(path: str | Path, photo_list: PhotoList) -> None:
    """
    Encode photo_list as tab-indented JSON and overwrite the file at path.

    Raises:
        PhotoListError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(photo_list.to_dict(), f, indent="\t", ensure_ascii=False)
            f.write("\n")
    except OSError as e:
        raise PhotoListError(
            f"cannot write photo list {path}: {e}",
            code="photo_list_write_failed",
            user_message=WRITE_FAILED_MESSAGE,
            details={"path": str(path)},
            original_exception=e,
        ) from e

    logger.debug("photo_list_written", path=str(path), entries=len(photo_list))


def update_or_insert_photo(photo_list: PhotoList, new_photo: Photo) -> None:
    """Replace the entry with new_photo's filename, or append new_photo."""
    for i, photo in enumerate(photo_list.photos):
        if photo.filename == new_photo.filename:
            photo_list.photos[i] = new_photo
            return
    photo_list.photos.append(new_photo)


def update_or_insert_photos(photo_list: PhotoList, photos: Iterable[Photo]) -> None:
    """Apply update_or_insert_photo for each photo in order."""
    for photo in photos:
        update_or_insert_photo(photo_list, photo)


def delete_photo(photo_list: PhotoList, photo_to_delete: Photo | str) -> Photo:
    """
    Remove the first entry matching the photo's filename.

    Only the entry is removed; the image file is left alone.

    Args:
        photo_list: List to edit in place
        photo_to_delete: Photo or bare filename to remove

    Returns:
        The removed entry

    Raises:
        PhotoEntryNotFoundError: If no entry has that filename (list unchanged)
    """
    filename = photo_to_delete.filename if isinstance(photo_to_delete, Photo) else photo_to_delete
    for i, photo in enumerate(photo_list.photos):
        if photo.filename == filename:
            return photo_list.photos.pop(i)
    raise PhotoEntryNotFoundError(filename)


class PhotoListStore:
    """
    Photo list file guarded by a lock.

    All mutating operations load the current file, apply the change and write
    it back while holding the lock, so concurrent callers in one process do
    not lose each other's updates.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> PhotoList:
        """
        Load the photo list; a missing file is an empty list.

        Raises:
            PhotoListError: If the file exists but cannot be read or decoded
        """
        if not self.path.exists():
            logger.debug("photo_list_missing", path=str(self.path))
            return PhotoList()

        try:
            return get_photo_list(self.path)
        except PhotoListNotFoundError:
            # Removed between the check and the read
            return PhotoList()

    def save(self, photo_list: PhotoList) -> None:
        """Write photo_list, replacing the file."""
        with self._lock:
            write_photo_list(self.path, photo_list)

    def modify(self, change: Callable[[PhotoList], Any]) -> Any:
        """
        Run change on the current list and persist the result under the lock.

        Args:
            change: Callable editing the list in place

        Returns:
            Whatever change returned

        Raises:
            PhotoListError: If the list cannot be loaded or saved
        """
        with self._lock:
            photo_list = self.load()
            result = change(photo_list)
            write_photo_list(self.path, photo_list)
            return result

    def upsert(self, photo: Photo) -> None:
        """Insert or update one entry."""
        self.modify(lambda photo_list: update_or_insert_photo(photo_list, photo))
        logger.info("photo_entry_saved", path=str(self.path), filename=photo.filename)

    def upsert_many(self, photos: list[Photo]) -> None:
        """Insert or update several entries in a single write."""
        self.modify(lambda photo_list: update_or_insert_photos(photo_list, photos))
        logger.info("photo_entries_saved", path=str(self.path), count=len(photos))

    def remove(self, filename: str) -> Photo:
        """
        Delete the entry for filename.

        Raises:
            PhotoEntryNotFoundError: If there is no such entry (file not rewritten)
        """
        with self._lock:
            photo_list = self.load()
            removed = delete_photo(photo_list, filename)
            write_photo_list(self.path, photo_list)

        logger.info("photo_entry_removed", path=str(self.path), filename=filename)
        return removed
