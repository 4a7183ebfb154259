"""Photo directory operations for backpaws application."""

import contextlib
import os
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path, PurePosixPath
from typing import BinaryIO
from urllib.parse import unquote, urlparse

import requests

from ..config import DEFAULT_ALLOWED_EXTENSIONS
from ..errors import NetworkError, NoPhotosFoundError, PhotoNotFoundError, StorageError, ValidationError
from ..logging_config import get_logger
from ..models.photo import Photo

logger = get_logger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024
PHOTO_FILE_MODE = 0o644


def is_valid_photo(filename: str, allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS) -> bool:
    """Check whether filename has one of the allowed extensions (case-insensitive)."""
    ext = os.path.splitext(filename)[1].lower()
    return bool(ext) and ext in allowed_extensions


def clean_filename(filename: str | None) -> str:
    """
    Reduce a client-supplied filename to its base name.

    Browsers on some platforms send full paths, with either separator.

    Raises:
        ValidationError: If nothing usable is left
    """
    name = (filename or "").replace("\\", "/").rsplit("/", 1)[-1].strip()
    if name in ("", ".", ".."):
        raise ValidationError(
            f"unusable filename: {filename!r}",
            code="missing_filename",
            user_message="Failed to retrieve file",
            details={"filename": filename},
        )
    return name


def write_replacing(path: Path, stream: BinaryIO | Iterable[bytes]) -> None:
    """Write stream to a temporary file beside path, then move it onto path."""
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as out:
            if hasattr(stream, "read"):
                shutil.copyfileobj(stream, out)
            else:
                for chunk in stream:
                    out.write(chunk)
        os.chmod(temp_name, PHOTO_FILE_MODE)
        os.replace(temp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(temp_name)
        raise


class PhotoStore:
    """Directory of photo files."""

    def __init__(self, photo_dir: str | Path, allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS):
        self.photo_dir = Path(photo_dir)
        self.allowed_extensions = tuple(ext.lower() for ext in allowed_extensions)

    def is_valid_photo(self, filename: str) -> bool:
        """Check filename against this store's allowed extensions."""
        return is_valid_photo(filename, self.allowed_extensions)

    def list_photo_files(self) -> list[str]:
        """
        Names of the photo files in the directory, sorted.

        Subdirectories, files with other extensions and symlinks pointing
        outside the directory are skipped.

        Raises:
            StorageError: If the directory cannot be read
        """
        try:
            with os.scandir(self.photo_dir) as entries:
                names = [
                    entry.name
                    for entry in entries
                    if not entry.is_dir()
                    and self.is_valid_photo(entry.name)
                    and (not entry.is_symlink() or self._contained_path(entry.name) is not None)
                ]
        except OSError as e:
            raise StorageError(
                f"failed to read directory {self.photo_dir}: {e}",
                code="photo_dir_unreadable",
                user_message="Failed to read photo directory",
                details={"photo_dir": str(self.photo_dir)},
                original_exception=e,
            ) from e

        return sorted(names)

    def get_photos_from_dir(self) -> list[Photo]:
        """
        Photo entries for every photo file, titled after the filename stem.

        Raises:
            StorageError: If the directory cannot be read
            NoPhotosFoundError: If the directory holds no photos
        """
        photos = [Photo.from_filename(name) for name in self.list_photo_files()]
        if not photos:
            raise NoPhotosFoundError(
                f"no photos found in the directory {self.photo_dir}",
                details={"photo_dir": str(self.photo_dir)},
            )
        return photos

    def _contained_path(self, name: str) -> Path | None:
        """Resolved <photo_dir>/<name>, or None when it is not strictly inside the directory."""
        root = self.photo_dir.resolve()
        try:
            candidate = (root / name).resolve()
        except (OSError, RuntimeError, ValueError):
            return None
        return candidate if root in candidate.parents else None

    def resolve_photo_path(self, name: str) -> Path:
        """
        Join name onto the photo directory, refusing paths that escape it.

        Symlinks are followed, so a link to a file elsewhere is refused too.

        Raises:
            ValidationError: If name is absolute or walks out of the directory
        """
        candidate = self._contained_path(name)
        if candidate is None:
            raise ValidationError(
                f"photo name escapes photo directory: {name!r}",
                code="invalid_photo_name",
                user_message="Invalid photo name",
                details={"name": name},
            )
        return candidate

    def get_photo_path(self, name: str) -> Path:
        """
        Path of an existing photo file.

        Raises:
            ValidationError: If name is empty or escapes the photo directory
            PhotoNotFoundError: If there is no such file
        """
        if not name:
            raise ValidationError(
                "photo not specified", code="photo_not_specified", user_message="Photo not specified"
            )

        path = self.resolve_photo_path(name)
        if not path.is_file():
            raise PhotoNotFoundError(f"photo not found: {name}", details={"name": name})
        return path

    def save_photo(self, filename: str, stream: BinaryIO | Iterable[bytes]) -> Path:
        """
        Write stream to <photo_dir>/<filename>, replacing any existing file.

        stream is either a binary file object or an iterable of byte chunks.
        The bytes go to a temporary file next to the target, which replaces
        the target only once the stream is exhausted; on failure the
        temporary file is removed and any existing photo is left as it was.

        Raises:
            ValidationError: If filename has a disallowed extension or escapes the directory
            StorageError: If writing fails
            requests.RequestException: If reading a download stream fails, unchanged
        """
        if not self.is_valid_photo(filename):
            raise ValidationError(
                f"invalid file type: {filename}",
                code="invalid_file_type",
                user_message="Invalid file type",
                details={"filename": filename},
            )

        path = self.resolve_photo_path(filename)
        try:
            write_replacing(path, stream)
        except requests.RequestException:
            # RequestException is an OSError; download_photo reports it as NetworkError
            raise
        except OSError as e:
            raise StorageError(
                f"failed to save photo {path}: {e}",
                code="photo_save_failed",
                user_message="Failed to save photo",
                details={"filename": filename},
                original_exception=e,
            ) from e

        logger.debug("photo_file_saved", path=str(path))
        return path

    def download_photo(self, url: str, timeout: float = 30.0) -> str:
        """
        Fetch a photo over HTTP into the photo directory.

        The file is named after the last segment of the URL path.

        Returns:
            The saved filename

        Raises:
            ValidationError: If the URL has no usable filename or a disallowed extension
            NetworkError: If the request fails or does not return 200
            StorageError: If writing fails
        """
        filename = unquote(PurePosixPath(urlparse(url).path).name)
        if not filename:
            raise ValidationError(
                f"invalid URL, cannot determine filename: {url}",
                code="invalid_url",
                details={"url": url},
            )
        if not self.is_valid_photo(filename):
            raise ValidationError(
                f"invalid file type: {filename}",
                code="invalid_file_type",
                user_message="Invalid file type",
                details={"url": url, "filename": filename},
            )

        try:
            response = requests.get(url, stream=True, timeout=timeout)
        except requests.RequestException as e:
            raise NetworkError(
                f"failed to download photo from {url}: {e}", details={"url": url}, original_exception=e
            ) from e

        with response:
            if response.status_code != 200:
                raise NetworkError(
                    f"failed to download photo from {url}: HTTP {response.status_code}",
                    code="download_bad_status",
                    details={"url": url, "status_code": response.status_code},
                )

            try:
                path = self.save_photo(filename, response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE))
            except requests.RequestException as e:
                raise NetworkError(
                    f"download from {url} interrupted: {e}", details={"url": url}, original_exception=e
                ) from e

        logger.info("photo_downloaded", url=url, filename=filename, path=str(path))
        return filename
