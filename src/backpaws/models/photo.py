"""
Photo models for backpaws application.

This module contains the Photo and PhotoList dataclasses that represent
the photo list JSON document kept next to the images.
"""

from dataclasses import dataclass, field
from pathlib import PurePath


@dataclass
class Photo:
    """
    Metadata for a single photo file.

    The filename is the key: it matches a file in the photo directory and is
    unique within a PhotoList.
    """

    filename: str
    title: str = ""
    description: str = ""

    @classmethod
    def from_filename(cls, filename: str) -> "Photo":
        """
        Create a Photo whose title defaults to the filename without extension.

        Args:
            filename: Name of the photo file

        Returns:
            New Photo instance with an empty description
        """
        return cls(filename=filename, title=PurePath(filename).stem)

    def to_dict(self) -> dict:
        """Convert Photo to its JSON representation."""
        return {
            "filename": self.filename,
            "title": self.title,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Photo":
        """
        Create Photo from a decoded JSON object.

        Raises:
            ValueError: If data is not an object or has no filename
        """
        if not isinstance(data, dict):
            raise ValueError(f"photo entry must be an object, got {type(data).__name__}")
        if "filename" not in data:
            raise ValueError("photo entry has no filename")

        return cls(
            filename=str(data["filename"]),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
        )


@dataclass
class PhotoList:
    """
    Ordered collection of Photo entries persisted as one JSON document.

    The list is independent of the photo directory: it may reference files
    that are gone and omit files that exist.
    """

    path: str = ""
    photos: list[Photo] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.photos)

    def find(self, filename: str) -> Photo | None:
        """Return the entry for filename, or None."""
        for photo in self.photos:
            if photo.filename == filename:
                return photo
        return None

    def filenames(self) -> set[str]:
        """Filenames that have an entry."""
        return {photo.filename for photo in self.photos}

    def to_dict(self) -> dict:
        """Convert PhotoList to its JSON representation."""
        return {
            "path": self.path,
            "photos": [photo.to_dict() for photo in self.photos],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PhotoList":
        """
        Create PhotoList from a decoded JSON document.

        A missing or null ``photos`` value is an empty list.

        Raises:
            ValueError: If the document or one of its entries is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"photo list must be an object, got {type(data).__name__}")

        raw_photos = data.get("photos") or []
        if not isinstance(raw_photos, list):
            raise ValueError("photo list 'photos' must be an array")

        return cls(
            path=str(data.get("path") or ""),
            photos=[Photo.from_dict(item) for item in raw_photos],
        )
