"""
Interactive photo metadata editing.

A photo source yields the photos to describe, a Prompter asks the user for
each photo's title and description, and the answers are saved to the photo
list in a single locked update.
"""

import sys
from collections.abc import Iterator
from typing import Protocol, TextIO

from ..errors import BackPawsError, InputClosedError
from ..logging_config import get_logger
from ..models.photo import Photo
from ..services.photo_list import PhotoListStore
from ..services.photo_store import PhotoStore

logger = get_logger(__name__)

DONE_KEYWORD = "done"


class Prompter:
    """Line-based question/answer over a pair of text streams."""

    def __init__(self, input_stream: TextIO | None = None, output_stream: TextIO | None = None):
        self.input_stream = input_stream or sys.stdin
        self.output_stream = output_stream or sys.stdout

    def say(self, message: str) -> None:
        print(message, file=self.output_stream)

    def ask(self, question: str) -> str:
        """
        Print question and return the next line without its newline.

        Raises:
            InputClosedError: If the input stream is exhausted
        """
        self.output_stream.write(question)
        self.output_stream.flush()

        line = self.input_stream.readline()
        if not line:
            raise InputClosedError(f"input ended while waiting for: {question.strip()}")
        return line.rstrip("\r\n")


class PhotoSource(Protocol):
    """Produces photos to collect metadata for."""

    def photos(self, prompter: Prompter, known_filenames: set[str]) -> Iterator[Photo]: ...


class DirectorySource:
    """Photos already in the photo directory."""

    def __init__(self, photo_store: PhotoStore, skip_existing: bool = True):
        self.photo_store = photo_store
        self.skip_existing = skip_existing

    def photos(self, prompter: Prompter, known_filenames: set[str]) -> Iterator[Photo]:
        for photo in self.photo_store.get_photos_from_dir():
            if self.skip_existing and photo.filename in known_filenames:
                logger.debug("photo_already_listed", filename=photo.filename)
                continue
            yield photo


class RemoteSource:
    """Photos fetched from URLs typed in by the user."""

    def __init__(self, photo_store: PhotoStore, timeout: float = 30.0):
        self.photo_store = photo_store
        self.timeout = timeout

    def photos(self, prompter: Prompter, known_filenames: set[str]) -> Iterator[Photo]:
        prompter.say(f"Enter photo URLs one by one. Type '{DONE_KEYWORD}' when finished:")
        downloaded: list[Photo] = []
        while True:
            url = prompter.ask("Enter photo URL: ").strip()
            if url == DONE_KEYWORD:
                break
            if not url:
                continue

            try:
                filename = self.photo_store.download_photo(url, timeout=self.timeout)
            except BackPawsError as e:
                prompter.say(f"Error downloading photo from {url}: {e}")
                continue

            downloaded.append(Photo.from_filename(filename))

        # Metadata questions come after the whole URL list, as one batch
        yield from downloaded


def describe_photo(prompter: Prompter, photo: Photo, number: int) -> Photo:
    """Ask for a title (blank keeps the default) and a description."""
    title = prompter.ask(f"Enter title for photo {number} ({photo.filename}) [{photo.title}]: ").strip()
    description = prompter.ask(f"Enter description for photo {number} ({title or photo.title}): ")
    return Photo(filename=photo.filename, title=title or photo.title, description=description)


def collect_photo_metadata(store: PhotoListStore, source: PhotoSource, prompter: Prompter) -> list[Photo]:
    """
    Prompt for metadata of every photo the source yields and save it.

    Nothing is written when the input ends early.

    Returns:
        The photos that were saved

    Raises:
        InputClosedError: If the input stream ends before all answers are read
        PhotoListError: If the photo list cannot be read or written
    """
    known_filenames = store.load().filenames()

    described: list[Photo] = []
    for number, photo in enumerate(source.photos(prompter, known_filenames), start=1):
        described.append(describe_photo(prompter, photo, number))

    if not described:
        prompter.say("No new photos to describe.")
        return []

    store.upsert_many(described)
    prompter.say("Photo list updated successfully!")
    logger.info("photo_metadata_collected", count=len(described), path=str(store.path))
    return described


def remove_photo_entry(store: PhotoListStore, filename: str) -> Photo:
    """
    Remove a photo's list entry; the image file stays.

    Raises:
        PhotoEntryNotFoundError: If the photo list has no such entry
    """
    return store.remove(filename)
