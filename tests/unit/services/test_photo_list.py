"""
Unit tests for photo list persistence.
"""

import json
import threading
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from backpaws.errors import PhotoEntryNotFoundError, PhotoListError, PhotoListNotFoundError
from backpaws.models.photo import Photo, PhotoList
from backpaws.services.photo_list import (
    PhotoListStore,
    delete_photo,
    get_photo_list,
    update_or_insert_photo,
    update_or_insert_photos,
    write_photo_list,
)


class TestGetPhotoList:
    """Test cases for get_photo_list."""

    def test_reads_existing_file(self, temp_dir: Path):
        path = temp_dir / "photo_list.json"
        path.write_text(
            json.dumps(
                {
                    "path": "./photos",
                    "photos": [{"filename": "cat.jpg", "title": "Cat", "description": "A cat"}],
                }
            ),
            encoding="utf-8",
        )

        photo_list = get_photo_list(path)

        assert photo_list.path == "./photos"
        assert photo_list.photos == [Photo(filename="cat.jpg", title="Cat", description="A cat")]

    def test_missing_file(self, temp_dir: Path):
        """A missing file raises the not-found subclass."""
        with pytest.raises(PhotoListNotFoundError, match="cannot open photo list"):
            get_photo_list(temp_dir / "missing.json")

    def test_missing_file_is_photo_list_error(self, temp_dir: Path):
        with pytest.raises(PhotoListError):
            get_photo_list(temp_dir / "missing.json")

    def test_invalid_json(self, temp_dir: Path):
        path = temp_dir / "photo_list.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(PhotoListError, match="failed to decode photo list") as exc_info:
            get_photo_list(path)

        assert not isinstance(exc_info.value, PhotoListNotFoundError)
        assert exc_info.value.user_message == "Failed to retrieve photo list"
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_malformed_document(self, temp_dir: Path):
        path = temp_dir / "photo_list.json"
        path.write_text(json.dumps({"photos": [{"title": "no filename"}]}), encoding="utf-8")

        with pytest.raises(PhotoListError, match="failed to decode photo list"):
            get_photo_list(path)

    def test_directory_instead_of_file(self, temp_dir: Path):
        with pytest.raises(PhotoListError) as exc_info:
            get_photo_list(temp_dir)

        assert not isinstance(exc_info.value, PhotoListNotFoundError)


class TestWritePhotoList:
    """Test cases for write_photo_list."""

    def test_writes_tab_indented_json(self, temp_dir: Path):
        path = temp_dir / "photo_list.json"
        photo_list = PhotoList(photos=[Photo(filename="cat.jpg", title="Cat", description="A cat")])

        write_photo_list(path, photo_list)

        text = path.read_text(encoding="utf-8")
        assert text.endswith("\n")
        assert '\n\t"photos": [' in text
        assert json.loads(text) == {
            "path": "",
            "photos": [{"filename": "cat.jpg", "title": "Cat", "description": "A cat"}],
        }

    def test_overwrites_existing_file(self, temp_dir: Path):
        path = temp_dir / "photo_list.json"
        write_photo_list(path, PhotoList(photos=[Photo(filename="a.jpg"), Photo(filename="b.jpg")]))

        write_photo_list(path, PhotoList(photos=[Photo(filename="c.jpg")]))

        assert get_photo_list(path).photos == [Photo(filename="c.jpg")]

    def test_creates_parent_directories(self, temp_dir: Path):
        path = temp_dir / "nested" / "dir" / "photos.json"

        write_photo_list(path, PhotoList())

        assert path.is_file()

    def test_keeps_non_ascii_text(self, temp_dir: Path):
        path = temp_dir / "photo_list.json"
        write_photo_list(path, PhotoList(photos=[Photo(filename="neko.jpg", title="猫")]))

        assert "猫" in path.read_text(encoding="utf-8")
        assert get_photo_list(path).photos[0].title == "猫"

    def test_write_failure(self, temp_dir: Path):
        """Writing onto a directory path fails with PhotoListError."""
        target = temp_dir / "occupied"
        target.mkdir()

        with pytest.raises(PhotoListError, match="cannot write photo list") as exc_info:
            write_photo_list(target, PhotoList())

        assert exc_info.value.user_message == "Failed to update photo list"


class TestUpdateOrInsertPhoto:
    """Test cases for update_or_insert_photo."""

    def test_appends_to_empty_list(self):
        photo_list = PhotoList()
        photo = Photo(filename="cat.jpg", title="Cat", description="A cat")

        update_or_insert_photo(photo_list, photo)

        assert photo_list.photos == [photo]

    def test_same_filename_replaces_entry(self):
        """Second call with the same filename keeps the length and wins."""
        photo_list = PhotoList()
        update_or_insert_photo(photo_list, Photo(filename="cat.jpg", title="Cat", description="A cat"))

        update_or_insert_photo(photo_list, Photo(filename="cat.jpg", title="Tabby", description="Striped"))

        assert len(photo_list) == 1
        assert photo_list.photos[0] == Photo(filename="cat.jpg", title="Tabby", description="Striped")

    def test_replaces_in_place(self):
        photo_list = PhotoList(
            photos=[Photo(filename="a.jpg"), Photo(filename="b.jpg"), Photo(filename="c.jpg")]
        )

        update_or_insert_photo(photo_list, Photo(filename="b.jpg", title="B"))

        assert [p.filename for p in photo_list.photos] == ["a.jpg", "b.jpg", "c.jpg"]
        assert photo_list.photos[1].title == "B"

    def test_filenames_are_case_sensitive(self):
        photo_list = PhotoList(photos=[Photo(filename="cat.jpg")])

        update_or_insert_photo(photo_list, Photo(filename="CAT.jpg"))

        assert len(photo_list) == 2

    def test_update_or_insert_photos(self):
        photo_list = PhotoList(photos=[Photo(filename="a.jpg", title="old")])

        update_or_insert_photos(
            photo_list,
            [Photo(filename="b.jpg"), Photo(filename="a.jpg", title="new"), Photo(filename="b.jpg", title="B")],
        )

        assert photo_list.photos == [Photo(filename="a.jpg", title="new"), Photo(filename="b.jpg", title="B")]


class TestDeletePhoto:
    """Test cases for delete_photo."""

    def test_removes_matching_entry(self):
        photo_list = PhotoList(photos=[Photo(filename="a.jpg"), Photo(filename="b.jpg")])

        removed = delete_photo(photo_list, Photo(filename="a.jpg"))

        assert removed.filename == "a.jpg"
        assert photo_list.photos == [Photo(filename="b.jpg")]

    def test_accepts_filename(self):
        photo_list = PhotoList(photos=[Photo(filename="a.jpg")])

        delete_photo(photo_list, "a.jpg")

        assert photo_list.photos == []

    def test_not_found_leaves_list_unmodified(self):
        photos = [Photo(filename="a.jpg", title="A"), Photo(filename="b.jpg")]
        photo_list = PhotoList(photos=list(photos))

        with pytest.raises(PhotoEntryNotFoundError, match="photo with filename missing.jpg not found"):
            delete_photo(photo_list, Photo(filename="missing.jpg"))

        assert photo_list.photos == photos

    def test_not_found_on_empty_list(self):
        with pytest.raises(PhotoEntryNotFoundError) as exc_info:
            delete_photo(PhotoList(), "a.jpg")

        assert exc_info.value.filename == "a.jpg"
        assert exc_info.value.http_status == 404


class TestPhotoListStore:
    """Test cases for PhotoListStore."""

    def test_load_missing_file_is_empty(self, temp_dir: Path):
        store = PhotoListStore(temp_dir / "photo_list.json")

        with capture_logs() as logs:
            assert store.load() == PhotoList()

        assert [entry for entry in logs if entry["log_level"] != "debug"] == []
        assert not store.path.exists()

    def test_load_corrupt_file_raises(self, temp_dir: Path):
        path = temp_dir / "photo_list.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(PhotoListError):
            PhotoListStore(path).load()

    def test_upsert_creates_file(self, temp_dir: Path):
        store = PhotoListStore(temp_dir / "photo_list.json")

        store.upsert(Photo(filename="cat.jpg", title="Cat"))

        assert get_photo_list(store.path).photos == [Photo(filename="cat.jpg", title="Cat")]

    def test_upsert_keeps_path_field(self, temp_dir: Path):
        path = temp_dir / "photo_list.json"
        write_photo_list(path, PhotoList(path="./photos"))

        PhotoListStore(path).upsert(Photo(filename="cat.jpg"))

        assert get_photo_list(path).path == "./photos"

    def test_upsert_many(self, temp_dir: Path):
        store = PhotoListStore(temp_dir / "photo_list.json")
        store.upsert(Photo(filename="a.jpg", title="old"))

        store.upsert_many([Photo(filename="a.jpg", title="new"), Photo(filename="b.jpg")])

        assert store.load().photos == [Photo(filename="a.jpg", title="new"), Photo(filename="b.jpg")]

    def test_upsert_does_not_write_when_load_fails(self, temp_dir: Path):
        path = temp_dir / "photo_list.json"
        path.write_text("{broken", encoding="utf-8")

        with pytest.raises(PhotoListError):
            PhotoListStore(path).upsert(Photo(filename="cat.jpg"))

        assert path.read_text(encoding="utf-8") == "{broken"

    def test_remove(self, temp_dir: Path):
        store = PhotoListStore(temp_dir / "photo_list.json")
        store.upsert_many([Photo(filename="a.jpg"), Photo(filename="b.jpg")])

        removed = store.remove("a.jpg")

        assert removed.filename == "a.jpg"
        assert store.load().photos == [Photo(filename="b.jpg")]

    def test_remove_missing_entry_does_not_rewrite(self, temp_dir: Path):
        store = PhotoListStore(temp_dir / "photo_list.json")
        store.upsert(Photo(filename="a.jpg"))
        before = store.path.read_text(encoding="utf-8")

        with pytest.raises(PhotoEntryNotFoundError):
            store.remove("missing.jpg")

        assert store.path.read_text(encoding="utf-8") == before

    def test_modify_returns_change_result(self, temp_dir: Path):
        store = PhotoListStore(temp_dir / "photo_list.json")

        result = store.modify(lambda photo_list: len(photo_list))

        assert result == 0
        assert store.path.is_file()

    def test_concurrent_upserts_lose_nothing(self, temp_dir: Path):
        """Parallel writers each land their entry."""
        store = PhotoListStore(temp_dir / "photo_list.json")
        errors: list[Exception] = []

        def worker(index: int) -> None:
            try:
                for j in range(5):
                    store.upsert(Photo(filename=f"photo_{index}_{j}.jpg", title=str(index)))
            except Exception as e:  # pragma: no cover - reported below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        photo_list = store.load()
        assert len(photo_list) == 40
        assert len(photo_list.filenames()) == 40
