"""
Pytest configuration and fixtures for backpaws tests.
"""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

from backpaws.config import GalleryConfig, get_config
from backpaws.web.app import create_app


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def photo_dir(temp_dir: Path) -> Path:
    """Empty photo directory."""
    path = temp_dir / "photos"
    path.mkdir()
    return path


@pytest.fixture
def gallery_config(photo_dir: Path) -> GalleryConfig:
    """Gallery settings pointing at the temporary photo directory."""
    return GalleryConfig(photo_dir=photo_dir)


@pytest.fixture
def app(gallery_config: GalleryConfig) -> Flask:
    """Flask application serving the temporary photo directory."""
    application = create_app(gallery_config)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Test client for the application."""
    return app.test_client()


@pytest.fixture
def sample_image_data() -> bytes:
    """Provide sample image data for testing."""
    # Simple 1x1 pixel PNG image data
    return bytes.fromhex(
        "89504e470d0a1a0a0000000d4948445200000001000000010802000000907753de"
        "0000000c4944415408d763f8000000000100010000000000000049454e44ae426082"
    )


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Set up test environment variables."""
    monkeypatch.setenv("TESTING", "true")
    monkeypatch.setenv("ENVIRONMENT", "testing")
    # setenv first so values loaded from .env files during a test are undone too
    for key in ("PHOTO_DIR", "PHOTO_LIST_PATH", "STATIC_DIR", "MAX_UPLOAD_BYTES", "HOST", "PORT", "DOWNLOAD_TIMEOUT"):
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    get_config().clear_cache()
    yield
    get_config().clear_cache()
