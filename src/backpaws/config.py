"""
Settings for backpaws.

Everything is read from environment variables (a ``.env`` file can seed
them, see ``backpaws.cli.tasks``). ``Config`` is the low-level cached
reader; ``GalleryConfig`` is the typed settings object the web app and the
command-line tools are built from.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PHOTO_DIR = "./photos"
DEFAULT_PHOTO_LIST_NAME = "photo_list.json"
DEFAULT_ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")
DEFAULT_MAX_UPLOAD_BYTES = 10 << 20  # 10 MiB
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_DOWNLOAD_TIMEOUT = 30.0

PACKAGE_STATIC_DIR = Path(__file__).parent / "static"

TRUTHY_VALUES = ("true", "1", "yes", "on")


def _cast(value: Any, cast_type: type) -> Any:
    if cast_type is bool and isinstance(value, str):
        return value.strip().lower() in TRUTHY_VALUES
    return cast_type(value)


class Config:
    """
    Environment variable reader with type casting.

    Values are cached per key and type until clear_cache() is called, so a
    ``.env`` file loaded later only takes effect after clearing.
    """

    def __init__(self) -> None:
        self._cache: dict[tuple[str, type], Any] = {}

    def get(self, key: str, default: Any = None, cast_type: type = str) -> Any:
        """
        Value of environment variable key cast to cast_type.

        A missing variable, or one that fails to cast, gives default.
        """
        cache_key = (key, cast_type)
        if cache_key in self._cache:
            return self._cache[cache_key]

        raw = os.environ.get(key)
        if raw is None:
            value = default
        else:
            try:
                value = _cast(raw, cast_type)
            except (TypeError, ValueError):
                logger.warning("config_value_invalid", key=key, value=raw, expected=cast_type.__name__)
                value = default

        self._cache[cache_key] = value
        return value

    def environment(self) -> str:
        return str(self.get("ENVIRONMENT", "development")).lower()

    def clear_cache(self) -> None:
        self._cache.clear()


_config: Config | None = None


def get_config() -> Config:
    """Process-wide Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_environment() -> str:
    return get_config().environment()


@dataclass(frozen=True)
class GalleryConfig:
    """
    Settings shared by the web application and the command-line tools.

    Paths are kept as given (relative paths resolve against the working
    directory at the time they are used).
    """

    photo_dir: Path = Path(DEFAULT_PHOTO_DIR)
    photo_list_path: Path | None = None
    static_dir: Path = PACKAGE_STATIC_DIR
    allowed_extensions: tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "photo_dir", Path(self.photo_dir))
        object.__setattr__(self, "static_dir", Path(self.static_dir))
        if self.photo_list_path is None:
            object.__setattr__(self, "photo_list_path", self.photo_dir / DEFAULT_PHOTO_LIST_NAME)
        else:
            object.__setattr__(self, "photo_list_path", Path(self.photo_list_path))
        object.__setattr__(
            self, "allowed_extensions", tuple(ext.lower() for ext in self.allowed_extensions)
        )

    @property
    def upload_template_path(self) -> Path:
        """Location of the static upload form."""
        return self.static_dir / "upload.html"

    @classmethod
    def from_env(cls) -> "GalleryConfig":
        """Build configuration from environment variables.

        Environment Variables:
            PHOTO_DIR: Directory holding the photos (default ./photos)
            PHOTO_LIST_PATH: Photo list JSON file (default <PHOTO_DIR>/photo_list.json)
            STATIC_DIR: Directory holding upload.html (default: bundled static files)
            MAX_UPLOAD_BYTES: Maximum accepted upload request size
            HOST, PORT: Address the server binds to
            DOWNLOAD_TIMEOUT: Seconds to wait on remote photo downloads
        """
        config = get_config()
        photo_dir = Path(config.get("PHOTO_DIR", DEFAULT_PHOTO_DIR))
        photo_list_path = config.get("PHOTO_LIST_PATH")

        gallery_config = cls(
            photo_dir=photo_dir,
            photo_list_path=Path(photo_list_path) if photo_list_path else None,
            static_dir=Path(config.get("STATIC_DIR", str(PACKAGE_STATIC_DIR))),
            max_upload_bytes=config.get("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES, int),
            host=config.get("HOST", DEFAULT_HOST),
            port=config.get("PORT", DEFAULT_PORT, int),
            download_timeout=config.get("DOWNLOAD_TIMEOUT", DEFAULT_DOWNLOAD_TIMEOUT, float),
        )

        logger.debug(
            "gallery_config_loaded",
            photo_dir=str(gallery_config.photo_dir),
            photo_list_path=str(gallery_config.photo_list_path),
            static_dir=str(gallery_config.static_dir),
        )
        return gallery_config
