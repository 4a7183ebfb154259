"""
Command-line tasks for backpaws.

Run through the ``backpaws-tools`` console script, e.g.::

    backpaws-tools update-photos
    backpaws-tools add-photos --env-file prod.env
    backpaws-tools remove-entry cat.jpg
    backpaws-tools serve
"""

import os

from dotenv import load_dotenv
from invoke import Context, task
from invoke.exceptions import Exit

from ..config import GalleryConfig, get_config
from ..errors import BackPawsError, InputClosedError
from ..logging_config import configure_structured_logging, get_logger
from ..main import run_server
from ..services.photo_list import PhotoListStore
from ..services.photo_store import PhotoStore
from .interactive import (
    DirectorySource,
    PhotoSource,
    Prompter,
    RemoteSource,
    collect_photo_metadata,
    remove_photo_entry,
)

logger = get_logger(__name__)

ENV_FILE_HELP = "Path to the environment file. Default is '.env'."


def load_settings(env_file: str) -> GalleryConfig:
    """Load env_file (if present), set up logging and read the gallery settings."""
    if os.path.exists(env_file):
        load_dotenv(dotenv_path=env_file)
        get_config().clear_cache()
        env_loaded = True
    else:
        env_loaded = False

    configure_structured_logging()
    if env_loaded:
        logger.info("environment_loaded", env_file=env_file)
    else:
        logger.debug("environment_file_not_found", env_file=env_file)

    return GalleryConfig.from_env()


def run_collection(config: GalleryConfig, source: PhotoSource) -> None:
    """Collect metadata from source, turning failures into a non-zero exit."""
    store = PhotoListStore(config.photo_list_path)
    try:
        saved = collect_photo_metadata(store, source, Prompter())
    except InputClosedError as e:
        raise Exit(f"\nAborted, photo list not changed: {e}", code=1) from e
    except BackPawsError as e:
        raise Exit(f"Error: {e}", code=1) from e

    logger.info("metadata_task_finished", saved=len(saved))


@task(
    help={
        "include_listed": "Also prompt for photos that already have a photo list entry.",
        "env_file": ENV_FILE_HELP,
    }
)
def update_photos(c: Context, include_listed: bool = False, env_file: str = ".env"):
    """
    Describe the photos in the photo directory interactively.

    Photos that already have a photo list entry are skipped unless
    --include-listed is given.
    """
    config = load_settings(env_file)
    photo_store = PhotoStore(config.photo_dir, config.allowed_extensions)
    run_collection(config, DirectorySource(photo_store, skip_existing=not include_listed))


@task(help={"env_file": ENV_FILE_HELP})
def add_photos(c: Context, env_file: str = ".env"):
    """
    Download photos from URLs into the photo directory and describe them.
    """
    config = load_settings(env_file)
    if not config.photo_dir.is_dir():
        raise Exit(f"Photo directory {config.photo_dir} does not exist", code=1)

    photo_store = PhotoStore(config.photo_dir, config.allowed_extensions)
    run_collection(config, RemoteSource(photo_store, timeout=config.download_timeout))


@task(help={"filename": "Filename of the entry to remove.", "env_file": ENV_FILE_HELP})
def remove_entry(c: Context, filename: str, env_file: str = ".env"):
    """
    Remove a photo's entry from the photo list. The image file is kept.
    """
    config = load_settings(env_file)
    try:
        remove_photo_entry(PhotoListStore(config.photo_list_path), filename)
    except BackPawsError as e:
        raise Exit(f"Error: {e}", code=1) from e

    print(f"Removed {filename} from {config.photo_list_path}")


@task(help={"env_file": ENV_FILE_HELP})
def serve(c: Context, env_file: str = ".env"):
    """
    Start the gallery web server.
    """
    config = load_settings(env_file)
    code = run_server(config)
    if code:
        raise Exit(code=code)
