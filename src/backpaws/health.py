"""
Health checks for backpaws, served as JSON at /health.

The application is healthy when the photo directory can be listed and the
photo list is either absent or decodes cleanly.
"""

import os
import platform
import time
from typing import Any

from backpaws import __version__
from backpaws.config import GalleryConfig, get_environment
from backpaws.errors import BackPawsError
from backpaws.logging_config import get_logger
from backpaws.services.photo_list import get_photo_list
from backpaws.services.photo_store import PhotoStore

logger = get_logger(__name__)

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"


def check_result(status: str, message: str, **extra: Any) -> dict[str, Any]:
    return {"status": status, "message": message, "timestamp": time.time(), **extra}


def check_photo_directory_health(config: GalleryConfig) -> dict[str, Any]:
    """Photo directory exists, is a directory and can be listed."""
    photo_dir = config.photo_dir

    if not photo_dir.exists():
        return check_result(UNHEALTHY, f"Photo directory {photo_dir} does not exist")
    if not photo_dir.is_dir():
        return check_result(UNHEALTHY, f"Photo directory {photo_dir} is not a directory")

    try:
        photo_count = len(PhotoStore(photo_dir, config.allowed_extensions).list_photo_files())
    except BackPawsError as e:
        return check_result(UNHEALTHY, f"Photo directory unreadable: {e}")

    return check_result(
        HEALTHY,
        "Photo directory is readable",
        photo_dir=str(photo_dir),
        photo_count=photo_count,
        writable=os.access(photo_dir, os.W_OK),
    )


def check_photo_list_health(config: GalleryConfig) -> dict[str, Any]:
    """Photo list is missing (nothing uploaded yet) or valid JSON."""
    path = config.photo_list_path
    if not path.exists():
        return check_result(HEALTHY, "Photo list not created yet", path=str(path), entries=0)

    try:
        entries = len(get_photo_list(path))
    except BackPawsError as e:
        return check_result(UNHEALTHY, f"Photo list unreadable: {e}", path=str(path))

    return check_result(HEALTHY, "Photo list is readable", path=str(path), entries=entries)


def get_application_info() -> dict[str, Any]:
    return {
        "name": "backpaws",
        "version": __version__,
        "environment": get_environment(),
        "python_version": platform.python_version(),
    }


def perform_health_check(config: GalleryConfig) -> dict[str, Any]:
    """
    Run every check and summarise.

    Returns:
        Dict with ``status``, ``timestamp``, ``duration_ms``, ``application``,
        per-check results under ``checks`` and the names of failing checks
        under ``unhealthy_services``
    """
    start_time = time.perf_counter()

    checks = {
        "photo_directory": check_photo_directory_health(config),
        "photo_list": check_photo_list_health(config),
    }
    unhealthy_services = [name for name, result in checks.items() if result["status"] != HEALTHY]
    status = UNHEALTHY if unhealthy_services else HEALTHY
    duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

    if unhealthy_services:
        logger.warning("health_check_failed", unhealthy_services=unhealthy_services, duration_ms=duration_ms)
    else:
        logger.debug("health_check_passed", duration_ms=duration_ms)

    return {
        "status": status,
        "timestamp": time.time(),
        "duration_ms": duration_ms,
        "application": get_application_info(),
        "checks": checks,
        "unhealthy_services": unhealthy_services,
    }
