"""
Error types and classification for backpaws.

Every failure the application reports is a BackPawsError. Each subclass
fixes a category, a severity, an HTTP status and a short generic message
that is safe to show to clients; the detailed message and the underlying
exception only go to the log. ErrorHandler files stray exceptions under the
closest category for logging and counting; clients get a plain 500 for them.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

import requests

from backpaws.logging_config import get_logger, log_error

logger = get_logger(__name__)


class ErrorCategory(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORAGE = "storage"
    PHOTO_LIST = "photo_list"
    NETWORK = "network"
    INPUT = "input"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorInfo:
    """Snapshot of a BackPawsError for responses and logs."""

    category: ErrorCategory
    severity: ErrorSeverity
    code: str
    message: str
    user_message: str
    http_status: int
    details: dict[str, Any]
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.__dict__)
        data["category"] = self.category.value
        data["severity"] = self.severity.value
        data["timestamp"] = self.timestamp.isoformat()
        return data


class BackPawsError(Exception):
    """
    Base exception for backpaws.

    Subclasses set the class attributes below; any of them can be
    overridden per instance through the keyword arguments. The error is
    logged as soon as it is created, at WARNING for LOW severity and at
    ERROR otherwise.
    """

    category = ErrorCategory.UNKNOWN
    severity = ErrorSeverity.MEDIUM
    code = "unknown_error"
    user_message = "Internal server error"
    http_status = 500

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        code: str | None = None,
        user_message: str | None = None,
        http_status: int | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(message)
        if category is not None:
            self.category = category
            if code is None:
                code = f"{category.value}_error"
        if severity is not None:
            self.severity = severity
        if code is not None:
            self.code = code
        if user_message is not None:
            self.user_message = user_message
        if http_status is not None:
            self.http_status = http_status
        self.details = details or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now()

        if original_exception is not None:
            self.__cause__ = original_exception

        self._log()

    def _log(self) -> None:
        context = {"category": self.category.value, "severity": self.severity.value, "code": self.code, **self.details}
        if self.original_exception is not None:
            context["exc_info"] = self.original_exception

        level = logging.WARNING if self.severity is ErrorSeverity.LOW else logging.ERROR
        log_error(self, context, level=level)

    def get_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            category=self.category,
            severity=self.severity,
            code=self.code,
            message=str(self),
            user_message=self.user_message,
            http_status=self.http_status,
            details=self.details,
            timestamp=self.timestamp,
        )


class ValidationError(BackPawsError):
    """Client input that cannot be accepted."""

    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.LOW
    code = "validation_failed"
    user_message = "Invalid request"
    http_status = 400


class PhotoNotFoundError(BackPawsError):
    """Requested photo file does not exist in the photo directory."""

    category = ErrorCategory.NOT_FOUND
    severity = ErrorSeverity.LOW
    code = "photo_not_found"
    user_message = "Photo not found"
    http_status = 404


class StorageError(BackPawsError):
    """Reading or writing photo files failed."""

    category = ErrorCategory.STORAGE
    severity = ErrorSeverity.HIGH
    code = "storage_error"
    user_message = "Failed to access photo storage"


class NoPhotosFoundError(StorageError):
    code = "no_photos_found"
    severity = ErrorSeverity.MEDIUM
    user_message = "No photos found in the directory"


class PhotoListError(BackPawsError):
    """Reading, decoding or writing the photo list failed."""

    category = ErrorCategory.PHOTO_LIST
    severity = ErrorSeverity.HIGH
    code = "photo_list_error"
    user_message = "Failed to access photo list"


class PhotoListNotFoundError(PhotoListError):
    """The photo list file does not exist yet; callers usually treat it as empty."""

    severity = ErrorSeverity.LOW
    code = "photo_list_missing"


class PhotoEntryNotFoundError(BackPawsError):
    """No photo list entry has the requested filename."""

    category = ErrorCategory.NOT_FOUND
    severity = ErrorSeverity.LOW
    code = "photo_entry_not_found"
    user_message = "Photo entry not found"
    http_status = 404

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"photo with filename {filename} not found", details={"filename": filename})


class NetworkError(BackPawsError):
    """Fetching a remote photo failed."""

    category = ErrorCategory.NETWORK
    code = "network_error"
    user_message = "Failed to download photo"
    http_status = 502


class InputClosedError(BackPawsError):
    """The interactive input ended before all answers were read."""

    category = ErrorCategory.INPUT
    severity = ErrorSeverity.HIGH
    code = "input_closed"
    user_message = "Failed to read input"


UNEXPECTED_ERROR_OVERRIDES: dict[str, Any] = {
    "severity": ErrorSeverity.HIGH,
    "user_message": BackPawsError.user_message,
    "http_status": 500,
}


class ErrorHandler:
    """
    Classifies unexpected exceptions and counts errors by code.

    Classification only picks the category and code that are logged and
    counted. An exception that is not a BackPawsError is a bug, so clients
    always get a 500 with a generic message for it.
    """

    # Checked in order; JSONDecodeError is a ValueError and FileNotFoundError an OSError
    CLASSIFICATION: list[tuple[type[Exception] | tuple[type[Exception], ...], type[BackPawsError]]] = [
        (json.JSONDecodeError, PhotoListError),
        (requests.RequestException, NetworkError),
        (FileNotFoundError, PhotoNotFoundError),
        (OSError, StorageError),
        (ValueError, ValidationError),
    ]

    FREQUENT_ERROR_INTERVAL = 10

    def __init__(self) -> None:
        self.error_counts: dict[str, int] = {}

    def handle_error(self, error: Exception, context: dict[str, Any] | None = None) -> ErrorInfo:
        """
        Describe error, classifying it first unless it is already a BackPawsError.

        Args:
            error: Exception to handle
            context: Extra details recorded with a classified error

        Returns:
            ErrorInfo for the (possibly classified) error
        """
        if not isinstance(error, BackPawsError):
            error = self.classify(error, context or {})

        error_info = error.get_error_info()
        self._track_error(error_info.code)
        return error_info

    def classify(self, error: Exception, context: dict[str, Any]) -> BackPawsError:
        details = {"original_type": type(error).__name__, **context}
        error_class = next(
            (target for exception_types, target in self.CLASSIFICATION if isinstance(error, exception_types)),
            BackPawsError,
        )
        return error_class(str(error), details=details, original_exception=error, **UNEXPECTED_ERROR_OVERRIDES)

    def _track_error(self, error_code: str) -> None:
        count = self.error_counts.get(error_code, 0) + 1
        self.error_counts[error_code] = count
        if count % self.FREQUENT_ERROR_INTERVAL == 0:
            logger.warning("frequent_error_detected", error_code=error_code, count=count)


error_handler = ErrorHandler()


def handle_error(error: Exception, context: dict[str, Any] | None = None) -> ErrorInfo:
    """Classify and count error with the shared ErrorHandler."""
    return error_handler.handle_error(error, context)
