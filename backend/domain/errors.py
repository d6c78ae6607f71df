"""
Error Handling Module

Defines domain exceptions and error categories for the blob store.
Domain exceptions are pure and have no external dependencies.
The HTTP layer maps categories to status codes and renders messages.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    INTERNAL = "internal"
    OTHER = "other"


# User-facing messages for the JSON API
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.NOT_FOUND: {
        "title": "File Not Found",
        "message": "Sorry, no file for you.",
        "action": "Check the key you were given, or upload the file again.",
    },
    ErrorCategory.EXPIRED: {
        "title": "File Expired",
        "message": "This file outlived its retention window and has been removed.",
        "action": "Upload the file again to get a fresh retention window.",
    },
    ErrorCategory.INTERNAL: {
        "title": "Internal Error",
        "message": "The storage backend failed while handling your request.",
        "action": "Please try again later.",
    },
    ErrorCategory.OTHER: {
        "title": "Request Failed",
        "message": "The request could not be completed.",
        "action": "Please check your input and try again.",
    },
}


# HTTP status codes per category
STATUS_CODES: Dict[ErrorCategory, int] = {
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.EXPIRED: 410,
    ErrorCategory.INTERNAL: 500,
    ErrorCategory.OTHER: 400,
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions are pure and have no external dependencies.
    They can optionally wrap original errors for context.
    """

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class BlobError(DomainError):
    """
    Base exception for blob store failures.

    Every subclass pins an ErrorCategory so callers can map the failure
    to a status code without inspecting messages.
    """

    category: ErrorCategory = ErrorCategory.OTHER

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.category]


class BlobNotFoundError(BlobError):
    """
    Raised when a key has no (non-empty) directory, or fails validation.
    """

    category = ErrorCategory.NOT_FOUND

    def __init__(self, key: Optional[str] = None, original_error: Exception = None):
        super().__init__("Sorry, no file for you.", original_error)
        self.key = key


class BlobExpiredError(BlobError):
    """Raised when a blob existed but its retention window reached zero."""

    category = ErrorCategory.EXPIRED

    def __init__(self, key: Optional[str] = None):
        super().__init__("This file has expired.")
        self.key = key


class StorageInternalError(BlobError):
    """
    Wraps an underlying filesystem failure (permission, I/O, disk full).

    The message carries the underlying cause for diagnostics.
    """

    category = ErrorCategory.INTERNAL

    def __init__(self, cause: Any, original_error: Exception = None):
        if original_error is None and isinstance(cause, Exception):
            original_error = cause
        super().__init__(f"Internal Error: {cause}", original_error)


class BlobStoreError(BlobError):
    """Free-form failure for conditions not otherwise categorized."""

    category = ErrorCategory.OTHER


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: Optional[int] = None,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for JSON API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details, included as "detail"
        context: Additional context information
        status_code: HTTP status code (defaults to the category's code)

    Returns:
        Tuple of (error_dict, status_code)
    """
    error_info = ERROR_MESSAGES.get(category, ERROR_MESSAGES[ErrorCategory.OTHER])
    body: Dict[str, Any] = {
        "error": category.value,
        "title": error_info["title"],
        "message": error_info["message"],
        "action": error_info["action"],
    }
    if technical_message:
        body["detail"] = technical_message
    if context:
        body["context"] = context

    if status_code is None:
        status_code = STATUS_CODES[category]
    return body, status_code
