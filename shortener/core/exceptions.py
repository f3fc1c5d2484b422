"""
Custom Exceptions

This module defines custom exceptions for better error handling
and more specific error messages.

Every exception carries the HTTP status and the machine-readable error code
used when it reaches the API boundary, so endpoints stay thin and the
application-level exception handler renders them uniformly as
``{"error": ..., "code": ...}``.
"""

from datetime import datetime
from typing import Any, Dict

from shortener.core.expiry import format_timestamp


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Render the error body returned to API consumers."""
        return {"error": self.message, "code": self.error_code}


class InvalidURLError(URLShortenerException):
    """Raised when URL validation fails."""

    status_code = 400
    error_code = "INVALID_URL_FORMAT"

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class InvalidValidityError(URLShortenerException):
    """Raised when the requested validity is not a positive integer."""

    status_code = 400
    error_code = "INVALID_VALIDITY"

    def __init__(self, validity: Any):
        self.validity = validity
        super().__init__("Validity must be a positive integer representing minutes")


class InvalidShortcodeFormatError(URLShortenerException):
    """Raised when a caller-supplied shortcode is malformed."""

    status_code = 400
    error_code = "INVALID_SHORTCODE_FORMAT"

    def __init__(self, shortcode: str, min_length: int = 3, max_length: int = 20):
        self.shortcode = shortcode
        super().__init__(
            f"Shortcode must be alphanumeric and between {min_length}-{max_length} characters"
        )


class ShortcodeCollisionError(URLShortenerException):
    """Raised when the requested shortcode is already taken."""

    status_code = 409
    error_code = "SHORTCODE_COLLISION"

    def __init__(self, shortcode: str):
        self.shortcode = shortcode
        super().__init__("Shortcode already exists. Please choose a different one.")


class ShortcodeGenerationError(URLShortenerException):
    """Raised when no free shortcode was found within the attempt budget."""

    status_code = 500
    error_code = "SHORTCODE_GENERATION_FAILED"

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__("Unable to generate unique shortcode. Please try again.")


class ShortcodeNotFoundError(URLShortenerException):
    """Raised when a shortcode is not found in the store."""

    status_code = 404
    error_code = "SHORTCODE_NOT_FOUND"

    def __init__(self, shortcode: str):
        self.shortcode = shortcode
        super().__init__(f"Shortcode '{shortcode}' not found")


class ShortcodeExpiredError(URLShortenerException):
    """Raised when a redirect targets a shortcode past its expiry."""

    status_code = 410
    error_code = "URL_EXPIRED"

    def __init__(self, shortcode: str, expires_at: datetime):
        self.shortcode = shortcode
        self.expires_at = expires_at
        super().__init__("This short URL has expired")

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["expiredAt"] = format_timestamp(self.expires_at)
        return body


class ShortcodeAlreadyExistsError(URLShortenerException):
    """
    Raised by the store when an insert targets a key that is already present.

    The allocator translates this into ShortcodeCollisionError.
    """

    status_code = 409
    error_code = "SHORTCODE_COLLISION"

    def __init__(self, shortcode: str):
        self.shortcode = shortcode
        super().__init__(f"Shortcode '{shortcode}' already exists")


class AuditLogError(URLShortenerException):
    """Raised when an audit entry is invalid or cannot be delivered."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Audit log error: {message}")
