"""
URL Shortening Service

This service handles the business logic of creating short URLs:
- Validating the target URL
- Delegating shortcode selection and storage to the ShortcodeAllocator
- Building the public short link

Design Decisions:
- URL validation happens here, before the allocator runs; the allocator
  assumes a well-formed absolute URL
- Validity and shortcode rules are enforced by the allocator so that every
  caller of allocate() gets the same checks
"""

from typing import Optional, TYPE_CHECKING

from shortener.core.exceptions import InvalidURLError
from shortener.core.log_constants import LogLevel, LogPackage
from shortener.core.setting import settings
from shortener.core.validators import is_valid_url
from shortener.services.shortcode_allocator import ShortcodeAllocator
from shortener.store.models import UrlRecord

if TYPE_CHECKING:
    from shortener.services.audit_logger import AuditLogger


def build_short_link(shortcode: str, base_url: str = settings.BASE_URL) -> str:
    return f"{base_url.rstrip('/')}/{shortcode}"


class URLShorteningService:
    """
    Core business logic for URL shortening.

    Handles URL validation and delegates code allocation to the allocator.
    Separated from API layer for testability and maintainability.
    """

    def __init__(self, allocator: ShortcodeAllocator, audit: Optional["AuditLogger"] = None):
        """
        Initialize the URL shortening service.

        Args:
            allocator: Shortcode allocator bound to the application store
            audit: Optional AuditLogger receiving 'controller' entries
        """
        self.allocator = allocator
        self.audit = audit

    def _emit(self, level: LogLevel, message: str) -> None:
        if self.audit is not None:
            self.audit.emit(level, LogPackage.CONTROLLER, message)

    def create_short_url(
        self,
        original_url: str,
        validity_minutes: Optional[int] = None,
        shortcode: Optional[str] = None
    ) -> UrlRecord:
        """
        Create a new short URL.

        Args:
            original_url: The long URL to shorten
            validity_minutes: Lifetime in minutes (defaults to 30)
            shortcode: Optional custom shortcode

        Returns:
            The stored UrlRecord

        Raises:
            InvalidURLError: If URL format is invalid
            InvalidValidityError: If validity is not a positive integer
            InvalidShortcodeFormatError: If the custom shortcode is malformed
            ShortcodeCollisionError: If the shortcode is already taken
            ShortcodeGenerationError: If no free shortcode could be generated
        """
        self._emit(LogLevel.INFO, "Processing create short URL request")

        if not is_valid_url(original_url):
            self._emit(LogLevel.WARN, f"Invalid URL format: {original_url}")
            raise InvalidURLError(
                original_url,
                reason="Invalid URL format. URL must use http:// or https:// and have a valid domain"
            )

        return self.allocator.allocate(
            original_url,
            validity_minutes=validity_minutes,
            shortcode=shortcode,
        )
