"""
Redirect Service

This service handles URL redirection logic:
1. Look the shortcode up (NotFound if absent)
2. Refuse expired codes (Expired, carrying the expiry instant)
3. Record the click
4. Hand the original URL back for the redirect

Expired codes are never counted as clicks and never redirect.
"""

from typing import Optional, TYPE_CHECKING

from shortener.core.exceptions import ShortcodeExpiredError
from shortener.core.expiry import format_timestamp, is_expired
from shortener.core.log_constants import LogLevel, LogPackage
from shortener.store.interface import MappingStore
from shortener.store.models import ClickDetails

if TYPE_CHECKING:
    from shortener.services.audit_logger import AuditLogger


class RedirectService:
    """
    Service for handling URL redirections.
    """

    def __init__(self, store: MappingStore, audit: Optional["AuditLogger"] = None):
        """
        Initialize the redirect service.

        Args:
            store: Application store
            audit: Optional AuditLogger receiving 'handler' entries
        """
        self.store = store
        self.audit = audit

    def _emit(self, level: LogLevel, message: str) -> None:
        if self.audit is not None:
            self.audit.emit(level, LogPackage.HANDLER, message)

    def resolve(self, shortcode: str, details: Optional[ClickDetails] = None) -> str:
        """
        Resolve a shortcode to its original URL, recording the click.

        Args:
            shortcode: The shortcode being visited
            details: Request metadata for the click event

        Returns:
            The original URL to redirect to

        Raises:
            ShortcodeNotFoundError: If the shortcode does not exist
            ShortcodeExpiredError: If the shortcode has expired
        """
        record = self.store.get(shortcode)

        if is_expired(record.expires_at, self.store.now()):
            self._emit(
                LogLevel.WARN,
                f"Expired shortcode accessed: {shortcode} (expired {format_timestamp(record.expires_at)})"
            )
            raise ShortcodeExpiredError(shortcode, record.expires_at)

        self.store.record_click(shortcode, details or ClickDetails())
        self._emit(LogLevel.INFO, f"Redirect successful for shortcode: {shortcode}")
        return record.original_url
