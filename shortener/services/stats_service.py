"""
Statistics Service

This service handles retrieving statistics for short URLs.

Stats are served regardless of expiry: an expired code keeps its full click
history, and the response carries an explicit isExpired flag instead.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

from shortener.core.expiry import format_timestamp, is_expired
from shortener.core.log_constants import LogLevel, LogPackage
from shortener.store.interface import MappingStore
from shortener.store.models import ClickEvent

if TYPE_CHECKING:
    from shortener.services.audit_logger import AuditLogger

DIRECT_REFERRER = "Direct"
UNKNOWN_VALUE = "Unknown"


def present_click(click: ClickEvent) -> Dict[str, str]:
    """Shape one stored click event for API consumers."""
    return {
        "timestamp": format_timestamp(click.timestamp),
        "referrer": click.referrer or DIRECT_REFERRER,
        "userAgent": click.user_agent or UNKNOWN_VALUE,
        "ipAddress": click.source_address or UNKNOWN_VALUE,
        "location": click.approximate_location or UNKNOWN_VALUE,
    }


class StatsService:
    """
    Service for retrieving URL statistics.

    Combines the stored record, the expiry policy and the click log.
    """

    def __init__(self, store: MappingStore, audit: Optional["AuditLogger"] = None):
        """
        Initialize the stats service.

        Args:
            store: Application store
            audit: Optional AuditLogger receiving 'controller' entries
        """
        self.store = store
        self.audit = audit

    def get_stats(self, shortcode: str) -> Dict[str, Any]:
        """
        Get comprehensive statistics for a short URL.

        Returns:
            Dictionary with statistics:
            - shortcode, originalUrl, createdAt, expiresAt
            - isExpired: whether the code has lapsed
            - totalClicks: number of recorded redirects
            - clickHistory: every click in the order it was recorded

        Raises:
            ShortcodeNotFoundError: If the shortcode does not exist
        """
        record = self.store.get(shortcode)
        clicks = self.store.get_analytics(shortcode)

        stats = {
            "shortcode": record.shortcode,
            "originalUrl": record.original_url,
            "createdAt": format_timestamp(record.created_at),
            "expiresAt": format_timestamp(record.expires_at),
            "isExpired": is_expired(record.expires_at, self.store.now()),
            "totalClicks": len(clicks),
            "clickHistory": [present_click(click) for click in clicks],
        }

        if self.audit is not None:
            self.audit.emit(
                LogLevel.INFO,
                LogPackage.CONTROLLER,
                f"Stats retrieved successfully for shortcode: {shortcode}"
            )
        return stats
