"""
Store Abstraction Interface

This module defines the contract of the mapping & analytics store: the single
authority of record for shortcode -> URL mappings and for the append-only
click log of each shortcode.

The interface allows swapping the in-memory implementation for another backend
without touching the allocator or the services built on top of it.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from shortener.store.models import ClickDetails, ClickEvent, UrlRecord


class MappingStore(ABC):
    """
    Abstract base class for mapping & analytics stores.

    Every operation must be safe to call concurrently. Implementations must
    guarantee that for one shortcode the insert in ``put`` is a
    compare-and-insert: two concurrent puts of the same key cannot both succeed.
    """

    @abstractmethod
    def now(self) -> datetime:
        """
        Current time according to the store clock (timezone-aware UTC).

        Click timestamps, creation times and expiry checks all use this clock.
        """
        pass

    @abstractmethod
    def exists(self, shortcode: str) -> bool:
        """
        Check whether a record is present for the shortcode.

        Presence, not expiry, decides this: an expired record still exists.
        """
        pass

    @abstractmethod
    def put(self, shortcode: str, record: UrlRecord) -> None:
        """
        Insert a new record and an empty click log for it.

        Args:
            shortcode: The key to insert
            record: The record to store

        Raises:
            ShortcodeAlreadyExistsError: If the key is already present
        """
        pass

    @abstractmethod
    def get(self, shortcode: str) -> UrlRecord:
        """
        Return the stored record without judging expiry.

        Raises:
            ShortcodeNotFoundError: If no record exists for the key
        """
        pass

    @abstractmethod
    def record_click(self, shortcode: str, details: ClickDetails) -> ClickEvent:
        """
        Append a click event stamped with the store clock.

        Expired records are not rejected here; blocking redirects on expired
        codes is the caller's decision.

        Raises:
            ShortcodeNotFoundError: If no record exists for the key
        """
        pass

    @abstractmethod
    def get_analytics(self, shortcode: str) -> List[ClickEvent]:
        """
        Return the click events of a shortcode in insertion order.

        Returns an empty list when the key has no clicks (or does not exist;
        callers check existence first through ``get``).
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""
        pass
