"""
In-Memory Mapping & Analytics Store

This module implements the MappingStore interface with two dictionaries held
for the lifetime of the process:
- records: shortcode -> UrlRecord
- clicks: shortcode -> list of ClickEvent (append-only)

Concurrency:
- Each shortcode has its own lock; the compare-and-insert in put() and the
  appends in record_click() run under the lock of their key only
- The per-key lock table is guarded by a short-lived registry lock that is
  held only while looking up or creating a lock object
- Reads of a single dictionary entry need no lock; returned values are frozen
  models and fresh lists, so callers cannot mutate stored state
- Operations never await, so plain threading locks serve both the event loop
  and worker threads

Nothing is evicted: expired records stay readable for stats until restart.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from shortener.core.exceptions import ShortcodeAlreadyExistsError, ShortcodeNotFoundError
from shortener.core.expiry import utc_now
from shortener.core.log_constants import LogLevel, LogPackage
from shortener.store.interface import MappingStore
from shortener.store.models import ClickDetails, ClickEvent, UrlRecord

if TYPE_CHECKING:
    from shortener.services.audit_logger import AuditLogger

logger = logging.getLogger(__name__)


class InMemoryMappingStore(MappingStore):
    """
    Process-local store with per-shortcode locking.

    Constructed once at application start and shared by the allocator and
    all request handlers.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        audit: Optional["AuditLogger"] = None
    ):
        """
        Initialize an empty store.

        Args:
            clock: Source of the current UTC time (injectable for tests)
            audit: Optional AuditLogger receiving 'db' entries
        """
        self._clock = clock
        self._audit = audit

        self._records: Dict[str, UrlRecord] = {}
        self._clicks: Dict[str, List[ClickEvent]] = {}

        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

        self._emit(LogLevel.INFO, "URL storage initialized successfully")

    def _emit(self, level: LogLevel, message: str) -> None:
        if self._audit is not None:
            self._audit.emit(level, LogPackage.DB, message)

    def _lock_for(self, shortcode: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(shortcode)
            if lock is None:
                lock = threading.Lock()
                self._locks[shortcode] = lock
            return lock

    def _existing_lock(self, shortcode: str) -> Optional[threading.Lock]:
        with self._registry_lock:
            return self._locks.get(shortcode)

    def now(self) -> datetime:
        return self._clock()

    def exists(self, shortcode: str) -> bool:
        exists = shortcode in self._records
        logger.debug(f"Shortcode existence check for {shortcode}: {exists}")
        return exists

    def put(self, shortcode: str, record: UrlRecord) -> None:
        if record.shortcode != shortcode:
            raise ValueError(
                f"Record shortcode '{record.shortcode}' does not match key '{shortcode}'"
            )

        with self._lock_for(shortcode):
            if shortcode in self._records:
                self._emit(LogLevel.WARN, f"Rejected duplicate insert for shortcode: {shortcode}")
                raise ShortcodeAlreadyExistsError(shortcode)

            # Click log first so a visible record always has a log to append to
            self._clicks[shortcode] = []
            self._records[shortcode] = record

        self._emit(LogLevel.INFO, f"URL stored with shortcode: {shortcode}")

    def get(self, shortcode: str) -> UrlRecord:
        record = self._records.get(shortcode)
        if record is None:
            self._emit(LogLevel.WARN, f"URL not found for shortcode: {shortcode}")
            raise ShortcodeNotFoundError(shortcode)

        self._emit(LogLevel.DEBUG, f"URL retrieved for shortcode: {shortcode}")
        return record

    def record_click(self, shortcode: str, details: ClickDetails) -> ClickEvent:
        lock = self._existing_lock(shortcode)
        if lock is None or shortcode not in self._records:
            self._emit(LogLevel.WARN, f"Click rejected for unknown shortcode: {shortcode}")
            raise ShortcodeNotFoundError(shortcode)

        with lock:
            events = self._clicks[shortcode]
            timestamp = self._clock()
            # Keep per-key timestamps non-decreasing even if the clock steps back
            if events and timestamp < events[-1].timestamp:
                timestamp = events[-1].timestamp

            event = ClickEvent(timestamp=timestamp, **details.model_dump())
            events.append(event)

        self._emit(LogLevel.INFO, f"Click recorded for shortcode: {shortcode}")
        return event

    def get_analytics(self, shortcode: str) -> List[ClickEvent]:
        lock = self._existing_lock(shortcode)
        if lock is None:
            return []

        with lock:
            analytics = list(self._clicks.get(shortcode, ()))

        self._emit(
            LogLevel.DEBUG,
            f"Analytics retrieved for shortcode: {shortcode}, clicks: {len(analytics)}"
        )
        return analytics

    def count(self) -> int:
        return len(self._records)
