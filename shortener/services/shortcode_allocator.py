"""
Shortcode Allocator

Turns a creation request into the final (shortcode, UrlRecord) pair and
commits it to the store.

Two paths:
- Caller-supplied shortcode: validated for format, refused if it names a
  fixed route, checked for presence, never retried. An empty string counts
  as not supplied
- Generated shortcode: SHORTCODE_LENGTH characters drawn uniformly from the
  62-symbol base62 alphabet, redrawn while taken, up to
  MAX_GENERATION_ATTEMPTS candidates

The presence check only saves wasted inserts. Uniqueness is guaranteed by the
store's compare-and-insert put(); losing that race surfaces as a collision.
"""

import logging
import secrets
from typing import Callable, Optional, TYPE_CHECKING

from shortener.core.exceptions import (
    InvalidShortcodeFormatError,
    InvalidValidityError,
    ShortcodeAlreadyExistsError,
    ShortcodeCollisionError,
    ShortcodeGenerationError,
)
from shortener.core.expiry import compute_expiry
from shortener.core.log_constants import LogLevel, LogPackage
from shortener.core.setting import settings
from shortener.core.validators import is_valid_shortcode, is_valid_validity
from shortener.store.interface import MappingStore
from shortener.store.models import UrlRecord

if TYPE_CHECKING:
    from shortener.services.audit_logger import AuditLogger

logger = logging.getLogger(__name__)

BASE62_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"

# Single-segment paths already served by fixed routes
RESERVED_SHORTCODES = frozenset({"docs", "health", "redoc"})


def generate_shortcode(length: int = 6) -> str:
    """
    Draw a random base62 shortcode.

    Example:
        generate_shortcode() -> "aZ3k9Q"
    """
    return "".join(secrets.choice(BASE62_CHARS) for _ in range(length))


class ShortcodeAllocator:
    """
    Allocates unique shortcodes and persists the resulting records.
    """

    def __init__(
        self,
        store: MappingStore,
        code_length: int = settings.SHORTCODE_LENGTH,
        max_attempts: int = settings.MAX_GENERATION_ATTEMPTS,
        min_length: int = settings.SHORTCODE_MIN_LENGTH,
        max_length: int = settings.SHORTCODE_MAX_LENGTH,
        default_validity: int = settings.DEFAULT_VALIDITY_MINUTES,
        generator: Callable[[int], str] = generate_shortcode,
        audit: Optional["AuditLogger"] = None
    ):
        """
        Initialize the allocator.

        Args:
            store: Store used for presence checks and the final insert
            code_length: Length of generated shortcodes
            max_attempts: Candidate budget for generation
            min_length: Minimum length of supplied shortcodes
            max_length: Maximum length of supplied shortcodes
            default_validity: Minutes applied when no validity is given
            generator: Candidate source (tests inject deterministic ones)
            audit: Optional AuditLogger receiving 'service' entries
        """
        self.store = store
        self.code_length = code_length
        self.max_attempts = max_attempts
        self.min_length = min_length
        self.max_length = max_length
        self.default_validity = default_validity
        self.generator = generator
        self.audit = audit

    def _emit(self, level: LogLevel, message: str) -> None:
        if self.audit is not None:
            self.audit.emit(level, LogPackage.SERVICE, message)

    def _claim_supplied(self, shortcode: str) -> str:
        if not is_valid_shortcode(shortcode, self.min_length, self.max_length):
            self._emit(LogLevel.WARN, f"Invalid shortcode format: {shortcode}")
            raise InvalidShortcodeFormatError(shortcode, self.min_length, self.max_length)

        if shortcode in RESERVED_SHORTCODES:
            self._emit(LogLevel.WARN, f"Reserved shortcode requested: {shortcode}")
            raise ShortcodeCollisionError(shortcode)

        if self.store.exists(shortcode):
            self._emit(LogLevel.WARN, f"Shortcode already exists: {shortcode}")
            raise ShortcodeCollisionError(shortcode)

        return shortcode

    def _generate_free(self) -> str:
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generator(self.code_length)
            if candidate not in RESERVED_SHORTCODES and not self.store.exists(candidate):
                logger.debug(f"Generated shortcode {candidate} on attempt {attempt}")
                return candidate

        self._emit(
            LogLevel.ERROR,
            f"Failed to generate unique shortcode after {self.max_attempts} attempts"
        )
        raise ShortcodeGenerationError(self.max_attempts)

    def allocate(
        self,
        original_url: str,
        validity_minutes: Optional[int] = None,
        shortcode: Optional[str] = None
    ) -> UrlRecord:
        """
        Allocate a shortcode for a URL and store the record.

        Args:
            original_url: Target URL, already validated by the caller
            validity_minutes: Lifetime in minutes (default_validity when None)
            shortcode: Optional caller-supplied shortcode (empty means generate)

        Returns:
            The stored UrlRecord

        Raises:
            InvalidValidityError: If validity is not a positive integer
            InvalidShortcodeFormatError: If the supplied shortcode is malformed
            ShortcodeCollisionError: If the shortcode is (or just became) taken
            ShortcodeGenerationError: If the generation budget was exhausted
        """
        if validity_minutes is None:
            validity_minutes = self.default_validity
        if not is_valid_validity(validity_minutes):
            raise InvalidValidityError(validity_minutes)

        if shortcode:
            final_shortcode = self._claim_supplied(shortcode)
        else:
            final_shortcode = self._generate_free()

        created_at = self.store.now()
        record = UrlRecord(
            shortcode=final_shortcode,
            original_url=original_url,
            created_at=created_at,
            expires_at=compute_expiry(created_at, validity_minutes),
            validity_minutes=validity_minutes,
        )

        try:
            self.store.put(final_shortcode, record)
        except ShortcodeAlreadyExistsError:
            self._emit(LogLevel.WARN, f"Shortcode taken concurrently: {final_shortcode}")
            raise ShortcodeCollisionError(final_shortcode)

        self._emit(LogLevel.INFO, f"Short URL created successfully: {final_shortcode}")
        return record
