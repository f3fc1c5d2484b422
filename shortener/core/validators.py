"""
Input Validators and Sanitizers

This module provides validation functions for user inputs at the request
boundary: target URLs, validity durations and shortcodes.

Security Considerations:
- Only http/https targets are accepted (no javascript:, data:, file: ...);
  the scheme is checked, not substrings of the whole URL
- Shortcodes are restricted to base62 characters, which also rules out
  path traversal through the redirect route
- Length limits prevent oversized keys and URLs
"""

import re
from typing import Any
from urllib.parse import urlparse

MAX_URL_LENGTH = 2048

_SHORTCODE_PATTERN = re.compile(r"[0-9a-zA-Z]+")


def is_valid_url(url: str) -> bool:
    """
    Validate URL format and security.

    Checks that URL is absolute, uses http/https and names a host. The scheme
    allow-list is what keeps javascript:, data:, file: and similar targets out;
    the rest of the URL is not scanned.

    Args:
        url: The URL string to validate

    Returns:
        True if valid and safe, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    if len(url) > MAX_URL_LENGTH:
        return False

    try:
        result = urlparse(url)

        if not result.scheme or not result.netloc:
            return False

        allowed_schemes = {'http', 'https'}
        if result.scheme.lower() not in allowed_schemes:
            return False

        if not result.hostname:
            return False

        # .port raises ValueError for a non-numeric or out-of-range port
        if result.port == 0:
            return False

        return True
    except ValueError:
        return False


def is_valid_shortcode(shortcode: Any, min_length: int = 3, max_length: int = 20) -> bool:
    """
    Validate shortcode format.

    Shortcodes must be alphanumeric ([0-9a-zA-Z]) and between ``min_length``
    and ``max_length`` characters inclusive.
    """
    if not shortcode or not isinstance(shortcode, str):
        return False
    if not min_length <= len(shortcode) <= max_length:
        return False
    return bool(_SHORTCODE_PATTERN.fullmatch(shortcode))


def is_valid_validity(validity: Any) -> bool:
    """Validity must be a positive integer number of minutes (bools rejected)."""
    if isinstance(validity, bool) or not isinstance(validity, int):
        return False
    return validity > 0
