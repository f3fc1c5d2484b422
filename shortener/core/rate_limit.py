"""
Rate Limiting Configuration

This module provides rate limiting functionality for API endpoints.
Rate limiting prevents abuse of the creation endpoint (which spends random
draws from the shortcode space) and of the redirect endpoint (which appends
an analytics event per hit).

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- Different limits for different endpoints
- IP-based limiting
- Can be switched off through RATE_LIMIT_ENABLED (tests, trusted deployments)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from shortener.core.setting import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

# Format: "count/period" (e.g., "10/minute" means 10 requests per minute)
RATE_LIMITS = {
    "shorten": "30/minute",  # URL creation per IP
    "redirect": "300/minute",  # Redirects per IP
    "stats": "60/minute",  # Stats queries per IP
}
