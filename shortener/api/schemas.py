"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Field names follow the public JSON contract (camelCase) directly.

Design Principles:
- Request models: Define the accepted shape; semantic checks (URL format,
  positive validity, shortcode format) live in the services so they return
  the service's error codes
- Response models: Define output structure
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ShortenRequest(BaseModel):
    """Request model for URL shortening endpoint."""
    url: str = Field(..., description="The long URL to shorten")
    validity: Optional[Any] = Field(
        default=None,
        description="Validity in minutes (positive integer, default 30)"
    )
    shortcode: Optional[str] = Field(
        default=None,
        description="Custom shortcode (alphanumeric, 3-20 characters)"
    )


class ShortenResponse(BaseModel):
    """Response model for URL shortening endpoint."""
    shortLink: str = Field(..., description="The complete short URL")
    expiry: str = Field(..., description="Expiry instant (ISO-8601, UTC)")


class ClickHistoryItem(BaseModel):
    timestamp: str
    referrer: str
    userAgent: str
    ipAddress: str
    location: str


class StatsResponse(BaseModel):
    """Response model for statistics endpoint."""
    shortcode: str
    originalUrl: str
    createdAt: str
    expiresAt: str
    isExpired: bool
    totalClicks: int
    clickHistory: List[ClickHistoryItem]


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float
    totalUrls: int


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str
    code: str
    expiredAt: Optional[str] = None
