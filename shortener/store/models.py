"""
Store Models for URL Shortener Service

This module defines the records held by the mapping & analytics store:
- UrlRecord: the mapping between a shortcode and its original URL
- ClickDetails: caller-supplied metadata about one redirect
- ClickEvent: one recorded redirect (ClickDetails plus the store timestamp)

Design Decisions:
- All models are frozen: records are never updated once stored, and handing a
  frozen model to a caller cannot corrupt the store
- Absent referrer / user agent are stored as None; the presentation defaults
  ("Direct", "Unknown") are applied by the stats service, not here
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

UNKNOWN_ADDRESS = "unknown"
UNKNOWN_LOCATION = "Unknown Location"
LOCAL_NETWORK = "Local Network"


class UrlRecord(BaseModel):
    """
    Mapping from one shortcode to its target.

    Fields:
    - shortcode: Unique key (3-20 alphanumeric characters)
    - original_url: Validated absolute target URL
    - created_at: When the record was created (store clock)
    - expires_at: created_at + validity_minutes
    - validity_minutes: Requested lifetime, informational
    """
    model_config = ConfigDict(frozen=True)

    shortcode: str
    original_url: str
    created_at: datetime
    expires_at: datetime
    validity_minutes: int = Field(gt=0)

    @model_validator(mode="after")
    def _check_expiry(self) -> "UrlRecord":
        if (self.expires_at - self.created_at).total_seconds() != self.validity_minutes * 60:
            raise ValueError("expires_at must equal created_at + validity_minutes")
        return self


class ClickDetails(BaseModel):
    """Request metadata captured at redirect time."""
    model_config = ConfigDict(frozen=True)

    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    source_address: str = UNKNOWN_ADDRESS
    approximate_location: str = UNKNOWN_LOCATION


class ClickEvent(ClickDetails):
    """One successful redirect, stamped by the store when it was appended."""

    timestamp: datetime
