"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request parsing (Pydantic models)
- Rate limiting
- Delegating to service layer
- Shaping responses

Service exceptions are not caught here: they propagate to the exception
handler registered in create_app(), which renders the error body and status.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from shortener.api.dependencies import (
    get_redirect_service,
    get_stats_service,
    get_url_service,
)
from shortener.api.schemas import ErrorResponse, ShortenRequest, ShortenResponse, StatsResponse
from shortener.core.exceptions import InvalidShortcodeFormatError, ShortcodeNotFoundError
from shortener.core.expiry import format_timestamp
from shortener.core.rate_limit import RATE_LIMITS, limiter
from shortener.core.setting import settings
from shortener.core.validators import is_valid_shortcode
from shortener.services.client_info import extract_click_details
from shortener.services.redirect_service import RedirectService
from shortener.services.stats_service import StatsService
from shortener.services.url_service import URLShorteningService, build_short_link

router = APIRouter()


@router.post(
    "/shorturls",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Create a short URL",
    description="Takes a long URL, an optional validity and an optional custom shortcode"
)
@limiter.limit(RATE_LIMITS["shorten"])
async def create_short_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: ShortenRequest,
    url_service: URLShorteningService = Depends(get_url_service)
) -> ShortenResponse:
    """
    Create a new short URL from a long URL.

    Returns:
        ShortenResponse with the short link and its expiry
    """
    record = url_service.create_short_url(
        body.url,
        validity_minutes=body.validity,
        shortcode=body.shortcode,
    )

    return ShortenResponse(
        shortLink=build_short_link(record.shortcode, settings.BASE_URL),
        expiry=format_timestamp(record.expires_at),
    )


@router.get(
    "/shorturls/{shortcode}",
    response_model=StatsResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get URL statistics",
    description="Returns the record, its expiry state and the full click history"
)
@limiter.limit(RATE_LIMITS["stats"])
async def get_url_stats(
    shortcode: str,
    request: Request,  # Required for rate limiting
    stats_service: StatsService = Depends(get_stats_service)
) -> StatsResponse:
    """
    Get statistics for a short URL.

    Raises:
        InvalidShortcodeFormatError: If the shortcode format is invalid (400)
        ShortcodeNotFoundError: If the shortcode does not exist (404)
    """
    if not is_valid_shortcode(shortcode, settings.SHORTCODE_MIN_LENGTH, settings.SHORTCODE_MAX_LENGTH):
        raise InvalidShortcodeFormatError(
            shortcode, settings.SHORTCODE_MIN_LENGTH, settings.SHORTCODE_MAX_LENGTH
        )

    return StatsResponse(**stats_service.get_stats(shortcode))


@router.get(
    "/{shortcode}",
    status_code=status.HTTP_302_FOUND,
    responses={404: {"model": ErrorResponse}, 410: {"model": ErrorResponse}},
    summary="Redirect to original URL",
    description="Records the click and redirects to the original long URL"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def redirect_to_url(
    shortcode: str,
    request: Request,
    redirect_service: RedirectService = Depends(get_redirect_service)
) -> RedirectResponse:
    """
    Redirect to the original URL for a given shortcode.

    Raises:
        ShortcodeNotFoundError: If the shortcode does not exist (404)
        ShortcodeExpiredError: If the shortcode has expired (410)
    """
    # A malformed code can never have been stored
    if not is_valid_shortcode(shortcode, settings.SHORTCODE_MIN_LENGTH, settings.SHORTCODE_MAX_LENGTH):
        raise ShortcodeNotFoundError(shortcode)

    original_url = redirect_service.resolve(shortcode, extract_click_details(request))

    return RedirectResponse(
        url=original_url,
        status_code=status.HTTP_302_FOUND
    )
