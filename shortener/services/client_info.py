"""
Client metadata extraction for click analytics.

Best-effort only: every helper falls back to a sentinel instead of failing.
"""

import ipaddress
from typing import Optional

from fastapi import Request

from shortener.store.models import (
    ClickDetails,
    LOCAL_NETWORK,
    UNKNOWN_ADDRESS,
    UNKNOWN_LOCATION,
)

PRIVATE_NETWORKS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("fc00::/7"),
)


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Handles proxies and load balancers by checking X-Forwarded-For header.

    Args:
        request: FastAPI Request object

    Returns:
        IP address as string, or "unknown"
    """
    # Check for forwarded IP (from proxy/load balancer)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    # Fallback to direct client IP
    return request.client.host if request.client and request.client.host else UNKNOWN_ADDRESS


def get_location_from_ip(ip: Optional[str]) -> str:
    """
    Approximate the network origin of an address.

    Loopback, link-local and RFC 1918 / unique-local ranges report
    "Local Network"; anything else is "Unknown Location" since no geolocation
    database is consulted.
    """
    if not ip or ip == UNKNOWN_ADDRESS:
        return UNKNOWN_LOCATION

    try:
        address = ipaddress.ip_address(ip.strip())
    except ValueError:
        return UNKNOWN_LOCATION

    if address.is_loopback or address.is_link_local:
        return LOCAL_NETWORK
    if any(address in network for network in PRIVATE_NETWORKS):
        return LOCAL_NETWORK
    return UNKNOWN_LOCATION


def extract_click_details(request: Request) -> ClickDetails:
    """Collect referrer, user agent and origin of a redirect request."""
    client_ip = get_client_ip(request)
    return ClickDetails(
        referrer=request.headers.get("Referer") or request.headers.get("Referrer") or None,
        user_agent=request.headers.get("User-Agent") or None,
        source_address=client_ip,
        approximate_location=get_location_from_ip(client_ip),
    )
