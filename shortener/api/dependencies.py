"""
FastAPI dependencies for dependency injection.

The store and the audit logger are built once by create_app() and kept on
app.state; these functions hand them (and the services built on them) to
the endpoints. Tests swap the whole store by passing their own to create_app().
"""

from fastapi import Depends, Request

from shortener.services.audit_logger import AuditLogger
from shortener.services.redirect_service import RedirectService
from shortener.services.shortcode_allocator import ShortcodeAllocator
from shortener.services.stats_service import StatsService
from shortener.services.url_service import URLShorteningService
from shortener.store.interface import MappingStore


def get_store(request: Request) -> MappingStore:
    return request.app.state.store


def get_audit_logger(request: Request) -> AuditLogger:
    return request.app.state.audit


def get_url_service(
    store: MappingStore = Depends(get_store),
    audit: AuditLogger = Depends(get_audit_logger)
) -> URLShorteningService:
    """URLShorteningService wired to the application store."""
    allocator = ShortcodeAllocator(store, audit=audit)
    return URLShorteningService(allocator, audit=audit)


def get_redirect_service(
    store: MappingStore = Depends(get_store),
    audit: AuditLogger = Depends(get_audit_logger)
) -> RedirectService:
    return RedirectService(store, audit=audit)


def get_stats_service(
    store: MappingStore = Depends(get_store),
    audit: AuditLogger = Depends(get_audit_logger)
) -> StatsService:
    return StatsService(store, audit=audit)
