"""
Services module for business logic separation.

This module contains service classes that encapsulate business logic,
keeping it separate from API endpoints and the store:
- ShortcodeAllocator: unique shortcode selection and record creation
- URLShorteningService / RedirectService / StatsService: request use cases
- AuditLogger: fire-and-forget delivery to the external log service
"""
