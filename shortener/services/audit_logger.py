"""
Audit Logging Service

This service ships audit entries to the external log service while mirroring
them to the local ``logging`` hierarchy.

Each entry is a (stack, level, package, message) tuple drawn from the fixed
taxonomy in shortener.core.log_constants and is POSTed as JSON with a bearer
token.

Design Decisions:
- emit() is fire-and-forget: the HTTP call runs as a separate asyncio task and
  every failure is logged locally and dropped, so store, allocator and request
  handling never wait on or fail because of the log service
- log() is the awaitable form for callers that want the service response; it
  raises AuditLogError instead of swallowing
- Without a running event loop (e.g. synchronous unit tests) emit() only logs
  locally
- Nothing is sent when the service is disabled or no token is configured
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set, Union

import httpx

from shortener.core.exceptions import AuditLogError
from shortener.core.log_constants import LOCAL_LEVELS, LogLevel, LogPackage, LogStack
from shortener.core.setting import Settings

logger = logging.getLogger(__name__)


class AuditLogger:
    """
    Client for the external log service.

    One instance is created per application and shared by every component
    that reports audit entries.
    """

    def __init__(
        self,
        endpoint: str,
        token: Optional[str] = None,
        enabled: bool = True,
        timeout: float = 10.0,
        stack: LogStack = LogStack.BACKEND,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the audit logger.

        Args:
            endpoint: URL of the log service
            token: Bearer token; sending is skipped when missing
            enabled: Master switch for remote delivery
            timeout: Timeout in seconds per submission
            stack: Stack reported with every entry
            client: Pre-built HTTP client (tests inject a MockTransport here)
        """
        self.endpoint = endpoint
        self.token = token
        self.enabled = enabled
        self.timeout = timeout
        self.stack = stack

        self._client = client
        self._owns_client = client is None
        self._pending: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, config: Settings) -> "AuditLogger":
        return cls(
            endpoint=config.LOG_SERVICE_URL,
            token=config.LOG_SERVICE_TOKEN,
            enabled=config.LOG_SERVICE_ENABLED,
            timeout=config.LOG_SERVICE_TIMEOUT,
        )

    @property
    def is_active(self) -> bool:
        """True when entries are actually sent to the remote service."""
        return self.enabled and bool(self.token)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def build_entry(
        self,
        level: Union[LogLevel, str],
        package: Union[LogPackage, str],
        message: str
    ) -> Dict[str, str]:
        """
        Validate an entry against the taxonomy and build the request payload.

        Raises:
            AuditLogError: If level, package or message is invalid
        """
        try:
            level = LogLevel(level.lower() if isinstance(level, str) else level)
        except ValueError:
            raise AuditLogError(
                f"Level must be one of: {', '.join(item.value for item in LogLevel)}"
            )

        try:
            package = LogPackage(package.lower() if isinstance(package, str) else package)
        except ValueError:
            raise AuditLogError(
                f"Package must be one of: {', '.join(item.value for item in LogPackage)}"
            )

        if not message or not isinstance(message, str):
            raise AuditLogError("Message parameter is required and must be a string")

        return {
            "stack": self.stack.value,
            "level": level.value,
            "package": package.value,
            "message": message,
        }

    def _mirror(self, entry: Dict[str, str]) -> None:
        logger.log(
            LOCAL_LEVELS[LogLevel(entry["level"])],
            f"[{entry['package']}] {entry['message']}"
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _send(self, entry: Dict[str, str]) -> Dict[str, Any]:
        try:
            response = await self._get_client().post(
                self.endpoint,
                json=entry,
                headers={"Authorization": f"Bearer {self.token}"},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise AuditLogError("Failed to reach logging service - network error", original_error=e)

        if response.status_code >= 400:
            raise AuditLogError(f"Logging service error: {response.status_code}")

        try:
            return response.json()
        except ValueError:
            return {}

    async def log(
        self,
        level: Union[LogLevel, str],
        package: Union[LogPackage, str],
        message: str
    ) -> Optional[Dict[str, Any]]:
        """
        Validate, mirror locally and deliver an entry, waiting for the result.

        Returns:
            The log service response, or None when remote delivery is inactive

        Raises:
            AuditLogError: On invalid entries or delivery failures
        """
        entry = self.build_entry(level, package, message)
        self._mirror(entry)

        if not self.is_active:
            return None

        return await self._send(entry)

    def emit(
        self,
        level: Union[LogLevel, str],
        package: Union[LogPackage, str],
        message: str
    ) -> None:
        """
        Fire-and-forget variant of log(). Never raises.
        """
        try:
            entry = self.build_entry(level, package, message)
        except AuditLogError as e:
            logger.warning(f"Dropping invalid audit entry: {e}")
            return

        self._mirror(entry)

        if not self.is_active:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return

        task = loop.create_task(self._send_quietly(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send_quietly(self, entry: Dict[str, str]) -> None:
        try:
            await self._send(entry)
        except Exception as e:
            logger.debug(f"Audit entry not delivered: {e}")

    async def drain(self) -> None:
        """Wait for every in-flight emit() task to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        """Finish in-flight deliveries and close the HTTP client if we own it."""
        await self.drain()
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
