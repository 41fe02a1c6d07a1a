# =============================================================================
# foodapi/context.py - Application Context
# =============================================================================
# One composition root builds one AppContext; the app factory, the lifespan
# and the server all receive it instead of reaching for module globals.
# Tests build their own context with a fake database connector.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Protocol

from foodapi.config import Settings
from foodapi.middleware.rate_limit import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


class DatabaseConnector(Protocol):
    """What the app needs from the database layer (see datastore.MongoConnector)."""

    host: str | None

    @property
    def is_connected(self) -> bool: ...

    @property
    def database(self) -> Any: ...

    def connect(self) -> Awaitable[str]: ...

    def disconnect(self, on_closed: Callable[[], None] | None = None) -> Awaitable[None]: ...


@dataclass
class AppContext:
    """
    Process-wide state shared by the HTTP app and the server.

    Attributes:
        settings: Application settings
        database: The single database connector
        rate_limiter: Per-IP request counters for /api
        exit_code: Status the process exits with (0 unless a fatal error occurred)
        connect_task: Background task running the startup connect
    """

    settings: Settings
    database: DatabaseConnector
    rate_limiter: FixedWindowRateLimiter | None = None
    exit_code: int = 0
    connect_task: asyncio.Task | None = None
    _fatal_callbacks: list[Callable[[], None]] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if self.rate_limiter is None:
            self.rate_limiter = FixedWindowRateLimiter(
                window_seconds=self.settings.rate_limit_window_seconds,
                max_requests=self.settings.RATE_LIMIT_MAX,
            )

    def on_fatal(self, callback: Callable[[], None]) -> None:
        """Register a callback to run when a fatal error is reported."""
        self._fatal_callbacks.append(callback)

    def fail(self, exit_code: int = 1) -> None:
        """Record a fatal error and ask the registered owners to stop."""
        self.exit_code = exit_code
        for callback in self._fatal_callbacks:
            callback()

    async def close(self) -> None:
        """Cancel a pending connect and close the database handle."""
        task, self.connect_task = self.connect_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        await self.database.disconnect(lambda: logger.info("MongoDB connection closed."))
