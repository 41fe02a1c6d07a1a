# =============================================================================
# datastore/mongo_client.py - MongoDB Connector
# =============================================================================
# This module owns the process-wide MongoDB connection. The application
# context holds exactly one MongoConnector; it is connected once during
# startup and closed once during graceful shutdown.
#
# A failed initial connection is fatal for the API, but deciding to exit is
# left to the caller: connect() only raises DatabaseConnectionError.
#
# Usage:
#   from datastore.mongo_client import MongoConnector
#   connector = MongoConnector(settings.MONGODB_URI)
#   host = await connector.connect()
#   dishes = connector.database["dishes"]
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Callable

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """
    Error while connecting to (or using) the database handle.

    Provides actionable error messages: the suggestion says how to fix the
    configuration, not just what failed.
    """

    def __init__(
        self,
        message: str,
        code: str = "DATABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class MongoConnector:
    """
    Single MongoDB connection for the lifetime of the process.

    Only one connection attempt is ever made: a second call to connect()
    while the first is in flight, or after it succeeded, is rejected.

    Example:
        connector = MongoConnector("mongodb://localhost:27017/sbfoods")
        host = await connector.connect()
        await connector.database["orders"].find_one({})
        await connector.disconnect(lambda: print("closed"))
    """

    def __init__(
        self,
        uri: str | None,
        default_db_name: str = "sbfoods",
        server_selection_timeout_ms: int = 30000,
    ):
        self.uri = uri
        self.default_db_name = default_db_name
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self._client: AsyncMongoClient | None = None
        self._connecting = False
        self.host: str | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self.host is not None

    async def connect(self) -> str:
        """
        Open the connection and verify it with a ping.

        Returns:
            The host the driver connected to

        Raises:
            DatabaseConnectionError: If the URI is missing or invalid, the
                server is unreachable, or a connection already exists
        """
        if self._connecting or self._client is not None:
            raise DatabaseConnectionError(
                message="A database connection already exists or is in progress",
                code="ALREADY_CONNECTED",
                suggestion="Call connect() once at startup",
            )

        if not self.uri:
            raise DatabaseConnectionError(
                message="MONGODB_URI is not set",
                code="MISSING_URI",
                suggestion="Set MONGODB_URI in the environment or your .env file",
            )

        self._connecting = True
        client: AsyncMongoClient | None = None
        try:
            # The URI parser raises plain ValueError/TypeError for some
            # malformed values (e.g. a non-numeric port), not InvalidURI
            try:
                client = AsyncMongoClient(
                    self.uri,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                )
            except (PyMongoError, ValueError, TypeError) as e:
                raise DatabaseConnectionError(
                    message=f"Invalid MongoDB URI: {e}",
                    code="INVALID_URI",
                    suggestion="Check the format of MONGODB_URI (mongodb://host:port/db)",
                ) from e
            await client.admin.command("ping")
        except (PyMongoError, ValueError, TypeError) as e:
            if client is not None:
                await client.close()
            raise DatabaseConnectionError(
                message=f"Failed to connect to MongoDB: {e}",
                code="CONNECTION_FAILED",
                suggestion="Check MONGODB_URI and that the database server is reachable",
            ) from e
        finally:
            self._connecting = False

        self._client = client
        self.host = self._connected_host(client)
        logger.debug(f"MongoDB client ready (host={self.host})")
        return self.host

    async def disconnect(self, on_closed: Callable[[], None] | None = None) -> None:
        """
        Close the connection, then run the on_closed continuation.

        Safe to call when nothing is connected; the continuation still runs
        so shutdown sequences can rely on it.
        """
        client, self._client = self._client, None
        self.host = None
        if client is not None:
            await client.close()
        if on_closed is not None:
            on_closed()

    @property
    def database(self):
        """Default database for the connection (from the URI, else default_db_name)."""
        if self._client is None:
            raise DatabaseConnectionError(
                message="Database handle requested before connect()",
                code="NOT_CONNECTED",
                suggestion="Wait for startup to finish connecting to MongoDB",
            )
        return self._client.get_default_database(default=self.default_db_name)

    @staticmethod
    def _connected_host(client: AsyncMongoClient) -> str:
        nodes = sorted(client.nodes)
        if not nodes:
            return "unknown"
        return ",".join(f"{host}:{port}" for host, port in nodes)
