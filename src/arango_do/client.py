"""
ArangoClient - ArangoDB client for .do services.

Owns the transport and executes methods: a method is rendered to a
request, sent, and the response is interpreted and decoded into the
method's result type.
"""

from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import Any, Union

from .collection_methods import CollectionMethod
from .database import Database
from .document_methods import DocumentMethod
from .method import Prepare, prepare
from .response import interpret
from .transport import HttpTransport, Transport
from .types import ArangoError, TransportFailure

__all__ = ["ArangoClient", "Method"]

LOG = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8529"
DEFAULT_DATABASE = "_system"
DEFAULT_TIMEOUT = 30.0

Method = Union[CollectionMethod, DocumentMethod]


class ArangoClient:
    """
    ArangoDB client.

    Databases can be accessed using either attribute access or subscript
    notation.

    Example:
        # Create client
        client = ArangoClient("http://localhost:8529")
        await client.connect()

        # Access databases
        db = client["myapp"]
        db = client.myapp

        # Run any method directly
        header = await client.execute(InsertDocument("customers", NewDocument({"name": "Jane"})))

        # Close connection
        await client.close()

        # Or use as async context manager
        async with ArangoClient("http://localhost:8529") as client:
            customers = client["myapp"]["customers"]
            ...
    """

    __slots__ = ("_uri", "_database", "_transport", "_connected", "_databases", "_options")

    def __init__(
        self,
        uri: str | None = None,
        *,
        database: str | None = None,
        transport: Transport | None = None,
        **options: Any,
    ) -> None:
        """
        Initialize the ArangoDB client.

        Args:
            uri: Server URL (e.g., "http://localhost:8529").
                 If not provided, uses ARANGO_URL environment variable.
            database: Default database for execute(). If not provided, uses
                ARANGO_DATABASE environment variable, then "_system".
            transport: Transport to use instead of the HTTP transport.
            **options: Additional connection options.
                - timeout: Default timeout for requests (default: 30.0).
                - username: Basic auth user (default: ARANGO_USERNAME).
                - password: Basic auth password (default: ARANGO_PASSWORD).
        """
        self._uri = uri or os.environ.get("ARANGO_URL", DEFAULT_URL)
        self._database = database or os.environ.get("ARANGO_DATABASE", DEFAULT_DATABASE)
        self._transport = transport
        self._connected = False
        self._databases: dict[str, Database] = {}
        self._options = options

    @property
    def uri(self) -> str:
        """Get the server URL."""
        return self._uri

    @property
    def database_name(self) -> str:
        """Get the default database name."""
        return self._database

    @property
    def is_connected(self) -> bool:
        """Check if the client is connected."""
        return self._connected

    async def connect(self) -> ArangoClient:
        """
        Open the transport.

        Returns:
            Self for chaining.

        Raises:
            TransportFailure: If the transport cannot be opened.
        """
        if self._connected:
            return self

        if self._transport is None:
            self._transport = HttpTransport(
                self._uri,
                timeout=self._options.get("timeout", DEFAULT_TIMEOUT),
                username=self._options.get("username", os.environ.get("ARANGO_USERNAME")),
                password=self._options.get("password", os.environ.get("ARANGO_PASSWORD")),
            )

        try:
            await self._transport.open()
        except ArangoError:
            raise
        except Exception as e:
            raise TransportFailure(f"Failed to connect to {self._uri}: {e}") from e

        self._connected = True
        LOG.debug("Connected to %s", self._uri)
        return self

    async def close(self) -> None:
        """Close the connection."""
        if self._transport is not None and self._connected:
            await self._transport.close()
        self._connected = False
        self._databases.clear()

    def _ensure_connected(self) -> None:
        """Ensure the client is connected."""
        if not self._connected or self._transport is None:
            raise ArangoError("Client is not connected. Call connect() first.")

    async def execute(self, method: Method | Prepare, database: str | None = None) -> Any:
        """
        Execute a method and return its decoded result.

        Args:
            method: The method to execute.
            database: Database to run it in (default: the client's database).

        Returns:
            The method's result type.

        Raises:
            TransportFailure: If the request could not be completed.
            ApiError: If the server returned an error envelope.
            ProtocolViolation: If the response has an unexpected shape.
        """
        self._ensure_connected()

        request = prepare(method)
        path = f"/_db/{database or self._database}{request.path}"
        response = await self._transport.request(  # type: ignore[union-attr]
            request.operation,
            path,
            request.parameters,
            request.headers,
            request.body,
        )
        LOG.debug("%s %s -> %s", type(method).__name__, path, response.status)

        payload = interpret(response, method.RETURN_TYPE)
        return method.decode(payload)

    def __getitem__(self, name: str) -> Database:
        """
        Get a database by name using subscript notation.

        Args:
            name: Database name.

        Returns:
            Database instance.

        Example:
            db = client["myapp"]
        """
        self._ensure_connected()

        if name not in self._databases:
            self._databases[name] = Database(self, name)
        return self._databases[name]

    def __getattr__(self, name: str) -> Database:
        """
        Get a database by name using attribute access.

        Args:
            name: Database name.

        Returns:
            Database instance.

        Example:
            db = client.myapp
        """
        if name.startswith("_"):
            raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

        return self[name]

    def get_database(self, name: str | None = None) -> Database:
        """
        Get a database by name.

        Args:
            name: Database name (default: the client's database).

        Returns:
            Database instance.
        """
        return self[name or self._database]

    async def __aenter__(self) -> ArangoClient:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        status = "connected" if self._connected else "disconnected"
        return f"ArangoClient({self._uri!r}, {status})"
