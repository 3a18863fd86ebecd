"""
Transport - HTTP execution of prepared requests.

The transport only moves bytes: it maps the operation to an HTTP verb,
sends the request and returns status, headers and body text. Deciding
whether the response is a success is left to :mod:`arango_do.response`.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

import aiohttp

from .method import Operation
from .types import TransportFailure

__all__ = ["HttpTransport", "RawResponse", "Transport", "HTTP_METHODS"]

LOG = logging.getLogger(__name__)

HTTP_METHODS: dict[Operation, str] = {
    Operation.READ: "GET",
    Operation.READ_HEADER: "HEAD",
    Operation.CREATE: "POST",
    Operation.REPLACE: "PUT",
    Operation.UPDATE: "PATCH",
    Operation.DELETE: "DELETE",
}


@dataclass(frozen=True)
class RawResponse:
    """Status, headers and body text of a response."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    text: str = ""

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class Transport(Protocol):
    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def request(
        self,
        operation: Operation,
        path: str,
        parameters: Mapping[str, Any],
        headers: Mapping[str, str],
        body: str | None,
    ) -> RawResponse: ...


def render_parameters(parameters: Mapping[str, Any]) -> dict[str, str]:
    """Render query parameter values the way the server expects them."""
    rendered = {}
    for name, value in parameters.items():
        if isinstance(value, bool):
            rendered[name] = "true" if value else "false"
        else:
            rendered[name] = str(value)
    return rendered


def _basic_auth_headers(username: str | None, password: str | None) -> dict[str, str]:
    if not username:
        return {}
    credentials = f"{username}:{password or ''}".encode("utf-8")
    return {"Authorization": "Basic " + base64.b64encode(credentials).decode("ascii")}


class HttpTransport:
    """
    Transport backed by an aiohttp client session.

    Example:
        transport = HttpTransport("http://localhost:8529", timeout=10.0)
        await transport.open()
        response = await transport.request(Operation.READ, "/_api/version", {}, {}, None)
        await transport.close()
    """

    __slots__ = ("_base_url", "_timeout", "_headers", "_session")

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        username: str | None = None,
        password: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = _basic_auth_headers(username, password)
        self._session: aiohttp.ClientSession | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def is_open(self) -> bool:
        return self._session is not None

    async def open(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers=self._headers,
            )

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def request(
        self,
        operation: Operation,
        path: str,
        parameters: Mapping[str, Any],
        headers: Mapping[str, str],
        body: str | None,
    ) -> RawResponse:
        """
        Send one request.

        Raises:
            TransportFailure: If the transport is closed or the request
                could not be completed.
        """
        if self._session is None:
            raise TransportFailure("Transport is not open. Call open() first.")

        verb = HTTP_METHODS[operation]
        request_headers = dict(headers)
        data = None
        if body is not None:
            request_headers.setdefault("Content-Type", "application/json")
            data = body.encode("utf-8")

        LOG.debug("%s %s", verb, path)
        try:
            async with self._session.request(
                verb,
                self._base_url + path,
                params=render_parameters(parameters),
                headers=request_headers,
                data=data,
            ) as response:
                try:
                    text = await response.text()
                except UnicodeDecodeError as e:
                    raise TransportFailure(f"{verb} {path} returned an undecodable body: {e}") from e
                LOG.debug("%s %s -> %s", verb, path, response.status)
                return RawResponse(response.status, dict(response.headers), text)
        except asyncio.TimeoutError as e:
            raise TransportFailure(f"{verb} {path} timed out after {self._timeout}s") from e
        except aiohttp.ClientError as e:
            raise TransportFailure(f"{verb} {path} failed: {e}") from e

    def __repr__(self) -> str:
        status = "open" if self._session is not None else "closed"
        return f"HttpTransport({self._base_url!r}, {status})"
