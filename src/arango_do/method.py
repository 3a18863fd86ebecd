"""
Method - description of one call against the server.

Every operation this client supports is an immutable method object that
renders to an operation kind, a path, query parameters, headers and an
optional body, and knows how to decode the server's answer. Methods
never touch the network; :meth:`ArangoClient.execute` runs them.

Example:
    method = GetDocument(DocumentId("customers", "94711"))
    request = prepare(method)
    request.path        # "/_api/document/customers/94711"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Protocol
from urllib.parse import quote

__all__ = [
    "Operation",
    "PreparedRequest",
    "Prepare",
    "ReturnType",
    "prepare",
]

PATH_API_DOCUMENT = "/_api/document"
PATH_API_COLLECTION = "/_api/collection"
PATH_CHECKSUM = "/checksum"
PATH_COUNT = "/count"
PATH_PROPERTIES = "/properties"
PATH_RENAME = "/rename"
PATH_REVISION = "/revision"

FIELD_ID = "id"
FIELD_RESULT = "result"

# Characters allowed in document keys that need no escaping in a path.
_KEY_SAFE = "_-:.@()+,=;$!*'"


class Operation(Enum):
    """CRUD category of a method, mapped to an HTTP verb by the transport."""

    READ = "read"
    READ_HEADER = "read_header"
    CREATE = "create"
    REPLACE = "replace"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class ReturnType:
    """
    Where a method's result is found in a successful response.

    Attributes:
        result_field: Name of the field holding the result, or None when
            the whole response body is the result.
        header_field: Name of a response header holding the result; used
            by header-only reads, which have no body.
    """

    result_field: str | None = None
    header_field: str | None = None


@dataclass(frozen=True)
class PreparedRequest:
    """A method rendered to its wire form."""

    operation: Operation
    path: str
    parameters: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None


class Prepare(Protocol):
    """The interface every method implements."""

    RETURN_TYPE: ClassVar[ReturnType]

    def operation(self) -> Operation: ...

    def path(self) -> str: ...

    def parameters(self) -> dict[str, Any]: ...

    def headers(self) -> dict[str, str]: ...

    def body(self) -> str | None: ...

    def decode(self, payload: Any) -> Any: ...


def prepare(method: Prepare) -> PreparedRequest:
    """Render ``method`` to a request."""
    return PreparedRequest(
        operation=method.operation(),
        path=method.path(),
        parameters=method.parameters(),
        headers=method.headers(),
        body=method.body(),
    )


def document_path(collection: str, key: Any = None) -> str:
    path = f"{PATH_API_DOCUMENT}/{collection}"
    if key is not None:
        path += "/" + quote(str(key), safe=_KEY_SAFE)
    return path


def collection_path(name: str | None = None, suffix: str = "") -> str:
    if name is None:
        return PATH_API_COLLECTION
    return f"{PATH_API_COLLECTION}/{name}{suffix}"
