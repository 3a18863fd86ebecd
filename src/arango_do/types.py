"""
Type definitions for arango-do SDK.

Provides the document identity and revision model, the document and
collection value types returned by operations, and the exception
hierarchy raised when a call fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Generic, Mapping, TypeVar

T = TypeVar("T")

ID_SEPARATOR = "/"


# =============================================================================
# Error codes
# =============================================================================


class ErrorCode(IntEnum):
    """Server error numbers (``errorNum``) this client knows by name."""

    NO_ERROR = 0
    FAILED = 1
    INTERNAL = 4
    BAD_PARAMETER = 10
    FORBIDDEN = 11

    HTTP_BAD_PARAMETER = 400
    HTTP_UNAUTHORIZED = 401
    HTTP_FORBIDDEN = 403
    HTTP_NOT_FOUND = 404
    HTTP_METHOD_NOT_ALLOWED = 405
    HTTP_PRECONDITION_FAILED = 412
    HTTP_SERVER_ERROR = 500
    HTTP_SERVICE_UNAVAILABLE = 503
    HTTP_CORRUPTED_JSON = 600

    ARANGO_CONFLICT = 1200
    ARANGO_DOCUMENT_NOT_FOUND = 1202
    ARANGO_COLLECTION_NOT_FOUND = 1203
    ARANGO_COLLECTION_PARAMETER_MISSING = 1204
    ARANGO_DOCUMENT_HANDLE_BAD = 1205
    ARANGO_DUPLICATE_NAME = 1207
    ARANGO_ILLEGAL_NAME = 1208
    ARANGO_UNIQUE_CONSTRAINT_VIOLATED = 1210
    ARANGO_DOCUMENT_KEY_BAD = 1221
    ARANGO_DOCUMENT_TYPE_INVALID = 1227
    ARANGO_DATABASE_NOT_FOUND = 1228
    ARANGO_DATABASE_NAME_INVALID = 1229
    ARANGO_USE_SYSTEM_DATABASE = 1230

    @classmethod
    def lookup(cls, number: int | None) -> ErrorCode | None:
        """Resolve a raw error number, or None if this client does not know it."""
        if number is None:
            return None
        try:
            return cls(number)
        except ValueError:
            return None


# =============================================================================
# Exceptions
# =============================================================================


class ArangoError(Exception):
    """Base exception for ArangoDB operations."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def error_code(self) -> ErrorCode | None:
        """The server error number as a known ErrorCode, if it is one."""
        return ErrorCode.lookup(self.code)


class TransportFailure(ArangoError):
    """Error raised when a request could not be completed."""

    pass


class ProtocolViolation(ArangoError):
    """Error raised when a response does not have the expected shape."""

    pass


class MalformedIdentifier(ArangoError, ValueError):
    """Error raised when a document id or key cannot be used."""

    pass


class ApiError(ArangoError):
    """
    Error envelope returned by the server for a whole call.

    Attributes:
        status_code: HTTP status of the response.
        code: Server error number (``errorNum``), 0 if the server sent none.
        details: Remaining fields of the envelope.
    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        status_code: int = 0,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code)
        self.status_code = status_code
        self.details = dict(details or {})

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status_code={self.status_code}, "
            f"code={self.code}, message={self.message!r})"
        )


class NotModified(ApiError):
    """Error raised when an If-None-Match read found the same revision."""

    pass


class NotFoundError(ApiError):
    """Error raised when a document or collection does not exist."""

    pass


class PreconditionFailed(ApiError):
    """Error raised when a conditional request found another revision."""

    @property
    def revision(self) -> Revision | None:
        """The document's current revision, when the server reported it."""
        rev = self.details.get("_rev")
        return Revision(rev) if isinstance(rev, str) else None


class DuplicateKeyError(ApiError):
    """Error raised when inserting a document with a duplicate key."""

    pass


class ElementError(ArangoError):
    """
    Failure of one element inside a batch response.

    Instances are placed in the batch result at the position of the item
    that failed; they are values, not raised.
    """

    def __repr__(self) -> str:
        return f"ElementError(code={self.code}, message={self.message!r})"


# =============================================================================
# Identity & revision
# =============================================================================


@dataclass(frozen=True)
class DocumentKey:
    """The key of a document, unique within its collection."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value:
            raise MalformedIdentifier(f"Document key must be a non-empty string: {self.value!r}")

    @classmethod
    def of(cls, key: DocumentKey | str) -> DocumentKey:
        return key if isinstance(key, DocumentKey) else cls(key)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Revision:
    """
    Opaque version tag assigned by the server.

    Revisions compare by their string value only; no ordering exists.
    """

    value: str

    @classmethod
    def of(cls, revision: Revision | str) -> Revision:
        return revision if isinstance(revision, Revision) else cls(revision)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DocumentId:
    """
    Globally unique document id within a database: ``collection/key``.

    Example:
        doc_id = DocumentId("customers", "94711")
        str(doc_id)                              # "customers/94711"
        DocumentId.parse("customers/94711") == doc_id
    """

    collection_name: str
    document_key: str

    def __post_init__(self) -> None:
        if not self.collection_name:
            raise MalformedIdentifier("Document id requires a collection name")
        if not self.document_key:
            raise MalformedIdentifier("Document id requires a document key")

    @classmethod
    def parse(cls, text: str) -> DocumentId:
        """
        Parse the canonical ``collection/key`` form.

        Raises:
            MalformedIdentifier: If the separator or either part is missing.
        """
        collection, sep, key = text.partition(ID_SEPARATOR)
        if not sep:
            raise MalformedIdentifier(f"Document id is missing the '/' separator: {text!r}")
        return cls(collection, key)

    @property
    def key(self) -> DocumentKey:
        return DocumentKey(self.document_key)

    def __str__(self) -> str:
        return f"{self.collection_name}{ID_SEPARATOR}{self.document_key}"


# =============================================================================
# Documents
# =============================================================================


@dataclass(frozen=True)
class NewDocument(Generic[T]):
    """
    Content to insert, with an optional pre-assigned key.

    If no key is given the server assigns one.
    """

    content: T
    key: DocumentKey | None = None

    def __post_init__(self) -> None:
        if self.key is not None:
            object.__setattr__(self, "key", DocumentKey.of(self.key))

    def with_key(self, key: DocumentKey | str) -> NewDocument[T]:
        return NewDocument(self.content, DocumentKey.of(key))


@dataclass(frozen=True)
class DocumentUpdate(Generic[T]):
    """
    Replacement or partial-update content for the document with ``key``.

    ``revision`` is the expected revision checked inside the request body;
    it is independent of any If-Match header.
    """

    key: DocumentKey
    content: T
    revision: Revision | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", DocumentKey.of(self.key))
        if self.revision is not None:
            object.__setattr__(self, "revision", Revision.of(self.revision))

    def with_revision(self, revision: Revision | str) -> DocumentUpdate[T]:
        return DocumentUpdate(self.key, self.content, Revision.of(revision))


@dataclass(frozen=True)
class DocumentHeader:
    """Id, key and revision of a stored document."""

    id: DocumentId
    key: DocumentKey
    revision: Revision

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> DocumentHeader:
        """
        Build a header from the ``_id``, ``_key`` and ``_rev`` attributes.

        Raises:
            ProtocolViolation: If one of the attributes is missing.
        """
        id_text = _require(data, "_id")
        try:
            doc_id = DocumentId.parse(id_text)
        except MalformedIdentifier as e:
            raise ProtocolViolation(f"Server returned a malformed _id: {id_text!r}") from e
        return cls(doc_id, DocumentKey(_require(data, "_key")), Revision(_require(data, "_rev")))

    def deconstruct(self) -> tuple[DocumentId, DocumentKey, Revision]:
        return self.id, self.key, self.revision


@dataclass(frozen=True)
class Document(Generic[T]):
    """A stored document together with its content."""

    id: DocumentId
    key: DocumentKey
    revision: Revision
    content: T

    @property
    def header(self) -> DocumentHeader:
        return DocumentHeader(self.id, self.key, self.revision)


@dataclass(frozen=True)
class UpdatedDocumentHeader(Generic[T]):
    """
    Result of a replace or update.

    ``old_content`` and ``new_content`` are only set when ``return_old`` /
    ``return_new`` was requested.
    """

    id: DocumentId
    key: DocumentKey
    revision: Revision
    old_revision: Revision
    old_content: T | None = None
    new_content: T | None = None

    @property
    def header(self) -> DocumentHeader:
        return DocumentHeader(self.id, self.key, self.revision)


# =============================================================================
# Collections
# =============================================================================


class CollectionType(IntEnum):
    DOCUMENTS = 2
    EDGES = 3


class CollectionStatus(IntEnum):
    NEW_BORN = 1
    UNLOADED = 2
    LOADED = 3
    UNLOADING = 4
    DELETED = 5
    LOADING = 6


@dataclass(frozen=True)
class KeyOptions:
    """Key generator settings of a collection."""

    type: str | None = None
    allow_user_keys: bool | None = None
    increment: int | None = None
    offset: int | None = None

    def to_json(self) -> dict[str, Any]:
        return _drop_none(
            {
                "type": self.type,
                "allowUserKeys": self.allow_user_keys,
                "increment": self.increment,
                "offset": self.offset,
            }
        )

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> KeyOptions:
        return cls(
            type=data.get("type"),
            allow_user_keys=data.get("allowUserKeys"),
            increment=data.get("increment"),
            offset=data.get("offset"),
        )


@dataclass(frozen=True)
class CollectionInfo:
    """Basic description of a collection as reported by the server."""

    id: str
    name: str
    type: CollectionType
    status: CollectionStatus | int | None = None
    is_system: bool = False

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> CollectionInfo:
        status = data.get("status")
        if status is not None:
            try:
                status = CollectionStatus(status)
            except ValueError:
                pass
        try:
            type_ = CollectionType(_require(data, "type"))
        except ValueError as e:
            raise ProtocolViolation(f"Unknown collection type: {data.get('type')!r}") from e
        return cls(
            id=str(_require(data, "id")),
            name=_require(data, "name"),
            type=type_,
            status=status,
            is_system=bool(data.get("isSystem", False)),
        )


@dataclass(frozen=True)
class CollectionProperties:
    """Collection description including its changeable properties."""

    info: CollectionInfo
    wait_for_sync: bool = False
    key_options: KeyOptions | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.info.name

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> CollectionProperties:
        known = {"id", "name", "type", "status", "isSystem", "waitForSync", "keyOptions", "code", "error"}
        key_options = data.get("keyOptions")
        return cls(
            info=CollectionInfo.from_json(data),
            wait_for_sync=bool(data.get("waitForSync", False)),
            key_options=KeyOptions.from_json(key_options) if isinstance(key_options, Mapping) else None,
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class NewCollection:
    """
    Parameters for creating a collection.

    Unset fields are left to the server's defaults.
    """

    name: str
    type: CollectionType | None = None
    wait_for_sync: bool | None = None
    is_system: bool | None = None
    key_options: KeyOptions | None = None

    @classmethod
    def documents(cls, name: str) -> NewCollection:
        return cls(name, CollectionType.DOCUMENTS)

    @classmethod
    def edges(cls, name: str) -> NewCollection:
        return cls(name, CollectionType.EDGES)

    def to_json(self) -> dict[str, Any]:
        return _drop_none(
            {
                "name": self.name,
                "type": int(self.type) if self.type is not None else None,
                "waitForSync": self.wait_for_sync,
                "isSystem": self.is_system,
                "keyOptions": self.key_options.to_json() if self.key_options else None,
            }
        )


@dataclass(frozen=True)
class CollectionPropertiesUpdate:
    """Properties that can be changed on an existing collection."""

    wait_for_sync: bool | None = None
    journal_size: int | None = None

    def to_json(self) -> dict[str, Any]:
        return _drop_none({"waitForSync": self.wait_for_sync, "journalSize": self.journal_size})


@dataclass(frozen=True)
class CollectionChecksum:
    """Checksum of a collection and the collection revision it was taken at."""

    checksum: str
    revision: Revision

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> CollectionChecksum:
        return cls(str(_require(data, "checksum")), Revision(str(_require(data, "revision"))))


def _require(data: Mapping[str, Any], name: str) -> Any:
    if not isinstance(data, Mapping) or name not in data:
        raise ProtocolViolation(f"Response is missing the {name!r} field")
    return data[name]


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}
