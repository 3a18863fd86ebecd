"""
Document methods - reading and writing documents.

Single-document methods return a typed result or raise an ApiError.
Multi-document methods (``InsertDocuments``, ``GetDocuments``,
``ReplaceDocuments``, ``UpdateDocuments``, ``DeleteDocuments``) send all
items in one request and return a :class:`BatchResult` with one outcome
per item.

Content types: ``content_type`` selects how returned content is decoded
(a pydantic model class, :class:`JsonString`, or None for a plain dict).
When it is None for a write, the type of the content that was sent is
used if it is a model or a JsonString.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, Mapping, TypeVar, Union

from .batch import BatchResult, aggregate
from .conditions import (
    PARAM_RETURN_NEW,
    PARAM_WAIT_FOR_SYNC,
    PARAM_WAIT_FOR_SYNC_REPLICATION,
    Conditions,
    WriteOptions,
    revision_fields,
)
from .content import (
    decode_document,
    decode_updated_header,
    dumps,
    encode_array,
    encode_content,
    infer_content_type,
)
from .method import Operation, ReturnType, document_path
from .types import (
    Document,
    DocumentHeader,
    DocumentId,
    DocumentKey,
    DocumentUpdate,
    NewDocument,
    Revision,
    UpdatedDocumentHeader,
)

__all__ = [
    "DeleteDocument",
    "DeleteDocuments",
    "DocumentMethod",
    "GetDocument",
    "GetDocumentRevision",
    "GetDocuments",
    "InsertDocument",
    "InsertDocuments",
    "ReplaceDocument",
    "ReplaceDocuments",
    "UpdateDocument",
    "UpdateDocuments",
]

T = TypeVar("T")

PARAM_KEEP_NULL = "keepNull"
PARAM_MERGE_OBJECTS = "mergeObjects"
PARAM_ONLY_GET = "onlyget"

HEADER_ETAG = "Etag"


def _insert_parameters(return_new: bool, force_wait_for_sync: bool, wait_for_sync_replication: bool) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if force_wait_for_sync:
        params[PARAM_WAIT_FOR_SYNC] = True
    if return_new:
        params[PARAM_RETURN_NEW] = True
    if not wait_for_sync_replication:
        params[PARAM_WAIT_FOR_SYNC_REPLICATION] = 0
    return params


def _update_parameters(options: WriteOptions, keep_null: bool | None, merge_objects: bool | None) -> dict[str, Any]:
    params = options.parameters()
    if keep_null is not None:
        params[PARAM_KEEP_NULL] = keep_null
    if merge_objects is not None:
        params[PARAM_MERGE_OBJECTS] = merge_objects
    return params


def _new_document_body(document: NewDocument[Any]) -> str:
    extra = {"_key": str(document.key)} if document.key is not None else None
    return encode_content(document.content, extra)


def _update_body(update: DocumentUpdate[Any], options: WriteOptions, *, with_key: bool, partial: bool) -> str:
    extra: dict[str, Any] = {"_key": str(update.key)} if with_key else {}
    extra.update(revision_fields(update, options))
    return encode_content(update.content, extra, partial=partial)


def _first_content_type(items: tuple[Any, ...]) -> type[Any] | None:
    return infer_content_type(items[0].content) if items else None


# =============================================================================
# Insert
# =============================================================================


@dataclass(frozen=True)
class InsertDocument(Generic[T]):
    """
    Insert one document.

    Returns a DocumentHeader, or a Document with the stored content when
    ``return_new`` is set.

    Example:
        method = InsertDocument("customers", NewDocument(customer).with_key("94711"))
        header = await client.execute(method)
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    collection: str
    document: NewDocument[T]
    return_new: bool = False
    force_wait_for_sync: bool = False
    wait_for_sync_replication: bool = True
    content_type: type[Any] | None = None

    def operation(self) -> Operation:
        return Operation.CREATE

    def path(self) -> str:
        return document_path(self.collection)

    def parameters(self) -> dict[str, Any]:
        return _insert_parameters(self.return_new, self.force_wait_for_sync, self.wait_for_sync_replication)

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return _new_document_body(self.document)

    def decode(self, payload: Any) -> DocumentHeader | Document[T]:
        if self.return_new:
            content_type = self.content_type or infer_content_type(self.document.content)
            return decode_document(payload, content_type, "new")
        return DocumentHeader.from_json(payload)


@dataclass(frozen=True)
class InsertDocuments(Generic[T]):
    """
    Insert many documents in one request.

    Each outcome is a DocumentHeader (or a Document when ``return_new`` is
    set) or an ElementError, e.g. for a duplicate key.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    collection: str
    documents: tuple[NewDocument[T], ...]
    return_new: bool = False
    force_wait_for_sync: bool = False
    wait_for_sync_replication: bool = True
    content_type: type[Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "documents", tuple(self.documents))

    def operation(self) -> Operation:
        return Operation.CREATE

    def path(self) -> str:
        return document_path(self.collection)

    def parameters(self) -> dict[str, Any]:
        return _insert_parameters(self.return_new, self.force_wait_for_sync, self.wait_for_sync_replication)

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return encode_array(_new_document_body(d) for d in self.documents)

    def decode(self, payload: Any) -> BatchResult[DocumentHeader | Document[T]]:
        if self.return_new:
            content_type = self.content_type or _first_content_type(self.documents)
            return aggregate(payload, len(self.documents), lambda e: decode_document(e, content_type, "new"))
        return aggregate(payload, len(self.documents), DocumentHeader.from_json)


# =============================================================================
# Read
# =============================================================================


@dataclass(frozen=True)
class GetDocument(Generic[T]):
    """
    Fetch one document.

    ``conditions`` adds If-Match / If-None-Match checks; a mismatch raises
    PreconditionFailed, a matching If-None-Match raises NotModified.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    id: DocumentId
    conditions: Conditions = field(default_factory=Conditions)
    content_type: type[Any] | None = None

    def operation(self) -> Operation:
        return Operation.READ

    def path(self) -> str:
        return document_path(self.id.collection_name, self.id.document_key)

    def parameters(self) -> dict[str, Any]:
        return {}

    def headers(self) -> dict[str, str]:
        return self.conditions.headers()

    def body(self) -> str | None:
        return None

    def decode(self, payload: Any) -> Document[T]:
        return decode_document(payload, self.content_type)


@dataclass(frozen=True)
class GetDocuments(Generic[T]):
    """Fetch many documents of one collection by key in one request."""

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    collection: str
    keys: tuple[DocumentKey, ...]
    content_type: type[Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", tuple(DocumentKey.of(k) for k in self.keys))

    def operation(self) -> Operation:
        return Operation.REPLACE

    def path(self) -> str:
        return document_path(self.collection)

    def parameters(self) -> dict[str, Any]:
        return {PARAM_ONLY_GET: True}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return encode_array(dumps(str(k)) for k in self.keys)

    def decode(self, payload: Any) -> BatchResult[Document[T]]:
        return aggregate(payload, len(self.keys), lambda e: decode_document(e, self.content_type))


@dataclass(frozen=True)
class GetDocumentRevision:
    """
    Check whether a document exists without fetching its content.

    Returns the document's current Revision, or None if the server
    answers 404. The response of a header-only read has no body, so a
    missing document and a missing collection both yield None.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType(header_field=HEADER_ETAG)

    id: DocumentId

    def operation(self) -> Operation:
        return Operation.READ_HEADER

    def path(self) -> str:
        return document_path(self.id.collection_name, self.id.document_key)

    def parameters(self) -> dict[str, Any]:
        return {}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return None

    def decode(self, payload: Any) -> Revision | None:
        if payload is None:
            return None
        return Revision(str(payload).strip('"'))


# =============================================================================
# Replace / update
# =============================================================================


@dataclass(frozen=True)
class ReplaceDocument(Generic[T]):
    """
    Replace the content of one document.

    Example:
        method = ReplaceDocument(
            doc_id,
            DocumentUpdate(doc_id.key, replacement).with_revision(rev),
            options=WriteOptions(ignore_revisions=False, return_old=True),
        )
        updated = await client.execute(method)
        updated.old_revision == rev
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    id: DocumentId
    update: DocumentUpdate[T]
    options: WriteOptions = field(default_factory=WriteOptions)
    conditions: Conditions = field(default_factory=Conditions)
    content_type: type[Any] | None = None
    old_content_type: type[Any] | None = None

    def operation(self) -> Operation:
        return Operation.REPLACE

    def path(self) -> str:
        return document_path(self.id.collection_name, self.id.document_key)

    def parameters(self) -> dict[str, Any]:
        return self.options.parameters()

    def headers(self) -> dict[str, str]:
        return self.conditions.headers()

    def body(self) -> str | None:
        return _update_body(self.update, self.options, with_key=False, partial=False)

    def decode(self, payload: Any) -> UpdatedDocumentHeader[T]:
        content_type = self.content_type or infer_content_type(self.update.content)
        return decode_updated_header(
            payload,
            content_type,
            return_old=self.options.return_old,
            return_new=self.options.return_new,
            old_content_type=self.old_content_type,
        )


@dataclass(frozen=True)
class UpdateDocument(Generic[T]):
    """
    Partially update one document.

    Only the attributes present in the content are changed. With a
    pydantic model, fields that were never set are not sent; fields set
    to None are sent as null, which removes the attribute when
    ``keep_null`` is False.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    id: DocumentId
    update: DocumentUpdate[Any]
    options: WriteOptions = field(default_factory=WriteOptions)
    conditions: Conditions = field(default_factory=Conditions)
    keep_null: bool | None = None
    merge_objects: bool | None = None
    content_type: type[Any] | None = None
    old_content_type: type[Any] | None = None

    def operation(self) -> Operation:
        return Operation.UPDATE

    def path(self) -> str:
        return document_path(self.id.collection_name, self.id.document_key)

    def parameters(self) -> dict[str, Any]:
        return _update_parameters(self.options, self.keep_null, self.merge_objects)

    def headers(self) -> dict[str, str]:
        return self.conditions.headers()

    def body(self) -> str | None:
        return _update_body(self.update, self.options, with_key=False, partial=True)

    def decode(self, payload: Any) -> UpdatedDocumentHeader[T]:
        return decode_updated_header(
            payload,
            self.content_type,
            return_old=self.options.return_old,
            return_new=self.options.return_new,
            old_content_type=self.old_content_type,
        )


@dataclass(frozen=True)
class ReplaceDocuments(Generic[T]):
    """Replace many documents of one collection in one request."""

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    collection: str
    updates: tuple[DocumentUpdate[T], ...]
    options: WriteOptions = field(default_factory=WriteOptions)
    content_type: type[Any] | None = None
    old_content_type: type[Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "updates", tuple(self.updates))

    def operation(self) -> Operation:
        return Operation.REPLACE

    def path(self) -> str:
        return document_path(self.collection)

    def parameters(self) -> dict[str, Any]:
        return self.options.parameters()

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return encode_array(
            _update_body(u, self.options, with_key=True, partial=False) for u in self.updates
        )

    def decode(self, payload: Any) -> BatchResult[UpdatedDocumentHeader[T]]:
        content_type = self.content_type or _first_content_type(self.updates)
        return aggregate(
            payload,
            len(self.updates),
            lambda e: decode_updated_header(
                e,
                content_type,
                return_old=self.options.return_old,
                return_new=self.options.return_new,
                old_content_type=self.old_content_type,
            ),
        )


@dataclass(frozen=True)
class UpdateDocuments(Generic[T]):
    """Partially update many documents of one collection in one request."""

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    collection: str
    updates: tuple[DocumentUpdate[Any], ...]
    options: WriteOptions = field(default_factory=WriteOptions)
    keep_null: bool | None = None
    merge_objects: bool | None = None
    content_type: type[Any] | None = None
    old_content_type: type[Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "updates", tuple(self.updates))

    def operation(self) -> Operation:
        return Operation.UPDATE

    def path(self) -> str:
        return document_path(self.collection)

    def parameters(self) -> dict[str, Any]:
        return _update_parameters(self.options, self.keep_null, self.merge_objects)

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return encode_array(
            _update_body(u, self.options, with_key=True, partial=True) for u in self.updates
        )

    def decode(self, payload: Any) -> BatchResult[UpdatedDocumentHeader[T]]:
        return aggregate(
            payload,
            len(self.updates),
            lambda e: decode_updated_header(
                e,
                self.content_type,
                return_old=self.options.return_old,
                return_new=self.options.return_new,
                old_content_type=self.old_content_type,
            ),
        )


# =============================================================================
# Delete
# =============================================================================


def _deleted(payload: Mapping[str, Any], return_old: bool, content_type: type[Any] | None) -> DocumentHeader | Document[Any]:
    if return_old:
        return decode_document(payload, content_type, "old")
    return DocumentHeader.from_json(payload)


@dataclass(frozen=True)
class DeleteDocument(Generic[T]):
    """
    Delete one document.

    Returns the DocumentHeader of the removed document, or a Document with
    its last content when ``options.return_old`` is set.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    id: DocumentId
    options: WriteOptions = field(default_factory=WriteOptions)
    conditions: Conditions = field(default_factory=Conditions)
    content_type: type[Any] | None = None

    def operation(self) -> Operation:
        return Operation.DELETE

    def path(self) -> str:
        return document_path(self.id.collection_name, self.id.document_key)

    def parameters(self) -> dict[str, Any]:
        return self.options.parameters(allow_return_new=False)

    def headers(self) -> dict[str, str]:
        return self.conditions.headers()

    def body(self) -> str | None:
        return None

    def decode(self, payload: Any) -> DocumentHeader | Document[T]:
        return _deleted(payload, self.options.return_old, self.content_type)


@dataclass(frozen=True)
class DeleteDocuments(Generic[T]):
    """
    Delete many documents of one collection in one request.

    Items are keys, or DocumentHeaders whose revision is checked unless
    ``options.ignore_revisions`` is set.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    collection: str
    items: tuple[DocumentKey | DocumentHeader, ...]
    options: WriteOptions = field(default_factory=WriteOptions)
    content_type: type[Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "items",
            tuple(i if isinstance(i, DocumentHeader) else DocumentKey.of(i) for i in self.items),
        )

    def operation(self) -> Operation:
        return Operation.DELETE

    def path(self) -> str:
        return document_path(self.collection)

    def parameters(self) -> dict[str, Any]:
        return self.options.parameters(allow_return_new=False)

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return encode_array(self._selector(i) for i in self.items)

    def _selector(self, item: DocumentKey | DocumentHeader) -> str:
        if isinstance(item, DocumentKey):
            return dumps(str(item))
        selector = {"_key": str(item.key)}
        if not self.options.ignore_revisions:
            selector["_rev"] = str(item.revision)
        return dumps(selector)

    def decode(self, payload: Any) -> BatchResult[DocumentHeader | Document[T]]:
        return aggregate(
            payload,
            len(self.items),
            lambda e: _deleted(e, self.options.return_old, self.content_type),
        )


DocumentMethod = Union[
    InsertDocument,
    InsertDocuments,
    GetDocument,
    GetDocuments,
    GetDocumentRevision,
    ReplaceDocument,
    ReplaceDocuments,
    UpdateDocument,
    UpdateDocuments,
    DeleteDocument,
    DeleteDocuments,
]
