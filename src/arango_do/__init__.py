"""
arango-do - ArangoDB document operations. Async client for .do services.

This package provides an async client for the ArangoDB HTTP document API
with support for:
- Single and batch document CRUD with per-item batch outcomes
- Optimistic concurrency via revisions (If-Match and body revisions)
- Typed content (pydantic models) or opaque JSON text
- Collection management

Example usage:
    from arango_do import ArangoClient, ElementError

    async def main():
        async with ArangoClient("http://localhost:8529") as client:
            db = client["myapp"]
            await db.create_collection("customers")
            customers = db["customers"]

            # Insert a document under a chosen key
            header = await customers.insert_one({"name": "Jane Doe"}, key="94711")

            # Read it back
            doc = await customers.get("94711")
            print(doc.revision, doc.content["name"])

            # Replace only if nobody changed it meanwhile
            await customers.replace("94711", {"name": "Jane Roe"}, if_match=doc.revision)

            # Batch writes report failures per item
            result = await customers.insert_many([{"name": "A"}, {"name": "B"}])
            for outcome in result:
                if isinstance(outcome, ElementError):
                    print(outcome.code, outcome.message)

    import asyncio
    asyncio.run(main())
"""

from __future__ import annotations

__version__ = "0.1.0"

from .batch import BatchResult
from .client import ArangoClient
from .collection import Collection
from .collection_methods import (
    ChangeCollectionProperties,
    CreateCollection,
    DropCollection,
    GetCollection,
    GetCollectionChecksum,
    GetCollectionDocumentCount,
    GetCollectionProperties,
    GetCollectionRevision,
    ListCollections,
    RenameCollection,
)
from .conditions import Conditions, WriteOptions
from .content import JsonString
from .database import Database
from .document_methods import (
    DeleteDocument,
    DeleteDocuments,
    GetDocument,
    GetDocumentRevision,
    GetDocuments,
    InsertDocument,
    InsertDocuments,
    ReplaceDocument,
    ReplaceDocuments,
    UpdateDocument,
    UpdateDocuments,
)
from .method import Operation, PreparedRequest, prepare
from .transport import HttpTransport, RawResponse, Transport
from .types import (
    ApiError,
    ArangoError,
    CollectionChecksum,
    CollectionInfo,
    CollectionProperties,
    CollectionPropertiesUpdate,
    CollectionStatus,
    CollectionType,
    Document,
    DocumentHeader,
    DocumentId,
    DocumentKey,
    DocumentUpdate,
    DuplicateKeyError,
    ElementError,
    ErrorCode,
    KeyOptions,
    MalformedIdentifier,
    NewCollection,
    NewDocument,
    NotFoundError,
    NotModified,
    PreconditionFailed,
    ProtocolViolation,
    Revision,
    TransportFailure,
    UpdatedDocumentHeader,
)

__all__ = [
    # Main classes
    "ArangoClient",
    "Database",
    "Collection",
    "BatchResult",
    # Identity & documents
    "DocumentId",
    "DocumentKey",
    "Revision",
    "NewDocument",
    "DocumentUpdate",
    "DocumentHeader",
    "Document",
    "UpdatedDocumentHeader",
    "JsonString",
    # Conditions
    "Conditions",
    "WriteOptions",
    # Document methods
    "InsertDocument",
    "InsertDocuments",
    "GetDocument",
    "GetDocuments",
    "GetDocumentRevision",
    "ReplaceDocument",
    "ReplaceDocuments",
    "UpdateDocument",
    "UpdateDocuments",
    "DeleteDocument",
    "DeleteDocuments",
    # Collection methods
    "ListCollections",
    "CreateCollection",
    "DropCollection",
    "GetCollection",
    "GetCollectionProperties",
    "ChangeCollectionProperties",
    "RenameCollection",
    "GetCollectionChecksum",
    "GetCollectionDocumentCount",
    "GetCollectionRevision",
    # Collection types
    "CollectionType",
    "CollectionStatus",
    "CollectionInfo",
    "CollectionProperties",
    "CollectionPropertiesUpdate",
    "CollectionChecksum",
    "KeyOptions",
    "NewCollection",
    # Requests & transport
    "Operation",
    "PreparedRequest",
    "prepare",
    "Transport",
    "HttpTransport",
    "RawResponse",
    # Exceptions
    "ArangoError",
    "TransportFailure",
    "ProtocolViolation",
    "MalformedIdentifier",
    "ApiError",
    "NotModified",
    "NotFoundError",
    "PreconditionFailed",
    "DuplicateKeyError",
    "ElementError",
    "ErrorCode",
    # Version
    "__version__",
]
