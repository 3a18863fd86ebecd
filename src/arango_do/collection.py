"""
Collection - ArangoDB document operations.

Provides async document operations bound to one collection. Every call
builds one method object and executes it through the client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, Iterable, TypeVar

from .batch import BatchResult
from .collection_methods import (
    ChangeCollectionProperties,
    GetCollection,
    GetCollectionChecksum,
    GetCollectionDocumentCount,
    GetCollectionProperties,
    GetCollectionRevision,
)
from .conditions import Conditions, WriteOptions
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
from .types import (
    CollectionChecksum,
    CollectionInfo,
    CollectionProperties,
    CollectionPropertiesUpdate,
    Document,
    DocumentHeader,
    DocumentId,
    DocumentKey,
    DocumentUpdate,
    NewDocument,
    Revision,
    UpdatedDocumentHeader,
)

if TYPE_CHECKING:
    from .database import Database

T = TypeVar("T")

__all__ = ["Collection"]


def _new_document(item: Any) -> NewDocument[Any]:
    return item if isinstance(item, NewDocument) else NewDocument(item)


class Collection(Generic[T]):
    """
    ArangoDB collection with async document operations.

    Example:
        customers = db["customers"]

        # Insert
        header = await customers.insert_one({"name": "Jane Doe"}, key="94711")

        # Read
        doc = await customers.get("94711")
        print(doc.revision, doc.content)

        # Conditional replace
        updated = await customers.replace(
            "94711", {"name": "Jane Roe"}, if_match=doc.revision, return_old=True
        )

        # Batch insert with per-item outcomes
        result = await customers.insert_many([{"name": "A"}, {"name": "B"}])
        for outcome in result:
            ...
    """

    __slots__ = ("_database", "_name", "_content_type")

    def __init__(
        self,
        database: Database,
        name: str,
        content_type: type[Any] | None = None,
    ) -> None:
        """
        Initialize a collection.

        Args:
            database: Parent database instance.
            name: Collection name.
            content_type: Type documents are decoded into (plain dicts if None).
        """
        self._database = database
        self._name = name
        self._content_type = content_type

    @property
    def name(self) -> str:
        """Get the collection name."""
        return self._name

    @property
    def full_name(self) -> str:
        """Get the full collection name (database.collection)."""
        return f"{self._database.name}.{self._name}"

    @property
    def database(self) -> Database:
        """Get the parent database."""
        return self._database

    @property
    def content_type(self) -> type[Any] | None:
        return self._content_type

    def document_id(self, key: DocumentKey | str) -> DocumentId:
        """Build the id of the document with ``key`` in this collection."""
        return DocumentId(self._name, str(key))

    def _type(self, content_type: type[Any] | None) -> type[Any] | None:
        return content_type or self._content_type

    # -------------------------------------------------------------------------
    # Insert
    # -------------------------------------------------------------------------

    async def insert_one(
        self,
        document: NewDocument[T] | T,
        key: DocumentKey | str | None = None,
        *,
        return_new: bool = False,
        force_wait_for_sync: bool = False,
    ) -> DocumentHeader | Document[T]:
        """
        Insert a single document.

        Args:
            document: Content, or a NewDocument carrying content and key.
            key: Key to store the document under (server generated if None).
            return_new: Return the stored document with its content.
            force_wait_for_sync: Wait until the write is synced to disk.

        Returns:
            DocumentHeader, or Document if return_new is set.

        Raises:
            DuplicateKeyError: If a document with the same key exists.
            ApiError: If the insert fails.
        """
        new_document = _new_document(document)
        if key is not None:
            new_document = new_document.with_key(key)
        return await self._database.execute(
            InsertDocument(
                self._name,
                new_document,
                return_new=return_new,
                force_wait_for_sync=force_wait_for_sync,
                content_type=self._content_type,
            )
        )

    async def insert_many(
        self,
        documents: Iterable[NewDocument[T] | T],
        *,
        return_new: bool = False,
        force_wait_for_sync: bool = False,
    ) -> BatchResult[DocumentHeader | Document[T]]:
        """
        Insert multiple documents in one request.

        Failed items do not fail the call: their position in the result
        holds an ElementError instead of a header.

        Args:
            documents: Contents or NewDocuments.
            return_new: Return the stored documents with their content.
            force_wait_for_sync: Wait until the writes are synced to disk.

        Returns:
            BatchResult with one outcome per document, in input order.
        """
        return await self._database.execute(
            InsertDocuments(
                self._name,
                tuple(_new_document(d) for d in documents),
                return_new=return_new,
                force_wait_for_sync=force_wait_for_sync,
                content_type=self._content_type,
            )
        )

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    async def get(
        self,
        key: DocumentKey | str,
        *,
        if_match: Revision | str | None = None,
        if_none_match: Revision | str | None = None,
        content_type: type[Any] | None = None,
    ) -> Document[T]:
        """
        Fetch a single document.

        Args:
            key: Document key.
            if_match: Only succeed if the document has this revision.
            if_none_match: Only succeed if the document has another revision.
            content_type: Override the collection's content type.

        Raises:
            NotFoundError: If the document or the collection does not exist.
            PreconditionFailed: If the if_match revision does not match.
            NotModified: If the if_none_match revision matches.
        """
        return await self._database.execute(
            GetDocument(
                self.document_id(key),
                Conditions(if_match=if_match, if_none_match=if_none_match),
                content_type=self._type(content_type),
            )
        )

    async def get_many(
        self,
        keys: Iterable[DocumentKey | str],
        *,
        content_type: type[Any] | None = None,
    ) -> BatchResult[Document[T]]:
        """
        Fetch multiple documents in one request.

        Missing documents are reported as ElementErrors at their position.
        """
        return await self._database.execute(
            GetDocuments(self._name, tuple(keys), content_type=self._type(content_type))
        )

    async def document_revision(self, key: DocumentKey | str) -> Revision | None:
        """
        Get the current revision of a document without fetching it.

        Returns:
            The revision, or None if the document does not exist.
        """
        return await self._database.execute(GetDocumentRevision(self.document_id(key)))

    # -------------------------------------------------------------------------
    # Replace / update
    # -------------------------------------------------------------------------

    async def replace(
        self,
        key: DocumentKey | str,
        content: Any,
        revision: Revision | str | None = None,
        *,
        if_match: Revision | str | None = None,
        ignore_revisions: bool | None = None,
        return_old: bool = False,
        return_new: bool = False,
        force_wait_for_sync: bool = False,
        content_type: type[Any] | None = None,
        old_content_type: type[Any] | None = None,
    ) -> UpdatedDocumentHeader[T]:
        """
        Replace a single document.

        Args:
            key: Document key.
            content: The new content.
            revision: Expected revision, checked in the request body.
            if_match: Expected revision, checked via the If-Match header.
            ignore_revisions: Skip the body revision check.
            return_old: Return the previous content.
            return_new: Return the new content.
            force_wait_for_sync: Wait until the write is synced to disk.
            content_type: Type to decode the new content into (default: the
                collection's content type, else the type of ``content``).
            old_content_type: Type to decode the previous content into
                (default: the collection's content type).

        Returns:
            UpdatedDocumentHeader with the new and the previous revision.

        Raises:
            PreconditionFailed: If a revision check fails.
            NotFoundError: If the document does not exist.
        """
        update = DocumentUpdate(DocumentKey.of(key), content, revision)
        options = WriteOptions(
            return_old=return_old,
            return_new=return_new,
            force_wait_for_sync=force_wait_for_sync,
            ignore_revisions=ignore_revisions,
        )
        return await self._database.execute(
            ReplaceDocument(
                self.document_id(key),
                update,
                options,
                Conditions(if_match=if_match),
                content_type=self._type(content_type),
                old_content_type=old_content_type or self._content_type,
            )
        )

    async def update(
        self,
        key: DocumentKey | str,
        content: Any,
        revision: Revision | str | None = None,
        *,
        if_match: Revision | str | None = None,
        ignore_revisions: bool | None = None,
        keep_null: bool | None = None,
        merge_objects: bool | None = None,
        return_old: bool = False,
        return_new: bool = False,
        force_wait_for_sync: bool = False,
        content_type: type[Any] | None = None,
        old_content_type: type[Any] | None = None,
    ) -> UpdatedDocumentHeader[T]:
        """
        Partially update a single document.

        Args:
            key: Document key.
            content: Attributes to change.
            revision: Expected revision, checked in the request body.
            if_match: Expected revision, checked via the If-Match header.
            ignore_revisions: Skip the body revision check.
            keep_null: False removes attributes that are set to null.
            merge_objects: False replaces nested objects instead of merging.
            return_old: Return the previous content.
            return_new: Return the new content.
            force_wait_for_sync: Wait until the write is synced to disk.
            content_type: Override the collection's content type.
            old_content_type: Type to decode the previous content into.
        """
        update = DocumentUpdate(DocumentKey.of(key), content, revision)
        options = WriteOptions(
            return_old=return_old,
            return_new=return_new,
            force_wait_for_sync=force_wait_for_sync,
            ignore_revisions=ignore_revisions,
        )
        return await self._database.execute(
            UpdateDocument(
                self.document_id(key),
                update,
                options,
                Conditions(if_match=if_match),
                keep_null=keep_null,
                merge_objects=merge_objects,
                content_type=self._type(content_type),
                old_content_type=old_content_type or self._content_type,
            )
        )

    async def replace_many(
        self,
        updates: Iterable[DocumentUpdate[Any]],
        *,
        ignore_revisions: bool | None = None,
        return_old: bool = False,
        return_new: bool = False,
        force_wait_for_sync: bool = False,
        content_type: type[Any] | None = None,
        old_content_type: type[Any] | None = None,
    ) -> BatchResult[UpdatedDocumentHeader[T]]:
        """Replace multiple documents in one request."""
        options = WriteOptions(
            return_old=return_old,
            return_new=return_new,
            force_wait_for_sync=force_wait_for_sync,
            ignore_revisions=ignore_revisions,
        )
        return await self._database.execute(
            ReplaceDocuments(
                self._name,
                tuple(updates),
                options,
                content_type=self._type(content_type),
                old_content_type=old_content_type or self._content_type,
            )
        )

    async def update_many(
        self,
        updates: Iterable[DocumentUpdate[Any]],
        *,
        ignore_revisions: bool | None = None,
        keep_null: bool | None = None,
        merge_objects: bool | None = None,
        return_old: bool = False,
        return_new: bool = False,
        force_wait_for_sync: bool = False,
        content_type: type[Any] | None = None,
        old_content_type: type[Any] | None = None,
    ) -> BatchResult[UpdatedDocumentHeader[T]]:
        """Partially update multiple documents in one request."""
        options = WriteOptions(
            return_old=return_old,
            return_new=return_new,
            force_wait_for_sync=force_wait_for_sync,
            ignore_revisions=ignore_revisions,
        )
        return await self._database.execute(
            UpdateDocuments(
                self._name,
                tuple(updates),
                options,
                keep_null=keep_null,
                merge_objects=merge_objects,
                content_type=self._type(content_type),
                old_content_type=old_content_type or self._content_type,
            )
        )

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    async def delete(
        self,
        key: DocumentKey | str,
        *,
        if_match: Revision | str | None = None,
        return_old: bool = False,
        force_wait_for_sync: bool = False,
    ) -> DocumentHeader | Document[T]:
        """
        Delete a single document.

        Returns:
            DocumentHeader of the removed document, or a Document with its
            last content if return_old is set.
        """
        options = WriteOptions(return_old=return_old, force_wait_for_sync=force_wait_for_sync)
        return await self._database.execute(
            DeleteDocument(
                self.document_id(key),
                options,
                Conditions(if_match=if_match),
                content_type=self._content_type,
            )
        )

    async def delete_many(
        self,
        items: Iterable[DocumentKey | DocumentHeader | str],
        *,
        ignore_revisions: bool | None = None,
        return_old: bool = False,
        force_wait_for_sync: bool = False,
    ) -> BatchResult[DocumentHeader | Document[T]]:
        """Delete multiple documents by key or header in one request."""
        options = WriteOptions(
            return_old=return_old,
            force_wait_for_sync=force_wait_for_sync,
            ignore_revisions=ignore_revisions,
        )
        return await self._database.execute(
            DeleteDocuments(self._name, tuple(items), options, content_type=self._content_type)
        )

    # -------------------------------------------------------------------------
    # Collection management
    # -------------------------------------------------------------------------

    async def info(self) -> CollectionInfo:
        """Get the collection's description."""
        return await self._database.execute(GetCollection(self._name))

    async def properties(self) -> CollectionProperties:
        """Get the collection's properties."""
        return await self._database.execute(GetCollectionProperties(self._name))

    async def change_properties(
        self,
        wait_for_sync: bool | None = None,
        journal_size: int | None = None,
    ) -> CollectionProperties:
        """Change the collection's changeable properties."""
        updates = CollectionPropertiesUpdate(wait_for_sync=wait_for_sync, journal_size=journal_size)
        return await self._database.execute(ChangeCollectionProperties(self._name, updates))

    async def count(self) -> int:
        """Get the number of documents in the collection."""
        return await self._database.execute(GetCollectionDocumentCount(self._name))

    async def revision(self) -> Revision:
        """Get the collection's revision."""
        return await self._database.execute(GetCollectionRevision(self._name))

    async def checksum(self, with_revisions: bool = False, with_data: bool = False) -> CollectionChecksum:
        """Get the collection's checksum."""
        return await self._database.execute(
            GetCollectionChecksum(self._name, with_revisions, with_data)
        )

    async def rename(self, new_name: str) -> CollectionInfo:
        """Rename the collection; this handle keeps pointing at the old name."""
        return await self._database.rename_collection(self._name, new_name)

    async def drop(self, system: bool = False) -> str:
        """Drop the collection."""
        return await self._database.drop_collection(self._name, system)

    def __repr__(self) -> str:
        return f"Collection({self.full_name!r})"
