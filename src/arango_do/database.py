"""
Database - ArangoDB database operations.

Provides collection handles and the collection management calls of one
database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .collection import Collection
from .collection_methods import (
    CreateCollection,
    DropCollection,
    GetCollection,
    GetCollectionChecksum,
    ListCollections,
    RenameCollection,
)
from .types import (
    CollectionChecksum,
    CollectionInfo,
    CollectionProperties,
    CollectionType,
    KeyOptions,
    NewCollection,
)

if TYPE_CHECKING:
    from .client import ArangoClient, Method

__all__ = ["Database"]


class Database:
    """
    ArangoDB database with async operations.

    Collections can be accessed using either attribute access or
    subscript notation.

    Example:
        db = client["myapp"]

        # Access collections
        customers = db.customers
        orders = db["orders"]

        # Typed collection
        customers = db.get_collection("customers", Customer)

        # List collections
        names = await db.list_collection_names()
    """

    __slots__ = ("_client", "_name", "_collections")

    def __init__(
        self,
        client: ArangoClient,
        name: str,
    ) -> None:
        """
        Initialize a database.

        Args:
            client: Parent ArangoClient instance.
            name: Database name.
        """
        self._client = client
        self._name = name
        self._collections: dict[str, Collection[Any]] = {}

    @property
    def name(self) -> str:
        """Get the database name."""
        return self._name

    @property
    def client(self) -> ArangoClient:
        """Get the parent client."""
        return self._client

    async def execute(self, method: Method) -> Any:
        """Execute a method in this database."""
        return await self._client.execute(method, database=self._name)

    def __getitem__(self, name: str) -> Collection[Any]:
        """
        Get a collection by name using subscript notation.

        Args:
            name: Collection name.

        Returns:
            Collection instance.

        Example:
            customers = db["customers"]
        """
        if name not in self._collections:
            self._collections[name] = Collection(self, name)
        return self._collections[name]

    def __getattr__(self, name: str) -> Collection[Any]:
        """
        Get a collection by name using attribute access.

        Args:
            name: Collection name.

        Returns:
            Collection instance.

        Example:
            customers = db.customers
        """
        if name.startswith("_"):
            raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

        return self[name]

    def get_collection(
        self,
        name: str,
        content_type: type[Any] | None = None,
    ) -> Collection[Any]:
        """
        Get a collection that decodes document content into ``content_type``.

        Args:
            name: Collection name.
            content_type: A pydantic model class or JsonString; plain dicts
                when None.

        Returns:
            Collection instance.

        Example:
            class Customer(BaseModel):
                name: str
                age: int

            customers = db.get_collection("customers", Customer)
            doc = await customers.get("94711")
            doc.content.name
        """
        if content_type is None:
            return self[name]
        return Collection(self, name, content_type)

    async def list_collections(self, exclude_system: bool = True) -> list[CollectionInfo]:
        """
        List the collections of the database.

        Args:
            exclude_system: Leave out system collections.

        Returns:
            List of collection descriptions.
        """
        return await self.execute(ListCollections(exclude_system=exclude_system))

    async def list_collection_names(self, exclude_system: bool = True) -> list[str]:
        """
        List the collection names of the database.

        Returns:
            List of collection names.
        """
        return [c.name for c in await self.list_collections(exclude_system)]

    async def get_collection_info(self, name: str) -> CollectionInfo:
        """
        Get the description of a collection.

        Raises:
            NotFoundError: If the collection does not exist.
        """
        return await self.execute(GetCollection(name))

    async def create_collection(
        self,
        name: str,
        type: CollectionType | None = None,
        *,
        wait_for_sync: bool | None = None,
        is_system: bool | None = None,
        key_options: KeyOptions | None = None,
        wait_for_sync_replication: bool = True,
    ) -> CollectionProperties:
        """
        Create a new collection.

        Args:
            name: Collection name.
            type: Documents or edges (server default: documents).
            wait_for_sync: Sync every write to disk before returning.
            is_system: Create a system collection.
            key_options: Key generator settings.
            wait_for_sync_replication: Cluster only; wait for all replicas.

        Returns:
            The properties of the new collection.
        """
        collection = NewCollection(
            name,
            type=type,
            wait_for_sync=wait_for_sync,
            is_system=is_system,
            key_options=key_options,
        )
        return await self.execute(CreateCollection(collection, wait_for_sync_replication))

    async def drop_collection(self, name: str, system: bool = False) -> str:
        """
        Drop a collection.

        Args:
            name: Name of the collection to drop.
            system: Must be True to drop a system collection.

        Returns:
            The id of the dropped collection.
        """
        collection_id = await self.execute(DropCollection(name, system))
        self._collections.pop(name, None)
        return collection_id

    async def rename_collection(self, name: str, new_name: str) -> CollectionInfo:
        """
        Rename a collection.

        Args:
            name: Current collection name.
            new_name: New collection name.

        Returns:
            The description of the renamed collection.
        """
        info = await self.execute(RenameCollection(name, new_name))
        self._collections.pop(name, None)
        return info

    async def collection_checksum(
        self,
        name: str,
        with_revisions: bool = False,
        with_data: bool = False,
    ) -> CollectionChecksum:
        """
        Get the checksum of a collection.

        Args:
            name: Collection name.
            with_revisions: Include document revisions.
            with_data: Include document bodies.
        """
        return await self.execute(GetCollectionChecksum(name, with_revisions, with_data))

    def __repr__(self) -> str:
        return f"Database({self._name!r})"
