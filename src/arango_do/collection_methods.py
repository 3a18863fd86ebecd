"""
Collection methods - managing collections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from .conditions import PARAM_WAIT_FOR_SYNC_REPLICATION
from .content import dumps
from .method import (
    FIELD_ID,
    FIELD_RESULT,
    PATH_CHECKSUM,
    PATH_COUNT,
    PATH_PROPERTIES,
    PATH_RENAME,
    PATH_REVISION,
    Operation,
    ReturnType,
    collection_path,
)
from .types import (
    CollectionChecksum,
    CollectionInfo,
    CollectionProperties,
    CollectionPropertiesUpdate,
    NewCollection,
    ProtocolViolation,
    Revision,
)

__all__ = [
    "ChangeCollectionProperties",
    "CollectionMethod",
    "CreateCollection",
    "DropCollection",
    "GetCollection",
    "GetCollectionChecksum",
    "GetCollectionDocumentCount",
    "GetCollectionProperties",
    "GetCollectionRevision",
    "ListCollections",
    "RenameCollection",
]

PARAM_EXCLUDE_SYSTEM = "excludeSystem"
PARAM_IS_SYSTEM = "isSystem"
PARAM_WITH_REVISIONS = "withRevisions"
PARAM_WITH_DATA = "withData"


@dataclass(frozen=True)
class ListCollections:
    """
    List the collections of the database.

    System collections are excluded unless ``exclude_system`` is False.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType(result_field=FIELD_RESULT)

    exclude_system: bool = True

    @classmethod
    def including_system(cls) -> ListCollections:
        return cls(exclude_system=False)

    def operation(self) -> Operation:
        return Operation.READ

    def path(self) -> str:
        return collection_path()

    def parameters(self) -> dict[str, Any]:
        if self.exclude_system:
            return {PARAM_EXCLUDE_SYSTEM: True}
        return {}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return None

    def decode(self, payload: Any) -> list[CollectionInfo]:
        if not isinstance(payload, list):
            raise ProtocolViolation("Collection list must be a JSON array")
        return [CollectionInfo.from_json(item) for item in payload]


@dataclass(frozen=True)
class CreateCollection:
    """Create a collection."""

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    collection: NewCollection
    wait_for_sync_replication: bool = True

    @classmethod
    def with_name(cls, name: str) -> CreateCollection:
        return cls(NewCollection(name))

    @classmethod
    def documents_with_name(cls, name: str) -> CreateCollection:
        return cls(NewCollection.documents(name))

    @classmethod
    def edges_with_name(cls, name: str) -> CreateCollection:
        return cls(NewCollection.edges(name))

    def operation(self) -> Operation:
        return Operation.CREATE

    def path(self) -> str:
        return collection_path()

    def parameters(self) -> dict[str, Any]:
        if not self.wait_for_sync_replication:
            return {PARAM_WAIT_FOR_SYNC_REPLICATION: 0}
        return {}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return dumps(self.collection.to_json())

    def decode(self, payload: Any) -> CollectionProperties:
        return CollectionProperties.from_json(payload)


@dataclass(frozen=True)
class DropCollection:
    """
    Drop a collection.

    Returns the id of the dropped collection. System collections are only
    dropped when ``system`` is True.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType(result_field=FIELD_ID)

    name: str
    system: bool = False

    def operation(self) -> Operation:
        return Operation.DELETE

    def path(self) -> str:
        return collection_path(self.name)

    def parameters(self) -> dict[str, Any]:
        if self.system:
            return {PARAM_IS_SYSTEM: True}
        return {}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return None

    def decode(self, payload: Any) -> str:
        return str(payload)


@dataclass(frozen=True)
class GetCollection:
    """Fetch the description of a collection."""

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    name: str

    def operation(self) -> Operation:
        return Operation.READ

    def path(self) -> str:
        return collection_path(self.name)

    def parameters(self) -> dict[str, Any]:
        return {}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return None

    def decode(self, payload: Any) -> CollectionInfo:
        return CollectionInfo.from_json(payload)


@dataclass(frozen=True)
class GetCollectionProperties:
    """Fetch the properties of a collection."""

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    name: str

    def operation(self) -> Operation:
        return Operation.READ

    def path(self) -> str:
        return collection_path(self.name, PATH_PROPERTIES)

    def parameters(self) -> dict[str, Any]:
        return {}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return None

    def decode(self, payload: Any) -> CollectionProperties:
        return CollectionProperties.from_json(payload)


@dataclass(frozen=True)
class ChangeCollectionProperties:
    """
    Change the properties of a collection.

    Only ``wait_for_sync`` and ``journal_size`` can be changed; use
    RenameCollection to change the name.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    name: str
    updates: CollectionPropertiesUpdate = field(default_factory=CollectionPropertiesUpdate)

    def operation(self) -> Operation:
        return Operation.REPLACE

    def path(self) -> str:
        return collection_path(self.name, PATH_PROPERTIES)

    def parameters(self) -> dict[str, Any]:
        return {}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return dumps(self.updates.to_json())

    def decode(self, payload: Any) -> CollectionProperties:
        return CollectionProperties.from_json(payload)


@dataclass(frozen=True)
class RenameCollection:
    """
    Rename a collection.

    Not available in a cluster. Documents keep their stored ids.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    name: str
    new_name: str

    def operation(self) -> Operation:
        return Operation.REPLACE

    def path(self) -> str:
        return collection_path(self.name, PATH_RENAME)

    def parameters(self) -> dict[str, Any]:
        return {}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return dumps({"name": self.new_name})

    def decode(self, payload: Any) -> CollectionInfo:
        return CollectionInfo.from_json(payload)


@dataclass(frozen=True)
class GetCollectionChecksum:
    """
    Fetch the checksum of a collection.

    By default the checksum covers keys only; ``with_revisions`` and
    ``with_data`` include revisions and document bodies.
    """

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    name: str
    with_revisions: bool = False
    with_data: bool = False

    def operation(self) -> Operation:
        return Operation.READ

    def path(self) -> str:
        return collection_path(self.name, PATH_CHECKSUM)

    def parameters(self) -> dict[str, Any]:
        return {
            PARAM_WITH_REVISIONS: True if self.with_revisions else 0,
            PARAM_WITH_DATA: True if self.with_data else 0,
        }

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return None

    def decode(self, payload: Any) -> CollectionChecksum:
        return CollectionChecksum.from_json(payload)


@dataclass(frozen=True)
class GetCollectionDocumentCount:
    """Fetch the number of documents in a collection."""

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    name: str

    def operation(self) -> Operation:
        return Operation.READ

    def path(self) -> str:
        return collection_path(self.name, PATH_COUNT)

    def parameters(self) -> dict[str, Any]:
        return {}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return None

    def decode(self, payload: Any) -> int:
        if not isinstance(payload, dict) or not isinstance(payload.get("count"), int):
            raise ProtocolViolation("Response is missing the 'count' field")
        return payload["count"]


@dataclass(frozen=True)
class GetCollectionRevision:
    """Fetch the revision of a collection."""

    RETURN_TYPE: ClassVar[ReturnType] = ReturnType()

    name: str

    def operation(self) -> Operation:
        return Operation.READ

    def path(self) -> str:
        return collection_path(self.name, PATH_REVISION)

    def parameters(self) -> dict[str, Any]:
        return {}

    def headers(self) -> dict[str, str]:
        return {}

    def body(self) -> str | None:
        return None

    def decode(self, payload: Any) -> Revision:
        if not isinstance(payload, dict) or "revision" not in payload:
            raise ProtocolViolation("Response is missing the 'revision' field")
        return Revision(str(payload["revision"]))


CollectionMethod = Union[
    ListCollections,
    CreateCollection,
    DropCollection,
    GetCollection,
    GetCollectionProperties,
    ChangeCollectionProperties,
    RenameCollection,
    GetCollectionChecksum,
    GetCollectionDocumentCount,
    GetCollectionRevision,
]
