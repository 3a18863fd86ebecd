"""
Pytest fixtures for arango-do tests.

Provides an in-memory ArangoDB server implementing the Transport protocol
and client/database/collection fixtures for testing without actual
network connections.
"""

from __future__ import annotations

import itertools
import json
import zlib
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

import pytest
from pydantic import BaseModel

from arango_do.method import Operation
from arango_do.transport import RawResponse

UNIQUE_CONSTRAINT_MESSAGE = 'unique constraint violated - in index 0 of type primary over ["_key"]'

SYSTEM_ATTRIBUTES = ("_id", "_key", "_rev")


# =============================================================================
# Content models used across tests
# =============================================================================


class Contact(BaseModel):
    address: str
    kind: str
    tag: str | None = None


class Customer(BaseModel):
    name: str
    contact: list[Contact] = []
    gender: str = "female"
    age: int = 0
    active: bool = True
    groups: list[str] = []


class CustomerPatch(BaseModel):
    name: str | None = None
    age: int | None = None
    active: bool | None = None


class VipCustomer(BaseModel):
    name: str
    status: str


# =============================================================================
# Mock server
# =============================================================================


@dataclass
class RecordedRequest:
    """One request received by the mock server."""

    operation: Operation
    path: str
    parameters: dict[str, Any]
    headers: dict[str, str]
    body: str | None

    @property
    def json(self) -> Any:
        return json.loads(self.body) if self.body is not None else None


@dataclass
class MockCollection:
    """Stored state of one collection."""

    id: str
    name: str
    type: int = 2
    is_system: bool = False
    wait_for_sync: bool = False
    key_options: dict[str, Any] = field(default_factory=lambda: {"type": "traditional", "allowUserKeys": True})
    documents: dict[str, dict[str, Any]] = field(default_factory=dict)
    revision: str = "0"

    def info(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "status": 3,
            "isSystem": self.is_system,
        }

    def properties(self) -> dict[str, Any]:
        return {
            **self.info(),
            "waitForSync": self.wait_for_sync,
            "keyOptions": dict(self.key_options),
            "globallyUniqueId": f"h{self.id}",
        }


def _flag(parameters: dict[str, Any], name: str, default: bool = False) -> bool:
    if name not in parameters:
        return default
    return parameters[name] in (True, "true", 1, "1")


def _unquote(revision: str | None) -> str | None:
    return revision.strip('"') if revision is not None else None


def _response(status: int, payload: Any = None, headers: dict[str, str] | None = None) -> RawResponse:
    text = "" if payload is None else json.dumps(payload)
    return RawResponse(status, headers or {}, text)


def _error(status: int, number: int, message: str, **extra: Any) -> RawResponse:
    return _response(
        status,
        {"error": True, "code": status, "errorNum": number, "errorMessage": message, **extra},
    )


def _element_error(number: int, message: str) -> dict[str, Any]:
    return {"error": True, "errorNum": number, "errorMessage": message}


class _Failure(Exception):
    """Failure of one document operation inside the mock server."""

    def __init__(self, status: int, number: int, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.status = status
        self.number = number
        self.message = message
        self.extra = extra

    def response(self) -> RawResponse:
        return _error(self.status, self.number, self.message, **self.extra)

    def element(self) -> dict[str, Any]:
        return _element_error(self.number, self.message)


class MockArangoServer:
    """
    In-memory ArangoDB server for the document and collection APIs.

    Implements the Transport protocol. Databases are created on first
    use. Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.databases: dict[str, dict[str, MockCollection]] = {}
        self.requests: list[RecordedRequest] = []
        self.is_open = False
        self.open_calls = 0
        self._queued: list[RawResponse | Exception] = []
        self._ids = itertools.count(10000)
        self._keys = itertools.count(1)
        self._revisions = itertools.count(1)

    # -------------------------------------------------------------------------
    # Transport protocol
    # -------------------------------------------------------------------------

    async def open(self) -> None:
        self.open_calls += 1
        self.is_open = True

    async def close(self) -> None:
        self.is_open = False

    async def request(
        self,
        operation: Operation,
        path: str,
        parameters: dict[str, Any],
        headers: dict[str, str],
        body: str | None,
    ) -> RawResponse:
        """Handle one request."""
        self.requests.append(RecordedRequest(operation, path, dict(parameters), dict(headers), body))

        if self._queued:
            queued = self._queued.pop(0)
            if isinstance(queued, Exception):
                raise queued
            return queued

        parts = [unquote(p) for p in path.split("/") if p]
        if len(parts) < 4 or parts[0] != "_db" or parts[2] != "_api":
            return _error(404, 404, f"unknown path '{path}'")

        collections = self.databases.setdefault(parts[1], {})
        payload = json.loads(body) if body is not None else None
        api, rest = parts[3], parts[4:]

        if api == "document" and rest:
            return self._document(collections, operation, rest, parameters, headers, payload)
        if api == "collection":
            return self._collection(collections, operation, rest, parameters, payload)
        return _error(404, 404, f"unknown path '{path}'")

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    @property
    def last_request(self) -> RecordedRequest:
        return self.requests[-1]

    def queue_response(self, response: RawResponse | Exception) -> None:
        """Answer the next request with ``response`` (or raise it)."""
        self._queued.append(response)

    # -------------------------------------------------------------------------
    # Document API
    # -------------------------------------------------------------------------

    def _document(
        self,
        collections: dict[str, MockCollection],
        operation: Operation,
        rest: list[str],
        parameters: dict[str, Any],
        headers: dict[str, str],
        payload: Any,
    ) -> RawResponse:
        name = rest[0]
        coll = collections.get(name)
        if coll is None:
            if operation is Operation.READ_HEADER:
                return _response(404)
            return _error(404, 1203, f"collection not found: {name}")

        status = 201 if _flag(parameters, "waitForSync") or coll.wait_for_sync else 202

        if len(rest) > 1:
            key = "/".join(rest[1:])
            try:
                if operation is Operation.READ:
                    return self._read(coll, key, headers)
                if operation is Operation.READ_HEADER:
                    return self._read_header(coll, key, headers)
                if operation is Operation.REPLACE:
                    result = self._write(coll, key, payload, parameters, headers, merge=False)
                    return _response(status, result)
                if operation is Operation.UPDATE:
                    result = self._write(coll, key, payload, parameters, headers, merge=True)
                    return _response(status, result)
                if operation is Operation.DELETE:
                    result = self._remove(coll, key, None, parameters, headers)
                    return _response(200 if status == 201 else 202, result)
            except _Failure as failure:
                if operation is Operation.READ_HEADER:
                    return _response(failure.status)
                return failure.response()
            return _error(405, 405, "method not supported")

        if operation is Operation.CREATE:
            return self._insert(coll, payload, parameters, status)
        if operation is Operation.REPLACE and _flag(parameters, "onlyget"):
            return self._read_many(coll, payload)
        if operation in (Operation.REPLACE, Operation.UPDATE):
            merge = operation is Operation.UPDATE
            results = []
            for item in payload:
                try:
                    key = item.get("_key")
                    if not key:
                        raise _Failure(400, 1221, "illegal document key")
                    results.append(self._write(coll, key, item, parameters, {}, merge=merge))
                except _Failure as failure:
                    results.append(failure.element())
            return _response(status, results)
        if operation is Operation.DELETE:
            results = []
            for item in payload:
                try:
                    if isinstance(item, str):
                        results.append(self._remove(coll, item, None, parameters, {}))
                    else:
                        results.append(self._remove(coll, item["_key"], item.get("_rev"), parameters, {}))
                except _Failure as failure:
                    results.append(failure.element())
            return _response(200 if status == 201 else 202, results)
        return _error(405, 405, "method not supported")

    def _lookup(self, coll: MockCollection, key: str) -> dict[str, Any]:
        document = coll.documents.get(key)
        if document is None:
            raise _Failure(404, 1202, "document not found")
        return document

    def _check_if_match(self, document: dict[str, Any], headers: dict[str, str]) -> None:
        expected = _unquote(headers.get("If-Match"))
        if expected is not None and expected != document["_rev"]:
            raise _Failure(
                412,
                1200,
                "precondition failed",
                _id=document["_id"],
                _key=document["_key"],
                _rev=document["_rev"],
            )

    def _read(self, coll: MockCollection, key: str, headers: dict[str, str]) -> RawResponse:
        document = self._lookup(coll, key)
        self._check_if_match(document, headers)
        if _unquote(headers.get("If-None-Match")) == document["_rev"]:
            return _response(304)
        return _response(200, document, {"Etag": f'"{document["_rev"]}"'})

    def _read_header(self, coll: MockCollection, key: str, headers: dict[str, str]) -> RawResponse:
        document = self._lookup(coll, key)
        self._check_if_match(document, headers)
        return _response(200, None, {"Etag": f'"{document["_rev"]}"'})

    def _read_many(self, coll: MockCollection, keys: list[Any]) -> RawResponse:
        results = []
        for key in keys:
            document = coll.documents.get(key)
            results.append(document if document is not None else _element_error(1202, "document not found"))
        return _response(200, results)

    def _store(self, coll: MockCollection, key: str, content: dict[str, Any]) -> dict[str, Any]:
        revision = f"_rev{next(self._revisions)}"
        document = {"_key": key, "_id": f"{coll.name}/{key}", "_rev": revision}
        document.update({k: v for k, v in content.items() if k not in SYSTEM_ATTRIBUTES})
        coll.documents[key] = document
        coll.revision = revision
        return document

    def _insert(self, coll: MockCollection, payload: Any, parameters: dict[str, Any], status: int) -> RawResponse:
        return_new = _flag(parameters, "returnNew")

        def insert_one(content: dict[str, Any]) -> dict[str, Any]:
            key = content.get("_key") or str(next(self._keys))
            if key in coll.documents:
                raise _Failure(409, 1210, UNIQUE_CONSTRAINT_MESSAGE)
            document = self._store(coll, key, content)
            result = {"_id": document["_id"], "_key": key, "_rev": document["_rev"]}
            if return_new:
                result["new"] = dict(document)
            return result

        if isinstance(payload, list):
            results = []
            for content in payload:
                try:
                    results.append(insert_one(content))
                except _Failure as failure:
                    results.append(failure.element())
            return _response(status, results)

        try:
            return _response(status, insert_one(payload))
        except _Failure as failure:
            return failure.response()

    def _write(
        self,
        coll: MockCollection,
        key: str,
        content: dict[str, Any],
        parameters: dict[str, Any],
        headers: dict[str, str],
        *,
        merge: bool,
    ) -> dict[str, Any]:
        old = self._lookup(coll, key)
        self._check_if_match(old, headers)
        if not _flag(parameters, "ignoreRevs", True) and "_rev" in content and content["_rev"] != old["_rev"]:
            raise _Failure(412, 1200, "precondition failed", _id=old["_id"], _key=key, _rev=old["_rev"])

        if merge:
            new_content = _merge(
                {k: v for k, v in old.items() if k not in SYSTEM_ATTRIBUTES},
                content,
                keep_null=_flag(parameters, "keepNull", True),
                merge_objects=_flag(parameters, "mergeObjects", True),
            )
        else:
            new_content = content
        new = self._store(coll, key, new_content)

        result = {"_id": new["_id"], "_key": key, "_rev": new["_rev"], "_oldRev": old["_rev"]}
        if _flag(parameters, "returnOld"):
            result["old"] = old
        if _flag(parameters, "returnNew"):
            result["new"] = dict(new)
        return result

    def _remove(
        self,
        coll: MockCollection,
        key: str,
        revision: str | None,
        parameters: dict[str, Any],
        headers: dict[str, str],
    ) -> dict[str, Any]:
        old = self._lookup(coll, key)
        self._check_if_match(old, headers)
        if not _flag(parameters, "ignoreRevs", True) and revision is not None and revision != old["_rev"]:
            raise _Failure(412, 1200, "precondition failed", _id=old["_id"], _key=key, _rev=old["_rev"])
        del coll.documents[key]
        coll.revision = f"_rev{next(self._revisions)}"
        result = {"_id": old["_id"], "_key": key, "_rev": old["_rev"]}
        if _flag(parameters, "returnOld"):
            result["old"] = old
        return result

    # -------------------------------------------------------------------------
    # Collection API
    # -------------------------------------------------------------------------

    def _collection(
        self,
        collections: dict[str, MockCollection],
        operation: Operation,
        rest: list[str],
        parameters: dict[str, Any],
        payload: Any,
    ) -> RawResponse:
        if not rest:
            if operation is Operation.READ:
                exclude_system = _flag(parameters, "excludeSystem")
                result = [c.info() for c in collections.values() if not (exclude_system and c.is_system)]
                return _response(200, {"error": False, "code": 200, "result": result})
            if operation is Operation.CREATE:
                return self._create_collection(collections, payload)
            return _error(405, 405, "method not supported")

        name, suffix = rest[0], rest[1] if len(rest) > 1 else None
        coll = collections.get(name)
        if coll is None:
            return _error(404, 1203, "collection or view not found")

        if operation is Operation.DELETE and suffix is None:
            if coll.is_system and not _flag(parameters, "isSystem"):
                return _error(403, 11, "forbidden")
            del collections[name]
            return _response(200, {"error": False, "code": 200, "id": coll.id})

        if operation is Operation.READ:
            if suffix is None:
                return _response(200, {"error": False, "code": 200, **coll.info()})
            if suffix == "properties":
                return _response(200, {"error": False, "code": 200, **coll.properties()})
            if suffix == "count":
                return _response(200, {"error": False, "code": 200, **coll.properties(), "count": len(coll.documents)})
            if suffix == "revision":
                return _response(200, {"error": False, "code": 200, **coll.properties(), "revision": coll.revision})
            if suffix == "checksum":
                return _response(200, {"error": False, "code": 200, **coll.info(), **self._checksum(coll, parameters)})

        if operation is Operation.REPLACE:
            if suffix == "properties":
                if "waitForSync" in payload:
                    coll.wait_for_sync = bool(payload["waitForSync"])
                return _response(200, {"error": False, "code": 200, **coll.properties()})
            if suffix == "rename":
                new_name = payload["name"]
                if new_name in collections:
                    return _error(409, 1207, "duplicate name")
                del collections[name]
                coll.name = new_name
                for document in coll.documents.values():
                    document["_id"] = f"{new_name}/{document['_key']}"
                collections[new_name] = coll
                return _response(200, {"error": False, "code": 200, **coll.info()})

        return _error(405, 405, "method not supported")

    def _create_collection(self, collections: dict[str, MockCollection], payload: Any) -> RawResponse:
        name = payload.get("name")
        if not name:
            return _error(400, 1208, "illegal name")
        if name in collections:
            return _error(409, 1207, "duplicate name")
        coll = MockCollection(
            id=str(next(self._ids)),
            name=name,
            type=payload.get("type", 2),
            is_system=bool(payload.get("isSystem", name.startswith("_"))),
            wait_for_sync=bool(payload.get("waitForSync", False)),
        )
        if "keyOptions" in payload:
            coll.key_options.update(payload["keyOptions"])
        collections[name] = coll
        return _response(200, {"error": False, "code": 200, **coll.properties()})

    def _checksum(self, coll: MockCollection, parameters: dict[str, Any]) -> dict[str, Any]:
        with_revisions = _flag(parameters, "withRevisions")
        with_data = _flag(parameters, "withData")
        checksum = 0
        for key, document in coll.documents.items():
            part = key
            if with_revisions:
                part += document["_rev"]
            if with_data:
                part += json.dumps({k: v for k, v in document.items() if k not in SYSTEM_ATTRIBUTES}, sort_keys=True)
            checksum ^= zlib.crc32(part.encode("utf-8"))
        return {"checksum": str(checksum), "revision": coll.revision}


def _merge(old: dict[str, Any], patch: dict[str, Any], *, keep_null: bool, merge_objects: bool) -> dict[str, Any]:
    merged = dict(old)
    for key, value in patch.items():
        if key in SYSTEM_ATTRIBUTES:
            continue
        if value is None and not keep_null:
            merged.pop(key, None)
        elif isinstance(value, dict) and merge_objects and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value, keep_null=keep_null, merge_objects=merge_objects)
        else:
            merged[key] = value
    return merged


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_server() -> MockArangoServer:
    """Create an in-memory ArangoDB server."""
    return MockArangoServer()


@pytest.fixture
async def client(mock_server: MockArangoServer):
    """Create a connected ArangoClient."""
    from arango_do import ArangoClient

    client = ArangoClient("http://arango.test:8529", database="testdb", transport=mock_server)
    await client.connect()
    return client


@pytest.fixture
async def database(client):
    """Create a database."""
    return client["testdb"]


@pytest.fixture
async def collection(database):
    """Create a document collection."""
    await database.create_collection("customers")
    return database["customers"]


@pytest.fixture
async def typed_collection(database):
    """Create a document collection that decodes into Customer."""
    await database.create_collection("typed_customers")
    return database.get_collection("typed_customers", Customer)


@pytest.fixture
def customer() -> Customer:
    return Customer(
        name="Jane Doe",
        contact=[Contact(address="1-555-234523", kind="phone", tag="work")],
        gender="female",
        age=42,
    )
