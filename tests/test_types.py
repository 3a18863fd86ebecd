"""
Tests for identity, revision and value types.

Covers document ids and keys, revisions, document headers and the
collection value types parsed from server responses.
"""

from __future__ import annotations

import pytest


class TestDocumentId:
    """Tests for DocumentId."""

    def test_str_is_collection_slash_key(self):
        """Test the canonical text form."""
        from arango_do import DocumentId

        assert str(DocumentId("customers", "94711")) == "customers/94711"

    def test_parse(self):
        """Test parsing the canonical form."""
        from arango_do import DocumentId

        doc_id = DocumentId.parse("customers/94711")

        assert doc_id.collection_name == "customers"
        assert doc_id.document_key == "94711"
        assert doc_id == DocumentId("customers", "94711")

    def test_parse_round_trip(self):
        """Test that parse(str(id)) gives back the same id."""
        from arango_do import DocumentId

        doc_id = DocumentId("orders", "a-b_c:1")
        assert DocumentId.parse(str(doc_id)) == doc_id

    def test_parse_splits_at_first_separator(self):
        """Test that only the first separator splits."""
        from arango_do import DocumentId

        doc_id = DocumentId.parse("customers/a/b")
        assert doc_id.collection_name == "customers"
        assert doc_id.document_key == "a/b"

    @pytest.mark.parametrize("text", ["customers", "", "/94711", "customers/"])
    def test_parse_malformed(self, text):
        """Test that ids without both parts are rejected."""
        from arango_do import DocumentId, MalformedIdentifier

        with pytest.raises(MalformedIdentifier):
            DocumentId.parse(text)

    def test_malformed_identifier_is_value_error(self):
        """Test MalformedIdentifier can be caught as ValueError."""
        from arango_do import DocumentId

        with pytest.raises(ValueError):
            DocumentId("", "94711")

    def test_key_property(self):
        """Test the key of an id."""
        from arango_do import DocumentId, DocumentKey

        assert DocumentId("customers", "94711").key == DocumentKey("94711")


class TestDocumentKeyAndRevision:
    """Tests for DocumentKey and Revision."""

    def test_empty_key_rejected(self):
        """Test an empty key is malformed."""
        from arango_do import DocumentKey, MalformedIdentifier

        with pytest.raises(MalformedIdentifier):
            DocumentKey("")

    def test_key_of_accepts_str_and_key(self):
        """Test DocumentKey.of coerces strings."""
        from arango_do import DocumentKey

        key = DocumentKey("94711")
        assert DocumentKey.of("94711") == key
        assert DocumentKey.of(key) is key

    def test_revisions_compare_by_value(self):
        """Test revision equality is string equality."""
        from arango_do import Revision

        assert Revision("_abc") == Revision("_abc")
        assert Revision("_abc") != Revision("_abd")
        assert str(Revision("_abc")) == "_abc"

    def test_revisions_are_not_ordered(self):
        """Test revisions have no ordering."""
        from arango_do import Revision

        with pytest.raises(TypeError):
            Revision("_a") < Revision("_b")  # noqa: B015


class TestDocumentValues:
    """Tests for NewDocument, DocumentUpdate and headers."""

    def test_new_document_with_key(self):
        """Test with_key returns a copy carrying the key."""
        from arango_do import DocumentKey, NewDocument

        doc = NewDocument({"name": "Jane"})
        keyed = doc.with_key("94711")

        assert doc.key is None
        assert keyed.key == DocumentKey("94711")
        assert keyed.content == {"name": "Jane"}

    def test_document_update_coerces_key_and_revision(self):
        """Test DocumentUpdate accepts plain strings."""
        from arango_do import DocumentKey, DocumentUpdate, Revision

        update = DocumentUpdate("94711", {"name": "John"}).with_revision("_rev1")

        assert update.key == DocumentKey("94711")
        assert update.revision == Revision("_rev1")

    def test_header_from_json(self):
        """Test parsing a header from server attributes."""
        from arango_do import DocumentHeader, DocumentId, DocumentKey, Revision

        header = DocumentHeader.from_json({"_id": "customers/1", "_key": "1", "_rev": "_r1"})
        doc_id, key, revision = header.deconstruct()

        assert doc_id == DocumentId("customers", "1")
        assert key == DocumentKey("1")
        assert revision == Revision("_r1")

    def test_header_missing_attribute(self):
        """Test a header without _rev is a protocol violation."""
        from arango_do import DocumentHeader, ProtocolViolation

        with pytest.raises(ProtocolViolation):
            DocumentHeader.from_json({"_id": "customers/1", "_key": "1"})

    def test_header_malformed_id(self):
        """Test a server _id without separator is a protocol violation."""
        from arango_do import DocumentHeader, ProtocolViolation

        with pytest.raises(ProtocolViolation):
            DocumentHeader.from_json({"_id": "customers", "_key": "1", "_rev": "_r1"})

    def test_document_header_property(self):
        """Test a document exposes its header."""
        from arango_do import Document, DocumentHeader, DocumentId, DocumentKey, Revision

        doc = Document(DocumentId("c", "1"), DocumentKey("1"), Revision("_r"), {"a": 1})
        assert doc.header == DocumentHeader(DocumentId("c", "1"), DocumentKey("1"), Revision("_r"))


class TestCollectionValues:
    """Tests for collection value types."""

    def test_collection_info_from_json(self):
        """Test parsing a collection description."""
        from arango_do import CollectionInfo, CollectionStatus, CollectionType

        info = CollectionInfo.from_json(
            {"id": "9", "name": "customers", "type": 3, "status": 3, "isSystem": False}
        )

        assert info.name == "customers"
        assert info.type is CollectionType.EDGES
        assert info.status is CollectionStatus.LOADED
        assert info.is_system is False

    def test_collection_info_unknown_type(self):
        """Test an unknown collection type is a protocol violation."""
        from arango_do import CollectionInfo, ProtocolViolation

        with pytest.raises(ProtocolViolation):
            CollectionInfo.from_json({"id": "9", "name": "x", "type": 7})

    def test_collection_properties_keeps_extra_fields(self):
        """Test unknown property fields are preserved."""
        from arango_do import CollectionProperties, KeyOptions

        props = CollectionProperties.from_json(
            {
                "id": "9",
                "name": "customers",
                "type": 2,
                "waitForSync": True,
                "keyOptions": {"type": "traditional", "allowUserKeys": True},
                "globallyUniqueId": "h9",
                "error": False,
                "code": 200,
            }
        )

        assert props.name == "customers"
        assert props.wait_for_sync is True
        assert props.key_options == KeyOptions(type="traditional", allow_user_keys=True)
        assert props.extra == {"globallyUniqueId": "h9"}

    def test_new_collection_omits_unset_fields(self):
        """Test create bodies leave server defaults alone."""
        from arango_do import NewCollection

        assert NewCollection("customers").to_json() == {"name": "customers"}
        assert NewCollection.edges("knows").to_json() == {"name": "knows", "type": 3}

    def test_new_collection_with_key_options(self):
        """Test key options are rendered in server form."""
        from arango_do import KeyOptions, NewCollection

        body = NewCollection(
            "customers",
            wait_for_sync=True,
            key_options=KeyOptions(type="autoincrement", increment=5),
        ).to_json()

        assert body == {
            "name": "customers",
            "waitForSync": True,
            "keyOptions": {"type": "autoincrement", "increment": 5},
        }


class TestErrorCode:
    """Tests for ErrorCode."""

    def test_lookup_known(self):
        """Test known numbers resolve to members."""
        from arango_do import ErrorCode

        assert ErrorCode.lookup(1202) is ErrorCode.ARANGO_DOCUMENT_NOT_FOUND

    def test_lookup_unknown(self):
        """Test unknown numbers resolve to None."""
        from arango_do import ErrorCode

        assert ErrorCode.lookup(99999) is None
        assert ErrorCode.lookup(None) is None

    def test_error_code_property(self):
        """Test exceptions expose the resolved code."""
        from arango_do import ApiError, ErrorCode

        assert ApiError("conflict", 1200, 412).error_code is ErrorCode.ARANGO_CONFLICT
        assert ApiError("odd", 4242, 500).error_code is None

    def test_precondition_failed_revision(self):
        """Test the current revision is taken from the envelope details."""
        from arango_do import PreconditionFailed, Revision

        error = PreconditionFailed("precondition failed", 1200, 412, {"_rev": "_r9"})
        assert error.revision == Revision("_r9")
        assert PreconditionFailed("precondition failed", 1200, 412).revision is None
