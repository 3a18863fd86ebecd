"""
Content - encoding and decoding of document content.

A document's content can be given in one of three forms:

- a pydantic model (typed mode): serialized against its schema. For
  partial updates only the fields that were explicitly set are sent, so
  an omitted field leaves the stored attribute alone while a field set
  to ``None`` overwrites it with ``null``.
- a :class:`JsonString` (opaque mode): an already serialized JSON object
  that is passed through unchanged on write (unless a given key or
  revision replaces one inside it) and handed back as text on read.
- a plain mapping: sent as is.

All three produce the same request bytes for the same data.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ValidationError

from .types import (
    Document,
    DocumentHeader,
    ProtocolViolation,
    Revision,
    UpdatedDocumentHeader,
)

__all__ = [
    "JsonString",
    "SYSTEM_ATTRIBUTES",
    "decode_content",
    "decode_document",
    "decode_updated_header",
    "dumps",
    "encode_array",
    "encode_content",
    "infer_content_type",
]

SYSTEM_ATTRIBUTES = ("_id", "_key", "_rev")


def dumps(value: Any) -> str:
    """Serialize to compact JSON."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class JsonString:
    """
    A raw JSON object carried as text.

    Written content is sent unchanged unless a given ``_key`` or ``_rev``
    replaces one inside it. Content read back is the parsed
    object serialized again in compact form, so whitespace and number
    spelling can differ from what the server sent.

    Example:
        doc = NewDocument(JsonString('{"name": "Jane Doe", "age": 42}'))
        await customers.insert_one(doc)

        fetched = await customers.get("94711", content_type=JsonString)
        print(fetched.content.as_str())
    """

    __slots__ = ("_text",)

    def __init__(self, text: str) -> None:
        self._text = text

    @classmethod
    def from_value(cls, value: Any) -> JsonString:
        return cls(dumps(value))

    def as_str(self) -> str:
        return self._text

    def parse(self) -> Any:
        return json.loads(self._text)

    def __str__(self) -> str:
        return self._text

    def __eq__(self, other: object) -> bool:
        if isinstance(other, JsonString):
            return self._text == other._text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._text)

    def __repr__(self) -> str:
        return f"JsonString({self._text!r})"


# =============================================================================
# Encoding
# =============================================================================


def encode_content(
    content: Any,
    extra: Mapping[str, Any] | None = None,
    *,
    partial: bool = False,
) -> str:
    """
    Serialize document content to a JSON object.

    Args:
        content: A pydantic model, a JsonString or a mapping.
        extra: System attributes (``_key``, ``_rev``) placed in front of
            the content's own attributes. They replace attributes of
            the same name in the content.
        partial: Send only explicitly set fields of a pydantic model.

    Returns:
        The JSON text of the object.
    """
    extra = dict(extra or {})

    if isinstance(content, JsonString):
        if not extra:
            return content.as_str()
        data = content.parse()
        if not isinstance(data, Mapping):
            raise ValueError("JsonString document content must be a JSON object")
        if extra.keys().isdisjoint(data):
            return _splice(content.as_str(), extra)
        return dumps(_merge(extra, data))

    if isinstance(content, BaseModel):
        data = content.model_dump(mode="json", by_alias=True, exclude_unset=partial)
    elif isinstance(content, Mapping):
        data = dict(content)
    else:
        raise TypeError(
            f"Unsupported document content type {type(content).__name__}; "
            "use a pydantic model, a JsonString or a mapping"
        )

    return dumps(_merge(extra, data))


def encode_array(fragments: Iterable[str]) -> str:
    """Join already serialized JSON values into a JSON array."""
    return "[" + ",".join(fragments) + "]"


def _merge(extra: dict[str, Any], data: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(extra)
    for name, value in data.items():
        merged.setdefault(name, value)
    return merged


def _splice(fragment: str, extra: dict[str, Any]) -> str:
    # Inserts attributes into a JSON object without re-serializing it.
    if not extra:
        return fragment
    text = fragment.strip()
    if not text.startswith("{"):
        raise ValueError("JsonString document content must be a JSON object")
    head = ",".join(f"{dumps(k)}:{dumps(v)}" for k, v in extra.items())
    rest = text[1:].lstrip()
    separator = "" if rest.startswith("}") else ","
    return "{" + head + separator + rest


# =============================================================================
# Decoding
# =============================================================================


def infer_content_type(content: Any) -> type[Any] | None:
    """The type to decode returned content into when the caller gave none."""
    if isinstance(content, (BaseModel, JsonString)):
        return type(content)
    return None


def decode_content(data: Any, content_type: type[Any] | None) -> Any:
    """
    Decode the content of a document returned by the server.

    The system attributes ``_id``, ``_key`` and ``_rev`` are removed
    before decoding; they are reported on the document itself.

    Raises:
        ProtocolViolation: If the content is not a JSON object or does not
            validate against a pydantic ``content_type``.
    """
    if not isinstance(data, Mapping):
        raise ProtocolViolation(f"Document content must be a JSON object, got {type(data).__name__}")

    attributes = {k: v for k, v in data.items() if k not in SYSTEM_ATTRIBUTES}

    if content_type is None or content_type is dict:
        return attributes
    if content_type is JsonString:
        return JsonString.from_value(attributes)
    if isinstance(content_type, type) and issubclass(content_type, BaseModel):
        try:
            return content_type.model_validate(attributes)
        except ValidationError as e:
            raise ProtocolViolation(
                f"Document content does not match {content_type.__name__}: {e}"
            ) from e
    raise TypeError(f"Unsupported content type {content_type!r}")


def decode_document(data: Any, content_type: type[Any] | None, field: str | None = None) -> Document[Any]:
    """
    Decode a document header and its content.

    Args:
        data: The response object.
        content_type: Type to decode the content into.
        field: Name of the attribute that holds the content (``new`` or
            ``old``); the response object itself when None.
    """
    header = DocumentHeader.from_json(data)
    if field is None:
        content = data
    elif field in data:
        content = data[field]
    else:
        raise ProtocolViolation(f"Response is missing the {field!r} field")
    return Document(header.id, header.key, header.revision, decode_content(content, content_type))


def decode_updated_header(
    data: Any,
    content_type: type[Any] | None,
    *,
    return_old: bool,
    return_new: bool,
    old_content_type: type[Any] | None = None,
) -> UpdatedDocumentHeader[Any]:
    """
    Decode the result of a replace or update.

    ``old_content`` / ``new_content`` are decoded only when the matching
    flag was set on the request; otherwise they stay None even if the
    server sent them. ``old_content_type`` defaults to ``content_type``.
    """
    header = DocumentHeader.from_json(data)
    if "_oldRev" not in data:
        raise ProtocolViolation("Response is missing the '_oldRev' field")

    old_content = None
    new_content = None
    if return_old:
        if "old" not in data:
            raise ProtocolViolation("Response is missing the 'old' field")
        old_content = decode_content(data["old"], old_content_type or content_type)
    if return_new:
        if "new" not in data:
            raise ProtocolViolation("Response is missing the 'new' field")
        new_content = decode_content(data["new"], content_type)

    return UpdatedDocumentHeader(
        id=header.id,
        key=header.key,
        revision=header.revision,
        old_revision=Revision(data["_oldRev"]),
        old_content=old_content,
        new_content=new_content,
    )
