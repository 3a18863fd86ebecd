"""
Response - classification of server responses.

A 2xx response yields the method's payload (a named field or the whole
body). Anything else is mapped to an :class:`ApiError` subclass built
from the server's error envelope::

    {"error": true, "code": 412, "errorNum": 1200, "errorMessage": "precondition failed"}

Error numbers this client does not know are kept as they are.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from .method import ReturnType
from .transport import RawResponse
from .types import (
    ApiError,
    DuplicateKeyError,
    ErrorCode,
    NotFoundError,
    NotModified,
    PreconditionFailed,
    ProtocolViolation,
)

__all__ = ["interpret", "map_error", "parse_body"]

LOG = logging.getLogger(__name__)

FIELD_ERROR = "error"
FIELD_CODE = "code"
FIELD_ERROR_NUM = "errorNum"
FIELD_ERROR_MESSAGE = "errorMessage"

_ERRORS_BY_STATUS: dict[int, type[ApiError]] = {
    304: NotModified,
    404: NotFoundError,
    412: PreconditionFailed,
}


def is_success(status: int) -> bool:
    return 200 <= status < 300


def parse_body(response: RawResponse) -> Any:
    """
    Parse the JSON body of a successful response.

    Raises:
        ProtocolViolation: If the body is not valid JSON.
    """
    try:
        return json.loads(response.text)
    except ValueError as e:
        LOG.warning("Response with status %s is not valid JSON", response.status)
        raise ProtocolViolation(f"Response body is not valid JSON: {e}") from e


def interpret(response: RawResponse, return_type: ReturnType) -> Any:
    """
    Extract the payload of a response or raise the error it carries.

    Args:
        response: The raw response.
        return_type: Where the method expects its result.

    Returns:
        The payload to hand to the method's ``decode``. Header-only reads
        return the header value, or None for a 404.

    Raises:
        ApiError: For any non-2xx response.
        ProtocolViolation: If a successful response lacks the result.
    """
    if return_type.header_field is not None:
        if response.status == 404:
            return None
        if not is_success(response.status):
            raise map_error(response)
        value = response.header(return_type.header_field)
        if value is None:
            raise ProtocolViolation(f"Response is missing the {return_type.header_field!r} header")
        return value

    if not is_success(response.status):
        raise map_error(response)

    payload = parse_body(response)
    if return_type.result_field is None:
        return payload
    if not isinstance(payload, Mapping) or return_type.result_field not in payload:
        LOG.warning("Response is missing the %r field", return_type.result_field)
        raise ProtocolViolation(f"Response is missing the {return_type.result_field!r} field")
    return payload[return_type.result_field]


def map_error(response: RawResponse) -> ApiError:
    """
    Build the error for a non-2xx response.

    A body that is not an error envelope still produces an ApiError with
    the HTTP status, error number 0 and the raw text as message.
    """
    envelope: Mapping[str, Any] | None = None
    if response.text:
        try:
            parsed = json.loads(response.text)
        except ValueError:
            parsed = None
        if isinstance(parsed, Mapping) and FIELD_ERROR_NUM in parsed:
            envelope = parsed

    if envelope is None:
        message = response.text.strip() or f"HTTP {response.status}"
        return _error_class(response.status, 0)(message, 0, response.status)

    number = envelope.get(FIELD_ERROR_NUM)
    code = number if isinstance(number, int) else 0
    message = str(envelope.get(FIELD_ERROR_MESSAGE, ""))
    status = envelope.get(FIELD_CODE, response.status)
    if not isinstance(status, int):
        status = response.status
    details = {
        k: v
        for k, v in envelope.items()
        if k not in (FIELD_ERROR, FIELD_CODE, FIELD_ERROR_NUM, FIELD_ERROR_MESSAGE)
    }
    return _error_class(status, code)(message, code, status, details)


def _error_class(status: int, code: int) -> type[ApiError]:
    if code == ErrorCode.ARANGO_UNIQUE_CONSTRAINT_VIOLATED:
        return DuplicateKeyError
    return _ERRORS_BY_STATUS.get(status, ApiError)
