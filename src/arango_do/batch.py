"""
Batch - per-element results of multi-document calls.

A batch call sends N items in one request and receives N elements back.
The call as a whole can succeed while single elements failed (a duplicate
key, a missing document, a revision mismatch). Each element is turned
into either its decoded value or an :class:`ElementError`, at the
position of the item it belongs to.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterator, Mapping, Sequence, TypeVar, Union, overload

from .types import ElementError, ProtocolViolation

__all__ = ["BatchResult", "aggregate"]

LOG = logging.getLogger(__name__)

R = TypeVar("R")


class BatchResult(Sequence[Union[R, ElementError]], Generic[R]):
    """
    Ordered outcomes of a batch call, one per input item.

    Example:
        result = await customers.insert_many(docs)
        for doc, outcome in zip(docs, result):
            if isinstance(outcome, ElementError):
                print("failed:", outcome.code, outcome.message)

        if not result.ok:
            failed_indexes = [index for index, _ in result.errors]
    """

    __slots__ = ("_outcomes",)

    def __init__(self, outcomes: Sequence[R | ElementError]) -> None:
        self._outcomes = tuple(outcomes)

    @overload
    def __getitem__(self, index: int) -> R | ElementError: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[R | ElementError]: ...

    def __getitem__(self, index: int | slice) -> Any:
        return self._outcomes[index]

    def __len__(self) -> int:
        return len(self._outcomes)

    def __iter__(self) -> Iterator[R | ElementError]:
        return iter(self._outcomes)

    @property
    def ok(self) -> bool:
        """True if no element failed."""
        return not any(isinstance(o, ElementError) for o in self._outcomes)

    @property
    def values(self) -> list[R]:
        """The successful outcomes, in input order."""
        return [o for o in self._outcomes if not isinstance(o, ElementError)]

    @property
    def errors(self) -> list[tuple[int, ElementError]]:
        """Index and error of every failed element."""
        return [(i, o) for i, o in enumerate(self._outcomes) if isinstance(o, ElementError)]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BatchResult):
            return self._outcomes == other._outcomes
        return NotImplemented

    def __repr__(self) -> str:
        return f"BatchResult({list(self._outcomes)!r})"


def is_element_error(element: Mapping[str, Any]) -> bool:
    """
    Tell an error element from a success element by its shape.

    The server sends no separate status per element. An element is an
    error exactly when it carries ``"error": true``; this is checked
    before the element is decoded as a success.
    """
    return element.get("error") is True


def aggregate(
    payload: Any,
    expected: int,
    decode: Callable[[Mapping[str, Any]], R],
) -> BatchResult[R]:
    """
    Pair each response element with the request item at the same index.

    Args:
        payload: The parsed response body, a JSON array.
        expected: Number of items sent.
        decode: Decoder for a success element.

    Returns:
        A BatchResult with one outcome per item.

    Raises:
        ProtocolViolation: If the response is not an array of objects or
            its length differs from ``expected``.
    """
    if not isinstance(payload, list):
        raise ProtocolViolation(f"Batch response must be a JSON array, got {type(payload).__name__}")
    if len(payload) != expected:
        LOG.warning("Batch response has %d elements for %d items", len(payload), expected)
        raise ProtocolViolation(f"Batch response has {len(payload)} elements for {expected} items")

    outcomes: list[R | ElementError] = []
    for index, element in enumerate(payload):
        if not isinstance(element, Mapping):
            raise ProtocolViolation(f"Batch element {index} is not a JSON object")
        if is_element_error(element):
            number = element.get("errorNum")
            outcomes.append(
                ElementError(
                    str(element.get("errorMessage", "")),
                    number if isinstance(number, int) else 0,
                )
            )
        else:
            outcomes.append(decode(element))

    result = BatchResult(outcomes)
    if not result.ok:
        LOG.debug("Batch of %d items had %d failed elements", expected, len(result.errors))
    return result
