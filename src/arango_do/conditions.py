"""
Conditions - revision checks and write flags attached to a request.

Two independent optimistic-concurrency checks exist:

- header level: ``If-Match`` / ``If-None-Match`` carried by
  :class:`Conditions`;
- body level: the expected revision of a :class:`DocumentUpdate`, sent as
  ``_rev`` inside the request body and governed by
  ``WriteOptions.ignore_revisions``.

Both are sent when both are given; the server decides which one fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .types import DocumentUpdate, Revision

__all__ = [
    "Conditions",
    "WriteOptions",
    "revision_fields",
]

HEADER_IF_MATCH = "If-Match"
HEADER_IF_NONE_MATCH = "If-None-Match"

PARAM_WAIT_FOR_SYNC = "waitForSync"
PARAM_WAIT_FOR_SYNC_REPLICATION = "waitForSyncReplication"
PARAM_RETURN_NEW = "returnNew"
PARAM_RETURN_OLD = "returnOld"
PARAM_IGNORE_REVISIONS = "ignoreRevs"


def _quote(revision: Revision | str) -> str:
    return f'"{revision}"'


@dataclass(frozen=True)
class Conditions:
    """
    Header-level revision checks.

    Attributes:
        if_match: Succeed only if the document's revision equals this one.
        if_none_match: Succeed only if the document's revision differs.
    """

    if_match: Revision | str | None = None
    if_none_match: Revision | str | None = None

    def headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.if_match is not None:
            headers[HEADER_IF_MATCH] = _quote(self.if_match)
        if self.if_none_match is not None:
            headers[HEADER_IF_NONE_MATCH] = _quote(self.if_none_match)
        return headers


@dataclass(frozen=True)
class WriteOptions:
    """
    Flags of a replace, update or delete.

    Attributes:
        return_old: Return the content as it was before the write.
        return_new: Return the content as it is after the write.
        force_wait_for_sync: Wait for the write to be synced to disk even
            if the collection does not require it.
        ignore_revisions: Whether the server skips the ``_rev`` check of the
            request body. None leaves the server default in place.
        wait_for_sync_replication: Cluster deployments only; turning it off
            returns before all replicas acknowledged the write.
    """

    return_old: bool = False
    return_new: bool = False
    force_wait_for_sync: bool = False
    ignore_revisions: bool | None = None
    wait_for_sync_replication: bool = True

    def parameters(self, *, allow_return_new: bool = True) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if self.force_wait_for_sync:
            params[PARAM_WAIT_FOR_SYNC] = True
        if self.return_new and allow_return_new:
            params[PARAM_RETURN_NEW] = True
        if self.return_old:
            params[PARAM_RETURN_OLD] = True
        if self.ignore_revisions is not None:
            params[PARAM_IGNORE_REVISIONS] = self.ignore_revisions
        if not self.wait_for_sync_replication:
            params[PARAM_WAIT_FOR_SYNC_REPLICATION] = 0
        return params


def revision_fields(update: DocumentUpdate[Any], options: WriteOptions) -> dict[str, Any]:
    """
    Body attributes carrying the expected revision of ``update``.

    Nothing is sent when no revision was given or when the request asks
    the server to ignore revisions.
    """
    if update.revision is None or options.ignore_revisions:
        return {}
    return {"_rev": str(update.revision)}
