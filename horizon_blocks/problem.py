"""Problem conditions raised while serving a block range.

Each condition renders to a Horizon-style problem document:
``{"type", "title", "status", "detail"}``. Server-side conditions keep the
underlying cause for logging but never expose it in the rendered body.
"""

from __future__ import annotations

from typing import Any


class Problem(Exception):
    """Base class for every condition that aborts a request."""

    type: str = "server_error"
    title: str = "Internal Server Error"
    status: int = 500
    detail: str = (
        "An error occurred while processing this request. This is usually due "
        "to a bug within the server software."
    )

    def __init__(self, detail: str | None = None, *, extras: dict[str, Any] | None = None):
        if detail is not None:
            self.detail = detail
        self.extras = extras or {}
        super().__init__(self.detail)

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "status": self.status,
            "detail": self.detail,
        }
        if self.extras:
            body["extras"] = self.extras
        return body


class BadRequest(Problem):
    type = "bad_request"
    title = "Bad Request"
    status = 400
    detail = (
        "The request you sent was invalid in some way. Check the `extras` "
        "field for the failing parameter."
    )


class BeforeRetainedHistory(Problem):
    """Requested start precedes the oldest ledger the history store retains."""

    type = "before_history"
    title = "Data Requested Is Before Recorded History"
    status = 410
    detail = (
        "This server does not have the data you requested. The requested "
        "ledger range starts before the oldest ledger in recorded history."
    )


class StaleHistory(Problem):
    """History database lags too far behind the core node."""

    type = "stale_history"
    title = "Historical DB Is Too Stale"
    status = 503
    detail = (
        "This server is not able to serve requests because its historical "
        "database is too far behind the network. Try again later."
    )


class StoreUnavailable(Problem):
    """The history store could not be reached."""


class QueryFailed(Problem):
    """A batch query was rejected or failed while executing."""


class PublishFailed(Problem):
    """The outbound POST to the message proxy could not be completed."""


__all__ = [
    "BadRequest",
    "BeforeRetainedHistory",
    "Problem",
    "PublishFailed",
    "QueryFailed",
    "StaleHistory",
    "StoreUnavailable",
]
