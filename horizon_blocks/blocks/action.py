"""Block range request: validate, load, assemble, then publish or return.

Steps run strictly in order and the first ``Problem`` raised aborts the
rest. Everything loaded here is scoped to one request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

import bittensor as bt

from horizon_blocks.history.loader import BatchLoader
from horizon_blocks.history.state import LedgerState
from horizon_blocks.problem import BadRequest, BeforeRetainedHistory, StaleHistory

from .assembler import assemble_blocks
from .models import BlockData, PublishReply
from .publisher import KafkaPublisher

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def _parse_int32(query: Mapping[str, str], name: str) -> int:
    raw = query.get(name)
    if raw is None or raw == "":
        raise BadRequest(extras={"invalid_field": name, "reason": "required"})
    try:
        value = int(raw)
    except ValueError:
        raise BadRequest(extras={"invalid_field": name, "reason": "unparseable value"}) from None
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise BadRequest(extras={"invalid_field": name, "reason": "out of range"})
    return value


@dataclass(frozen=True)
class SendParams:
    """Parsed request parameters."""

    ledger_start: int
    ledger_end: int
    send_kafka: bool = False

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> SendParams:
        """Parse ``ledger_start``, ``ledger_end`` and ``send_kafka``.

        Both bounds are required. ``send_kafka`` is only true for the literal
        string ``"true"``; any other value (or none) means false.
        """
        return cls(
            ledger_start=_parse_int32(query, "ledger_start"),
            ledger_end=_parse_int32(query, "ledger_end"),
            send_kafka=query.get("send_kafka") == "true",
        )


def ensure_history_freshness(state: LedgerState, stale_threshold: int) -> None:
    """Raise ``StaleHistory`` if history trails core by more than the threshold.

    A threshold of 0 disables the check.
    """
    if stale_threshold > 0 and state.lag() > stale_threshold:
        raise StaleHistory(extras={
            "history_latest_ledger": state.history_latest,
            "core_latest_ledger": state.core_latest,
        })


def verify_within_history(start: int, history_elder: int) -> None:
    """Raise ``BeforeRetainedHistory`` if ``start`` precedes retained history.

    The upper bound is deliberately not checked: a range past the newest
    ledger yields an empty result.
    """
    if start < history_elder:
        raise BeforeRetainedHistory()


class SendAction:
    """Runs one block range request end to end."""

    def __init__(
        self,
        loader: BatchLoader,
        state: Callable[[], LedgerState],
        publisher: KafkaPublisher | None = None,
        stale_threshold: int = 0,
    ):
        self.loader = loader
        self.state = state
        self.publisher = publisher
        self.stale_threshold = stale_threshold

    async def load_blocks(self, params: SendParams) -> BlockData:
        state = self.state()
        ensure_history_freshness(state, self.stale_threshold)
        verify_within_history(params.ledger_start, state.history_elder)

        start, end = params.ledger_start, params.ledger_end
        ledgers = await self.loader.load_ledgers(start, end)
        transactions = await self.loader.load_transactions(start, end)
        operations = await self.loader.load_operations(start, end)

        def _log_orphans(kind: str, count: int) -> None:
            bt.logging.debug({"blocks_orphans": {"kind": kind, "count": count, "start": start, "end": end}})

        return assemble_blocks(ledgers, transactions, operations, on_orphans=_log_orphans)

    async def run(self, params: SendParams) -> BlockData | PublishReply:
        """Produce exactly one response body for the request."""
        if params.send_kafka and self.publisher is None:
            raise BadRequest(
                "Publishing is not enabled on this server.",
                extras={"invalid_field": "send_kafka"},
            )

        blocks = await self.load_blocks(params)
        if not params.send_kafka:
            return blocks
        return await self.publisher.publish(blocks)


def render(body: BlockData | PublishReply) -> dict[str, Any]:
    """JSON-ready dict for either response body."""
    if isinstance(body, BlockData):
        return body.to_json_dict()
    return body.model_dump(mode="json")


__all__ = [
    "SendAction",
    "SendParams",
    "ensure_history_freshness",
    "render",
    "verify_within_history",
]
