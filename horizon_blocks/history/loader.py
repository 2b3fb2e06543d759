"""Batch reads of ledgers, transactions and operations for a sequence range.

Each read is independent and returns rows in the store's order. Failures
are translated into ``StoreUnavailable`` (lost or unreachable connection,
pool timeout) or ``QueryFailed`` (anything else SQLAlchemy raises, and rows
that do not fit the record models); no partial result is ever handed back.
"""

from __future__ import annotations

from typing import Any, TypeVar

import bittensor as bt
from pydantic import BaseModel, ValidationError
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, InterfaceError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeout
from sqlalchemy.sql.elements import TextClause

from horizon_blocks.problem import QueryFailed, StoreUnavailable

from .records import LedgerRecord, OperationRecord, TransactionRecord

RecordT = TypeVar("RecordT", bound=BaseModel)

# ---------------------------------------------------------------------------
# SQL queries
# ---------------------------------------------------------------------------

_SELECT_LEDGERS = text("""
    SELECT
        hl.id,
        hl.sequence,
        hl.ledger_hash,
        hl.previous_ledger_hash,
        hl.transaction_count,
        hl.successful_transaction_count,
        hl.failed_transaction_count,
        hl.operation_count,
        hl.closed_at,
        hl.total_coins,
        hl.fee_pool,
        hl.base_fee,
        hl.base_reserve,
        hl.max_tx_set_size,
        hl.protocol_version,
        hl.ledger_header
    FROM history_ledgers hl
    WHERE hl.sequence >= :start
      AND hl.sequence <= :end
    ORDER BY hl.sequence ASC
""")

_SELECT_TRANSACTIONS = text("""
    SELECT
        ht.id,
        ht.transaction_hash,
        ht.ledger_sequence,
        ht.account,
        ht.account_sequence,
        ht.fee_charged,
        ht.max_fee,
        ht.operation_count,
        ht.tx_envelope,
        ht.tx_result,
        ht.tx_meta,
        ht.tx_fee_meta,
        ht.memo_type,
        ht.signatures
    FROM history_transactions ht
    WHERE ht.ledger_sequence >= :start
      AND ht.ledger_sequence <= :end
    ORDER BY ht.id ASC
""")

_SELECT_OPERATIONS = text("""
    SELECT
        hop.id,
        hop.transaction_id,
        hop.application_order,
        hop.type,
        hop.details,
        hop.source_account,
        ht.account AS transaction_account
    FROM history_operations hop
    JOIN history_transactions ht ON ht.id = hop.transaction_id
    WHERE ht.ledger_sequence >= :start
      AND ht.ledger_sequence <= :end
    ORDER BY hop.id ASC
""")


class BatchLoader:
    """Loads the three flat record sets for an inclusive ledger range."""

    def __init__(self, database: Any):
        self.database = database

    async def _read(self, name: str, query: TextClause, start: int, end: int) -> list[Any]:
        try:
            return await self.database.read(
                query, params={"start": start, "end": end}, mappings=True,
            )
        except (InterfaceError, PoolTimeout, OSError) as e:
            bt.logging.error({"blocks_load": {"step": name, "status": "store_unavailable", "error": str(e)}})
            raise StoreUnavailable() from e
        except DBAPIError as e:
            # OperationalError also covers bad SQL on some drivers (sqlite "no such column")
            if e.connection_invalidated:
                bt.logging.error({"blocks_load": {"step": name, "status": "store_unavailable", "error": str(e)}})
                raise StoreUnavailable() from e
            bt.logging.error({"blocks_load": {"step": name, "status": "query_failed", "error": str(e)}})
            raise QueryFailed() from e
        except SQLAlchemyError as e:
            bt.logging.error({"blocks_load": {"step": name, "status": "query_failed", "error": str(e)}})
            raise QueryFailed() from e

    def _build(self, name: str, model: type[RecordT], rows: list[Any]) -> list[RecordT]:
        try:
            return [model(**dict(r)) for r in rows]
        except ValidationError as e:
            bt.logging.error({"blocks_load": {"step": name, "status": "malformed_row", "error": str(e)}})
            raise QueryFailed() from e

    async def load_ledgers(self, start: int, end: int) -> list[LedgerRecord]:
        rows = await self._read("ledgers", _SELECT_LEDGERS, start, end)
        return self._build("ledgers", LedgerRecord, rows)

    async def load_transactions(self, start: int, end: int) -> list[TransactionRecord]:
        rows = await self._read("transactions", _SELECT_TRANSACTIONS, start, end)
        return self._build("transactions", TransactionRecord, rows)

    async def load_operations(self, start: int, end: int) -> list[OperationRecord]:
        rows = await self._read("operations", _SELECT_OPERATIONS, start, end)
        return self._build("operations", OperationRecord, rows)


__all__ = ["BatchLoader"]
