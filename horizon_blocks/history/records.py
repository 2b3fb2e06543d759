"""Pydantic models for rows read from the history database.

Column names follow the Horizon ingestion schema (``history_ledgers``,
``history_transactions``, ``history_operations``). These are the flat inputs
to block assembly; nothing here knows about the nested output shape.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, field_validator


class LedgerRecord(BaseModel):
    """One row of ``history_ledgers``."""

    id: int
    sequence: int
    ledger_hash: str
    previous_ledger_hash: str | None = None
    transaction_count: int = 0
    # Not tracked by older ingestion versions
    successful_transaction_count: int | None = None
    failed_transaction_count: int | None = None
    operation_count: int = 0
    closed_at: datetime
    total_coins: int
    fee_pool: int
    base_fee: int
    base_reserve: int
    max_tx_set_size: int
    protocol_version: int = 0
    ledger_header: str | None = None

    @field_validator("closed_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def paging_token(self) -> str:
        return str(self.id)


class TransactionRecord(BaseModel):
    """One row of ``history_transactions``."""

    id: int
    transaction_hash: str
    ledger_sequence: int
    account: str
    account_sequence: str
    fee_charged: int
    max_fee: int | None = None
    operation_count: int
    tx_envelope: str = ""
    tx_result: str = ""
    tx_meta: str = ""
    tx_fee_meta: str = ""
    memo_type: str = "none"
    signatures: str = ""

    @field_validator("account_sequence", mode="before")
    @classmethod
    def _sequence_as_text(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("signatures", mode="before")
    @classmethod
    def _join_signatures(cls, v: Any) -> Any:
        """Postgres returns ``signatures`` as an array; render it comma-joined."""
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return ",".join(v)
        return v

    def paging_token(self) -> str:
        return str(self.id)


class OperationRecord(BaseModel):
    """One row of ``history_operations`` plus its transaction's source account."""

    id: int
    transaction_id: int
    application_order: int
    type: int
    details: str = ""
    source_account: str | None = None
    transaction_account: str | None = None

    @field_validator("details", mode="before")
    @classmethod
    def _details_as_text(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, (dict, list)):
            return json.dumps(v, sort_keys=True)
        return v


__all__ = ["LedgerRecord", "OperationRecord", "TransactionRecord"]
