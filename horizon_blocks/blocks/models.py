"""Pydantic models for assembled block documents.

Shape: ``BlockData.records[i].value`` is one ledger, carrying its
transactions, each carrying its operations. Field names are the wire names
consumed downstream, so they must not change.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Content type for the Kafka REST proxy JSON produce API
# ---------------------------------------------------------------------------

KAFKA_JSON_CONTENT_TYPE = "application/vnd.kafka.json.v1+json"

PUBLISH_SUCCESS = "success"


class BlockOperation(BaseModel):
    operation_id: str
    transaction_id: str
    application_order: int
    type: str
    detail: str
    source_account: str


class BlockTransaction(BaseModel):
    id: str
    paging_token: str
    hash: str
    ledger: int
    source_account: str
    source_account_sequence: str
    fee_paid: int
    operation_count: int
    envelope_xdr: str
    result_xdr: str
    result_meta_xdr: str
    fee_meta_xdr: str
    memo_type: str
    signatures: str
    operations: list[BlockOperation] = Field(default_factory=list)


class BlockLedger(BaseModel):
    """One ledger with its transactions.

    ``prev_hash`` and ``failed_transaction_count`` are ``None`` when unknown
    and are left out of the rendered JSON.
    """

    id: str
    paging_token: str
    hash: str
    prev_hash: str | None = None
    sequence: int
    transaction_count: int
    successful_transaction_count: int
    failed_transaction_count: int | None = None
    operation_count: int
    closed_at: datetime
    total_coins: str
    fee_pool: str
    base_fee_in_stroops: int
    base_reserve_in_stroops: int
    max_tx_set_size: int
    protocol_version: int
    header_xdr: str
    transactions: list[BlockTransaction] = Field(default_factory=list)


class BlockValue(BaseModel):
    value: BlockLedger


class BlockData(BaseModel):
    """Top-level response and publish payload."""

    records: list[BlockValue] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class PublishReply(BaseModel):
    """Acknowledgment rendered after a successful publish."""

    message: str = PUBLISH_SUCCESS


__all__ = [
    "KAFKA_JSON_CONTENT_TYPE",
    "PUBLISH_SUCCESS",
    "BlockData",
    "BlockLedger",
    "BlockOperation",
    "BlockTransaction",
    "BlockValue",
    "PublishReply",
]
