"""Assemble flat history rows into nested block documents.

Pure and total: no I/O, never raises for well-typed input. Children are
grouped under their parent by foreign key in the order they were loaded;
nothing is re-sorted. Children whose parent was not loaded in the same
batch are dropped.
"""

from __future__ import annotations

from typing import Callable, Hashable, Iterable, TypeVar

from horizon_blocks.history.records import LedgerRecord, OperationRecord, TransactionRecord

from .amount import amount_string
from .models import BlockData, BlockLedger, BlockOperation, BlockTransaction, BlockValue
from .operation_types import type_name

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def _group_ordered(items: Iterable[tuple[K, V]]) -> dict[K, list[V]]:
    """Ordered multimap: key -> values in first-seen iteration order."""
    groups: dict[K, list[V]] = {}
    for key, value in items:
        groups.setdefault(key, []).append(value)
    return groups


def build_operation(record: OperationRecord) -> BlockOperation:
    return BlockOperation(
        operation_id=str(record.id),
        transaction_id=str(record.transaction_id),
        application_order=record.application_order,
        type=type_name(record.type),
        detail=record.details,
        # Fall back to the owning transaction's source account
        source_account=record.source_account or record.transaction_account or "",
    )


def build_transaction(
    record: TransactionRecord, operations: list[BlockOperation],
) -> BlockTransaction:
    return BlockTransaction(
        id=str(record.id),
        paging_token=record.paging_token(),
        hash=record.transaction_hash,
        ledger=record.ledger_sequence,
        source_account=record.account,
        source_account_sequence=record.account_sequence,
        fee_paid=record.fee_charged,
        operation_count=record.operation_count,
        envelope_xdr=record.tx_envelope,
        result_xdr=record.tx_result,
        result_meta_xdr=record.tx_meta,
        fee_meta_xdr=record.tx_fee_meta,
        memo_type=record.memo_type,
        signatures=record.signatures,
        operations=operations,
    )


def build_ledger(
    record: LedgerRecord, transactions: list[BlockTransaction],
) -> BlockLedger:
    successful = record.successful_transaction_count
    if successful is None:
        successful = record.transaction_count

    return BlockLedger(
        id=str(record.id),
        paging_token=record.paging_token(),
        hash=record.ledger_hash,
        prev_hash=record.previous_ledger_hash or None,
        sequence=record.sequence,
        transaction_count=record.transaction_count,
        successful_transaction_count=successful,
        failed_transaction_count=record.failed_transaction_count,
        operation_count=record.operation_count,
        closed_at=record.closed_at,
        total_coins=amount_string(record.total_coins),
        fee_pool=amount_string(record.fee_pool),
        base_fee_in_stroops=record.base_fee,
        base_reserve_in_stroops=record.base_reserve,
        max_tx_set_size=record.max_tx_set_size,
        protocol_version=record.protocol_version,
        header_xdr=record.ledger_header or "",
        transactions=transactions,
    )


def assemble_blocks(
    ledgers: Iterable[LedgerRecord],
    transactions: Iterable[TransactionRecord],
    operations: Iterable[OperationRecord],
    *,
    on_orphans: Callable[[str, int], None] | None = None,
) -> BlockData:
    """Build one ``BlockValue`` per ledger, in ledger load order.

    Args:
        ledgers: Ledger rows, in the order they should be emitted.
        transactions: Transaction rows; grouped by ``ledger_sequence``.
        operations: Operation rows; grouped by ``transaction_id``.
        on_orphans: Optional callback ``(kind, count)`` invoked when rows
            had no loaded parent. Used for diagnostics only.

    Returns:
        BlockData with exactly one record per ledger row.
    """
    ops_by_tx = _group_ordered(
        (op.transaction_id, build_operation(op)) for op in operations
    )

    tx_records = list(transactions)
    txs_by_ledger = _group_ordered(
        (tx.ledger_sequence, build_transaction(tx, ops_by_tx.get(tx.id, [])))
        for tx in tx_records
    )

    ledger_records = list(ledgers)
    records = [
        BlockValue(value=build_ledger(lr, txs_by_ledger.get(lr.sequence, [])))
        for lr in ledger_records
    ]

    if on_orphans is not None:
        tx_ids = {tx.id for tx in tx_records}
        orphan_ops = sum(len(v) for k, v in ops_by_tx.items() if k not in tx_ids)
        sequences = {lr.sequence for lr in ledger_records}
        orphan_txs = sum(len(v) for k, v in txs_by_ledger.items() if k not in sequences)
        if orphan_ops:
            on_orphans("operations", orphan_ops)
        if orphan_txs:
            on_orphans("transactions", orphan_txs)

    return BlockData(records=records)


__all__ = ["assemble_blocks", "build_ledger", "build_operation", "build_transaction"]
