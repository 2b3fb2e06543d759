"""Seed a local SQLite history database with a few synthetic ledgers.

One-shot script so the block server has data to serve immediately.

Usage:
    uv run python scripts/dev/seed_history.py --db sqlite+aiosqlite:///history.db --ledgers 10
    HORIZON_BLOCKS__HISTORY__DATABASE_URL=sqlite+aiosqlite:///history.db \
      uv run python -m horizon_blocks.entrypoints.server
"""

from __future__ import annotations

import argparse
import asyncio
import json
from datetime import datetime, timedelta, timezone

import bittensor as bt
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from horizon_blocks.history.schema import Base, HistoryLedger, HistoryOperation, HistoryTransaction

ACCOUNTS = [
    "GAAZI4TCR3TY5OJHCTJC2A4QSY6CJWJH5IAJTGKIN2ER7LBNVKOCCWN7",
    "GBRPYHIL2CI3FNQ4BXLFMNDLFJUNPU2HY3ZMFSHONUCEOASW7QC7OX2H",
    "GCEZWKCA5VLDNRLN3RPRJMRZOX3Z6G5CHCGSNFHEYVXM3XOJMDS674JZ",
]


def _toid(ledger: int, tx_order: int = 0, op_order: int = 0) -> int:
    """Total-order id: ledger << 32 | tx << 12 | op."""
    return (ledger << 32) | (tx_order << 12) | op_order


def build_rows(first: int, count: int, txs_per_ledger: int = 2, ops_per_tx: int = 2):
    closed = datetime(2019, 1, 1, tzinfo=timezone.utc)
    prev_hash = None
    rows = []
    for seq in range(first, first + count):
        ledger_hash = f"{seq:064x}"
        rows.append(HistoryLedger(
            id=_toid(seq),
            sequence=seq,
            ledger_hash=ledger_hash,
            previous_ledger_hash=prev_hash,
            transaction_count=txs_per_ledger,
            successful_transaction_count=txs_per_ledger,
            failed_transaction_count=0,
            operation_count=txs_per_ledger * ops_per_tx,
            closed_at=closed + timedelta(seconds=5 * (seq - first)),
            total_coins=1_000_000_000_000_000_000,
            fee_pool=100 * seq,
            base_fee=100,
            base_reserve=5_000_000,
            max_tx_set_size=50,
            protocol_version=10,
        ))
        prev_hash = ledger_hash

        for t in range(1, txs_per_ledger + 1):
            tx_id = _toid(seq, t)
            account = ACCOUNTS[t % len(ACCOUNTS)]
            rows.append(HistoryTransaction(
                id=tx_id,
                transaction_hash=f"{tx_id:064x}",
                ledger_sequence=seq,
                application_order=t,
                account=account,
                account_sequence=tx_id,
                max_fee=100 * ops_per_tx,
                fee_charged=100 * ops_per_tx,
                operation_count=ops_per_tx,
                signatures="c2lnbmF0dXJl",
                memo_type="none",
            ))
            for o in range(1, ops_per_tx + 1):
                rows.append(HistoryOperation(
                    id=_toid(seq, t, o),
                    transaction_id=tx_id,
                    application_order=o,
                    type=1,
                    details=json.dumps({"amount": "10.0000000", "asset_type": "native"}),
                    # Leave every second operation to inherit the transaction source
                    source_account=ACCOUNTS[(t + o) % len(ACCOUNTS)] if o % 2 else None,
                ))
    return rows


async def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a local history database")
    parser.add_argument("--db", type=str, default="sqlite+aiosqlite:///history.db")
    parser.add_argument("--first", type=int, default=1)
    parser.add_argument("--ledgers", type=int, default=10)
    args = parser.parse_args()

    engine = create_async_engine(args.db)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine)
    async with session_factory() as session:
        session.add_all(build_rows(args.first, args.ledgers))
        await session.commit()

    bt.logging.info({"seed_history": {"db": args.db, "first": args.first, "ledgers": args.ledgers}})
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
