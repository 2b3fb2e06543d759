"""Declarative models of the history tables read by the batch loader.

Ingestion owns these tables in production; the models exist so local and
test databases can be created with the same columns. ``signatures`` is
plain text here, while Postgres ingestion stores a text array.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class HistoryLedger(Base):
    __tablename__ = "history_ledgers"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    importer_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    ledger_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    previous_ledger_hash: Mapped[str | None] = mapped_column(String(64))
    transaction_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    successful_transaction_count: Mapped[int | None] = mapped_column(Integer)
    failed_transaction_count: Mapped[int | None] = mapped_column(Integer)
    operation_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    closed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_coins: Mapped[int] = mapped_column(BigInteger, nullable=False)
    fee_pool: Mapped[int] = mapped_column(BigInteger, nullable=False)
    base_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    base_reserve: Mapped[int] = mapped_column(Integer, nullable=False)
    max_tx_set_size: Mapped[int] = mapped_column(Integer, nullable=False)
    protocol_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ledger_header: Mapped[str | None] = mapped_column(Text)


class HistoryTransaction(Base):
    __tablename__ = "history_transactions"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    transaction_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    ledger_sequence: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    application_order: Mapped[int] = mapped_column(Integer, nullable=False)
    account: Mapped[str] = mapped_column(String(64), nullable=False)
    account_sequence: Mapped[int] = mapped_column(BigInteger, nullable=False)
    max_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    fee_charged: Mapped[int] = mapped_column(Integer, nullable=False)
    operation_count: Mapped[int] = mapped_column(Integer, nullable=False)
    tx_envelope: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tx_result: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tx_meta: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tx_fee_meta: Mapped[str] = mapped_column(Text, nullable=False, default="")
    signatures: Mapped[str] = mapped_column(Text, nullable=False, default="")
    memo_type: Mapped[str] = mapped_column(String, nullable=False, default="none")


class HistoryOperation(Base):
    __tablename__ = "history_operations"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    transaction_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("history_transactions.id"), nullable=False, index=True,
    )
    application_order: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[int] = mapped_column(Integer, nullable=False)
    details: Mapped[str | None] = mapped_column(Text)
    source_account: Mapped[str | None] = mapped_column(String(64))


__all__ = ["Base", "HistoryLedger", "HistoryOperation", "HistoryTransaction"]
