"""Tests for history row models."""

from datetime import datetime, timezone

from horizon_blocks.history.records import LedgerRecord, OperationRecord, TransactionRecord


class TestLedgerRecord:

    def test_naive_closed_at_is_utc(self):
        lr = LedgerRecord(
            id=1, sequence=1, ledger_hash="h", closed_at="2019-01-01 00:00:05.000000",
            total_coins=0, fee_pool=0, base_fee=100, base_reserve=5_000_000,
            max_tx_set_size=50,
        )
        assert lr.closed_at == datetime(2019, 1, 1, 0, 0, 5, tzinfo=timezone.utc)
        assert lr.successful_transaction_count is None
        assert lr.failed_transaction_count is None
        assert lr.paging_token() == "1"


class TestTransactionRecord:

    def test_signature_array_is_comma_joined(self):
        tx = TransactionRecord(
            id=1, transaction_hash="h", ledger_sequence=1, account="G",
            account_sequence=123, fee_charged=100, operation_count=1,
            signatures=["a", "b"],
        )
        assert tx.signatures == "a,b"
        assert tx.account_sequence == "123"

    def test_null_signatures(self):
        tx = TransactionRecord(
            id=1, transaction_hash="h", ledger_sequence=1, account="G",
            account_sequence="1", fee_charged=100, operation_count=1, signatures=None,
        )
        assert tx.signatures == ""


class TestOperationRecord:

    def test_json_details_are_serialised(self):
        op = OperationRecord(
            id=1, transaction_id=1, application_order=1, type=1,
            details={"to": "G", "amount": "1.0000000"},
        )
        assert op.details == '{"amount": "1.0000000", "to": "G"}'

    def test_null_details(self):
        op = OperationRecord(id=1, transaction_id=1, application_order=1, type=1, details=None)
        assert op.details == ""
        assert op.source_account is None
