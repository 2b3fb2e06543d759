"""Read side of the history database: row models, batch loader, retained range."""

from .database import HistoryDatabase
from .loader import BatchLoader
from .records import LedgerRecord, OperationRecord, TransactionRecord
from .state import LedgerState, LedgerStateTracker, load_ledger_state

__all__ = [
    "BatchLoader",
    "HistoryDatabase",
    "LedgerRecord",
    "LedgerState",
    "LedgerStateTracker",
    "OperationRecord",
    "TransactionRecord",
    "load_ledger_state",
]
