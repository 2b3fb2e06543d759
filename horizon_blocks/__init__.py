"""Ledger range export for a Horizon-style history database.

Loads a contiguous range of ledgers with their transactions and operations,
assembles them into nested block documents, and either returns them or
forwards them to a Kafka REST proxy.
"""

__version__ = "0.1.0"
