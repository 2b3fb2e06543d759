"""Block assembly and delivery.

Turns the flat ledger/transaction/operation rows of a sequence range into
nested block documents and either returns them or publishes them to a
Kafka REST proxy topic.
"""

from .action import SendAction, SendParams, ensure_history_freshness, verify_within_history
from .assembler import assemble_blocks
from .models import (
    BlockData,
    BlockLedger,
    BlockOperation,
    BlockTransaction,
    BlockValue,
    PublishReply,
)
from .publisher import KafkaPublisher, PublishTarget

__all__ = [
    "BlockData",
    "BlockLedger",
    "BlockOperation",
    "BlockTransaction",
    "BlockValue",
    "KafkaPublisher",
    "PublishReply",
    "PublishTarget",
    "SendAction",
    "SendParams",
    "assemble_blocks",
    "ensure_history_freshness",
    "verify_within_history",
]
