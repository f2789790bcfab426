"""Domain models for the ledger bot."""

from ledgerbot.models.connection import (
    ConnectionState,
    ConnectionStatus,
    ConnectionUpdate,
    Credentials,
    StatusRecord,
)
from ledgerbot.models.message import InboundMessage, MessageKind
from ledgerbot.models.transaction import (
    ContextTag,
    Direction,
    ExtractedTransactionIntent,
    Transaction,
    TransactionStatus,
)

__all__ = [
    "ConnectionState",
    "ConnectionStatus",
    "ConnectionUpdate",
    "Credentials",
    "StatusRecord",
    "InboundMessage",
    "MessageKind",
    "ContextTag",
    "Direction",
    "ExtractedTransactionIntent",
    "Transaction",
    "TransactionStatus",
]
