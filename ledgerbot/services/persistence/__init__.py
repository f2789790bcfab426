"""Persistence abstraction layer for transactions and connection status."""

from pathlib import Path

from ledgerbot.services.persistence.base import StatusPublisher, TransactionStore, PersistenceError
from ledgerbot.services.persistence.status import FileStatusPublisher
from ledgerbot.services.persistence.transactions import FileTransactionStore


def create_transaction_store(path: Path) -> TransactionStore:
    """Create the default transaction store implementation."""
    return FileTransactionStore(path)


def create_status_publisher(path: Path) -> StatusPublisher:
    """Create the default status publisher implementation."""
    return FileStatusPublisher(path)


__all__ = [
    "TransactionStore",
    "StatusPublisher",
    "PersistenceError",
    "FileTransactionStore",
    "FileStatusPublisher",
    "create_transaction_store",
    "create_status_publisher",
]
