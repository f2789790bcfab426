"""Persistence Protocol definitions."""

from typing import Optional, Protocol

from ledgerbot.models.connection import StatusRecord
from ledgerbot.models.transaction import Transaction
from ledgerbot.lib.exceptions import PersistenceError


class TransactionStore(Protocol):
    """
    Contract for transaction persistence implementations.

    Current implementation appends to a JSONL file, but the contract
    allows a database-backed store.
    """

    def add(self, transaction: Transaction) -> str:
        """
        Persist a transaction.

        Args:
            transaction: Transaction to persist

        Returns:
            str: Identifier of the stored record

        Raises:
            PersistenceError: If save fails

        Contract:
            - MUST persist before returning
            - MUST NOT modify transaction
        """
        ...

    def list(self) -> list[Transaction]:
        """Return stored transactions in insertion order."""
        ...


class StatusPublisher(Protocol):
    """
    Contract for connection status publication.

    The UI polls the published record to show the pairing code and
    the connection state.
    """

    def publish(self, record: StatusRecord) -> None:
        """
        Replace the published status record.

        Raises:
            PersistenceError: If the write fails
        """
        ...

    def read(self) -> Optional[StatusRecord]:
        """Return the last published record, or None."""
        ...


__all__ = ["TransactionStore", "StatusPublisher", "PersistenceError"]
