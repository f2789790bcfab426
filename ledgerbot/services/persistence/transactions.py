"""File-based transaction storage implementation."""

import json
import logging
from pathlib import Path

import pydantic

from ledgerbot.models.transaction import Transaction
from ledgerbot.lib.exceptions import PersistenceError, ValidationError

logger = logging.getLogger(__name__)


class FileTransactionStore:
    """
    Filesystem-based implementation of TransactionStore.

    Directory structure:
        {data_dir}/
        └── transactions.jsonl   (append-only)
    """

    def __init__(self, path: Path):
        """
        Initialize the file transaction store.

        Args:
            path: JSONL file receiving one transaction per line
        """
        self._path = path

    def _ensure_dir(self) -> None:
        """Ensure the parent directory exists, creating it if necessary."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            raise PersistenceError(
                f"Failed to create directory: {e}",
                path=str(self._path.parent),
                operation="mkdir",
            )

    def add(self, transaction: Transaction) -> str:
        """Append a transaction to the JSONL file."""
        self._ensure_dir()

        try:
            line = json.dumps(transaction.model_dump(mode="json"), ensure_ascii=False) + "\n"

            with open(self._path, "a", encoding="utf-8") as f:
                f.write(line)
                f.flush()
        except Exception as e:
            raise PersistenceError(
                f"Failed to append transaction: {e}",
                path=str(self._path),
                operation="append",
            )

        logger.debug(f"Stored transaction {transaction.id} in {self._path}")
        return transaction.id

    def list(self) -> list[Transaction]:
        """Load all transactions in insertion order."""
        if not self._path.exists():
            return []

        transactions = []

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        transactions.append(Transaction.model_validate(json.loads(line)))
                    except (json.JSONDecodeError, pydantic.ValidationError, ValidationError) as e:
                        logger.warning(f"Skipping corrupted transaction at line {line_num}: {e}")
        except OSError as e:
            raise PersistenceError(
                f"Failed to read transactions: {e}",
                path=str(self._path),
                operation="read",
            )

        return transactions
