"""File-based connection status publication."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from ledgerbot.models.connection import StatusRecord
from ledgerbot.lib.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class FileStatusPublisher:
    """
    Writes the connection status record to a single JSON file.

    Uses temp file + os.replace() so pollers never read a partial record.
    """

    def __init__(self, path: Path):
        self._path = path

    def publish(self, record: StatusRecord) -> None:
        """Replace the status file with the given record."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=".status_",
                suffix=".tmp",
            )
        except OSError as e:
            raise PersistenceError(
                f"Failed to prepare status file: {e}",
                path=str(self._path),
                operation="write",
            )

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                f.write(record.model_dump_json())
            os.replace(temp_path, self._path)
        except Exception as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise PersistenceError(
                f"Failed to publish status: {e}",
                path=str(self._path),
                operation="write",
            )

        logger.debug(f"Published status {record.status.value}")

    def read(self) -> Optional[StatusRecord]:
        """Return the last published record, or None if never published."""
        if not self._path.exists():
            return None

        try:
            return StatusRecord.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable status file {self._path}: {e}")
            return None
