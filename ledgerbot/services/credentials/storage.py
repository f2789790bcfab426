"""Credential storage with atomic JSON persistence.

This module implements filesystem-based credential storage using atomic
write operations (temp file + os.replace) to prevent corrupting the
session key material when the process dies mid-write.
"""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Protocol

from ledgerbot.lib.exceptions import CredentialStoreError
from ledgerbot.models.connection import Credentials

logger = logging.getLogger(__name__)

CREDENTIALS_FILENAME = "creds.json"


class CredentialStore(Protocol):
    """
    Contract for credential persistence implementations.

    Contract:
        - load() is called once per connection attempt; returns empty
          Credentials when nothing was stored yet
        - save() MUST persist before returning (write-through)
        - purge() MUST remove every trace of the session; later load()
          calls return empty Credentials
    """

    def load(self) -> Credentials:
        ...

    def save(self, credentials: Credentials) -> None:
        ...

    def purge(self) -> None:
        ...


class FileCredentialStore:
    """
    Atomic JSON-based credential storage.

    Directory structure:
        {auth_dir}/{instance_name}/
        └── creds.json
    """

    def __init__(self, auth_path: Path):
        """
        Initialize credential storage.

        Args:
            auth_path: Folder holding this instance's credentials
        """
        self.auth_path = auth_path

    @property
    def credentials_path(self) -> Path:
        """Path of the credentials file."""
        return self.auth_path / CREDENTIALS_FILENAME

    def load(self) -> Credentials:
        """
        Load stored credentials.

        Returns:
            Stored Credentials, or empty Credentials if none exist

        Raises:
            CredentialStoreError: If the file exists but cannot be parsed
        """
        if not self.credentials_path.exists():
            logger.info(f"No stored credentials in {self.auth_path}, pairing required")
            return Credentials()

        try:
            with open(self.credentials_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Credentials.from_dict(data)

        except json.JSONDecodeError as e:
            logger.error(f"Corrupted credentials at {self.credentials_path}: {e}")
            raise CredentialStoreError(
                "Corrupted credentials file",
                path=str(self.credentials_path),
                operation="read",
            ) from e

        except OSError as e:
            raise CredentialStoreError(
                f"Failed to load credentials: {e}",
                path=str(self.credentials_path),
                operation="read",
            ) from e

    def save(self, credentials: Credentials) -> None:
        """
        Persist credentials atomically.

        Uses temp file + os.replace() for POSIX-atomic writes.
        Crash during write leaves the previous file intact.
        """
        self.auth_path.mkdir(parents=True, exist_ok=True)

        json_content = json.dumps(credentials.to_dict(), ensure_ascii=False)

        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.auth_path,
            prefix=".creds_",
            suffix=".tmp",
        )

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                f.write(json_content)
                f.flush()
                os.fsync(f.fileno())

            os.replace(temp_path, self.credentials_path)
            logger.debug(f"Saved credentials to {self.credentials_path}")

        except Exception as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise CredentialStoreError(
                f"Failed to save credentials: {e}",
                path=str(self.credentials_path),
                operation="write",
            ) from e

    def purge(self) -> None:
        """Delete the whole credential folder (logout)."""
        if not self.auth_path.exists():
            return

        try:
            shutil.rmtree(self.auth_path)
        except OSError as e:
            raise CredentialStoreError(
                f"Failed to purge credentials: {e}",
                path=str(self.auth_path),
                operation="delete",
            ) from e

        logger.info(f"Session credentials deleted: {self.auth_path}")
