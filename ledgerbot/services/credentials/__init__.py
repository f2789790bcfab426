"""Credential persistence for the WhatsApp session."""

from ledgerbot.services.credentials.storage import CredentialStore, FileCredentialStore

__all__ = ["CredentialStore", "FileCredentialStore"]
