"""HTTP surface handlers."""

from ledgerbot.api.handlers import ApiResponse, DocumentRenderer, LedgerApi

__all__ = ["ApiResponse", "DocumentRenderer", "LedgerApi"]
