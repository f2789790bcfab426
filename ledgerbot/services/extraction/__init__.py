"""Free-text transaction extraction."""

from ledgerbot.services.extraction.extractor import extract_transaction

__all__ = ["extract_transaction"]
