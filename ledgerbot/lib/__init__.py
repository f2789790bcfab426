"""Shared utilities and configuration."""

from ledgerbot.lib.config import WhatsAppConfig, TranscriptionConfig
from ledgerbot.lib.timestamps import generate_uuid, generate_timestamp
from ledgerbot.lib.exceptions import (
    LedgerBotError,
    ConfigError,
    ValidationError,
    InvalidStateError,
    TransportError,
    TranscriptionError,
    PersistenceError,
)

__all__ = [
    "WhatsAppConfig",
    "TranscriptionConfig",
    "generate_uuid",
    "generate_timestamp",
    "LedgerBotError",
    "ConfigError",
    "ValidationError",
    "InvalidStateError",
    "TransportError",
    "TranscriptionError",
    "PersistenceError",
]
