"""WhatsApp ledger bot: session management and inbound message interpretation."""

__version__ = "0.1.0"
