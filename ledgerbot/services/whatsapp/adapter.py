"""WhatsApp event normalization layer.

This module defines normalized events coming out of the transport,
isolating the wire protocol details from the rest of the application.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ledgerbot.models.connection import ConnectionUpdate, Credentials
from ledgerbot.models.message import InboundMessage


@dataclass
class WhatsAppEvent:
    """
    Normalized event from the transport.

    Attributes:
        event_type: "credentials_update", "connection_update" or "messages"
        timestamp: When the event was received
        payload: Event-specific data
    """

    event_type: str  # "credentials_update" | "connection_update" | "messages"
    timestamp: datetime
    payload: dict

    @classmethod
    def credentials_update(cls, credentials: Credentials) -> "WhatsAppEvent":
        """Create a credentials update event."""
        return cls(
            event_type="credentials_update",
            timestamp=datetime.now(),
            payload={"credentials": credentials},
        )

    @classmethod
    def connection_update(
        cls,
        connection: Optional[str] = None,
        pairing_payload: Optional[str] = None,
        close_reason: Optional[str] = None,
        close_status_code: Optional[int] = None,
    ) -> "WhatsAppEvent":
        """Create a connection update event."""
        return cls(
            event_type="connection_update",
            timestamp=datetime.now(),
            payload={
                "update": ConnectionUpdate(
                    connection=connection,
                    pairing_payload=pairing_payload,
                    close_reason=close_reason,
                    close_status_code=close_status_code,
                ),
            },
        )

    @classmethod
    def messages(
        cls, messages: list[InboundMessage], batch_type: str = "notify"
    ) -> "WhatsAppEvent":
        """
        Create an inbound messages event.

        batch_type is "notify" for live messages and "append" for
        history sync batches delivered right after pairing.
        """
        return cls(
            event_type="messages",
            timestamp=datetime.now(),
            payload={
                "messages": list(messages),
                "batch_type": batch_type,
            },
        )

    @property
    def is_credentials_update(self) -> bool:
        return self.event_type == "credentials_update"

    @property
    def is_connection_update(self) -> bool:
        return self.event_type == "connection_update"

    @property
    def is_messages(self) -> bool:
        return self.event_type == "messages"

    @property
    def credentials(self) -> Optional[Credentials]:
        """Get credentials if this is a credentials update."""
        if self.is_credentials_update:
            return self.payload.get("credentials")
        return None

    @property
    def update(self) -> Optional[ConnectionUpdate]:
        """Get the connection update if this is a connection event."""
        if self.is_connection_update:
            return self.payload.get("update")
        return None

    @property
    def inbound_messages(self) -> list[InboundMessage]:
        """Get messages if this is a messages event."""
        if self.is_messages:
            return self.payload.get("messages", [])
        return []

    @property
    def is_notify(self) -> bool:
        """True for live message batches (as opposed to history sync)."""
        return self.is_messages and self.payload.get("batch_type") == "notify"
