"""Connection models for the WhatsApp session.

Defines the connection state machine, the status record published for
UI polling, and the opaque credential bundle persisted between runs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from ledgerbot.lib.timestamps import generate_timestamp


class ConnectionState(str, Enum):
    """
    Session connection states.

    State transitions:
        CLOSED → CONNECTING → WAITING_FOR_PAIRING → OPEN
        CONNECTING → OPEN (stored credentials, no pairing needed)
        Any state → CLOSED (on transport close)

    Exceeding the reconnect ceiling leaves the session in CLOSED with
    no further automatic transitions.
    """

    CLOSED = "CLOSED"
    CONNECTING = "CONNECTING"
    WAITING_FOR_PAIRING = "WAITING_FOR_PAIRING"
    OPEN = "OPEN"

    @classmethod
    def allowed_transitions(cls) -> dict["ConnectionState", list["ConnectionState"]]:
        """Return allowed state transitions."""
        return {
            cls.CLOSED: [cls.CONNECTING, cls.CLOSED],
            cls.CONNECTING: [cls.WAITING_FOR_PAIRING, cls.OPEN, cls.CLOSED],
            cls.WAITING_FOR_PAIRING: [cls.WAITING_FOR_PAIRING, cls.CONNECTING, cls.OPEN, cls.CLOSED],
            cls.OPEN: [cls.CLOSED],
        }

    def can_transition_to(self, new_state: "ConnectionState") -> bool:
        """Check if transition to new_state is allowed."""
        return new_state in self.allowed_transitions().get(self, [])


class ConnectionStatus(str, Enum):
    """Status values published to the status collaborator."""

    WAITING_QR = "waiting_qr"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class StatusRecord(BaseModel):
    """
    Connection status snapshot written on every state change.

    Immutable after creation; a new record replaces the previous one.
    """

    status: ConnectionStatus = Field(..., description="Published connection status")
    pairing_payload: str | None = Field(default=None, description="QR payload while pairing")
    updated_at: datetime = Field(default_factory=generate_timestamp, description="UTC timestamp")

    model_config = {
        "frozen": True,
    }


@dataclass
class Credentials:
    """
    Opaque session credentials.

    Attributes:
        creds: Identity and account key material as handed out by the transport
        keys: Signal keystore, rotated continuously while the session is open
    """

    creds: dict[str, Any] = field(default_factory=dict)
    keys: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True until the first successful pairing."""
        return not self.creds

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "creds": self.creds,
            "keys": self.keys,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Credentials":
        """Create Credentials from dictionary."""
        return cls(
            creds=data.get("creds") or {},
            keys=data.get("keys") or {},
        )


@dataclass
class ConnectionUpdate:
    """
    Connection update reported by the transport.

    Attributes:
        connection: "connecting", "open", "close" or None (pairing-only update)
        pairing_payload: QR payload when the transport needs pairing
        close_reason: Human-readable reason for a close
        close_status_code: Transport status code for a close (401 = logged out)
    """

    connection: Optional[str] = None
    pairing_payload: Optional[str] = None
    close_reason: Optional[str] = None
    close_status_code: Optional[int] = None
