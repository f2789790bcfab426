"""Inbound message model.

Transient: consumed once per router pass, never persisted verbatim.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ledgerbot.lib.timestamps import generate_timestamp

GROUP_SUFFIX = "@g.us"
BROADCAST_SUFFIX = "@broadcast"


class MessageKind(str, Enum):
    """Kinds of inbound messages the router distinguishes."""

    TEXT = "text"
    AUDIO = "audio"
    IMAGE = "image"
    UNKNOWN = "unknown"


@dataclass
class InboundMessage:
    """
    Normalized inbound message.

    Attributes:
        source_address: Sender address (e.g., "5511988887777@s.whatsapp.net")
        display_name: Sender push name
        kind: Classified message kind
        message_id: Network message identifier
        text_body: Plain/extended text, or the caption of an image
        media_ref: Retrievable URL of audio or image media
        from_self: True for messages sent by the connected account
        timestamp: When the message was sent
    """

    source_address: str
    display_name: str
    kind: MessageKind
    message_id: Optional[str] = None
    text_body: Optional[str] = None
    media_ref: Optional[str] = None
    from_self: bool = False
    timestamp: datetime = field(default_factory=generate_timestamp)

    @property
    def is_group(self) -> bool:
        """Check if the message came from a group chat."""
        return self.source_address.endswith(GROUP_SUFFIX)

    @property
    def is_broadcast(self) -> bool:
        """Check if the message came from a broadcast list or status."""
        return self.source_address.endswith(BROADCAST_SUFFIX)

    @property
    def is_direct(self) -> bool:
        """True for one-to-one messages from someone else."""
        return not (self.from_self or self.is_group or self.is_broadcast)

    @classmethod
    def from_payload(
        cls,
        source_address: str,
        display_name: Optional[str],
        payload: dict,
        message_id: Optional[str] = None,
        from_self: bool = False,
        timestamp: Optional[datetime] = None,
    ) -> "InboundMessage":
        """
        Classify a raw message payload.

        The payload is keyed by message type, as the network delivers it:
        "conversation", "extendedTextMessage", "audioMessage", "imageMessage".
        """
        kind = MessageKind.UNKNOWN
        text_body = None
        media_ref = None

        if payload.get("conversation"):
            kind = MessageKind.TEXT
            text_body = payload["conversation"]
        elif (payload.get("extendedTextMessage") or {}).get("text"):
            kind = MessageKind.TEXT
            text_body = payload["extendedTextMessage"]["text"]
        elif payload.get("audioMessage"):
            kind = MessageKind.AUDIO
            media_ref = payload["audioMessage"].get("url")
        elif payload.get("imageMessage"):
            kind = MessageKind.IMAGE
            media_ref = payload["imageMessage"].get("url")
            text_body = payload["imageMessage"].get("caption")

        return cls(
            source_address=source_address,
            display_name=display_name or "Desconhecido",
            kind=kind,
            message_id=message_id,
            text_body=text_body,
            media_ref=media_ref,
            from_self=from_self,
            timestamp=timestamp or generate_timestamp(),
        )
