"""WhatsApp service package: session, addressing, delivery and routing."""

from ledgerbot.services.whatsapp.adapter import WhatsAppEvent
from ledgerbot.services.whatsapp.addressing import normalize_address, to_address
from ledgerbot.services.whatsapp.router import InboundMessageRouter, RoutingOutcome, RoutingResult
from ledgerbot.services.whatsapp.sender import OutboundSender
from ledgerbot.services.whatsapp.session import WhatsAppSessionManager, reconnect_delay_ms
from ledgerbot.services.whatsapp.transport import AddressLookup, WhatsAppTransport, load_transport

__all__ = [
    "WhatsAppEvent",
    "normalize_address",
    "to_address",
    "InboundMessageRouter",
    "RoutingOutcome",
    "RoutingResult",
    "OutboundSender",
    "WhatsAppSessionManager",
    "reconnect_delay_ms",
    "AddressLookup",
    "WhatsAppTransport",
    "load_transport",
]
