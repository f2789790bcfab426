"""Transport contract for the messaging network.

The wire protocol (end-to-end encrypted handshake, framing) is provided
by an external library; this module only defines what the session
manager and the sender need from it, plus the loader for the concrete
factory named in configuration.
"""

import importlib
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Protocol, Union

from ledgerbot.lib.exceptions import ConfigError
from ledgerbot.models.connection import Credentials
from ledgerbot.services.whatsapp.adapter import WhatsAppEvent

# Status code the network uses for an explicit logout (session revoked)
LOGGED_OUT_STATUS_CODE = 401


@dataclass
class AddressLookup:
    """
    Result of an existence probe.

    Attributes:
        exists: Whether the address is registered on the network
        canonical_address: Address as the network knows it (may differ
            from the probed one, e.g. legacy 8-digit numbers)
    """

    exists: bool
    canonical_address: Optional[str] = None


class WhatsAppTransport(Protocol):
    """
    Contract for messaging transport implementations.

    Contract:
        - connect() raises if the transport cannot be constructed;
          otherwise returns the event stream for that connection attempt
        - the stream ends after delivering a "close" connection update
        - send calls raise on failure; callers decide how to recover
    """

    async def connect(self, credentials: Credentials) -> AsyncIterator[WhatsAppEvent]:
        ...

    async def send_text(self, address: str, body: str) -> None:
        ...

    async def send_document(
        self,
        address: str,
        document: Union[str, bytes],
        filename: str,
        mimetype: str,
    ) -> None:
        ...

    async def send_image(self, address: str, image: bytes, caption: str) -> None:
        ...

    async def check_exists(self, address: str) -> AddressLookup:
        ...

    async def mark_read(self, address: str, message_id: str) -> None:
        ...

    async def logout(self) -> None:
        ...

    async def close(self) -> None:
        ...

    @property
    def account_id(self) -> Optional[str]:
        ...


def load_transport(factory_path: str, **kwargs) -> WhatsAppTransport:
    """
    Build the transport named by a "package.module:callable" path.

    Args:
        factory_path: Import path of a callable returning a transport
        **kwargs: Forwarded to the factory

    Raises:
        ConfigError: If the path is malformed or cannot be imported
    """
    module_name, _, attr = factory_path.partition(":")
    if not module_name or not attr:
        raise ConfigError(
            f"Invalid transport factory '{factory_path}'. "
            "Expected 'package.module:callable' in WHATSAPP_TRANSPORT."
        )

    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigError(f"Cannot load transport factory '{factory_path}': {e}") from e

    return factory(**kwargs)
