"""Reply delivery through an external WhatsApp gateway."""

import logging
from typing import Optional

import httpx

from ledgerbot.lib.config import AutomationConfig

logger = logging.getLogger(__name__)


class ReplyGateway:
    """
    Posts replies to an external gateway's /send endpoint.

    Used by the router when the local session cannot deliver a reply,
    e.g. while it is reconnecting or waiting for pairing.
    """

    def __init__(
        self,
        config: AutomationConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.config.gateway_url)

    @property
    def send_url(self) -> str:
        return f"{self.config.gateway_url.rstrip('/')}/send"

    async def send_text(self, to: str, message: str) -> bool:
        """
        Relay a text reply.

        Returns:
            True if the gateway accepted the message
        """
        if not self.is_configured():
            logger.warning("WHATSAPP_WEBHOOK_URL não configurada, não foi possível enviar mensagem")
            return False

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.send_url, json={"to": to, "message": message})
        except httpx.RequestError as e:
            logger.error(f"❌ Error relaying message to {to} through gateway: {e}")
            return False

        if response.status_code >= 400:
            logger.error(f"Gateway rejected message to {to}: HTTP {response.status_code}")
            return False

        logger.info(f"Message to {to} relayed through external gateway")
        return True
