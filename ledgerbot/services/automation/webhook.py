"""Forwarding of media messages to an external automation webhook (n8n)."""

import logging
from typing import Optional

import httpx

from ledgerbot.lib.config import AutomationConfig
from ledgerbot.models.message import InboundMessage

logger = logging.getLogger(__name__)


class AutomationWebhook:
    """
    Posts image messages to the configured webhook.

    Receipts and invoices arrive as photos; their interpretation lives in
    the automation workflow, not here.
    """

    def __init__(
        self,
        config: AutomationConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.config.webhook_url)

    async def forward_image(self, message: InboundMessage) -> bool:
        """
        Forward an image message.

        Returns:
            True if the webhook accepted the payload
        """
        if not self.is_configured():
            logger.info("Imagem recebida, mas N8N_WEBHOOK_URL não configurado")
            return False

        payload = {
            "from": message.source_address,
            "fromName": message.display_name,
            "mediaUrl": message.media_ref,
            "caption": message.text_body,
            "messageId": message.message_id,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.config.webhook_url, json=payload)
        except httpx.RequestError as e:
            logger.error(f"Error forwarding image {message.message_id}: {e}")
            return False

        if response.status_code >= 400:
            logger.error(
                f"Webhook rejected image {message.message_id}: HTTP {response.status_code}"
            )
            return False

        logger.info(f"Image {message.message_id} forwarded to automation webhook")
        return True
