"""Outbound message delivery.

Text messages probe the candidate addresses of a phone number in order
and deliver to the first one the network confirms. Documents and images go
to the address exactly as supplied.
"""

import logging
from typing import Optional, Union

import httpx

from ledgerbot.lib.exceptions import ValidationError
from ledgerbot.services.whatsapp.addressing import normalize_address, to_address
from ledgerbot.services.whatsapp.session import WhatsAppSessionManager

logger = logging.getLogger(__name__)


class OutboundSender:
    """Send text, documents and images through the session's transport."""

    def __init__(
        self,
        session: WhatsAppSessionManager,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self._http_transport = http_transport

    @property
    def _domain(self) -> str:
        return self.session.config.address_domain

    async def send_text(self, raw_address: str, body: str) -> bool:
        """
        Send a text message.

        Args:
            raw_address: Phone number in any format, or a full address
            body: Message text

        Returns:
            True if a send call was issued without error
        """
        if not self.session.is_connected():
            logger.error("WhatsApp não está conectado, mensagem não enviada")
            return False

        try:
            candidates = normalize_address(raw_address, self._domain)
        except ValidationError as e:
            logger.error(f"Cannot send message: {e}")
            return False

        transport = self.session.transport

        for candidate in candidates:
            try:
                lookup = await transport.check_exists(candidate)
            except Exception as e:
                logger.warning(f"Existence check failed for {candidate}: {e}")
                continue

            if not lookup.exists:
                logger.debug(f"{candidate} is not on WhatsApp")
                continue

            target = lookup.canonical_address or candidate
            try:
                await transport.send_text(target, body)
            except Exception as e:
                logger.warning(f"Error sending message to {target}, trying next candidate: {e}")
                continue

            logger.info(f"✅ Message sent to {target}")
            return True

        # No candidate confirmed: send to the literal address anyway
        fallback = candidates[0]
        logger.warning(f"No candidate confirmed for {raw_address}, sending to {fallback}")
        try:
            await transport.send_text(fallback, body)
        except Exception as e:
            logger.error(f"❌ Error sending message to {fallback}: {e}")
            return False

        logger.info(f"✅ Message sent to {fallback} (unconfirmed address)")
        return True

    async def send_document(
        self,
        raw_address: str,
        file_ref: Union[str, bytes],
        filename: str,
        mimetype: str = "application/pdf",
    ) -> bool:
        """
        Send a document (URL or raw bytes) to a single address.

        Returns:
            True if the send call succeeded
        """
        if not self.session.is_connected():
            logger.error("WhatsApp não está conectado, documento não enviado")
            return False

        try:
            address = to_address(raw_address, self._domain)
            await self.session.transport.send_document(address, file_ref, filename, mimetype)
        except Exception as e:
            logger.error(f"❌ Error sending document to {raw_address}: {e}")
            return False

        logger.info(f"✅ Document sent to {address} - file: {filename}")
        return True

    async def send_image(self, raw_address: str, image_url: str, caption: str = "") -> bool:
        """
        Download an image and send it to a single address.

        Args:
            raw_address: Phone number in any format, or a full address
            image_url: Where to fetch the image from
            caption: Optional caption shown under the image

        Returns:
            True if the image was fetched and the send call succeeded
        """
        if not self.session.is_connected():
            logger.error("WhatsApp não está conectado, imagem não enviada")
            return False

        try:
            address = to_address(raw_address, self._domain)
            async with httpx.AsyncClient(
                timeout=self.session.config.media_timeout,
                transport=self._http_transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(image_url)
                response.raise_for_status()
            await self.session.transport.send_image(address, response.content, caption or "")
        except Exception as e:
            logger.error(f"❌ Error sending image to {raw_address}: {e}")
            return False

        logger.info(f"✅ Image sent to {address}")
        return True

    async def mark_as_read(self, address: str, message_id: str) -> None:
        """Send a read receipt; failures are only logged."""
        if not self.session.is_connected() or not message_id:
            return

        try:
            await self.session.transport.mark_read(address, message_id)
        except Exception as e:
            logger.warning(f"Error marking message {message_id} as read: {e}")
