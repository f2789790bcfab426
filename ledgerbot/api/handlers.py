"""HTTP surface handlers.

Framework-agnostic: each handler takes the decoded JSON body (if any)
and returns an ApiResponse that any web framework can serialize.
Routes:

    POST /message         → post_message
    GET  /status          → get_status
    GET  /qr              → get_qr
    POST /send-document   → post_send_document
    POST /send-image      → post_send_image
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from ledgerbot.lib import messages
from ledgerbot.lib.exceptions import LedgerBotError
from ledgerbot.models.message import InboundMessage, MessageKind
from ledgerbot.services.persistence.base import StatusPublisher
from ledgerbot.services.whatsapp.router import InboundMessageRouter, RoutingOutcome
from ledgerbot.services.whatsapp.sender import OutboundSender
from ledgerbot.services.whatsapp.session import WhatsAppSessionManager

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    """Status code plus JSON-serializable body."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class DocumentRenderer(Protocol):
    """
    Contract for prescription document rendering.

    Rendering and storage live outside this service; the renderer
    returns a URL the messaging network can fetch.
    """

    async def render_prescription(
        self, patient_id: str, prescription_id: str, prescription_type: str
    ) -> str:
        """
        Render and store a prescription PDF.

        Returns:
            Retrievable URL of the stored document

        Raises:
            Exception: Any failure is reported as a 500 by the handler
        """
        ...


class LedgerApi:
    """Request handlers backed by the session, router and sender."""

    def __init__(
        self,
        session: WhatsAppSessionManager,
        router: InboundMessageRouter,
        sender: OutboundSender,
        status_publisher: Optional[StatusPublisher] = None,
        document_renderer: Optional[DocumentRenderer] = None,
    ):
        self.session = session
        self.router = router
        self.sender = sender
        self.status_publisher = status_publisher
        self.document_renderer = document_renderer

    async def post_message(self, body: dict) -> ApiResponse:
        """Process a message relayed by an external gateway."""
        body = body or {}
        source = body.get("from")
        if not source:
            return ApiResponse(400, {"error": messages.ERROR_FROM_REQUIRED})

        message_type = body.get("messageType")
        text = body.get("text")
        audio_url = body.get("audioUrl")

        if message_type == MessageKind.AUDIO.value and audio_url:
            kind = MessageKind.AUDIO
        elif message_type == MessageKind.TEXT.value and text:
            kind = MessageKind.TEXT
        else:
            return ApiResponse(
                400,
                {
                    "error": messages.ERROR_UNSUPPORTED_MESSAGE,
                    "received": {
                        "messageType": message_type,
                        "hasText": bool(text),
                        "hasAudioUrl": bool(audio_url),
                    },
                },
            )

        message = InboundMessage(
            source_address=source,
            display_name=body.get("fromName") or messages.DEFAULT_SENDER_NAME,
            kind=kind,
            message_id=body.get("messageId"),
            text_body=text if kind == MessageKind.TEXT else None,
            media_ref=audio_url if kind == MessageKind.AUDIO else None,
        )

        try:
            result = await self.router.handle(message)
        except LedgerBotError as e:
            logger.error(f"❌ Error processing WhatsApp message: {e}")
            return ApiResponse(500, {"error": messages.ERROR_PROCESSING, "message": e.message})
        except Exception as e:
            logger.exception(f"❌ Unexpected error processing WhatsApp message: {e}")
            return ApiResponse(500, {"error": messages.ERROR_PROCESSING, "message": str(e)})

        if result.outcome == RoutingOutcome.TRANSCRIPTION_FAILED:
            return ApiResponse(500, {"error": messages.ERROR_TRANSCRIPTION, "message": result.error})

        if result.outcome == RoutingOutcome.HELP_SENT:
            return ApiResponse(200, {"success": False, "message": messages.HELP_SENT})

        if result.outcome != RoutingOutcome.RECORDED:
            return ApiResponse(200, {"success": False, "outcome": result.outcome.value})

        transaction = result.transaction
        return ApiResponse(
            200,
            {
                "success": True,
                "transactionId": transaction.id,
                "transaction": transaction.model_dump(mode="json"),
            },
        )

    def get_status(self) -> ApiResponse:
        """Connection state plus the last published status record."""
        record = None
        if self.status_publisher:
            record = self.status_publisher.read()

        return ApiResponse(
            200,
            {
                "success": True,
                "connected": self.session.is_connected(),
                "state": self.session.state.value,
                "account": self.session.connected_account(),
                "qrCode": record.pairing_payload if record else None,
                "updatedAt": record.updated_at.isoformat() if record else None,
            },
        )

    def get_qr(self) -> ApiResponse:
        """Current pairing payload, or 404 while none is pending."""
        pairing_code = self.session.current_pairing_code()
        if not pairing_code:
            return ApiResponse(
                404,
                {"error": messages.ERROR_QR_UNAVAILABLE, "message": messages.HINT_QR_UNAVAILABLE},
            )

        return ApiResponse(
            200,
            {"success": True, "qrCode": pairing_code, "message": messages.QR_READY},
        )

    async def post_send_document(self, body: dict) -> ApiResponse:
        """Render a prescription and send it to the patient as a document."""
        body = body or {}
        phone = body.get("phone")
        patient_id = body.get("patientId")
        prescription_id = body.get("prescriptionId")

        if not phone or not patient_id or not prescription_id:
            return ApiResponse(400, {"error": messages.ERROR_DOCUMENT_FIELDS})

        if self.document_renderer is None:
            logger.error("No document renderer configured")
            return ApiResponse(500, {"error": messages.ERROR_DOCUMENT, "message": "renderer unavailable"})

        try:
            storage_url = await self.document_renderer.render_prescription(
                patient_id, prescription_id, body.get("prescriptionType") or "simples"
            )
        except Exception as e:
            logger.exception(f"❌ Error rendering prescription {prescription_id}: {e}")
            return ApiResponse(500, {"error": messages.ERROR_DOCUMENT, "message": str(e)})

        filename = messages.PRESCRIPTION_FILENAME.format(
            patient_name=body.get("patientName") or messages.DEFAULT_PATIENT_NAME
        )
        sent = await self.sender.send_document(phone, storage_url, filename)

        if not sent:
            return ApiResponse(503, {"error": messages.ERROR_NOT_CONNECTED, "storageUrl": storage_url})

        return ApiResponse(
            200,
            {
                "success": True,
                "storageUrl": storage_url,
                "message": messages.DOCUMENT_SENT.format(phone=phone),
            },
        )

    async def post_send_image(self, body: dict) -> ApiResponse:
        """Fetch an image by URL and send it, with an optional caption."""
        body = body or {}
        phone = body.get("phone")
        image_url = body.get("imageUrl")

        if not phone or not image_url:
            return ApiResponse(400, {"error": messages.ERROR_IMAGE_FIELDS})

        if not self.session.is_connected():
            return ApiResponse(503, {"error": messages.ERROR_NOT_CONNECTED})

        if not await self.sender.send_image(phone, image_url, body.get("caption") or ""):
            return ApiResponse(500, {"error": messages.ERROR_IMAGE})

        return ApiResponse(200, {"success": True, "message": messages.IMAGE_SENT.format(phone=phone)})
