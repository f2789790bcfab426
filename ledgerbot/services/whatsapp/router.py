"""Inbound message routing.

Every live one-to-one message goes through the same sequential
pipeline: classify → (transcribe) → extract → persist → confirm.
Group and broadcast traffic and our own messages are ignored.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, time, timezone
from enum import Enum
from typing import Optional

from ledgerbot.lib import messages
from ledgerbot.lib.timestamps import generate_timestamp
from ledgerbot.models.message import InboundMessage, MessageKind
from ledgerbot.models.transaction import ExtractedTransactionIntent, Transaction
from ledgerbot.services.automation.gateway import ReplyGateway
from ledgerbot.services.automation.webhook import AutomationWebhook
from ledgerbot.services.extraction.extractor import extract_transaction
from ledgerbot.services.persistence.base import TransactionStore
from ledgerbot.services.transcription.base import TranscriptionService
from ledgerbot.services.whatsapp.sender import OutboundSender

logger = logging.getLogger(__name__)


class RoutingOutcome(str, Enum):
    """What the router did with a message."""

    IGNORED = "ignored"  # Own, group, broadcast or unsupported kind
    RECORDED = "recorded"  # Transaction created and confirmed
    HELP_SENT = "help_sent"  # No financial intent found
    TRANSCRIPTION_FAILED = "transcription_failed"  # Apology sent
    FORWARDED = "forwarded"  # Image handed to the automation webhook


@dataclass
class RoutingResult:
    """
    Result of routing one message.

    Attributes:
        outcome: What happened
        transaction: Created transaction, for RECORDED
        text: Text fed to the extractor (typed or transcribed)
        error: Failure description, for TRANSCRIPTION_FAILED
    """

    outcome: RoutingOutcome
    transaction: Optional[Transaction] = None
    text: Optional[str] = None
    error: Optional[str] = None


class InboundMessageRouter:
    """
    Turn inbound chat messages into ledger transactions.

    Registered on the session manager with on_message(router.handle);
    also called directly by the HTTP surface.
    """

    def __init__(
        self,
        sender: OutboundSender,
        transaction_store: TransactionStore,
        transcription_service: Optional[TranscriptionService] = None,
        automation: Optional[AutomationWebhook] = None,
        gateway: Optional[ReplyGateway] = None,
        language: str = "pt",
    ):
        self.sender = sender
        self.transaction_store = transaction_store
        self.transcription_service = transcription_service
        self.automation = automation
        self.gateway = gateway
        self.language = language

    async def handle(self, message: InboundMessage) -> RoutingResult:
        """
        Route one inbound message.

        Raises:
            PersistenceError: If the finished transaction cannot be stored
        """
        if not message.is_direct:
            logger.debug(f"Ignoring message {message.message_id} from {message.source_address}")
            return RoutingResult(RoutingOutcome.IGNORED)

        logger.info(f"📩 Message from {message.display_name} ({message.kind.value})")
        await self.sender.mark_as_read(message.source_address, message.message_id)

        if message.kind == MessageKind.TEXT:
            return await self.process_text(message, message.text_body or "")

        if message.kind == MessageKind.AUDIO:
            return await self._handle_audio(message)

        if message.kind == MessageKind.IMAGE:
            forwarded = self.automation is not None and await self.automation.forward_image(message)
            if not forwarded:
                logger.info(f"Image {message.message_id} acknowledged, not processed locally")
                return RoutingResult(RoutingOutcome.IGNORED)
            return RoutingResult(RoutingOutcome.FORWARDED)

        logger.debug(f"Unsupported message kind for {message.message_id}")
        return RoutingResult(RoutingOutcome.IGNORED)

    async def _handle_audio(self, message: InboundMessage) -> RoutingResult:
        if self.transcription_service is None:
            result_error = "Transcription service unavailable"
        elif not message.media_ref:
            result_error = "Audio URL missing"
        else:
            result = await self.transcription_service.transcribe_url(
                message.media_ref, language=self.language
            )
            if result.success:
                logger.info(f"✅ Audio transcribed: {result.text}")
                return await self.process_text(message, result.text)
            result_error = result.error_message

        logger.error(f"❌ Could not transcribe audio {message.message_id}: {result_error}")
        await self.reply(message.source_address, messages.TRANSCRIPTION_FAILED_MESSAGE)
        return RoutingResult(RoutingOutcome.TRANSCRIPTION_FAILED, error=result_error)

    async def process_text(self, message: InboundMessage, text: str) -> RoutingResult:
        """Extract, persist and confirm, or answer with the help message."""
        intent = extract_transaction(text)

        if intent is None:
            await self.reply(message.source_address, messages.HELP_MESSAGE)
            return RoutingResult(RoutingOutcome.HELP_SENT, text=text)

        transaction = build_transaction(intent, message)
        self.transaction_store.add(transaction)

        logger.info(
            f"✅ Transaction created via WhatsApp: {transaction.id} "
            f"{transaction.type.value} {transaction.amount} ({transaction.source})"
        )

        await self.reply(message.source_address, format_confirmation(transaction))
        return RoutingResult(RoutingOutcome.RECORDED, transaction=transaction, text=text)

    async def reply(self, address: str, body: str) -> bool:
        """
        Send a reply, relaying it through the external gateway when the
        session cannot deliver.

        Returns:
            True if either path accepted the reply
        """
        if await self.sender.send_text(address, body):
            return True

        if self.gateway is None:
            logger.warning(f"Reply to {address} not delivered, no gateway configured")
            return False

        logger.warning("⚠️ WhatsApp session unavailable, trying external gateway")
        return await self.gateway.send_text(address, body)


def build_transaction(intent: ExtractedTransactionIntent, message: InboundMessage) -> Transaction:
    """Create the ledger record for an extracted intent, filling defaults."""
    if intent.occurred_on:
        occurred_at = datetime.combine(intent.occurred_on, time(), tzinfo=timezone.utc)
    else:
        occurred_at = generate_timestamp()

    return Transaction(
        amount=intent.amount,
        type=intent.direction,
        date=occurred_at,
        description=intent.description or messages.DEFAULT_DESCRIPTION,
        category=intent.category,
        context_id=intent.context_tag,
        created_by=message.source_address,
        created_by_name=message.display_name or messages.DEFAULT_SENDER_NAME,
        source=message.kind.value,
    )


def format_confirmation(transaction: Transaction) -> str:
    """Confirmation text summarizing a recorded transaction."""
    return messages.TRANSACTION_CONFIRMATION.format(
        amount=messages.format_amount(transaction.amount),
        date=messages.format_date(transaction.date),
        description=transaction.description,
        category=transaction.category,
        context=messages.context_label(transaction.context_id.value),
    )
