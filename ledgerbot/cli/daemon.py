"""WhatsApp ledger daemon entry point.

This daemon keeps the WhatsApp session open, turns incoming text and
voice messages into ledger transactions and replies with a
confirmation. The HTTP surface (ledgerbot.api) is built on the same
components and can be mounted by any web framework.

Usage:
    python -m ledgerbot.cli.daemon
    python -m ledgerbot.cli.daemon --verbose
"""

import argparse
import asyncio
import logging
import signal
import sys
from dataclasses import dataclass
from typing import NoReturn, Optional

from ledgerbot.api.handlers import DocumentRenderer, LedgerApi
from ledgerbot.lib.config import (
    get_automation_config,
    get_ledger_config,
    get_transcription_config,
    get_whatsapp_config,
)
from ledgerbot.lib.exceptions import ConfigError
from ledgerbot.services.automation.gateway import ReplyGateway
from ledgerbot.services.automation.webhook import AutomationWebhook
from ledgerbot.services.credentials.storage import FileCredentialStore
from ledgerbot.services.persistence import create_status_publisher, create_transaction_store
from ledgerbot.services.transcription.whisper_api import WhisperApiTranscriptionService
from ledgerbot.services.whatsapp.router import InboundMessageRouter
from ledgerbot.services.whatsapp.sender import OutboundSender
from ledgerbot.services.whatsapp.session import WhatsAppSessionManager
from ledgerbot.services.whatsapp.transport import WhatsAppTransport, load_transport

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """Wired components sharing one session."""

    session: WhatsAppSessionManager
    sender: OutboundSender
    router: InboundMessageRouter
    api: LedgerApi


def build_application(
    transport: WhatsAppTransport,
    document_renderer: Optional[DocumentRenderer] = None,
) -> Application:
    """
    Wire the session, sender, router and HTTP handlers from configuration.

    Args:
        transport: Messaging transport for the session
        document_renderer: Optional prescription renderer for /send-document
    """
    whatsapp_config = get_whatsapp_config()
    ledger_config = get_ledger_config()
    transcription_config = get_transcription_config()

    credential_store = FileCredentialStore(whatsapp_config.auth_path)
    status_publisher = create_status_publisher(ledger_config.status_path)
    transaction_store = create_transaction_store(ledger_config.transactions_path)

    session = WhatsAppSessionManager(
        transport,
        credential_store,
        status_publisher=status_publisher,
        config=whatsapp_config,
    )
    sender = OutboundSender(session)

    transcription_service = WhisperApiTranscriptionService(transcription_config)
    if not transcription_service.is_ready():
        logger.warning("OPENAI_API_KEY not set, voice messages will not be transcribed")

    automation_config = get_automation_config()
    router = InboundMessageRouter(
        sender,
        transaction_store,
        transcription_service=transcription_service,
        automation=AutomationWebhook(automation_config),
        gateway=ReplyGateway(automation_config),
        language=transcription_config.language,
    )
    session.on_message(router.handle)

    api = LedgerApi(
        session,
        router,
        sender,
        status_publisher=status_publisher,
        document_renderer=document_renderer,
    )

    return Application(session=session, sender=sender, router=router, api=api)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the daemon."""
    level = logging.DEBUG if verbose else logging.INFO
    format_str = "[%(asctime)s] %(levelname)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=format_str,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def validate_configuration() -> bool:
    """Validate all required configuration is present."""
    whatsapp_config = get_whatsapp_config()
    ledger_config = get_ledger_config()
    transcription_config = get_transcription_config()

    errors = []

    if not whatsapp_config.is_configured():
        errors.append(
            "WhatsApp transport not configured. Set WHATSAPP_TRANSPORT "
            "('package.module:callable') in .env file."
        )

    if not ledger_config.data_path.exists():
        logger.info(f"Creating data directory: {ledger_config.data_path}")
        ledger_config.data_path.mkdir(parents=True, exist_ok=True)

    if errors:
        for error in errors:
            logger.error(error)
        return False

    logger.info(f"WhatsApp: instance {whatsapp_config.instance_name}")
    logger.info(f"Credentials: {whatsapp_config.auth_path.absolute()}")
    logger.info(f"Transcription: {transcription_config.model_name} ({transcription_config.language})")
    logger.info(f"Ledger data: {ledger_config.data_path.absolute()}")

    return True


async def run_daemon() -> NoReturn:
    """Main daemon loop."""
    logger.info("Starting WhatsApp ledger daemon...")

    whatsapp_config = get_whatsapp_config()
    transport = load_transport(whatsapp_config.transport)
    app = build_application(transport)

    if whatsapp_config.auto_start:
        await app.session.start()
    else:
        logger.info("WHATSAPP_AUTO_START disabled, session not opened")

    logger.info("Daemon running. Press Ctrl+C to stop.")

    try:
        # Keep running until cancelled
        while True:
            await asyncio.sleep(1)
    except asyncio.CancelledError:
        pass
    finally:
        await app.session.stop()
        logger.info("Daemon stopped.")


def signal_handler(signum: int, frame) -> None:
    """Handle shutdown signals gracefully."""
    logger.info(f"Received signal {signum}, initiating shutdown...")
    sys.exit(0)


def main() -> int:
    """Entry point for the daemon."""
    parser = argparse.ArgumentParser(
        description="WhatsApp Ledger Daemon",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    setup_logging(verbose=args.verbose)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("=" * 60)
    logger.info("WhatsApp Ledger Bot")
    logger.info("=" * 60)

    if not validate_configuration():
        logger.error("Configuration validation failed. Exiting.")
        return 1

    try:
        asyncio.run(run_daemon())
    except KeyboardInterrupt:
        logger.info("Daemon stopped by user.")
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Daemon failed with error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
