"""WhatsApp session manager: connection lifecycle and reconnection policy.

This module owns the single process-wide connection. It follows the
state machine defined by ConnectionState:

    CLOSED → CONNECTING → WAITING_FOR_PAIRING → OPEN, CLOSED from anywhere

All transport events of one connection attempt are consumed by one
dispatcher task. Connection updates and credential updates are handled
inline, in arrival order; inbound messages are handed to the message
handler as independent tasks so a slow pipeline never stalls the loop.

State, the reconnect counter and the cached pairing code are written
only from the dispatcher (and from start/stop/logout, which the caller
serializes); everyone else reads them through accessors.
"""

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

from ledgerbot.lib.config import WhatsAppConfig
from ledgerbot.lib.exceptions import CredentialStoreError, InvalidStateError, TransportError
from ledgerbot.models.connection import (
    ConnectionState,
    ConnectionStatus,
    ConnectionUpdate,
    Credentials,
    StatusRecord,
)
from ledgerbot.models.message import InboundMessage
from ledgerbot.services.credentials.storage import CredentialStore
from ledgerbot.services.persistence.base import StatusPublisher
from ledgerbot.services.whatsapp.adapter import WhatsAppEvent
from ledgerbot.services.whatsapp.transport import LOGGED_OUT_STATUS_CODE, WhatsAppTransport

logger = logging.getLogger(__name__)

MessageHandler = Callable[[InboundMessage], Awaitable[None]]
SleepFunc = Callable[[float], Awaitable[None]]


def reconnect_delay_ms(attempt: int, base_ms: int = 3000, max_ms: int = 30000) -> int:
    """
    Linear backoff capped at max_ms.

    Args:
        attempt: 1-based reconnect attempt number

    Returns:
        Delay in milliseconds before that attempt
    """
    return min(base_ms * attempt, max_ms)


class WhatsAppSessionManager:
    """
    Manage the WhatsApp connection, credentials and reconnects.

    One instance per process, constructed explicitly and passed to
    whatever needs it (sender, router, HTTP handlers).
    """

    def __init__(
        self,
        transport: WhatsAppTransport,
        credential_store: CredentialStore,
        status_publisher: Optional[StatusPublisher] = None,
        config: Optional[WhatsAppConfig] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """
        Initialize the session manager.

        Args:
            transport: Messaging transport (wire protocol black box)
            credential_store: Where session credentials live between runs
            status_publisher: Optional sink for UI status polling
            config: Reconnect policy; defaults to WhatsAppConfig()
            sleep: Awaitable delay used by reconnect timers
        """
        self.transport = transport
        self.credential_store = credential_store
        self.status_publisher = status_publisher
        self.config = config or WhatsAppConfig()
        self._sleep = sleep

        self._state = ConnectionState.CLOSED
        self._pairing_code: Optional[str] = None
        self._reconnect_attempts = 0
        self._startup_retry_used = False

        self._message_handler: Optional[MessageHandler] = None
        self._dispatch_task: Optional[asyncio.Task] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._message_tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def reconnect_pending(self) -> bool:
        """True while a reconnect timer is waiting to fire."""
        return self._reconnect_task is not None and not self._reconnect_task.done()

    def is_connected(self) -> bool:
        """Check if the session is open and able to send."""
        return self._state == ConnectionState.OPEN

    def current_pairing_code(self) -> Optional[str]:
        """Get the QR payload to display, if pairing is pending."""
        return self._pairing_code

    def connected_account(self) -> Optional[str]:
        """Get the account id of the logged-in number, if connected."""
        if not self.is_connected():
            return None
        return self.transport.account_id

    def on_message(self, handler: MessageHandler) -> None:
        """
        Register the inbound message handler.

        The handler is called once per live inbound message, each call
        in its own task.
        """
        self._message_handler = handler

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """
        Open a connection attempt.

        Loads credentials, opens the transport and spawns the dispatcher
        for its event stream. A transport that fails to construct is
        retried once after a fixed delay.

        Raises:
            InvalidStateError: If a connection attempt is already active
        """
        if self._state != ConnectionState.CLOSED:
            raise InvalidStateError(
                f"Cannot start WhatsApp session in {self._state.value} state"
            )

        logger.info("Starting WhatsApp session...")
        self._set_state(ConnectionState.CONNECTING)
        self._publish(ConnectionStatus.CONNECTING)

        try:
            credentials = self.credential_store.load()
            events = await self.transport.connect(credentials)
        except Exception as e:
            logger.error(f"Failed to initialize WhatsApp transport: {e}")
            self._set_state(ConnectionState.CLOSED)
            self._publish(ConnectionStatus.DISCONNECTED)
            self._schedule_startup_retry()
            return

        self._dispatch_task = asyncio.create_task(self._dispatch(events))
        logger.info("WhatsApp session initialized, waiting for events")

    async def stop(self) -> None:
        """Stop timers and the dispatcher and close the transport (shutdown)."""
        logger.info("Stopping WhatsApp session...")
        self._cancel_reconnect()

        task = self._dispatch_task
        self._dispatch_task = None
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        try:
            await self.transport.close()
        except Exception as e:
            logger.warning(f"Error closing transport: {e}")

        self._pairing_code = None
        self._set_state(ConnectionState.CLOSED)
        self._publish(ConnectionStatus.DISCONNECTED)
        logger.info("WhatsApp session stopped")

    async def logout(self) -> None:
        """
        Log out on user request.

        Revokes the session on the network, purges credentials and
        leaves the manager CLOSED; a new pairing is needed afterwards.

        Raises:
            TransportError: If the network refused the logout
        """
        self._cancel_reconnect()

        try:
            await self.transport.logout()
        except Exception as e:
            raise TransportError(f"Logout failed: {e}", original_error=e) from e

        self._handle_logout()
        self._set_state(ConnectionState.CLOSED)
        self._publish(ConnectionStatus.DISCONNECTED)
        logger.info("WhatsApp disconnected (logout requested)")

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def on_connection_update(self, update: ConnectionUpdate) -> None:
        """Advance the state machine for one connection update."""
        if update.pairing_payload:
            logger.info("📱 QR code generated, scan it with WhatsApp")
            self._pairing_code = update.pairing_payload
            self._set_state(ConnectionState.WAITING_FOR_PAIRING)
            self._publish(ConnectionStatus.WAITING_QR, update.pairing_payload)

        if update.connection == "close":
            await self._handle_close(update)
        elif update.connection == "open":
            self._set_state(ConnectionState.OPEN)
            self._pairing_code = None
            self._reconnect_attempts = 0
            self._startup_retry_used = False
            self._publish(ConnectionStatus.CONNECTED)
            logger.info(f"✅ WhatsApp connected as {self.transport.account_id}")
        elif update.connection == "connecting" and not update.pairing_payload:
            self._set_state(ConnectionState.CONNECTING)
            self._publish(ConnectionStatus.CONNECTING)

    async def on_credentials_update(self, credentials: Credentials) -> None:
        """
        Write credentials through to the store, no batching.

        A failed write is logged and the connection stays up.
        """
        try:
            self.credential_store.save(credentials)
        except CredentialStoreError as e:
            logger.error(f"Failed to persist WhatsApp credentials: {e}")

    async def _handle_close(self, update: ConnectionUpdate) -> None:
        logged_out = update.close_status_code == LOGGED_OUT_STATUS_CODE

        self._set_state(ConnectionState.CLOSED)
        self._publish(ConnectionStatus.DISCONNECTED)

        if logged_out:
            logger.warning("🚪 WhatsApp logged out by the network, purging session")
            self._cancel_reconnect()
            self._handle_logout()
            return

        if self._reconnect_attempts >= self.config.max_reconnect_attempts:
            logger.error(
                f"Connection closed ({update.close_reason}); reconnect limit of "
                f"{self.config.max_reconnect_attempts} reached, manual restart required"
            )
            return

        self._reconnect_attempts += 1
        delay_ms = reconnect_delay_ms(
            self._reconnect_attempts,
            self.config.reconnect_base_ms,
            self.config.reconnect_max_ms,
        )
        logger.info(
            f"Connection closed ({update.close_reason}), reconnecting in {delay_ms}ms "
            f"(attempt {self._reconnect_attempts}/{self.config.max_reconnect_attempts})"
        )
        self._schedule_start(delay_ms / 1000)

    def _handle_logout(self) -> None:
        self._pairing_code = None
        self._reconnect_attempts = 0
        self.credential_store.purge()

    # ------------------------------------------------------------------
    # Dispatcher
    # ------------------------------------------------------------------

    async def _dispatch(self, events: AsyncIterator[WhatsAppEvent]) -> None:
        """Consume one connection attempt's event stream."""
        close_reason = "event stream ended"
        try:
            async for event in events:
                if event.is_connection_update:
                    await self.on_connection_update(event.update)
                    if event.update.connection == "close":
                        return
                elif event.is_credentials_update:
                    await self.on_credentials_update(event.credentials)
                elif event.is_notify:
                    for message in event.inbound_messages:
                        self._spawn_message_handler(message)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"WhatsApp event stream failed: {e}")
            close_reason = str(e)

        # Stream gone without a close update: treat as a transient drop
        if self._state != ConnectionState.CLOSED:
            try:
                await self.transport.close()
            except Exception as e:
                logger.warning(f"Error closing transport: {e}")
            await self.on_connection_update(
                ConnectionUpdate(connection="close", close_reason=close_reason)
            )

    def _spawn_message_handler(self, message: InboundMessage) -> None:
        if not self._message_handler:
            logger.debug(f"No message handler registered, dropping {message.message_id}")
            return

        task = asyncio.create_task(self._run_message_handler(message))
        self._message_tasks.add(task)
        task.add_done_callback(self._message_tasks.discard)

    async def _run_message_handler(self, message: InboundMessage) -> None:
        try:
            await self._message_handler(message)
        except Exception as e:
            logger.exception(f"Error handling message {message.message_id}: {e}")

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _schedule_start(self, delay_seconds: float) -> None:
        self._cancel_reconnect()
        self._reconnect_task = asyncio.create_task(self._delayed_start(delay_seconds))

    def _schedule_startup_retry(self) -> None:
        if self._startup_retry_used:
            logger.error("WhatsApp transport failed again after retry, manual restart required")
            return

        self._startup_retry_used = True
        logger.info(f"Retrying WhatsApp initialization in {self.config.startup_retry_seconds}s")
        self._schedule_start(self.config.startup_retry_seconds)

    async def _delayed_start(self, delay_seconds: float) -> None:
        await self._sleep(delay_seconds)
        self._reconnect_task = None

        if self._state != ConnectionState.CLOSED:
            logger.debug(f"Skipping scheduled reconnect, session is {self._state.value}")
            return

        logger.info("🔄 Reconnecting to WhatsApp...")
        await self.start()

    def _cancel_reconnect(self) -> None:
        task = self._reconnect_task
        self._reconnect_task = None
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()

    # ------------------------------------------------------------------
    # State and status publication
    # ------------------------------------------------------------------

    def _set_state(self, new_state: ConnectionState) -> None:
        if new_state != self._state and not self._state.can_transition_to(new_state):
            logger.warning(f"Unexpected transition {self._state.value} → {new_state.value}")
        logger.debug(f"Connection state: {self._state.value} → {new_state.value}")
        self._state = new_state

    def _publish(self, status: ConnectionStatus, pairing_payload: Optional[str] = None) -> None:
        if not self.status_publisher:
            return

        try:
            self.status_publisher.publish(
                StatusRecord(status=status, pairing_payload=pairing_payload)
            )
        except Exception as e:
            logger.error(f"Failed to publish WhatsApp status {status.value}: {e}")
