"""Shared pytest fixtures for all test types."""

import asyncio
from pathlib import Path
from typing import Optional

import pytest
import pytest_asyncio

from ledgerbot.lib.config import WhatsAppConfig, reset_all_configs
from ledgerbot.lib.exceptions import PersistenceError
from ledgerbot.models.connection import Credentials
from ledgerbot.models.message import InboundMessage, MessageKind
from ledgerbot.services.transcription.base import TranscriptionResult, TranscriptionService
from ledgerbot.services.whatsapp.adapter import WhatsAppEvent
from ledgerbot.services.whatsapp.sender import OutboundSender
from ledgerbot.services.whatsapp.session import WhatsAppSessionManager
from ledgerbot.services.whatsapp.transport import AddressLookup

SENDER_ADDRESS = "5511988887777@s.whatsapp.net"

_END_OF_STREAM = object()


async def settle(rounds: int = 20) -> None:
    """Let spawned tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeTransport:
    """
    In-memory transport.

    Every connect() opens a fresh event queue; push() feeds the most
    recent one. Addresses listed in `existing` answer the probe with
    the mapped canonical address.
    """

    def __init__(self):
        self.connect_calls: list[Credentials] = []
        self.connect_failures = 0
        self.existing: dict[str, str] = {}
        self.probe_errors: set[str] = set()
        self.send_errors: set[str] = set()
        self.probes: list[str] = []
        self.sent: list[tuple[str, str]] = []
        self.documents: list[tuple[str, object, str, str]] = []
        self.images: list[tuple[str, bytes, str]] = []
        self.read_receipts: list[tuple[str, str]] = []
        self.logged_out = False
        self.logout_error: Optional[Exception] = None
        self.closed = False
        self._queue: Optional[asyncio.Queue] = None
        self._account_id = "5511900000000@s.whatsapp.net"

    @property
    def account_id(self) -> Optional[str]:
        return self._account_id

    async def connect(self, credentials: Credentials):
        self.connect_calls.append(credentials)
        if self.connect_failures > 0:
            self.connect_failures -= 1
            raise RuntimeError("socket construction failed")

        self._queue = asyncio.Queue()
        return self._events(self._queue)

    async def _events(self, queue: asyncio.Queue):
        while True:
            event = await queue.get()
            if event is _END_OF_STREAM:
                return
            yield event

    def push(self, event: WhatsAppEvent) -> None:
        self._queue.put_nowait(event)

    def end_stream(self) -> None:
        self._queue.put_nowait(_END_OF_STREAM)

    async def check_exists(self, address: str) -> AddressLookup:
        self.probes.append(address)
        if address in self.probe_errors:
            raise RuntimeError(f"probe failed for {address}")
        if address in self.existing:
            return AddressLookup(exists=True, canonical_address=self.existing[address])
        return AddressLookup(exists=False)

    async def send_text(self, address: str, body: str) -> None:
        if address in self.send_errors:
            raise RuntimeError(f"send failed for {address}")
        self.sent.append((address, body))

    async def send_document(self, address, document, filename, mimetype) -> None:
        if address in self.send_errors:
            raise RuntimeError(f"send failed for {address}")
        self.documents.append((address, document, filename, mimetype))

    async def send_image(self, address: str, image: bytes, caption: str) -> None:
        if address in self.send_errors:
            raise RuntimeError(f"send failed for {address}")
        self.images.append((address, image, caption))

    async def mark_read(self, address: str, message_id: str) -> None:
        self.read_receipts.append((address, message_id))

    async def logout(self) -> None:
        if self.logout_error:
            raise self.logout_error
        self.logged_out = True

    async def close(self) -> None:
        self.closed = True


class MemoryCredentialStore:
    """Credential store keeping everything in memory."""

    def __init__(self, credentials: Optional[Credentials] = None):
        self.credentials = credentials or Credentials()
        self.saved: list[Credentials] = []
        self.purge_count = 0
        self.save_error: Optional[Exception] = None

    def load(self) -> Credentials:
        return self.credentials

    def save(self, credentials: Credentials) -> None:
        if self.save_error:
            raise self.save_error
        self.credentials = credentials
        self.saved.append(credentials)

    def purge(self) -> None:
        self.credentials = Credentials()
        self.purge_count += 1


class MemoryStatusPublisher:
    """Status publisher recording every record."""

    def __init__(self):
        self.records = []

    def publish(self, record) -> None:
        self.records.append(record)

    def read(self):
        return self.records[-1] if self.records else None

    @property
    def statuses(self) -> list[str]:
        return [record.status.value for record in self.records]


class MemoryTransactionStore:
    """Transaction store keeping records in a list."""

    def __init__(self, fail: bool = False):
        self.transactions = []
        self.fail = fail

    def add(self, transaction) -> str:
        if self.fail:
            raise PersistenceError("disk full", path="memory", operation="append")
        self.transactions.append(transaction)
        return transaction.id

    def list(self):
        return list(self.transactions)


class ControlledSleep:
    """
    Sleep replacement for reconnect timers.

    Records each requested delay and blocks until release() is called,
    so tests decide when a timer fires.
    """

    def __init__(self):
        self.delays: list[float] = []
        self._waiters: list[asyncio.Event] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        event = asyncio.Event()
        self._waiters.append(event)
        await event.wait()

    def release(self) -> None:
        waiters, self._waiters = self._waiters, []
        for event in waiters:
            event.set()


class FakeTranscriptionService(TranscriptionService):
    """Transcription service returning a canned result."""

    def __init__(self, result: TranscriptionResult):
        self.result = result
        self.requests: list[tuple[str, str]] = []

    def is_ready(self) -> bool:
        return True

    async def transcribe_url(self, media_url: str, language: str = "pt") -> TranscriptionResult:
        self.requests.append((media_url, language))
        return self.result


def make_message(
    kind: MessageKind = MessageKind.TEXT,
    text: Optional[str] = None,
    media_ref: Optional[str] = None,
    source: str = SENDER_ADDRESS,
    from_self: bool = False,
    message_id: str = "MSG-1",
) -> InboundMessage:
    """Build an inbound message with sensible defaults."""
    return InboundMessage(
        source_address=source,
        display_name="Maria",
        kind=kind,
        message_id=message_id,
        text_body=text,
        media_ref=media_ref,
        from_self=from_self,
    )


@pytest.fixture(autouse=True)
def _reset_configs():
    """Every test starts with freshly loaded configuration."""
    reset_all_configs()
    yield
    reset_all_configs()


@pytest.fixture
def whatsapp_config(tmp_path: Path) -> WhatsAppConfig:
    """Default reconnect policy with credentials under tmp_path."""
    return WhatsAppConfig(auth_dir=str(tmp_path / "sessions"))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def credential_store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def status_publisher() -> MemoryStatusPublisher:
    return MemoryStatusPublisher()


@pytest.fixture
def transaction_store() -> MemoryTransactionStore:
    return MemoryTransactionStore()


@pytest.fixture
def sleep() -> ControlledSleep:
    return ControlledSleep()


@pytest.fixture
def session(transport, credential_store, status_publisher, whatsapp_config, sleep):
    """Session manager wired to in-memory collaborators, not started."""
    return WhatsAppSessionManager(
        transport,
        credential_store,
        status_publisher=status_publisher,
        config=whatsapp_config,
        sleep=sleep,
    )


@pytest_asyncio.fixture
async def open_session(session, transport):
    """Session manager that completed its handshake (state OPEN)."""
    await session.start()
    transport.push(WhatsAppEvent.connection_update(connection="open"))
    await settle()
    assert session.is_connected()
    yield session
    await session.stop()


@pytest.fixture
def sender(session) -> OutboundSender:
    return OutboundSender(session)
