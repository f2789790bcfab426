"""Contract tests for OutboundSender.

Text delivery probes each candidate address in order and sends to the
first one the network confirms, falling back to the literal number.
Nothing is sent while the session is not open.
"""

import httpx
import pytest

from ledgerbot.services.whatsapp.sender import OutboundSender

NINE_DIGIT = "5511988887777@s.whatsapp.net"
EIGHT_DIGIT = "551188887777@s.whatsapp.net"


class TestDisconnected:
    """Tests for sends attempted before the session is open."""

    @pytest.mark.asyncio
    async def test_send_text_returns_false_without_transport_calls(self, sender, transport):
        sent = await sender.send_text("5511988887777", "olá")

        assert sent is False
        assert transport.probes == []
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_send_document_returns_false(self, sender, transport):
        sent = await sender.send_document("5511988887777", "https://files/r.pdf", "Receita.pdf")

        assert sent is False
        assert transport.documents == []


class TestSendText:
    """Tests for candidate probing and delivery."""

    @pytest.mark.asyncio
    async def test_sends_to_first_confirmed_candidate(self, open_session, sender, transport):
        transport.existing = {NINE_DIGIT: NINE_DIGIT}

        assert await sender.send_text("5511988887777", "olá") is True

        assert transport.probes == [NINE_DIGIT]
        assert transport.sent == [(NINE_DIGIT, "olá")]

    @pytest.mark.asyncio
    async def test_falls_through_to_legacy_variant(self, open_session, sender, transport):
        transport.existing = {EIGHT_DIGIT: EIGHT_DIGIT}

        assert await sender.send_text("+55 (11) 98888-7777", "olá") is True

        assert transport.probes == [NINE_DIGIT, EIGHT_DIGIT]
        assert transport.sent == [(EIGHT_DIGIT, "olá")]

    @pytest.mark.asyncio
    async def test_uses_canonical_address_from_probe(self, open_session, sender, transport):
        transport.existing = {EIGHT_DIGIT: NINE_DIGIT}

        assert await sender.send_text("551188887777", "olá") is True

        assert transport.sent == [(NINE_DIGIT, "olá")]

    @pytest.mark.asyncio
    async def test_probe_error_tries_next_candidate(self, open_session, sender, transport):
        transport.probe_errors = {NINE_DIGIT}
        transport.existing = {EIGHT_DIGIT: EIGHT_DIGIT}

        assert await sender.send_text("5511988887777", "olá") is True

        assert transport.sent == [(EIGHT_DIGIT, "olá")]

    @pytest.mark.asyncio
    async def test_send_error_tries_next_candidate(self, open_session, sender, transport):
        transport.existing = {NINE_DIGIT: NINE_DIGIT, EIGHT_DIGIT: EIGHT_DIGIT}
        transport.send_errors = {NINE_DIGIT}

        assert await sender.send_text("5511988887777", "olá") is True

        assert transport.sent == [(EIGHT_DIGIT, "olá")]

    @pytest.mark.asyncio
    async def test_unconfirmed_number_falls_back_to_literal(self, open_session, sender, transport):
        assert await sender.send_text("5511988887777", "olá") is True

        assert transport.probes == [NINE_DIGIT, EIGHT_DIGIT]
        assert transport.sent == [(NINE_DIGIT, "olá")]

    @pytest.mark.asyncio
    async def test_fallback_failure_returns_false(self, open_session, sender, transport):
        transport.send_errors = {NINE_DIGIT}

        assert await sender.send_text("5511988887777", "olá") is False
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_invalid_number_returns_false(self, open_session, sender, transport):
        assert await sender.send_text("sem número", "olá") is False
        assert transport.probes == []

    @pytest.mark.asyncio
    async def test_full_address_is_probed_as_is(self, open_session, sender, transport):
        assert await sender.send_text(NINE_DIGIT, "olá") is True

        assert transport.probes == [NINE_DIGIT]
        assert transport.sent == [(NINE_DIGIT, "olá")]


class TestSendDocument:
    """Tests for document delivery."""

    @pytest.mark.asyncio
    async def test_sends_to_literal_address_without_probing(self, open_session, sender, transport):
        sent = await sender.send_document("5511988887777", "https://files/r.pdf", "Receita - Ana.pdf")

        assert sent is True
        assert transport.probes == []
        assert transport.documents == [
            (NINE_DIGIT, "https://files/r.pdf", "Receita - Ana.pdf", "application/pdf")
        ]

    @pytest.mark.asyncio
    async def test_accepts_raw_bytes(self, open_session, sender, transport):
        assert await sender.send_document("5511988887777", b"%PDF-1.7", "r.pdf") is True

        assert transport.documents[0][1] == b"%PDF-1.7"

    @pytest.mark.asyncio
    async def test_transport_error_returns_false(self, open_session, sender, transport):
        transport.send_errors = {NINE_DIGIT}

        assert await sender.send_document("5511988887777", "https://files/r.pdf", "r.pdf") is False


class TestSendImage:
    """Tests for image delivery."""

    IMAGE_URL = "https://files/receipt.jpg"

    @pytest.fixture
    def image_sender(self, session) -> OutboundSender:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/broken.jpg":
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, content=b"png-bytes")

        return OutboundSender(session, http_transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_returns_false_when_disconnected(self, image_sender, transport):
        assert await image_sender.send_image("5511988887777", self.IMAGE_URL) is False
        assert transport.images == []

    @pytest.mark.asyncio
    async def test_downloads_and_sends_without_probing(self, open_session, image_sender, transport):
        assert await image_sender.send_image("5511988887777", self.IMAGE_URL, "nota") is True

        assert transport.probes == []
        assert transport.images == [(NINE_DIGIT, b"png-bytes", "nota")]

    @pytest.mark.asyncio
    async def test_caption_defaults_to_empty(self, open_session, image_sender, transport):
        await image_sender.send_image(NINE_DIGIT, self.IMAGE_URL)

        assert transport.images[0][2] == ""

    @pytest.mark.asyncio
    async def test_download_error_returns_false(self, open_session, image_sender, transport):
        assert await image_sender.send_image("5511988887777", "https://files/broken.jpg") is False
        assert transport.images == []

    @pytest.mark.asyncio
    async def test_transport_error_returns_false(self, open_session, image_sender, transport):
        transport.send_errors = {NINE_DIGIT}

        assert await image_sender.send_image("5511988887777", self.IMAGE_URL) is False

class TestReadReceipts:
    """Tests for best-effort read receipts."""

    @pytest.mark.asyncio
    async def test_marks_message_read(self, open_session, sender, transport):
        await sender.mark_as_read(NINE_DIGIT, "MSG-9")

        assert transport.read_receipts == [(NINE_DIGIT, "MSG-9")]

    @pytest.mark.asyncio
    async def test_skipped_when_disconnected(self, sender, transport):
        await sender.mark_as_read(NINE_DIGIT, "MSG-9")

        assert transport.read_receipts == []
