"""Contract tests for transaction storage and status publication."""

import json
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from ledgerbot.models.connection import ConnectionStatus, StatusRecord
from ledgerbot.models.transaction import ContextTag, Direction, Transaction
from ledgerbot.services.persistence import create_status_publisher, create_transaction_store


def _transaction(description: str = "mercado") -> Transaction:
    return Transaction(
        amount=Decimal("50.00"),
        type=Direction.EXPENSE,
        date=datetime(2024, 3, 15, tzinfo=timezone.utc),
        description=description,
        category="Alimentação",
        context_id=ContextTag.HOME,
        created_by="5511988887777@s.whatsapp.net",
        created_by_name="Maria",
    )


class TestFileTransactionStore:
    """Tests for the JSONL transaction store."""

    @pytest.fixture
    def path(self, tmp_path: Path) -> Path:
        return tmp_path / "data" / "transactions.jsonl"

    def test_add_returns_id(self, path: Path):
        store = create_transaction_store(path)
        transaction = _transaction()

        assert store.add(transaction) == transaction.id
        assert path.exists()

    def test_list_in_insertion_order(self, path: Path):
        store = create_transaction_store(path)
        first, second = _transaction("mercado"), _transaction("padaria")

        store.add(first)
        store.add(second)

        loaded = store.list()
        assert [t.id for t in loaded] == [first.id, second.id]
        assert loaded[0].amount == Decimal("50.00")
        assert loaded[0].category == "Alimentação"

    def test_one_json_object_per_line(self, path: Path):
        store = create_transaction_store(path)
        store.add(_transaction())
        store.add(_transaction())

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])["type"] == "expense"

    def test_corrupted_line_skipped(self, path: Path):
        store = create_transaction_store(path)
        store.add(_transaction())
        with open(path, "a", encoding="utf-8") as f:
            f.write("{truncated\n")

        assert len(store.list()) == 1

    def test_invalid_record_skipped(self, path: Path):
        store = create_transaction_store(path)
        kept = _transaction()
        store.add(kept)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps({"amount": "-5"}) + "\n")

        assert [t.id for t in store.list()] == [kept.id]

    def test_blank_description_record_skipped(self, path: Path):
        store = create_transaction_store(path)
        kept = _transaction()
        store.add(kept)
        record = kept.model_dump(mode="json")
        record["description"] = "   "
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record) + "\n")

        assert [t.id for t in store.list()] == [kept.id]

    def test_empty_store(self, path: Path):
        assert create_transaction_store(path).list() == []


class TestFileStatusPublisher:
    """Tests for the status record file."""

    @pytest.fixture
    def path(self, tmp_path: Path) -> Path:
        return tmp_path / "data" / "whatsapp_status.json"

    def test_read_before_publish(self, path: Path):
        assert create_status_publisher(path).read() is None

    def test_publish_replaces_record(self, path: Path):
        publisher = create_status_publisher(path)

        publisher.publish(StatusRecord(status=ConnectionStatus.WAITING_QR, pairing_payload="2@QR"))
        publisher.publish(StatusRecord(status=ConnectionStatus.CONNECTED))

        record = publisher.read()
        assert record.status == ConnectionStatus.CONNECTED
        assert record.pairing_payload is None

    def test_file_is_plain_json(self, path: Path):
        create_status_publisher(path).publish(
            StatusRecord(status=ConnectionStatus.WAITING_QR, pairing_payload="2@QR")
        )

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["status"] == "waiting_qr"
        assert data["pairing_payload"] == "2@QR"

    def test_unreadable_file_reads_as_none(self, path: Path):
        path.parent.mkdir(parents=True)
        path.write_text("garbage", encoding="utf-8")

        assert create_status_publisher(path).read() is None
