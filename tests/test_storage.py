"""Tests for storage backends and the persisted wire format."""

import json
from datetime import date
from decimal import Decimal

import pytest
from gspread.utils import a1_to_rowcol

from crypto_ledger.models.transaction import Transaction, TransactionType
from crypto_ledger.services.storage import (
    DeserializationError,
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    StorageError,
)
from crypto_ledger.services.storage import codec
from crypto_ledger.services.storage.google_sheets import (
    EXCHANGE_RATE_KEY,
    TRANSACTION_COLUMNS,
    GoogleSheetsLedgerStorage,
)


@pytest.fixture
def transactions():
    return [
        Transaction(
            description="Rent",
            amount=Decimal("30.25"),
            type=TransactionType.EXPENSE,
            category="Home",
            date=date(2024, 5, 2),
        ),
        Transaction(
            description="Salary",
            amount=Decimal("100"),
            type=TransactionType.INCOME,
            category="Work",
            date=date(2024, 5, 1),
        ),
    ]


class TestCodec:
    """Tests for the JSON wire format."""

    def test_round_trip_preserves_records_and_order(self, transactions):
        raw = codec.dump_transactions(transactions)
        assert codec.load_transactions(raw) == transactions

    def test_records_use_expected_field_names(self, transactions):
        record = json.loads(codec.dump_transactions(transactions))[0]
        assert set(record) == {"id", "description", "amount", "type", "category", "date"}
        assert record["type"] == "EXPENSE"
        assert record["date"] == "2024-05-02"

    def test_numeric_amounts_are_accepted(self):
        """Test records written with JSON number amounts still load."""
        raw = json.dumps([{
            "id": "abc",
            "description": "Salary",
            "amount": 100,
            "type": "INCOME",
            "category": "Work",
            "date": "2024-05-01",
        }])
        [transaction] = codec.load_transactions(raw)
        assert transaction.amount == Decimal("100")

    @pytest.mark.parametrize("raw", ["{not json", '{"id": 1}', '[{"id": "x"}]'])
    def test_malformed_transactions_raise(self, raw):
        with pytest.raises(DeserializationError):
            codec.load_transactions(raw)

    def test_rate_parsing(self):
        assert codec.load_exchange_rate(" 120.0\n") == Decimal("120.0")

    @pytest.mark.parametrize("raw", ["abc", "0", "-1", "Infinity", ""])
    def test_invalid_rates_raise(self, raw):
        with pytest.raises(DeserializationError):
            codec.load_exchange_rate(raw)


class TestInMemoryStorage:
    """Tests for the dict-backed storage."""

    def test_missing_keys_load_as_empty(self):
        storage = InMemoryLedgerStorage()
        assert storage.load_transactions() == []
        assert storage.load_exchange_rate() is None

    def test_uses_configured_keys(self, transactions):
        storage = InMemoryLedgerStorage(
            transactions_key="ledger",
            exchange_rate_key="rate",
        )
        storage.save_transactions(transactions)
        storage.save_exchange_rate(Decimal("2.5"))
        assert set(storage.items) == {"ledger", "rate"}

    def test_keys_must_differ(self):
        with pytest.raises(ValueError):
            InMemoryLedgerStorage(transactions_key="same", exchange_rate_key="same")


class TestJsonFileStorage:
    """Tests for the file-per-key storage."""

    def test_round_trip(self, tmp_path, transactions):
        storage = JsonFileLedgerStorage(tmp_path / "data")
        storage.save_transactions(transactions)
        storage.save_exchange_rate(Decimal("120.5"))

        reopened = JsonFileLedgerStorage(tmp_path / "data")
        assert reopened.load_transactions() == transactions
        assert reopened.load_exchange_rate() == Decimal("120.5")

    def test_missing_directory_loads_empty(self, tmp_path):
        storage = JsonFileLedgerStorage(tmp_path / "nowhere")
        assert storage.load_transactions() == []
        assert storage.load_exchange_rate() is None

    def test_writes_one_file_per_key(self, tmp_path, transactions):
        storage = JsonFileLedgerStorage(tmp_path)
        storage.save_transactions(transactions)
        storage.save_exchange_rate(Decimal("1"))

        names = sorted(path.name for path in tmp_path.iterdir())
        assert names == ["exchange_rate.txt", "transactions.json"]

    def test_corrupt_file_raises(self, tmp_path):
        (tmp_path / "transactions.json").write_text("[{", encoding="utf-8")
        with pytest.raises(DeserializationError):
            JsonFileLedgerStorage(tmp_path).load_transactions()

    def test_undecodable_file_raises(self, tmp_path):
        (tmp_path / "transactions.json").write_bytes(b"\xff\xfe[]")
        with pytest.raises(DeserializationError):
            JsonFileLedgerStorage(tmp_path).load_transactions()

    def test_overwrite_replaces_contents(self, tmp_path, transactions):
        storage = JsonFileLedgerStorage(tmp_path)
        storage.save_transactions(transactions)
        storage.save_transactions(transactions[:1])
        assert storage.load_transactions() == transactions[:1]


class FakeWorksheet:
    """Minimal stand-in for a gspread worksheet."""

    def __init__(self, rows):
        self.rows = [list(row) for row in rows]
        self.fail_updates = False

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def update(self, values, range_name=None, value_input_option=None):
        if self.fail_updates:
            raise RuntimeError("quota exceeded")
        for index, row in enumerate(values):
            if index < len(self.rows):
                self.rows[index] = list(row)
            else:
                self.rows.append(list(row))

    def batch_clear(self, ranges):
        for name in ranges:
            start, end = name.split(":")
            first_row, _ = a1_to_rowcol(start)
            last_row, _ = a1_to_rowcol(end)
            for index in range(first_row - 1, min(last_row, len(self.rows))):
                self.rows[index] = [""] * len(self.rows[index])

    def update_cell(self, row, col, value):
        self.rows[row - 1][col - 1] = value

    def append_row(self, values, value_input_option=None):
        self.rows.append(list(values))


class FakeSheetsClient:
    def __init__(self):
        self.transactions_sheet = FakeWorksheet([TRANSACTION_COLUMNS])
        self.settings_sheet = FakeWorksheet([["key", "value"]])

    def get_transactions_sheet(self):
        return self.transactions_sheet

    def get_settings_sheet(self):
        return self.settings_sheet


class TestGoogleSheetsStorage:
    """Tests for the Google Sheets backend (fake client, no network)."""

    def test_transactions_round_trip(self, transactions):
        client = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(client)

        storage.save_transactions(transactions)

        assert client.transactions_sheet.rows[0] == TRANSACTION_COLUMNS
        assert len(client.transactions_sheet.rows) == 3
        assert storage.load_transactions() == transactions

    def test_save_rewrites_whole_sheet(self, transactions):
        client = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(client)
        storage.save_transactions(transactions)
        storage.save_transactions([])

        assert storage.load_transactions() == []
        assert [row for row in client.transactions_sheet.rows if any(row)] == [TRANSACTION_COLUMNS]

    def test_shrinking_save_clears_leftover_rows(self, transactions):
        client = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(client)
        storage.save_transactions(transactions)
        storage.save_transactions(transactions[:1])
        assert storage.load_transactions() == transactions[:1]

    def test_failed_save_keeps_previous_rows(self, transactions, monkeypatch):
        """Test that an update that keeps failing does not wipe the sheet."""
        monkeypatch.setattr(
            GoogleSheetsLedgerStorage.save_transactions.retry, "sleep", lambda seconds: None
        )
        client = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(client)
        storage.save_transactions(transactions)

        client.transactions_sheet.fail_updates = True
        with pytest.raises(StorageError):
            storage.save_transactions(transactions[:1])

        assert storage.load_transactions() == transactions

    def test_exchange_rate_is_appended_then_updated(self):
        client = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(client)

        assert storage.load_exchange_rate() is None
        storage.save_exchange_rate(Decimal("1.5"))
        storage.save_exchange_rate(Decimal("2.5"))

        assert client.settings_sheet.rows[1:] == [[EXCHANGE_RATE_KEY, "2.5"]]
        assert storage.load_exchange_rate() == Decimal("2.5")

    def test_malformed_row_raises(self):
        client = FakeSheetsClient()
        client.transactions_sheet.append_row(["x", "Salary", "lots", "INCOME", "", "2024-05-01"])
        with pytest.raises(DeserializationError):
            GoogleSheetsLedgerStorage(client).load_transactions()
