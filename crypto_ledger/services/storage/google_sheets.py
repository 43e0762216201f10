"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a durable backend because:
1. Users can view their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions: every save overwrites the whole sheet and then
  clears any leftover rows, which matches the ledger's full re-serialization on every mutation

The implementation follows the abstract interface, so the ledger does
not know or care which backend it is using.
"""

from decimal import Decimal
from typing import Optional

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from crypto_ledger.config import GoogleSheetsSettings, get_settings
from crypto_ledger.models.transaction import Transaction
from crypto_ledger.services.storage import codec
from crypto_ledger.services.storage.interface import (
    ConnectionError,
    DeserializationError,
    LedgerStorageInterface,
    StorageError,
)


# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "description",
    "amount",
    "type",
    "category",
    "date",
]

# The Settings sheet is a two-column key/value table
SETTINGS_COLUMNS = ["key", "value"]
EXCHANGE_RATE_KEY = "exchange_rate"


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create_sheet(
            self._settings.transactions_sheet_name,
            TRANSACTION_COLUMNS,
            rows=1000,
        )

    def get_settings_sheet(self) -> gspread.Worksheet:
        """Get or create the Settings worksheet."""
        return self._get_or_create_sheet(
            self._settings.settings_sheet_name,
            SETTINGS_COLUMNS,
            rows=10,
        )


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    Transactions are stored one per row, newest first.
    The exchange rate is a row in the Settings sheet.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _transaction_to_row(self, transaction: Transaction) -> list:
        """Convert a Transaction to a spreadsheet row."""
        return [
            transaction.id,
            transaction.description,
            str(transaction.amount),
            transaction.type.value,
            transaction.category,
            transaction.date.isoformat(),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        record = dict(zip(TRANSACTION_COLUMNS, row))
        return Transaction.model_validate(record)

    def load_transactions(self) -> list[Transaction]:
        """Load all transactions in sheet order."""
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read transactions: {e}")

        transactions = []
        for index, row in enumerate(all_rows, start=2):
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                transactions.append(self._row_to_transaction(row))
            except ValidationError as e:
                raise DeserializationError(
                    f"Malformed transaction in row {index}: {e.error_count()} error(s)"
                ) from e
        return transactions

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def save_transactions(self, transactions: list[Transaction]) -> None:
        """Rewrite the whole Transactions sheet."""
        try:
            sheet = self._client.get_transactions_sheet()
            previous_count = len(sheet.get_all_values())
            rows = [TRANSACTION_COLUMNS]
            rows.extend(self._transaction_to_row(t) for t in transactions)

            # Overwrite first, then drop leftover rows, so a failed update
            # leaves the previous ledger readable.
            sheet.update(rows, "A1", value_input_option="RAW")
            if previous_count > len(rows):
                sheet.batch_clear([
                    f"{rowcol_to_a1(len(rows) + 1, 1)}:"
                    f"{rowcol_to_a1(previous_count, len(TRANSACTION_COLUMNS))}"
                ])
        except Exception as e:
            raise StorageError(f"Failed to save transactions: {e}")

    def load_exchange_rate(self) -> Optional[Decimal]:
        """Read the rate row from the Settings sheet."""
        try:
            sheet = self._client.get_settings_sheet()
            all_rows = sheet.get_all_values()[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read exchange rate: {e}")

        for row in all_rows:
            if len(row) >= 2 and row[0] == EXCHANGE_RATE_KEY and row[1].strip():
                return codec.load_exchange_rate(row[1])
        return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def save_exchange_rate(self, rate: Decimal) -> None:
        """Update the rate row in place, appending it the first time."""
        try:
            sheet = self._client.get_settings_sheet()
            all_rows = sheet.get_all_values()

            for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
                if row and row[0] == EXCHANGE_RATE_KEY:
                    sheet.update_cell(idx, 2, codec.dump_exchange_rate(rate))
                    return

            sheet.append_row(
                [EXCHANGE_RATE_KEY, codec.dump_exchange_rate(rate)],
                value_input_option="RAW",
            )
        except Exception as e:
            raise StorageError(f"Failed to save exchange rate: {e}")
