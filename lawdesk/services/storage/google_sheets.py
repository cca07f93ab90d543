"""
Google Sheets Remote Mirror

DESIGN DECISION: Google Sheets is used as the remote mirror because:
1. The office can view new files and PJS takings directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Write-only: nothing is ever read back into the app
- No update or delete propagation; only creations are mirrored
- One row per record, appended in arrival order

Each record kind goes to its own worksheet, created with a header row
the first time it is needed.
"""

import threading
from typing import Any, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from lawdesk.config import get_settings
from lawdesk.config.settings import GoogleSheetsSettings
from lawdesk.services.storage.interface import (
    MirrorConnectionError,
    MirrorPushError,
    RecordKind,
    RemoteMirrorInterface,
)


# Column layout per mirrored record kind
KIND_COLUMNS: dict[RecordKind, list[str]] = {
    RecordKind.GUAMAN: ["name", "detail", "balance"],
    RecordKind.PJS: ["id", "date", "name", "detail", "amount"],
    RecordKind.DOCUMENT: ["doc_type", "doc_no", "date", "customer", "total"],
}


def fields_to_row(kind: RecordKind, fields: dict[str, Any]) -> list:
    """Order a record's fields by the kind's columns; missing values are blank."""
    row = []
    for column in KIND_COLUMNS[kind]:
        value = fields.get(column)
        if value is None:
            row.append("")
        elif isinstance(value, (int, float, str)):
            row.append(value)
        else:
            row.append(str(value))
    return row


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheets: dict[RecordKind, gspread.Worksheet] = {}
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
                raise MirrorConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise MirrorConnectionError(f"Failed to connect to Google Sheets: {e}")

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
                raise MirrorConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def sheet_name_for(self, kind: RecordKind) -> str:
        return {
            RecordKind.GUAMAN: self._settings.guaman_sheet_name,
            RecordKind.PJS: self._settings.pjs_sheet_name,
            RecordKind.DOCUMENT: self._settings.documents_sheet_name,
        }[kind]

    def get_worksheet(self, kind: RecordKind) -> gspread.Worksheet:
        """Get or create the worksheet for a record kind."""
        if kind in self._worksheets:
            return self._worksheets[kind]

        spreadsheet = self.get_spreadsheet()
        title = self.sheet_name_for(kind)
        columns = KIND_COLUMNS[kind]
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row([column.upper() for column in columns])
        self._worksheets[kind] = sheet
        return sheet


class GoogleSheetsMirror(RemoteMirrorInterface):
    """
    Google Sheets implementation of the remote mirror.

    Pushes are blocking network calls and are attempted once; wrap in
    a BackgroundMirror to keep them off the command path.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
        self._lock = threading.Lock()

    def push_record(self, kind: RecordKind, fields: dict[str, Any]) -> None:
        """Append one row to the kind's worksheet."""
        row = fields_to_row(kind, fields)
        try:
            with self._lock:
                sheet = self._client.get_worksheet(kind)
                sheet.append_row(row, value_input_option="USER_ENTERED")
        except MirrorConnectionError:
            raise
        except Exception as e:
            raise MirrorPushError(f"Failed to push {kind.value} record: {e}")
