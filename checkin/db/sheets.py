"""
Row store transport.

The store is a spreadsheet addressed with A1 ranges ("A:G", "Badges!A2:H2").
Reads return whole ranges as lists of string rows; writes overwrite the cells
of a range starting at its top-left corner. Nothing here is transactional.
"""

import os
import re
import logging
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

import gspread
import requests
from google.oauth2 import service_account

from checkin.core.config import settings
from checkin.core.exceptions import TransportError

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

Rows = List[List[str]]

_CELLS_RE = re.compile(r"^([A-Z]+)(\d*)(?::([A-Z]+)(\d*))?$")


def split_sheet_name(range_name: str) -> Tuple[Optional[str], str]:
    """'Badges!A:H' -> ('Badges', 'A:H'); 'A:G' -> (None, 'A:G')"""
    if "!" not in range_name:
        return None, range_name
    sheet, _, cells = range_name.rpartition("!")
    return sheet.strip("'"), cells


def column_index(letters: str) -> int:
    """Zero-based column index for a column label ('A' -> 0, 'AA' -> 26)."""
    index = 0
    for char in letters:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def parse_cells(cells: str) -> Tuple[int, Optional[int], int, Optional[int]]:
    """
    Parse the cell part of an A1 range.

    Returns (first_col, first_row, last_col, last_row) with zero-based
    columns and one-based rows; a missing row number means "unbounded".
    """
    match = _CELLS_RE.match(cells.upper())
    if not match:
        raise ValueError(f"Unsupported A1 range: {cells}")

    start_col, start_row, end_col, end_row = match.groups()
    first_row = int(start_row) if start_row else None
    if end_col is None:
        # Single cell or single column
        return column_index(start_col), first_row, column_index(start_col), first_row
    last_row = int(end_row) if end_row else None
    return column_index(start_col), first_row, column_index(end_col), last_row


def _trim(rows: Rows) -> Rows:
    """Drop trailing empty cells and trailing empty rows, as the Sheets API does."""
    trimmed = []
    for row in rows:
        row = list(row)
        while row and row[-1] == "":
            row.pop()
        trimmed.append(row)
    while trimmed and not trimmed[-1]:
        trimmed.pop()
    return trimmed


class RowStore:
    """Interface shared by the spreadsheet and in-memory stores."""

    def read_all(self, range_name: str) -> Rows:
        raise NotImplementedError

    def write_range(self, range_name: str, rows: Rows) -> None:
        raise NotImplementedError

    def ensure_sheet(self, title: str, columns: int) -> None:
        raise NotImplementedError


class InMemoryRowStore(RowStore):
    """A grid of string cells per sheet tab with Sheets-like A1 semantics."""

    def __init__(self, default_sheet: str = "Sheet1"):
        self.default_sheet = default_sheet
        self.sheets: Dict[str, Rows] = {default_sheet: []}

    def _grid(self, sheet: Optional[str]) -> Rows:
        title = sheet or self.default_sheet
        if title not in self.sheets:
            raise TransportError(f"Unable to parse range: {title}")
        return self.sheets[title]

    def read_all(self, range_name: str) -> Rows:
        sheet, cells = split_sheet_name(range_name)
        grid = self._grid(sheet)
        first_col, first_row, last_col, last_row = parse_cells(cells)

        start = (first_row or 1) - 1
        end = last_row if last_row is not None else len(grid)
        return _trim([row[first_col:last_col + 1] for row in grid[start:end]])

    def write_range(self, range_name: str, rows: Rows) -> None:
        sheet, cells = split_sheet_name(range_name)
        grid = self._grid(sheet)
        first_col, first_row, _, _ = parse_cells(cells)

        start = (first_row or 1) - 1
        for offset, values in enumerate(rows):
            row_index = start + offset
            while len(grid) <= row_index:
                grid.append([])
            row = grid[row_index]
            needed = first_col + len(values)
            if len(row) < needed:
                row.extend([""] * (needed - len(row)))
            for col_offset, value in enumerate(values):
                row[first_col + col_offset] = "" if value is None else str(value)

    def ensure_sheet(self, title: str, columns: int) -> None:
        self.sheets.setdefault(title, [])


class SheetsRowStore(RowStore):
    """Google Sheets backed store (gspread over a service-account credential)."""

    def __init__(self, spreadsheet_id: str, credentials):
        self.spreadsheet_id = spreadsheet_id
        self._credentials = credentials
        self._spreadsheet = None

    @property
    def spreadsheet(self) -> gspread.Spreadsheet:
        if self._spreadsheet is None:
            client = gspread.authorize(self._credentials)
            self._spreadsheet = client.open_by_key(self.spreadsheet_id)
            logger.info(f"Opened spreadsheet {self.spreadsheet_id}")
        return self._spreadsheet

    def read_all(self, range_name: str) -> Rows:
        try:
            response = self.spreadsheet.values_get(range_name)
        except (gspread.exceptions.GSpreadException, requests.exceptions.RequestException) as e:
            logger.error(f"Sheets read failed for {range_name}: {str(e)}")
            raise TransportError(f"Failed to read {range_name}") from e

        return [[str(cell) for cell in row] for row in response.get("values", [])]

    def write_range(self, range_name: str, rows: Rows) -> None:
        try:
            self.spreadsheet.values_update(
                range_name,
                params={"valueInputOption": "RAW"},
                body={"values": rows},
            )
        except (gspread.exceptions.GSpreadException, requests.exceptions.RequestException) as e:
            logger.error(f"Sheets write failed for {range_name}: {str(e)}")
            raise TransportError(f"Failed to write {range_name}") from e

    def ensure_sheet(self, title: str, columns: int) -> None:
        try:
            try:
                self.spreadsheet.worksheet(title)
            except gspread.exceptions.WorksheetNotFound:
                self.spreadsheet.add_worksheet(title=title, rows=1000, cols=columns)
                logger.info(f"Created worksheet '{title}'")
        except (gspread.exceptions.GSpreadException, requests.exceptions.RequestException) as e:
            logger.error(f"Failed to ensure worksheet '{title}': {str(e)}")
            raise TransportError(f"Failed to prepare worksheet {title}") from e


def build_credentials() -> service_account.Credentials:
    """Service-account credentials from a key file or from inline env values."""
    key_file = settings.GOOGLE_SERVICE_ACCOUNT_FILE
    if key_file and os.path.exists(key_file):
        return service_account.Credentials.from_service_account_file(key_file, scopes=SHEETS_SCOPES)

    if settings.GOOGLE_SHEETS_CLIENT_EMAIL and settings.google_private_key:
        info = {
            "type": "service_account",
            "client_email": settings.GOOGLE_SHEETS_CLIENT_EMAIL,
            "private_key": settings.google_private_key,
            "token_uri": GOOGLE_TOKEN_URI,
        }
        return service_account.Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)

    logger.error("Google Sheets credentials are not configured")
    raise TransportError("Google Sheets credentials are not configured")


@lru_cache()
def get_store() -> RowStore:
    """FastAPI dependency returning the process-wide row store."""
    if settings.USE_IN_MEMORY_STORE:
        logger.warning("Using in-memory row store; data is lost on restart")
        return InMemoryRowStore()
    return SheetsRowStore(settings.GOOGLE_SHEET_ID, build_credentials())
