import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from checkin.core.exceptions import StaleRowError
from checkin.db.sheets import RowStore, Rows

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


def column_letter(index: int) -> str:
    """1-based column number to its letter label (7 -> 'G')."""
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def dump_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def load_json_list(raw: str) -> list:
    """Parse a JSON list cell; blank or malformed cells read as empty."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed JSON cell: {raw[:80]}")
        return []
    return value if isinstance(value, list) else []


EnumType = TypeVar("EnumType", bound=Enum)

_timestamp = TypeAdapter(datetime)


def parse_enum(enum_cls: Type[EnumType], raw: str, default: EnumType) -> EnumType:
    """Read a hand-edited enum cell, ignoring case; unknown values fall back to `default`."""
    if not raw:
        return default
    for member in enum_cls:
        if member.value.lower() == raw.strip().lower():
            return member
    logger.warning(f"Unknown {enum_cls.__name__} value {raw!r}, using {default.value!r}")
    return default


def parse_timestamp(raw: str) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return _timestamp.validate_python(raw)
    except ValidationError:
        logger.warning(f"Ignoring unreadable timestamp cell: {raw[:80]}")
        return None


def parse_entries(model: Type[ModelType], items: list, label: str) -> List[ModelType]:
    """Validate JSON history entries one by one, dropping the ones that do not fit."""
    entries = []
    for item in items:
        try:
            entries.append(model.model_validate(item))
        except ValidationError:
            logger.warning(f"Dropping unreadable {label} entry: {item!r:.80}")
    return entries


class SheetCRUDBase(Generic[ModelType]):
    """
    Row <-> model translation for one tab of the spreadsheet.

    Column A holds the record ID and row 1 the header. Every read fetches the
    whole tab; rows are addressed by their 1-based sheet row number.
    """

    def __init__(self, model: type, header: List[str], defaults: List[str], sheet: Optional[str] = None):
        self.model = model
        self.header = header
        self.defaults = defaults
        self.sheet = sheet

    @property
    def width(self) -> int:
        return len(self.header)

    @property
    def last_column(self) -> str:
        return column_letter(self.width)

    def _range(self, cells: str) -> str:
        return f"{self.sheet}!{cells}" if self.sheet else cells

    @property
    def full_range(self) -> str:
        return self._range(f"A:{self.last_column}")

    def row_range(self, first_row: int, last_row: Optional[int] = None) -> str:
        return self._range(f"A{first_row}:{self.last_column}{last_row or first_row}")

    def pad(self, row: List[str]) -> List[str]:
        return list(row) + [""] * (self.width - len(row))

    # ----- translation, implemented per tab -----

    def to_model(self, row: List[str]) -> ModelType:
        raise NotImplementedError

    def to_row(self, obj: ModelType) -> List[str]:
        raise NotImplementedError

    # ----- reads -----

    def read_rows(self, store: RowStore) -> Rows:
        return store.read_all(self.full_range)

    def index(self, rows: Rows) -> Dict[str, int]:
        """Map record ID -> sheet row number, first occurrence wins."""
        ids: Dict[str, int] = {}
        for position, row in enumerate(rows[1:], start=2):
            if row and row[0] and row[0] not in ids:
                ids[row[0]] = position
        return ids

    def find(self, store: RowStore, record_id: str) -> Optional[Tuple[int, List[str]]]:
        rows = self.read_rows(store)
        row_number = self.index(rows).get(record_id)
        if row_number is None:
            return None
        return row_number, self.pad(rows[row_number - 1])

    def get(self, store: RowStore, record_id: str) -> Optional[ModelType]:
        found = self.find(store, record_id)
        if not found:
            return None
        return self.to_model(found[1])

    def get_all(self, store: RowStore) -> List[ModelType]:
        rows = self.read_rows(store)
        return [self.to_model(self.pad(row)) for row in rows[1:] if row and row[0]]

    def existing_ids(self, store: RowStore) -> set:
        return set(self.index(self.read_rows(store)))

    def exists(self, store: RowStore, record_id: str) -> bool:
        return record_id in self.index(self.read_rows(store))

    # ----- writes -----

    def next_row(self, store: RowStore) -> int:
        return len(store.read_all(self._range("A:A"))) + 1

    def append(self, store: RowStore, rows: Rows) -> int:
        """Write rows after the last used row; returns the first row number written."""
        start = self.next_row(store)
        store.write_range(self.row_range(start, start + len(rows) - 1), rows)
        return start

    def write_row(self, store: RowStore, row_number: int, row: List[str], snapshot: List[str]) -> None:
        """
        Rewrite one row, refusing when it no longer matches the snapshot the
        change was computed from.
        """
        current = store.read_all(self.row_range(row_number))
        current_row = self.pad(current[0]) if current else self.pad([])
        if current_row != self.pad(snapshot):
            logger.warning(f"Row {row_number} of {self.full_range} changed concurrently; refusing write")
            raise StaleRowError("Record was modified by another request, please retry")
        store.write_range(self.row_range(row_number), [self.pad(row)])

    # ----- setup -----

    def migrate_row(self, row: List[str]) -> List[str]:
        migrated = list(row)
        for position in range(len(migrated), self.width):
            migrated.append(self.defaults[position])
        for position, value in enumerate(migrated):
            if not value and self.defaults[position]:
                migrated[position] = self.defaults[position]
        return migrated

    def needs_migration(self, row: List[str]) -> bool:
        padded = self.pad(row)
        return any(not padded[i] and self.defaults[i] for i in range(self.width))

    def initialize(self, store: RowStore) -> None:
        """Ensure the tab and header exist and bring legacy rows up to full width."""
        if self.sheet:
            store.ensure_sheet(self.sheet, self.width)

        header_rows = store.read_all(self.row_range(1))
        if not header_rows or header_rows[0] != self.header:
            store.write_range(self.row_range(1), [self.header])
            logger.info(f"Wrote header for {self.full_range}")

        rows = store.read_all(self.full_range)
        if len(rows) <= 1:
            return

        updated = [rows[0]]
        changed = 0
        for row in rows[1:]:
            if row and row[0] and self.needs_migration(row):
                updated.append(self.migrate_row(row))
                changed += 1
            else:
                updated.append(row)

        if changed:
            store.write_range(self.row_range(1, len(updated)), [self.pad(row) for row in updated])
            logger.info(f"Migrated {changed} legacy rows in {self.full_range}")
