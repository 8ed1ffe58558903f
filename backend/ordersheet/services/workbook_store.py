"""
Order Sheet Backend: Workbook Store
====================================

What:  Durable storage of the order table as a single .xlsx file.
How:   Every operation loads the whole workbook from disk, works on the
       full table in memory, and (for mutations) rewrites the whole file.
       File bytes move through aiofiles; openpyxl parses and serializes
       the workbook in memory on a worker thread, off the event loop.
Who:   Constructed once by the app factory and handed to OrderService.

Table Layout:
    row 0        id | name | address | ... | orderCompletionStatus   (header)
    row 1..n     one order per row, cells in ORDER_FIELDS order

    Positions passed to replace_at() and delete_at() count the header as
    row 0, so the first order lives at position 1.

Concurrency:
    There is no lock, version or journal. Two mutations that overlap read
    the same pre-state and the later save wins (lost update). Saves go to a
    temp file that replaces the workbook in one step, so a concurrent read
    sees either the old table or the new one.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Optional
from zipfile import BadZipFile

import aiofiles
import aiofiles.os
from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException

from ordersheet.config import settings
from ordersheet.exceptions import StorageError
from ordersheet.schemas.order import ORDER_FIELDS

logger = logging.getLogger(__name__)


def format_timestamp(value: Any, fmt: str) -> Any:
    """
    Normalize a dateOfCreation value to the configured text format.

    datetime objects and ISO-8601 strings are reformatted; anything else
    (None, free text, numbers) is returned unchanged.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, datetime):
        # Offset-carrying stamps are written in server local time
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.strftime(fmt)
    return value


def order_to_row(order: Dict[str, Any], timestamp_format: str) -> List[Any]:
    """Convert a field-keyed order into its positional row."""
    row = [order.get(field) for field in ORDER_FIELDS]
    date_index = ORDER_FIELDS.index("dateOfCreation")
    row[date_index] = format_timestamp(row[date_index], timestamp_format)
    return row


def row_to_order(row: List[Any]) -> Dict[str, Any]:
    """Convert a positional row into a field-keyed order; missing cells become None."""
    return {
        field: row[index] if index < len(row) else None
        for index, field in enumerate(ORDER_FIELDS)
    }


def _parse(content: bytes) -> Workbook:
    return load_workbook(BytesIO(content))


def _serialize(workbook: Workbook) -> bytes:
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _trim(cells: tuple) -> List[Any]:
    # openpyxl pads every row to the sheet width; drop the empty tail
    row = list(cells)
    while row and row[-1] is None:
        row.pop()
    return row


class WorkbookStore:
    """
    Whole-file access to the order table.

    Operations:
        ensure_workbook(): create the file with only the header row if absent
        read_all():        data rows (header excluded) in file order
        append():          add one order as the last row
        replace_at():      overwrite the row at a header-inclusive position
        delete_at():       remove the row at a header-inclusive position
    """

    def __init__(
        self,
        path: Optional[str] = None,
        sheet_name: Optional[str] = None,
        timestamp_format: Optional[str] = None,
    ):
        """
        Args:
            path: Override settings.workbook_path (used in tests).
            sheet_name: Override settings.sheet_name.
            timestamp_format: Override settings.timestamp_format.
        """
        self.path = Path(path or settings.workbook_path).resolve()
        self.sheet_name = sheet_name or settings.sheet_name
        self.timestamp_format = timestamp_format or settings.timestamp_format

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def ensure_workbook(self) -> bool:
        """
        Create the backing file seeded with the header row, if it is absent.

        Returns:
            True when a new file was written, False when one already existed.

        Raises:
            StorageError if the file cannot be created.
        """
        if self.path.exists():
            logger.info("Loading existing workbook: %s", self.path)
            return False

        logger.info("Creating new workbook: %s", self.path)
        workbook = Workbook()
        workbook.active.title = self.sheet_name
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                message=str(e),
                context={"path": str(self.path), "os_error": str(e)},
            )
        await self._save(workbook, [list(ORDER_FIELDS)])
        return True

    # ── Reads ─────────────────────────────────────────────────────────────

    async def read_all(self) -> List[List[Any]]:
        """
        Load the file and return every row except the header.

        Raises:
            StorageError if the file is missing, unreadable or not a workbook
            with the orders sheet. Row contents are not validated.
        """
        workbook = await self._load()
        return self._table(workbook)[1:]

    # ── Mutations ─────────────────────────────────────────────────────────

    async def append(self, order: Dict[str, Any]) -> None:
        """Append `order` as a new last row and rewrite the file."""
        workbook = await self._load()
        rows = self._table(workbook)
        rows.append(order_to_row(order, self.timestamp_format))
        await self._save(workbook, rows)
        logger.info("Order with ID %s appended.", order.get("id"))

    async def replace_at(self, order: Dict[str, Any], position: int) -> None:
        """
        Overwrite the row at `position` (header = 0) and rewrite the file.

        No bounds check: a position past the end pads the table with empty
        rows so the order lands exactly at `position`.
        """
        workbook = await self._load()
        rows = self._table(workbook)
        while len(rows) <= position:
            rows.append([])
        rows[position] = order_to_row(order, self.timestamp_format)
        await self._save(workbook, rows)
        logger.info("Order with ID %s updated at row %d.", order.get("id"), position)

    async def delete_at(self, position: int) -> None:
        """Remove exactly one row at `position` (header = 0) and rewrite the file."""
        workbook = await self._load()
        rows = self._table(workbook)
        if -len(rows) <= position < len(rows):
            del rows[position]
        await self._save(workbook, rows)
        logger.info("Order deleted from row %d.", position)

    # ── File I/O ──────────────────────────────────────────────────────────

    async def _load(self) -> Workbook:
        try:
            async with aiofiles.open(self.path, "rb") as f:
                content = await f.read()
        except OSError as e:
            logger.error("Failed to read workbook %s: %s", self.path, str(e))
            raise StorageError(
                message=str(e),
                context={"path": str(self.path), "os_error": str(e)},
            )

        try:
            workbook = await asyncio.to_thread(_parse, content)
        except (BadZipFile, InvalidFileException, KeyError, ValueError) as e:
            logger.error("Workbook %s is not a valid spreadsheet: %s", self.path, str(e))
            raise StorageError(
                message=f"Malformed workbook: {e}",
                context={"path": str(self.path), "error_type": type(e).__name__},
            )

        if self.sheet_name not in workbook.sheetnames:
            raise StorageError(
                message=f"Worksheet '{self.sheet_name}' not found in workbook",
                context={"path": str(self.path), "sheets": workbook.sheetnames},
            )
        return workbook

    def _table(self, workbook: Workbook) -> List[List[Any]]:
        """Every row of the orders sheet, header included."""
        sheet = workbook[self.sheet_name]
        return [_trim(cells) for cells in sheet.iter_rows(values_only=True)]

    async def _save(self, workbook: Workbook, rows: List[List[Any]]) -> None:
        """
        Replace the orders sheet with `rows` and write the whole file.

        Other sheets in the workbook are kept as they were.
        """
        index = 0
        if self.sheet_name in workbook.sheetnames:
            index = workbook.sheetnames.index(self.sheet_name)
            workbook.remove(workbook[self.sheet_name])
        sheet = workbook.create_sheet(self.sheet_name, index)
        workbook.active = index

        try:
            for row in rows:
                sheet.append(row)
            data = await asyncio.to_thread(_serialize, workbook)
        except (ValueError, IllegalCharacterError) as e:
            # openpyxl refuses values it cannot put in a cell (dicts, control characters)
            raise StorageError(
                message=str(e),
                context={"path": str(self.path), "error_type": type(e).__name__},
            )

        # Whole-file replace: readers never see a half-written workbook.
        # Overlapping writers still lose updates; the last replace wins.
        temp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(temp_path, self.path)
        except OSError as e:
            logger.error("Failed to write workbook %s: %s", self.path, str(e))
            await self._discard(temp_path)
            raise StorageError(
                message=str(e),
                context={"path": str(self.path), "os_error": str(e)},
            )
        logger.info("Workbook saved.")

    async def _discard(self, temp_path: Path) -> None:
        """Best-effort removal of a leftover temp file after a failed save."""
        try:
            await aiofiles.os.remove(temp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to clean up temp file %s: %s", temp_path, str(e))
