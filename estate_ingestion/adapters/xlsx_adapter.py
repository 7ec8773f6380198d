"""
XLSX workbook reader (openpyxl).

Reads every sheet of an .xlsx file into an ``InMemoryWorkbook``:
  - first row of each sheet is the header
  - duplicate headers get a numeric suffix, blank headers become Column_N
  - blank cells -> "" (rows are always complete mappings)
  - whole-number floats -> int, dates -> ISO strings, text is stripped
  - fully blank rows are skipped

openpyxl is an optional parser; when it is missing the read fails with
``DependencyUnavailableError`` for that call only.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from io import BytesIO
from pathlib import Path
from typing import Any

from estate_ingestion.adapters.base import InMemoryWorkbook
from estate_kernel.exceptions import DependencyUnavailableError
from estate_kernel.logging_config import get_logger

logger = get_logger("ingestion.xlsx")

_MAX_ROWS = 100_000


def _normalize_header_cell(value: Any) -> str:
    """Normalize a header cell: strip and collapse internal whitespace."""
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def _cell_value(value: Any) -> Any:
    """Normalize one openpyxl cell value."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        if value == int(value):
            return int(value)
        return value
    if isinstance(value, (int, bool)):
        return value
    return str(value).strip()


def _headers(header_row: tuple[Any, ...]) -> list[str]:
    headers: list[str] = []
    for c, v in enumerate(header_row):
        key = _normalize_header_cell(v) or f"Column_{c + 1}"
        base = key
        cnt = 0
        while key in headers:
            cnt += 1
            key = f"{base}_{cnt}"
        headers.append(key)
    # Drop trailing generated headers (blank columns past the table)
    while headers and headers[-1].startswith("Column_") and not _normalize_header_cell(header_row[len(headers) - 1]):
        headers.pop()
    return headers


class XlsxWorkbookReader:
    """Materialize an .xlsx file (path or bytes) as an InMemoryWorkbook."""

    def read(self, source: Path | str | bytes) -> InMemoryWorkbook:
        try:
            import openpyxl
        except ImportError as e:
            raise DependencyUnavailableError("openpyxl", "XLSX import") from e

        handle = BytesIO(source) if isinstance(source, (bytes, bytearray)) else Path(source)
        wb = openpyxl.load_workbook(handle, read_only=True, data_only=True)
        try:
            sheets: dict[str, list[dict[str, Any]]] = {}
            for ws in wb.worksheets:
                sheets[ws.title] = self._read_sheet(ws)
        finally:
            wb.close()

        logger.info(
            "workbook_read",
            extra={"sheets": list(sheets), "rows": sum(len(r) for r in sheets.values())},
        )
        return InMemoryWorkbook(sheets)

    def _read_sheet(self, ws: Any) -> list[dict[str, Any]]:
        rows = ws.iter_rows(min_row=1, max_row=_MAX_ROWS, values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            return []
        headers = _headers(tuple(header_row))
        out: list[dict[str, Any]] = []
        for raw in rows:
            vals = [_cell_value(raw[c]) if c < len(raw) else "" for c in range(len(headers))]
            if not any(v != "" for v in vals):
                continue
            out.append(dict(zip(headers, vals)))
        return out
