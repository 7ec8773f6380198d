"""
Workbook source protocol and the in-memory workbook.

Contract:
    WorkbookSource.sheet_names lists sheets in workbook order.
    WorkbookSource.sheet_rows(name) returns one dict per data row
    (header -> cell value, blank cells as ""), already tabulated.

Architecture: estate_ingestion/adapters. No kernel imports beyond exceptions.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable


@runtime_checkable
class WorkbookSource(Protocol):
    """Already-tabulated workbook handed in by the host."""

    @property
    def sheet_names(self) -> tuple[str, ...]:
        ...

    def sheet_rows(self, name: str) -> list[dict[str, Any]]:
        """Rows of one sheet. Unknown sheet -> KeyError."""
        ...


class InMemoryWorkbook:
    """WorkbookSource over plain Python data: ``{sheet name: [row dict, ...]}``."""

    def __init__(self, sheets: Mapping[str, Sequence[Mapping[str, Any]]]):
        self._sheets = {name: [dict(r) for r in rows] for name, rows in sheets.items()}

    @property
    def sheet_names(self) -> tuple[str, ...]:
        return tuple(self._sheets)

    def sheet_rows(self, name: str) -> list[dict[str, Any]]:
        return [dict(r) for r in self._sheets[name]]

    def __repr__(self) -> str:
        sizes = ", ".join(f"{n}={len(r)}" for n, r in self._sheets.items())
        return f"InMemoryWorkbook({sizes})"
