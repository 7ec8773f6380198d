"""Workbook sources for the import pipelines."""

from estate_ingestion.adapters.base import InMemoryWorkbook, WorkbookSource
from estate_ingestion.adapters.xlsx_adapter import XlsxWorkbookReader

__all__ = [
    "InMemoryWorkbook",
    "WorkbookSource",
    "XlsxWorkbookReader",
]
