"""
Sheet classifier: decide the import pipeline from sheet names alone.

Priority (first match wins):
    1. any sheet name contains an employee marker  -> EMPLOYEES
    2. any sheet name contains a property or tenant marker -> RENT_MANAGEMENT
    3. otherwise -> UNRECOGNIZED

Matching is case-sensitive substring containment against the configured
marker tokens. UNRECOGNIZED is a normal verdict, not an error.
"""

from __future__ import annotations

from typing import Sequence

from estate_config.schema import SheetMarkers
from estate_ingestion.domain.types import Classification, ImportKind


def find_sheet(sheet_names: Sequence[str], markers: Sequence[str]) -> str | None:
    """First sheet (workbook order) whose name contains any marker."""
    for name in sheet_names:
        if any(token in name for token in markers):
            return name
    return None


def classify_sheets(sheet_names: Sequence[str], markers: SheetMarkers) -> Classification:
    employee_sheet = find_sheet(sheet_names, markers.employee)
    if employee_sheet is not None:
        return Classification(kind=ImportKind.EMPLOYEES, employee_sheet=employee_sheet)

    property_sheet = find_sheet(sheet_names, markers.property)
    tenant_sheet = find_sheet(sheet_names, markers.tenant)
    if property_sheet is not None or tenant_sheet is not None:
        return Classification(
            kind=ImportKind.RENT_MANAGEMENT,
            property_sheet=property_sheet,
            tenant_sheet=tenant_sheet,
        )

    return Classification(kind=ImportKind.UNRECOGNIZED)
