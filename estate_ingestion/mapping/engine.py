"""
Mapping engine: spreadsheet row -> entity payload for the row schemas.

Pure transformation, ZERO I/O. Column headers vary between exports, so each
entity field has a list of accepted header aliases; the first alias that is
present in the row with a non-blank value wins. Absent fields map to None and
the row schemas apply their own defaults and rules.

Sheet-specific defaults live here, not in the schemas:
    - property capacity: blank or zero -> ``default_capacity``
    - tenant employee code: blank -> ``{prefix}{row}``
    - tenant entry date: blank -> today
    - employee full_data: the whole raw row
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Sequence

from estate_kernel.domain.schemas import coerce_int, text


@dataclass(frozen=True)
class SheetRow:
    """One data row plus its 1-based position within the sheet."""

    row: int
    values: Mapping[str, Any]

    def get(self, aliases: Sequence[str]) -> Any:
        """Value of the first alias present and non-blank, else None."""
        for alias in aliases:
            if alias in self.values and text(self.values[alias]) != "":
                return self.values[alias]
        return None


def _map_fields(row: SheetRow, columns: Mapping[str, Sequence[str]]) -> dict[str, Any]:
    return {field_name: row.get(aliases) for field_name, aliases in columns.items()}


def map_property_row(
    row: SheetRow,
    columns: Mapping[str, Sequence[str]],
    default_capacity: int,
) -> dict[str, Any]:
    payload = _map_fields(row, columns)
    payload["capacity"] = coerce_int(payload.get("capacity"), default_capacity) or default_capacity
    return payload


def map_tenant_row(
    row: SheetRow,
    columns: Mapping[str, Sequence[str]],
    *,
    employee_prefix: str,
    today: date,
) -> dict[str, Any]:
    """
    Tenant payload without ``property_id``.

    The property is resolved by name by the caller; ``property_name`` stays
    in the payload for that lookup.
    """
    payload = _map_fields(row, columns)
    if payload.get("employee_id") is None:
        payload["employee_id"] = f"{employee_prefix}{row.row}"
    if payload.get("entry_date") is None:
        payload["entry_date"] = today.isoformat()
    payload["property_name"] = text(payload.get("property_name"))
    return payload


def map_employee_row(row: SheetRow, columns: Mapping[str, Sequence[str]]) -> dict[str, Any]:
    payload = _map_fields(row, columns)
    payload["full_data"] = dict(row.values)
    return payload


def sheet_rows(rows: Sequence[Mapping[str, Any]]) -> list[SheetRow]:
    """Number raw rows 1..N in sheet order."""
    return [SheetRow(row=i, values=values) for i, values in enumerate(rows, start=1)]
