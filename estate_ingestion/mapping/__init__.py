"""Row mapping: spreadsheet columns -> entity payloads."""

from estate_ingestion.mapping.engine import (
    SheetRow,
    map_employee_row,
    map_property_row,
    map_tenant_row,
    sheet_rows,
)

__all__ = [
    "SheetRow",
    "map_employee_row",
    "map_property_row",
    "map_tenant_row",
    "sheet_rows",
]
