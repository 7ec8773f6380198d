"""
EstateConfig schema.

Frozen dataclasses that the YAML file is parsed into by the loader. The
runtime only ever sees these types; nothing reads YAML directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Import vocabulary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SheetMarkers:
    """Substrings that identify a sheet's role. Matching is case-sensitive."""

    employee: tuple[str, ...]
    property: tuple[str, ...]
    tenant: tuple[str, ...]


@dataclass(frozen=True)
class ColumnAliases:
    """Entity field -> accepted column headers, first present alias wins."""

    property: dict[str, tuple[str, ...]] = field(default_factory=dict)
    tenant: dict[str, tuple[str, ...]] = field(default_factory=dict)
    employee: dict[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class ImportVocabulary:
    sheet_markers: SheetMarkers
    columns: ColumnAliases
    default_capacity: int = 2  # blank or zero capacity cells in registry sheets
    imported_employee_prefix: str = "IMP-"  # tenant rows without an employee code


# ---------------------------------------------------------------------------
# Runtime policies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AlertPolicy:
    contract_warning_days: int = 60
    contract_high_severity_days: int = 30


@dataclass(frozen=True)
class StoreDefaults:
    storage_key: str = "uns_db_v7_0"
    schema_version: str = "7.0"


@dataclass(frozen=True)
class EstateConfig:
    """The single runtime configuration artifact."""

    company_name: str
    closing_day: int
    vocabulary: ImportVocabulary
    alerts: AlertPolicy = field(default_factory=AlertPolicy)
    store: StoreDefaults = field(default_factory=StoreDefaults)
    checksum: str = ""
