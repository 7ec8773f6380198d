"""
estate_ingestion.domain.types -- Pure frozen dataclasses for the import system.

ZERO I/O. Imports only from estate_kernel/domain/.

Candidate ids:
    Candidate properties carry import-run handles (1..N in sheet order), not
    store ids. Candidate tenants point at those handles through
    ``property_id``. The merge engine rewrites both when minting store ids,
    so a CandidateSet always travels as one unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from estate_kernel.domain.entities import Employee, Property, Tenant


class ImportKind(str, Enum):
    """Which pipeline a workbook belongs to."""

    EMPLOYEES = "employees"
    RENT_MANAGEMENT = "rent_management"
    UNRECOGNIZED = "unrecognized"


# Row error codes
SCHEMA_VIOLATION = "SCHEMA_VIOLATION"
PROPERTY_NOT_FOUND = "PROPERTY_NOT_FOUND"


@dataclass(frozen=True)
class RowError:
    """
    One reportable problem, in the order it was found.

    ``row`` is the 1-based data-row position within ``sheet``; integrity
    findings on the assembled set are not tied to a row and use 0.
    """

    row: int
    field: str
    message: str
    code: str = SCHEMA_VIOLATION
    sheet: str | None = None


@dataclass(frozen=True)
class Classification:
    """Classifier verdict plus the sheets each pipeline should read."""

    kind: ImportKind
    employee_sheet: str | None = None
    property_sheet: str | None = None
    tenant_sheet: str | None = None


@dataclass(frozen=True)
class CandidateSet:
    """Schema-validated entities of one import run, not yet in the store."""

    properties: tuple[Property, ...] = ()
    tenants: tuple[Tenant, ...] = ()
    employees: tuple[Employee, ...] = ()

    @property
    def total(self) -> int:
        return len(self.properties) + len(self.tenants) + len(self.employees)


@dataclass(frozen=True)
class ImportResult:
    """
    Outcome of one pipeline run.

    ``success`` is False whenever any error was collected, but the candidate
    set is still usable: rows that passed are kept for review and merge.
    """

    success: bool
    kind: ImportKind
    candidates: CandidateSet
    errors: tuple[RowError, ...] = ()
    summary: str = ""
