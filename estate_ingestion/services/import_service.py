"""
Import service: classify -> map -> validate -> cross-check.

Orchestrates the sheet classifier, the mapping engine, the row schemas and
the integrity checker. Produces an ``ImportResult``; never touches the store.
Uses structured logging (LogContext, get_logger("ingestion.*")).

Error policy:
    Row, reference and integrity problems are collected into
    ``ImportResult.errors`` and processing continues with the next row.
    Only ``DependencyUnavailableError`` (xlsx parser missing) and unexpected
    faults propagate.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Sequence
from uuid import uuid4

from estate_config.schema import ImportVocabulary
from estate_kernel.domain.clock import Clock, SystemClock
from estate_kernel.domain.dtos import ValidationError
from estate_kernel.domain.entities import Employee, Property, Tenant
from estate_kernel.domain.integrity import check_integrity
from estate_kernel.domain.schemas import validate_employee, validate_property, validate_tenant
from estate_kernel.logging_config import LogContext, get_logger

from estate_ingestion.adapters.base import WorkbookSource
from estate_ingestion.adapters.xlsx_adapter import XlsxWorkbookReader
from estate_ingestion.domain.classifier import classify_sheets
from estate_ingestion.domain.types import (
    PROPERTY_NOT_FOUND,
    CandidateSet,
    Classification,
    ImportKind,
    ImportResult,
    RowError,
)
from estate_ingestion.mapping.engine import (
    map_employee_row,
    map_property_row,
    map_tenant_row,
    sheet_rows,
)

logger = get_logger("ingestion.import_service")


def _row_errors(row: int, sheet: str, errors: Sequence[ValidationError]) -> list[RowError]:
    return [
        RowError(row=row, field=e.field or "", message=e.message, code=e.code, sheet=sheet)
        for e in errors
    ]


class ImportService:
    """
    Runs one workbook through the pipeline its sheet names select.

    The vocabulary (sheet markers, column aliases, sheet defaults) comes from
    ``estate_config``; pass one explicitly to override the active config.
    """

    def __init__(
        self,
        vocabulary: ImportVocabulary | None = None,
        clock: Clock | None = None,
        reader: XlsxWorkbookReader | None = None,
    ):
        if vocabulary is None:
            from estate_config import get_active_config

            vocabulary = get_active_config().vocabulary
        self._vocabulary = vocabulary
        self._clock = clock or SystemClock()
        self._reader = reader or XlsxWorkbookReader()

    def classify(self, source: WorkbookSource) -> Classification:
        return classify_sheets(source.sheet_names, self._vocabulary.sheet_markers)

    def process_file(self, source: Path | str | bytes) -> ImportResult:
        """Read an .xlsx file (path or bytes) and process it."""
        return self.process_workbook(self._reader.read(source))

    def process_workbook(self, source: WorkbookSource) -> ImportResult:
        classification = self.classify(source)
        run_id = str(uuid4())
        with LogContext.bind(
            correlation_id=run_id,
            producer="ingestion",
            import_kind=classification.kind.value,
        ):
            logger.info(
                "import_started",
                extra={"sheets": list(source.sheet_names), "kind": classification.kind.value},
            )
            if classification.kind == ImportKind.EMPLOYEES:
                result = self._run_employees(source, classification)
            elif classification.kind == ImportKind.RENT_MANAGEMENT:
                result = self._run_rent_management(source, classification)
            else:
                result = self._unrecognized(source)

            log = logger.info if result.success else logger.warning
            log(
                "import_completed",
                extra={
                    "success": result.success,
                    "properties": len(result.candidates.properties),
                    "tenants": len(result.candidates.tenants),
                    "employees": len(result.candidates.employees),
                    "errors": len(result.errors),
                },
            )
            return result

    # -------------------------------------------------------------------------
    # Pipelines
    # -------------------------------------------------------------------------

    def _run_employees(self, source: WorkbookSource, classification: Classification) -> ImportResult:
        sheet = classification.employee_sheet
        columns = self._vocabulary.columns.employee
        employees: list[Employee] = []
        errors: list[RowError] = []

        for row in sheet_rows(source.sheet_rows(sheet)):
            checked = validate_employee(map_employee_row(row, columns))
            if checked.success:
                employees.append(checked.entity)
            else:
                errors.extend(_row_errors(row.row, sheet, checked.errors))

        summary = "\n".join([
            f"Employee import ({sheet})",
            f"Employees: {len(employees)}",
            f"Errors: {len(errors)}",
        ])
        return ImportResult(
            success=not errors,
            kind=ImportKind.EMPLOYEES,
            candidates=CandidateSet(employees=tuple(employees)),
            errors=tuple(errors),
            summary=summary,
        )

    def _run_rent_management(self, source: WorkbookSource, classification: Classification) -> ImportResult:
        vocab = self._vocabulary
        properties: list[Property] = []
        tenants: list[Tenant] = []
        errors: list[RowError] = []

        prop_sheet = classification.property_sheet
        if prop_sheet is not None:
            for row in sheet_rows(source.sheet_rows(prop_sheet)):
                payload = map_property_row(row, vocab.columns.property, vocab.default_capacity)
                checked = validate_property(payload, sheet=True)
                if checked.success:
                    # Import-run handle; replaced by a store id at merge
                    properties.append(replace(checked.entity, id=len(properties) + 1))
                else:
                    errors.extend(_row_errors(row.row, prop_sheet, checked.errors))

        tenant_sheet = classification.tenant_sheet
        if tenant_sheet is not None:
            today = self._clock.today()
            for row in sheet_rows(source.sheet_rows(tenant_sheet)):
                payload = map_tenant_row(
                    row,
                    vocab.columns.tenant,
                    employee_prefix=vocab.imported_employee_prefix,
                    today=today,
                )
                property_name = payload.pop("property_name")
                target = next((p for p in properties if p.name == property_name), None)
                if target is None:
                    errors.append(RowError(
                        row=row.row,
                        field="property_name",
                        message=f"property not found: {property_name or '(blank)'}",
                        code=PROPERTY_NOT_FOUND,
                        sheet=tenant_sheet,
                    ))
                    continue
                payload["property_id"] = target.id
                checked = validate_tenant(payload)
                if checked.success:
                    tenants.append(checked.entity)
                else:
                    errors.extend(_row_errors(row.row, tenant_sheet, checked.errors))

        row_error_count = len(errors)
        report = check_integrity(properties, tenants)
        for finding in report.errors:
            errors.append(RowError(row=0, field=finding.kind, message=finding.message, code=finding.kind))

        summary = "\n".join([
            "Rent management import",
            f"Properties: {len(properties)}",
            f"Tenants: {len(tenants)}",
            f"Row errors: {row_error_count}",
            f"Integrity errors: {len(report.errors)}",
        ])
        return ImportResult(
            success=not errors,
            kind=ImportKind.RENT_MANAGEMENT,
            candidates=CandidateSet(properties=tuple(properties), tenants=tuple(tenants)),
            errors=tuple(errors),
            summary=summary,
        )

    def _unrecognized(self, source: WorkbookSource) -> ImportResult:
        names = ", ".join(source.sheet_names) or "(none)"
        return ImportResult(
            success=False,
            kind=ImportKind.UNRECOGNIZED,
            candidates=CandidateSet(),
            summary=(
                "Unrecognized workbook\n"
                f"Sheets: {names}\n"
                "No sheet name matches a configured sheet marker."
            ),
        )
