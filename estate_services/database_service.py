"""
DatabaseService -- the CRUD surface over the canonical store.

Responsibility:
    Owns the current ``Database`` snapshot and its persistent store. Every
    mutation is read-modify-write of the whole aggregate: build a new
    Database from the current one, then save it. Direct edits re-run the row
    schemas on the post-update shape.

Architecture position:
    Services -- composes estate_kernel (schemas, integrity, allocation,
    metrics, reports, store) with estate_ingestion (import and merge).

Failure modes:
    - Validation failures and missing entities come back as
      ``MutationResult(success=False, ...)``; nothing is raised for them.
    - A corrupt stored payload is logged and replaced by the default
      database on ``open()``.
    - ``DependencyUnavailableError`` from the xlsx reader propagates.
"""

from __future__ import annotations

import dataclasses
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Mapping

from estate_config.schema import EstateConfig
from estate_kernel.domain.allocation import RentTotals, distribute_evenly, rent_totals
from estate_kernel.domain.clock import Clock, SystemClock
from estate_kernel.domain.dates import BillingCycle, billing_cycle, is_property_active
from estate_kernel.domain.dtos import MutationResult, ValidationError
from estate_kernel.domain.entities import (
    CLOSING_DAYS,
    Config,
    Database,
    Employee,
    IdMinter,
    Property,
    Tenant,
    default_database,
)
from estate_kernel.domain.integrity import IntegrityReport, check_integrity
from estate_kernel.domain.metrics import DashboardMetrics, compute_metrics
from estate_kernel.domain.reports import (
    CompanyReportRow,
    MonthlySnapshot,
    PayrollDeductionRow,
    PropertyReportRow,
    build_monthly_snapshot,
    company_summary_rows,
    payroll_deduction_rows,
    property_report_rows,
)
from estate_kernel.domain.schemas import (
    coerce_int,
    text,
    validate_employee,
    validate_property,
    validate_tenant,
)
from estate_kernel.exceptions import StoreCorruptedError
from estate_kernel.logging_config import LogContext, get_logger
from estate_kernel.store import serialization
from estate_kernel.store.base import PersistentStore

from estate_ingestion.adapters.base import WorkbookSource
from estate_ingestion.domain.types import ImportKind, ImportResult
from estate_ingestion.services.import_service import ImportService
from estate_ingestion.services.merge_service import MergeService

from estate_services.notifier import LoggingNotifier, NotificationKind, Notifier

logger = get_logger("services.database")

PROPERTY_NOT_FOUND = "property not found"
TENANT_NOT_FOUND = "tenant not found"
EMPLOYEE_NOT_FOUND = "employee not found"
EMPLOYEE_ALREADY_ASSIGNED = "employee already assigned to an active tenancy"


def _as_dict(entity: Any) -> dict[str, Any]:
    """Shallow field dict of a frozen entity (enums kept as members)."""
    return {f.name: getattr(entity, f.name) for f in dataclasses.fields(entity)}


class DatabaseService:
    """
    Stateful CRUD over one persistent store slot.

    Contract:
        Call ``open()`` once; the first data access opens lazily otherwise.
        All ids for new properties and tenants come from an ``IdMinter``
        seeded past the largest id in the store.
    """

    def __init__(
        self,
        store: PersistentStore,
        clock: Clock | None = None,
        notifier: Notifier | None = None,
        config: EstateConfig | None = None,
        import_service: ImportService | None = None,
        merge_service: MergeService | None = None,
    ):
        if config is None:
            from estate_config import get_active_config

            config = get_active_config()
        self._store = store
        self._clock = clock or SystemClock()
        self._notifier = notifier or LoggingNotifier()
        self._config = config
        self._importer = import_service or ImportService(config.vocabulary, self._clock)
        self._merger = merge_service or MergeService(self._clock)
        self._db: Database | None = None
        self._mint: IdMinter | None = None

    # -------------------------------------------------------------------------
    # Store lifecycle
    # -------------------------------------------------------------------------

    def _default(self) -> Database:
        return default_database(
            company_name=self._config.company_name,
            closing_day=self._config.closing_day,
            version=self._config.store.schema_version,
            last_sync=self._now(),
        )

    def open(self) -> Database:
        """Load the stored Database, or start from the default one."""
        try:
            db = self._store.load()
        except StoreCorruptedError as e:
            logger.error(
                "store_corrupted_fallback",
                extra={"storage_key": e.storage_key, "reason": e.reason, "error_code": e.code},
            )
            db = None
        if db is None:
            db = self._default()
        self._set(db)
        logger.info(
            "store_opened",
            extra={
                "storage_key": self._store.storage_key,
                "properties": len(db.properties),
                "tenants": len(db.tenants),
                "employees": len(db.employees),
            },
        )
        return db

    @property
    def database(self) -> Database:
        if self._db is None:
            return self.open()
        return self._db

    def _set(self, db: Database) -> None:
        self._db = db
        self._mint = IdMinter(self._clock, floor=db.max_id())

    def _commit(self, db: Database) -> None:
        self._store.save(db)
        self._set(db)

    def _now(self) -> str:
        return self._clock.now().isoformat()

    def _new_id(self) -> int:
        if self._mint is None:
            self.open()
        return self._mint()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    def add_property(self, data: Mapping[str, Any]) -> MutationResult:
        checked = validate_property(data)
        if not checked.success:
            return MutationResult.invalid(checked.errors)
        db = self.database
        now = self._now()
        prop = replace(checked.entity, id=self._new_id(), created_at=now, updated_at=now)
        self._commit(replace(db, properties=db.properties + (prop,)))
        logger.info("property_added", extra={"property_id": prop.id, "property_name": prop.name})
        return MutationResult.ok(count=1, entity_id=prop.id)

    def update_property(self, property_id: int, changes: Mapping[str, Any]) -> MutationResult:
        db = self.database
        existing = db.find_property(property_id)
        if existing is None:
            return MutationResult.failed(PROPERTY_NOT_FOUND)
        checked = validate_property({**_as_dict(existing), **changes})
        if not checked.success:
            return MutationResult.invalid(checked.errors)
        updated = replace(
            checked.entity,
            id=existing.id,
            created_at=existing.created_at,
            updated_at=self._now(),
        )
        self._commit(replace(
            db,
            properties=tuple(updated if p.id == property_id else p for p in db.properties),
        ))
        logger.info("property_updated", extra={"property_id": property_id})
        return MutationResult.ok(count=1, entity_id=property_id)

    def delete_property(self, property_id: int) -> MutationResult:
        """Delete a property and every tenant assigned to it."""
        db = self.database
        if db.find_property(property_id) is None:
            return MutationResult.failed(PROPERTY_NOT_FOUND)
        remaining = tuple(t for t in db.tenants if t.property_id != property_id)
        removed_tenants = len(db.tenants) - len(remaining)
        self._commit(replace(
            db,
            properties=tuple(p for p in db.properties if p.id != property_id),
            tenants=remaining,
        ))
        logger.info(
            "property_deleted",
            extra={"property_id": property_id, "tenants_removed": removed_tenants},
        )
        return MutationResult.ok(count=removed_tenants, entity_id=property_id)

    def get_property(self, property_id: int) -> Property | None:
        return self.database.find_property(property_id)

    def get_properties_by_status(self, active: bool) -> tuple[Property, ...]:
        today = self._clock.today()
        return tuple(p for p in self.database.properties if is_property_active(p, today) == active)

    # -------------------------------------------------------------------------
    # Tenants
    # -------------------------------------------------------------------------

    def _assignment_conflict(self, db: Database, employee_id: str, exclude_id: int | None = None) -> bool:
        return any(
            t.employee_id == employee_id and t.is_active and t.id != exclude_id
            for t in db.tenants
        )

    def add_tenant(self, data: Mapping[str, Any]) -> MutationResult:
        db = self.database
        if db.find_property(coerce_int(data.get("property_id"), 0)) is None:
            return MutationResult.failed(PROPERTY_NOT_FOUND)
        if self._assignment_conflict(db, text(data.get("employee_id"))):
            return MutationResult.failed(EMPLOYEE_ALREADY_ASSIGNED)
        checked = validate_tenant(data)
        if not checked.success:
            return MutationResult.invalid(checked.errors)

        now = self._now()
        tenant = replace(checked.entity, id=self._new_id(), created_at=now, updated_at=now)
        self._commit(replace(db, tenants=db.tenants + (tenant,)))
        logger.info(
            "tenant_added",
            extra={"tenant_id": tenant.id, "property_id": tenant.property_id},
        )
        return MutationResult.ok(count=1, entity_id=tenant.id)

    def update_tenant(self, tenant_id: int, changes: Mapping[str, Any]) -> MutationResult:
        db = self.database
        existing = db.find_tenant(tenant_id)
        if existing is None:
            return MutationResult.failed(TENANT_NOT_FOUND)
        checked = validate_tenant({**_as_dict(existing), **changes})
        if not checked.success:
            return MutationResult.invalid(checked.errors)
        tenant: Tenant = checked.entity
        if db.find_property(tenant.property_id) is None:
            return MutationResult.failed(PROPERTY_NOT_FOUND)
        if tenant.is_active and self._assignment_conflict(db, tenant.employee_id, exclude_id=tenant_id):
            return MutationResult.failed(EMPLOYEE_ALREADY_ASSIGNED)

        updated = replace(tenant, id=tenant_id, created_at=existing.created_at, updated_at=self._now())
        self._commit(replace(
            db,
            tenants=tuple(updated if t.id == tenant_id else t for t in db.tenants),
        ))
        logger.info("tenant_updated", extra={"tenant_id": tenant_id})
        return MutationResult.ok(count=1, entity_id=tenant_id)

    def delete_tenant(self, tenant_id: int) -> MutationResult:
        db = self.database
        if db.find_tenant(tenant_id) is None:
            return MutationResult.failed(TENANT_NOT_FOUND)
        self._commit(replace(db, tenants=tuple(t for t in db.tenants if t.id != tenant_id)))
        logger.info("tenant_deleted", extra={"tenant_id": tenant_id})
        return MutationResult.ok(count=1, entity_id=tenant_id)

    def get_tenants_by_property(self, property_id: int, active_only: bool = True) -> tuple[Tenant, ...]:
        return self.database.tenants_of(property_id, active_only=active_only)

    # -------------------------------------------------------------------------
    # Employees
    # -------------------------------------------------------------------------

    def add_employees(self, records: Iterable[Mapping[str, Any]]) -> MutationResult:
        """
        Add employee records, first write wins.

        All records are validated first; one invalid record rejects the call.
        ``count`` is the number actually added.
        """
        employees: list[Employee] = []
        errors: list[ValidationError] = []
        for record in records:
            checked = validate_employee(record)
            if checked.success:
                employees.append(checked.entity)
            else:
                errors.extend(checked.errors)
        if errors:
            return MutationResult.invalid(tuple(errors))

        db = self.database
        now = self._now()
        seen = {e.id for e in db.employees}
        added: list[Employee] = []
        for employee in employees:
            if employee.id in seen:
                continue
            seen.add(employee.id)
            added.append(replace(employee, created_at=now, updated_at=now))
        if added:
            self._commit(replace(db, employees=db.employees + tuple(added)))
        logger.info(
            "employees_added",
            extra={"added": len(added), "skipped": len(employees) - len(added)},
        )
        return MutationResult.ok(count=len(added))

    def update_employee(self, employee_id: str, changes: Mapping[str, Any]) -> MutationResult:
        db = self.database
        existing = db.find_employee(employee_id)
        if existing is None:
            return MutationResult.failed(EMPLOYEE_NOT_FOUND)
        checked = validate_employee({**_as_dict(existing), **changes, "id": employee_id})
        if not checked.success:
            return MutationResult.invalid(checked.errors)
        updated = replace(checked.entity, created_at=existing.created_at, updated_at=self._now())
        self._commit(replace(
            db,
            employees=tuple(updated if e.id == employee_id else e for e in db.employees),
        ))
        return MutationResult.ok(count=1, entity_id=employee_id)

    def get_employee_by_id(self, employee_id: str) -> Employee | None:
        return self.database.find_employee(employee_id)

    # -------------------------------------------------------------------------
    # Config
    # -------------------------------------------------------------------------

    def update_config(
        self,
        *,
        company_name: str | None = None,
        closing_day: int | None = None,
    ) -> MutationResult:
        db = self.database
        errors: list[ValidationError] = []
        if company_name is not None and not text(company_name):
            errors.append(ValidationError(
                code="MISSING_REQUIRED_FIELD",
                message="Company name is required",
                field="company_name",
            ))
        if closing_day is not None and closing_day not in CLOSING_DAYS:
            errors.append(ValidationError(
                code="OUT_OF_RANGE",
                message=f"Closing day must be one of {CLOSING_DAYS}",
                field="closing_day",
                details={"value": closing_day},
            ))
        if errors:
            return MutationResult.invalid(tuple(errors))

        config = Config(
            company_name=text(company_name) if company_name is not None else db.config.company_name,
            closing_day=closing_day if closing_day is not None else db.config.closing_day,
        )
        self._commit(replace(db, config=config))
        logger.info(
            "config_updated",
            extra={"company_name": config.company_name, "closing_day": config.closing_day},
        )
        return MutationResult.ok()

    # -------------------------------------------------------------------------
    # Import and merge
    # -------------------------------------------------------------------------

    def process_workbook(self, source: WorkbookSource) -> ImportResult:
        """Run the import pipeline. Does not touch the store."""
        return self._importer.process_workbook(source)

    def process_file(self, source: Path | str | bytes) -> ImportResult:
        return self._importer.process_file(source)

    def merge_import(self, result: ImportResult) -> MutationResult:
        if result.kind == ImportKind.UNRECOGNIZED:
            self._notifier.notify(NotificationKind.WARNING, "Import", result.summary)
            return MutationResult.failed("unrecognized workbook")

        outcome = self._merger.merge(self.database, result)
        self._commit(outcome.database)
        counts = outcome.counts
        self._notifier.notify(
            NotificationKind.SUCCESS,
            "Import merged",
            (
                f"{counts.properties_added} properties, {counts.tenants_added} tenants "
                f"and {counts.employees_added} employees added"
            ),
        )
        return MutationResult.ok(count=counts.added)

    # -------------------------------------------------------------------------
    # Rent allocation
    # -------------------------------------------------------------------------

    def distribute_evenly(self, property_id: int) -> MutationResult:
        """Split the property's collection target across its active tenants."""
        db = self.database
        prop = db.find_property(property_id)
        if prop is None:
            return MutationResult.failed(PROPERTY_NOT_FOUND)

        with LogContext.bind(producer="allocation", entity_id=str(property_id)):
            allocation = distribute_evenly(prop, db.tenants)
            if not allocation.success:
                self._notifier.notify(NotificationKind.WARNING, prop.name, allocation.error)
                return MutationResult.failed(allocation.error)

            amounts = {a.tenant_id: a.amount for a in allocation.allocations}
            now = self._now()
            tenants = tuple(
                replace(t, rent_contribution=amounts[t.id], updated_at=now) if t.id in amounts else t
                for t in db.tenants
            )
            self._commit(replace(db, tenants=tenants))
            logger.info(
                "rent_distributed",
                extra={"target": prop.rent_price_uns, "tenants": len(amounts)},
            )

        self._notifier.notify(
            NotificationKind.SUCCESS,
            prop.name,
            f"¥{prop.rent_price_uns:,} distributed across {len(amounts)} tenants",
        )
        return MutationResult.ok(count=len(amounts), entity_id=property_id)

    def rent_totals(self, property_id: int) -> RentTotals | None:
        """Collection progress of one property; None if it does not exist."""
        db = self.database
        prop = db.find_property(property_id)
        if prop is None:
            return None
        return rent_totals(prop, db.tenants)

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    def check_integrity(self) -> IntegrityReport:
        db = self.database
        return check_integrity(db.properties, db.tenants)

    def metrics(self) -> DashboardMetrics:
        alerts = self._config.alerts
        return compute_metrics(
            self.database,
            self._clock.today(),
            self._now(),
            warning_days=alerts.contract_warning_days,
            high_severity_days=alerts.contract_high_severity_days,
        )

    def billing_cycle(self) -> BillingCycle:
        return billing_cycle(self._clock.today(), self.database.config.closing_day)

    def property_report(self) -> tuple[PropertyReportRow, ...]:
        return property_report_rows(self.database, self._clock.today())

    def payroll_report(self) -> tuple[PayrollDeductionRow, ...]:
        return payroll_deduction_rows(self.database)

    def company_report(self) -> tuple[CompanyReportRow, ...]:
        return company_summary_rows(self.database)

    def monthly_snapshot(self) -> MonthlySnapshot:
        return build_monthly_snapshot(self.database, self._clock.today(), self._now())

    # -------------------------------------------------------------------------
    # Backup
    # -------------------------------------------------------------------------

    def export_json(self) -> str:
        return serialization.dumps(self.database, indent=2)

    def backup_filename(self) -> str:
        return f"UNS_Backup_{self._clock.today().isoformat()}.json"

    def import_json(self, payload: str) -> MutationResult:
        """Replace the whole store with a backup blob."""
        try:
            db = serialization.loads(payload)
        except ValueError as e:
            logger.warning("backup_rejected", extra={"reason": str(e)})
            self._notifier.notify(NotificationKind.ERROR, "Restore failed", str(e))
            return MutationResult.failed(f"invalid backup: {e}")
        self._commit(db)
        self._notifier.notify(NotificationKind.SUCCESS, "Restore", "Backup restored")
        return MutationResult.ok(count=len(db.properties) + len(db.tenants) + len(db.employees))

    def reset(self) -> MutationResult:
        self._commit(self._default())
        logger.warning("store_reset", extra={"storage_key": self._store.storage_key})
        return MutationResult.ok()
