"""
Merge service: ImportResult candidates -> canonical Database.

Additive only. Nothing already in the store is updated or removed.

Rules:
    - Employees: keyed by employee code, first write wins. A code already in
      the store, or earlier in the same batch, is skipped.
    - Properties: always appended with a freshly minted store id. Property
      names are not a merge key; importing the same registry twice yields
      two copies.
    - Tenants: appended with a fresh id and re-pointed from the import-run
      property handle to the store id minted for that property. A tenant
      whose handle has no minted property is skipped and logged.
    - Unrecognized results merge as a no-op.

The merge does not require ``ImportResult.success``; the caller decides
whether a partially failed import is merged.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from estate_kernel.domain.clock import Clock, SystemClock
from estate_kernel.domain.entities import Database, Employee, IdMinter, Property, Tenant
from estate_kernel.logging_config import get_logger

from estate_ingestion.domain.types import ImportKind, ImportResult

logger = get_logger("ingestion.merge_service")


@dataclass(frozen=True)
class MergeCounts:
    properties_added: int = 0
    tenants_added: int = 0
    employees_added: int = 0
    employees_skipped: int = 0
    tenants_skipped: int = 0

    @property
    def added(self) -> int:
        return self.properties_added + self.tenants_added + self.employees_added


@dataclass(frozen=True)
class MergeOutcome:
    """The new store snapshot plus what the merge did."""

    database: Database
    counts: MergeCounts


class MergeService:
    """Reconciles one import's candidates into a store snapshot."""

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()

    def merge(self, db: Database, result: ImportResult) -> MergeOutcome:
        if result.kind == ImportKind.UNRECOGNIZED:
            logger.info("merge_skipped_unrecognized")
            return MergeOutcome(database=db, counts=MergeCounts())

        candidates = result.candidates
        timestamp = self._clock.now().isoformat()

        employees, added_emp, skipped_emp = self._merge_employees(db, candidates.employees, timestamp)
        properties, tenants, tenant_skips = self._merge_rent(
            db, candidates.properties, candidates.tenants, timestamp,
        )

        counts = MergeCounts(
            properties_added=len(properties),
            tenants_added=len(tenants),
            employees_added=added_emp,
            employees_skipped=skipped_emp,
            tenants_skipped=tenant_skips,
        )
        merged = replace(
            db,
            properties=db.properties + properties,
            tenants=db.tenants + tenants,
            employees=employees,
            last_sync=timestamp,
        )
        logger.info(
            "merge_completed",
            extra={
                "kind": result.kind.value,
                "properties_added": counts.properties_added,
                "tenants_added": counts.tenants_added,
                "employees_added": counts.employees_added,
                "employees_skipped": counts.employees_skipped,
                "tenants_skipped": counts.tenants_skipped,
            },
        )
        return MergeOutcome(database=merged, counts=counts)

    def _merge_employees(
        self,
        db: Database,
        incoming: tuple[Employee, ...],
        timestamp: str,
    ) -> tuple[tuple[Employee, ...], int, int]:
        seen = {e.id for e in db.employees}
        added: list[Employee] = []
        skipped = 0
        for employee in incoming:
            if employee.id in seen:
                skipped += 1
                continue
            seen.add(employee.id)
            added.append(replace(employee, created_at=timestamp, updated_at=timestamp))
        return db.employees + tuple(added), len(added), skipped

    def _merge_rent(
        self,
        db: Database,
        properties: tuple[Property, ...],
        tenants: tuple[Tenant, ...],
        timestamp: str,
    ) -> tuple[tuple[Property, ...], tuple[Tenant, ...], int]:
        mint = IdMinter(self._clock, floor=db.max_id())
        store_ids: dict[int, int] = {}

        new_properties: list[Property] = []
        for prop in properties:
            store_id = mint()
            store_ids[prop.id] = store_id
            new_properties.append(replace(prop, id=store_id, created_at=timestamp, updated_at=timestamp))

        new_tenants: list[Tenant] = []
        skipped = 0
        for tenant in tenants:
            store_property_id = store_ids.get(tenant.property_id)
            if store_property_id is None:
                skipped += 1
                logger.warning(
                    "merge_tenant_unresolved",
                    extra={"employee_id": tenant.employee_id, "property_handle": tenant.property_id},
                )
                continue
            new_tenants.append(replace(
                tenant,
                id=mint(),
                property_id=store_property_id,
                created_at=timestamp,
                updated_at=timestamp,
            ))
        return tuple(new_properties), tuple(new_tenants), skipped
