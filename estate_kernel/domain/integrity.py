"""
Referential integrity checker for properties and tenants.

Pure function over an entity set. It does not know whether the set is an
import's candidates or the canonical store. Both rule classes are always
evaluated in full; nothing short-circuits.

Rules:
    FK_ERROR        every tenant.property_id resolves to a property in the set
    CAPACITY_ERROR  active tenants per property <= property.capacity
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from estate_kernel.domain.entities import Property, Tenant

FK_ERROR = "FK_ERROR"
CAPACITY_ERROR = "CAPACITY_ERROR"


@dataclass(frozen=True)
class IntegrityError:
    """One integrity finding. ``kind`` is FK_ERROR or CAPACITY_ERROR."""

    kind: str
    message: str
    entity_id: int | None = None


@dataclass(frozen=True)
class IntegrityReport:
    valid: bool
    errors: tuple[IntegrityError, ...] = ()

    def of_kind(self, kind: str) -> tuple[IntegrityError, ...]:
        return tuple(e for e in self.errors if e.kind == kind)


def check_integrity(
    properties: Iterable[Property],
    tenants: Iterable[Tenant],
) -> IntegrityReport:
    """Check FK and capacity invariants. Deterministic: same input, same errors."""
    properties = tuple(properties)
    tenants = tuple(tenants)
    property_ids = {p.id for p in properties}
    errors: list[IntegrityError] = []

    for tenant in tenants:
        if tenant.property_id not in property_ids:
            errors.append(IntegrityError(
                kind=FK_ERROR,
                message=(
                    f'Tenant "{tenant.name}" is assigned to a missing property '
                    f"(ID: {tenant.property_id})"
                ),
                entity_id=tenant.id,
            ))

    active_counts = Counter(t.property_id for t in tenants if t.is_active)
    for prop in properties:
        count = active_counts.get(prop.id, 0)
        if count > prop.capacity:
            errors.append(IntegrityError(
                kind=CAPACITY_ERROR,
                message=f'Property "{prop.name}" exceeds capacity ({count}/{prop.capacity})',
                entity_id=prop.id,
            ))

    return IntegrityReport(valid=not errors, errors=tuple(errors))
