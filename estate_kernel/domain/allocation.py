"""
Rent allocation: split a property's collection target across its tenants.

ZERO I/O. Produces the new contributions; applying them to the store is the
caller's job (``DatabaseService.distribute_evenly``).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from estate_kernel.domain.entities import Property, Tenant

NOTHING_TO_DISTRIBUTE = "nothing to distribute"


@dataclass(frozen=True)
class Allocation:
    tenant_id: int
    amount: int


@dataclass(frozen=True)
class AllocationResult:
    success: bool
    allocations: tuple[Allocation, ...] = ()
    error: str | None = None

    @property
    def total(self) -> int:
        return sum(a.amount for a in self.allocations)


def distribute_evenly(prop: Property, tenants: Iterable[Tenant]) -> AllocationResult:
    """
    Even split with the remainder on the first tenant.

    Only active tenants of ``prop`` take part, in the order given (store order).
    The assigned amounts always sum to ``rent_price_uns`` exactly.
    """
    recipients = [t for t in tenants if t.property_id == prop.id and t.is_active]
    if not recipients:
        return AllocationResult(success=False, error=NOTHING_TO_DISTRIBUTE)

    base, remainder = divmod(prop.rent_price_uns, len(recipients))
    allocations = tuple(
        Allocation(tenant_id=t.id, amount=base + remainder if i == 0 else base)
        for i, t in enumerate(recipients)
    )
    return AllocationResult(success=True, allocations=allocations)


@dataclass(frozen=True)
class RentTotals:
    """Collection progress of one property."""

    target: int
    total_rent: int
    total_parking: int
    total_all: int
    collection_rate: int  # percent of target covered by rent, half-up
    is_full: bool


def rent_totals(prop: Property, tenants: Iterable[Tenant]) -> RentTotals:
    recipients = [t for t in tenants if t.property_id == prop.id and t.is_active]
    total_rent = sum(t.rent_contribution for t in recipients)
    total_parking = sum(t.parking_fee for t in recipients)
    if prop.rent_price_uns > 0:
        rate = int((Decimal(total_rent) * 100 / Decimal(prop.rent_price_uns)).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP,
        ))
    else:
        rate = 0
    return RentTotals(
        target=prop.rent_price_uns,
        total_rent=total_rent,
        total_parking=total_parking,
        total_all=total_rent + total_parking,
        collection_rate=rate,
        is_full=total_rent >= prop.rent_price_uns,
    )
