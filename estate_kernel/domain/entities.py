"""
estate_kernel.domain.entities -- Canonical store entities.

ZERO I/O. Every entity is a frozen dataclass; updates go through
``dataclasses.replace`` so a store snapshot handed to a reader can never
change underneath it. Monetary amounts are integer yen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TenantStatus(str, Enum):
    """Occupancy status of a tenant assignment."""

    ACTIVE = "active"
    INACTIVE = "inactive"


CLOSING_DAYS = (0, 15, 20, 25)  # 0 = end-of-month billing

DEFAULT_COMPANY_NAME = "UNS-KIKAKU"
DEFAULT_UNIT_TYPE = "1K"
SCHEMA_VERSION = "7.0"


@dataclass(frozen=True)
class Property:
    """A leased unit (company dorm) with its cost and collection target."""

    id: int
    name: str
    address: str = ""
    address_auto: str = ""
    address_detail: str = ""
    room_number: str = ""
    postal_code: str = ""
    type: str = DEFAULT_UNIT_TYPE
    capacity: int = 1
    rent_cost: int = 0  # Paid to the external owner
    rent_price_uns: int = 0  # Target amount to collect from tenants
    parking_cost: int = 0
    manager_name: str = ""
    manager_phone: str = ""
    contract_start: str | None = None
    contract_end: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class Tenant:
    """An employee assigned to a property, with their monthly contribution."""

    id: int
    employee_id: str  # External employee code; not a store foreign key
    name: str
    name_kana: str
    property_id: int
    rent_contribution: int = 0
    parking_fee: int = 0
    entry_date: str = ""
    status: TenantStatus = TenantStatus.ACTIVE
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.ACTIVE


@dataclass(frozen=True)
class Employee:
    """Employee master record. ``full_data`` keeps the raw import row."""

    id: str
    name: str
    name_kana: str = ""
    company: str = ""
    full_data: dict[str, Any] | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class Config:
    """Company-wide settings."""

    company_name: str = DEFAULT_COMPANY_NAME
    closing_day: int = 0


@dataclass(frozen=True)
class Database:
    """
    The canonical store: single aggregate root read and written as a whole.

    Writers build a new Database from the old one (read-modify-write); there
    are no partial writes.
    """

    properties: tuple[Property, ...] = ()
    tenants: tuple[Tenant, ...] = ()
    employees: tuple[Employee, ...] = ()
    config: Config = field(default_factory=Config)
    version: str = SCHEMA_VERSION
    last_sync: str = ""

    def find_property(self, property_id: int) -> Property | None:
        for p in self.properties:
            if p.id == property_id:
                return p
        return None

    def find_tenant(self, tenant_id: int) -> Tenant | None:
        for t in self.tenants:
            if t.id == tenant_id:
                return t
        return None

    def find_employee(self, employee_id: str) -> Employee | None:
        for e in self.employees:
            if e.id == employee_id:
                return e
        return None

    def tenants_of(self, property_id: int, active_only: bool = True) -> tuple[Tenant, ...]:
        """Tenants of one property in store order."""
        return tuple(
            t for t in self.tenants
            if t.property_id == property_id and (not active_only or t.is_active)
        )

    def max_id(self) -> int:
        ids = [p.id for p in self.properties] + [t.id for t in self.tenants]
        return max(ids, default=0)


def default_database(
    *,
    company_name: str = DEFAULT_COMPANY_NAME,
    closing_day: int = 0,
    version: str = SCHEMA_VERSION,
    last_sync: str = "",
) -> Database:
    """Empty store with default config, used when the persistent slot is empty."""
    return Database(
        config=Config(company_name=company_name, closing_day=closing_day),
        version=version,
        last_sync=last_sync,
    )


class IdMinter:
    """
    Mints store-scoped integer ids derived from the clock.

    Ids are clock milliseconds, bumped past the largest id already handed out
    so that several entities minted within the same millisecond stay unique.
    """

    def __init__(self, clock: Any, floor: int = 0):
        self._clock = clock
        self._last = floor

    def __call__(self) -> int:
        candidate = self._clock.now_millis()
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate
