"""
estate_kernel.domain -- Pure types and functions for the estate ledger.

ZERO I/O apart from ``SystemClock``.
"""

from estate_kernel.domain.entities import (
    Config,
    Database,
    Employee,
    IdMinter,
    Property,
    Tenant,
    TenantStatus,
    default_database,
)
from estate_kernel.domain.integrity import IntegrityError, IntegrityReport, check_integrity
from estate_kernel.domain.schemas import EntityKind, SchemaResult, validate_entity

__all__ = [
    "Config",
    "Database",
    "Employee",
    "EntityKind",
    "IdMinter",
    "IntegrityError",
    "IntegrityReport",
    "Property",
    "SchemaResult",
    "Tenant",
    "TenantStatus",
    "check_integrity",
    "default_database",
    "validate_entity",
]
