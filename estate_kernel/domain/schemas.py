"""
Row schemas: validate and coerce one untyped mapping into one typed entity.

ZERO I/O. The input is a mapping of entity field name -> raw value (a CRUD
payload, or a spreadsheet row already mapped through column aliases by
``estate_ingestion.mapping``). The output is a ``SchemaResult`` carrying
either the typed entity or the field-level violations.

Coercion policy (asymmetric):
    - Identity fields (employee id, kana, names, property_id) are strict.
      Missing or malformed -> violation.
    - Money fields are lenient. The cell is stringified, trimmed and parsed
      as a leading integer; anything unparseable becomes 0. Only a negative
      amount is a violation.

Validators never assign ids; ``id`` is passed through (0 when absent).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from estate_kernel.domain.dates import parse_date, to_iso
from estate_kernel.domain.dtos import ValidationError
from estate_kernel.domain.entities import (
    DEFAULT_UNIT_TYPE,
    Employee,
    Property,
    Tenant,
    TenantStatus,
)

PROPERTY_MONEY_FIELDS = ("rent_cost", "rent_price_uns", "parking_cost")
TENANT_MONEY_FIELDS = ("rent_contribution", "parking_fee")

_POSTAL_CODE = re.compile(r"^\d{3}-?\d{4}$")
_PHONE = re.compile(r"^\d{10,11}$")
_LEADING_INT = re.compile(r"^[+-]?\d+")
_AMOUNT_NOISE = re.compile(r"[,\s¥￥円]")

_NAME_MIN, _NAME_MAX = 2, 100
_ADDRESS_MIN = 5
_CAPACITY_MIN, _CAPACITY_MAX = 1, 20
_EMPLOYEE_ID_MAX = 50


class EntityKind(str, Enum):
    PROPERTY = "property"
    TENANT = "tenant"
    EMPLOYEE = "employee"


@dataclass(frozen=True)
class SchemaResult:
    """Ok(entity) or Err(errors)."""

    success: bool
    entity: Any = None
    errors: tuple[ValidationError, ...] = ()


# -----------------------------------------------------------------------------
# Coercion (pure)
# -----------------------------------------------------------------------------


def text(value: Any) -> str:
    """Cell value as trimmed text. None -> ''. Whole floats lose their '.0'."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def coerce_int(value: Any, default: int = 0) -> int:
    """
    Parse a leading integer out of any cell value.

    Thousands separators, whitespace and yen marks are dropped first, so
    "¥50,000" -> 50000 and "12.7" -> 12. Anything else -> ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    s = _AMOUNT_NOISE.sub("", text(value))
    m = _LEADING_INT.match(s)
    if not m:
        return default
    return int(m.group(0))


def _strict_int(value: Any) -> int | None:
    """Integer or None. Strings must be whole numbers; no silent zeroing."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    s = text(value)
    if re.fullmatch(r"[+-]?\d+", s):
        return int(s)
    return None


def _required(field_name: str, value: str, label: str) -> list[ValidationError]:
    if not value:
        return [ValidationError(
            code="MISSING_REQUIRED_FIELD",
            message=f"{label} is required",
            field=field_name,
        )]
    return []


def _amounts(data: Mapping[str, Any], fields: tuple[str, ...]) -> tuple[dict[str, int], list[ValidationError]]:
    values: dict[str, int] = {}
    errors: list[ValidationError] = []
    for field_name in fields:
        amount = coerce_int(data.get(field_name), 0)
        if amount < 0:
            errors.append(ValidationError(
                code="NEGATIVE_AMOUNT",
                message=f"{field_name} cannot be negative",
                field=field_name,
                details={"value": amount},
            ))
        values[field_name] = amount
    return values, errors


# -----------------------------------------------------------------------------
# Entity schemas
# -----------------------------------------------------------------------------


def validate_property(data: Mapping[str, Any], *, sheet: bool = False) -> SchemaResult:
    """
    Validate a property payload.

    ``sheet=True`` is the registry-sheet profile: the address column is often
    blank in exports, so the address length rule is not applied.
    """
    errors: list[ValidationError] = []

    name = text(data.get("name"))
    if not name:
        errors.extend(_required("name", name, "Property name"))
    elif not _NAME_MIN <= len(name) <= _NAME_MAX:
        errors.append(ValidationError(
            code="INVALID_LENGTH",
            message=f"Property name must be {_NAME_MIN}-{_NAME_MAX} characters",
            field="name",
        ))

    address = text(data.get("address"))
    if not sheet and len(address) < _ADDRESS_MIN:
        errors.append(ValidationError(
            code="INVALID_LENGTH",
            message=f"Address must be at least {_ADDRESS_MIN} characters",
            field="address",
        ))

    postal_code = text(data.get("postal_code"))
    if postal_code and not _POSTAL_CODE.match(postal_code):
        errors.append(ValidationError(
            code="INVALID_FORMAT",
            message="Invalid postal code (format: 123-4567)",
            field="postal_code",
        ))

    manager_phone = text(data.get("manager_phone"))
    if manager_phone and not _PHONE.match(manager_phone):
        errors.append(ValidationError(
            code="INVALID_FORMAT",
            message="Phone number must have 10-11 digits",
            field="manager_phone",
        ))

    capacity = _strict_int(data.get("capacity"))
    if capacity is None or not _CAPACITY_MIN <= capacity <= _CAPACITY_MAX:
        errors.append(ValidationError(
            code="OUT_OF_RANGE",
            message=f"Capacity must be an integer {_CAPACITY_MIN}-{_CAPACITY_MAX}",
            field="capacity",
            details={"value": data.get("capacity")},
        ))

    money, money_errors = _amounts(data, PROPERTY_MONEY_FIELDS)
    errors.extend(money_errors)

    if errors:
        return SchemaResult(success=False, errors=tuple(errors))

    return SchemaResult(success=True, entity=Property(
        id=coerce_int(data.get("id"), 0),
        name=name,
        address=address,
        address_auto=text(data.get("address_auto")) or address,
        address_detail=text(data.get("address_detail")),
        room_number=text(data.get("room_number")),
        postal_code=postal_code,
        type=text(data.get("type")) or DEFAULT_UNIT_TYPE,
        capacity=capacity,
        manager_name=text(data.get("manager_name")),
        manager_phone=manager_phone,
        contract_start=to_iso(data.get("contract_start")),
        contract_end=to_iso(data.get("contract_end")),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
        **money,
    ))


def validate_tenant(data: Mapping[str, Any]) -> SchemaResult:
    """Validate a tenant payload. ``name`` falls back to the kana name."""
    errors: list[ValidationError] = []

    employee_id = text(data.get("employee_id"))
    errors.extend(_required("employee_id", employee_id, "Employee ID"))
    if len(employee_id) > _EMPLOYEE_ID_MAX:
        errors.append(ValidationError(
            code="INVALID_LENGTH",
            message=f"Employee ID must be at most {_EMPLOYEE_ID_MAX} characters",
            field="employee_id",
        ))

    name_kana = text(data.get("name_kana"))
    errors.extend(_required("name_kana", name_kana, "Kana name"))
    name = text(data.get("name")) or name_kana

    property_id = _strict_int(data.get("property_id"))
    if property_id is None or property_id <= 0:
        errors.append(ValidationError(
            code="INVALID_REFERENCE",
            message="property_id must be a positive integer",
            field="property_id",
            details={"value": data.get("property_id")},
        ))

    entry = parse_date(data.get("entry_date"))
    if not entry.is_valid:
        errors.append(ValidationError(
            code="INVALID_DATE",
            message="Entry date is missing or cannot be parsed",
            field="entry_date",
            details={"value": text(data.get("entry_date"))},
        ))

    raw_status = data.get("status") or TenantStatus.ACTIVE.value
    try:
        status = TenantStatus(raw_status)
    except ValueError:
        status = None
        errors.append(ValidationError(
            code="INVALID_STATUS",
            message="Status must be 'active' or 'inactive'",
            field="status",
            details={"value": raw_status},
        ))

    money, money_errors = _amounts(data, TENANT_MONEY_FIELDS)
    errors.extend(money_errors)

    if errors:
        return SchemaResult(success=False, errors=tuple(errors))

    return SchemaResult(success=True, entity=Tenant(
        id=coerce_int(data.get("id"), 0),
        employee_id=employee_id,
        name=name,
        name_kana=name_kana,
        property_id=property_id,
        entry_date=entry.value.isoformat(),
        status=status,
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
        **money,
    ))


def validate_employee(data: Mapping[str, Any]) -> SchemaResult:
    """Only id and name are required; full_data is kept but never inspected."""
    employee_id = text(data.get("id"))
    name = text(data.get("name"))
    errors = _required("id", employee_id, "Employee ID") + _required("name", name, "Name")
    if errors:
        return SchemaResult(success=False, errors=tuple(errors))
    full_data = data.get("full_data")
    return SchemaResult(success=True, entity=Employee(
        id=employee_id,
        name=name,
        name_kana=text(data.get("name_kana")),
        company=text(data.get("company")),
        full_data=dict(full_data) if full_data is not None else None,
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    ))


_VALIDATORS = {
    EntityKind.PROPERTY: validate_property,
    EntityKind.TENANT: validate_tenant,
    EntityKind.EMPLOYEE: validate_employee,
}


def validate_entity(kind: EntityKind | str, data: Mapping[str, Any]) -> SchemaResult:
    """Dispatch to the schema for ``kind``. Unknown kinds are a programming error."""
    try:
        validator = _VALIDATORS[EntityKind(kind)]
    except ValueError:
        raise ValueError(f"Unknown entity kind: {kind!r}") from None
    return validator(data)
