"""
Database <-> JSON-compatible dict.

The blob layout matches what the host has always stored under the storage
key: snake_case entity fields, camelCase config keys. Unknown keys are
ignored on read so older blobs with extra fields still load.
"""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any

from estate_kernel.domain.entities import (
    CLOSING_DAYS,
    Config,
    Database,
    Employee,
    Property,
    SCHEMA_VERSION,
    Tenant,
    TenantStatus,
)


def _entity_to_dict(entity: Any) -> dict[str, Any]:
    out = {}
    for f in dataclasses.fields(entity):
        value = getattr(entity, f.name)
        out[f.name] = value.value if isinstance(value, Enum) else value
    return out


def _known(cls: type, data: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in dataclasses.fields(cls)}
    return {k: v for k, v in data.items() if k in names}


# Annotation (as written under postponed evaluation) -> accepted JSON types.
_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "int": (int,),
    "str": (str,),
    "str | None": (str, type(None)),
    "dict[str, Any] | None": (dict, type(None)),
}


def _typed(cls: type, data: Any) -> dict[str, Any]:
    """Known fields of ``data`` for ``cls``, each checked against its annotation."""
    if not isinstance(data, dict):
        raise ValueError(f"{cls.__name__} entry is not an object")
    values = _known(cls, data)
    for f in dataclasses.fields(cls):
        accepted = _FIELD_TYPES.get(f.type)
        if accepted is None or f.name not in values:
            continue
        value = values[f.name]
        if isinstance(value, bool) or not isinstance(value, accepted):
            raise ValueError(
                f"{cls.__name__}.{f.name} must be {f.type}, got {type(value).__name__}"
            )
    return values


def _config_from_dict(raw: Any) -> Config:
    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ValueError("config is not an object")
    company_name = raw.get("companyName", Config.company_name)
    closing_day = raw.get("closingDay", Config.closing_day)
    if not isinstance(company_name, str):
        raise ValueError("config.companyName must be a string")
    if isinstance(closing_day, bool) or not isinstance(closing_day, int) or closing_day not in CLOSING_DAYS:
        raise ValueError(f"config.closingDay must be one of {CLOSING_DAYS}, got {closing_day!r}")
    return Config(company_name=company_name, closing_day=closing_day)


def database_to_dict(db: Database) -> dict[str, Any]:
    return {
        "properties": [_entity_to_dict(p) for p in db.properties],
        "tenants": [_entity_to_dict(t) for t in db.tenants],
        "employees": [_entity_to_dict(e) for e in db.employees],
        "config": {
            "companyName": db.config.company_name,
            "closingDay": db.config.closing_day,
        },
        "version": db.version,
        "last_sync": db.last_sync,
    }


def database_from_dict(data: Any) -> Database:
    """
    Rebuild a Database from its dict form.

    Raises:
        ValueError: if the payload is not a database (missing entity lists,
            entities missing required fields or holding mistyped values,
            or a config outside its domain).
    """
    if not isinstance(data, dict):
        raise ValueError("payload is not an object")
    if not isinstance(data.get("properties"), list) or not isinstance(data.get("tenants"), list):
        raise ValueError("payload has no properties/tenants lists")

    try:
        properties = tuple(Property(**_typed(Property, p)) for p in data["properties"])
        tenants = tuple(
            Tenant(**{**_typed(Tenant, t), "status": TenantStatus(t.get("status", "active"))})
            for t in data["tenants"]
        )
        employees = tuple(Employee(**_typed(Employee, e)) for e in data.get("employees") or [])
        config = _config_from_dict(data.get("config"))
    except (AttributeError, TypeError, ValueError) as e:
        raise ValueError(f"malformed entity: {e}") from e

    return Database(
        properties=properties,
        tenants=tenants,
        employees=employees,
        config=config,
        version=data.get("version", SCHEMA_VERSION),
        last_sync=data.get("last_sync", ""),
    )


def dumps(db: Database, *, indent: int | None = None) -> str:
    return json.dumps(database_to_dict(db), ensure_ascii=False, indent=indent)


def loads(payload: str) -> Database:
    """Parse a JSON blob. Raises ValueError on bad JSON or bad shape."""
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e.msg}") from e
    return database_from_dict(data)
