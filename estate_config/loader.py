"""
Configuration Loader (``estate_config.loader``).

Responsibility
--------------
Loads the YAML configuration file and parses it into the typed
``estate_config.schema`` dataclasses. Runtime callers go through
``estate_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys or invalid values -> ``InvalidConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from estate_config.schema import (
    AlertPolicy,
    ColumnAliases,
    EstateConfig,
    ImportVocabulary,
    SheetMarkers,
    StoreDefaults,
)
from estate_kernel.domain.entities import CLOSING_DAYS
from estate_kernel.exceptions import InvalidConfigError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization. Deterministic."""
    canonical = json.dumps(data, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _tokens(data: dict[str, Any], key: str, source: str) -> tuple[str, ...]:
    values = data.get(key)
    if not values or not isinstance(values, list):
        raise InvalidConfigError(source, f"sheet_markers.{key} must be a non-empty list")
    return tuple(str(v) for v in values)


def _aliases(data: dict[str, Any] | None, entity: str, source: str) -> dict[str, tuple[str, ...]]:
    out: dict[str, tuple[str, ...]] = {}
    for field_name, headers in (data or {}).items():
        if isinstance(headers, str):
            headers = [headers]
        if not isinstance(headers, list) or not headers:
            raise InvalidConfigError(source, f"columns.{entity}.{field_name} must list at least one header")
        out[str(field_name)] = tuple(str(h) for h in headers)
    return out


def parse_vocabulary(data: dict[str, Any], source: str) -> ImportVocabulary:
    markers = data.get("sheet_markers")
    if not isinstance(markers, dict):
        raise InvalidConfigError(source, "import.sheet_markers is required")
    columns = data.get("columns") or {}
    required = {"property": ("name",), "tenant": ("property_name", "name_kana"), "employee": ("id", "name")}
    aliases = {entity: _aliases(columns.get(entity), entity, source) for entity in required}
    for entity, fields in required.items():
        for f in fields:
            if f not in aliases[entity]:
                raise InvalidConfigError(source, f"columns.{entity}.{f} is required")

    default_capacity = int(data.get("default_capacity", 2))
    if default_capacity < 1:
        raise InvalidConfigError(source, "import.default_capacity must be >= 1")

    return ImportVocabulary(
        sheet_markers=SheetMarkers(
            employee=_tokens(markers, "employee", source),
            property=_tokens(markers, "property", source),
            tenant=_tokens(markers, "tenant", source),
        ),
        columns=ColumnAliases(**aliases),
        default_capacity=default_capacity,
        imported_employee_prefix=str(data.get("imported_employee_prefix", "IMP-")),
    )


def parse_config(data: dict[str, Any], source: str = "<dict>") -> EstateConfig:
    """Parse the whole configuration document."""
    company = data.get("company") or {}
    closing_day = company.get("closing_day", 0)
    if closing_day not in CLOSING_DAYS:
        raise InvalidConfigError(source, f"company.closing_day must be one of {CLOSING_DAYS}")

    if not isinstance(data.get("import"), dict):
        raise InvalidConfigError(source, "import section is required")

    alerts = data.get("alerts") or {}
    policy = AlertPolicy(
        contract_warning_days=int(alerts.get("contract_warning_days", 60)),
        contract_high_severity_days=int(alerts.get("contract_high_severity_days", 30)),
    )
    if policy.contract_high_severity_days > policy.contract_warning_days:
        raise InvalidConfigError(source, "alerts.contract_high_severity_days exceeds contract_warning_days")

    store = data.get("store") or {}
    return EstateConfig(
        company_name=str(company.get("name", "UNS-KIKAKU")),
        closing_day=closing_day,
        vocabulary=parse_vocabulary(data["import"], source),
        alerts=policy,
        store=StoreDefaults(
            storage_key=str(store.get("storage_key", "uns_db_v7_0")),
            schema_version=str(store.get("schema_version", "7.0")),
        ),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> EstateConfig:
    return parse_config(load_yaml_file(path), source=str(path))
