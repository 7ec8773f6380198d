"""
Dashboard metrics and alerts derived from a store snapshot.

Pure and read-only: the same Database and the same ``today`` give the same
metrics. Alerts are recomputed on every call and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from estate_kernel.domain.dates import days_until, is_property_active, parse_date
from estate_kernel.domain.entities import Database, Property


class AlertType(str, Enum):
    WARNING = "warning"
    DANGER = "danger"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class AlertItem:
    type: AlertType
    message: str
    severity: AlertSeverity
    timestamp: str


@dataclass(frozen=True)
class DashboardMetrics:
    total_properties: int
    occupied_count: int
    total_capacity: int
    occupancy_rate: int  # percent, half-up
    total_collected: int
    total_property_cost: int
    total_target: int
    profit: int
    alerts: tuple[AlertItem, ...] = ()


def active_properties(db: Database, today: date) -> tuple[Property, ...]:
    return tuple(p for p in db.properties if is_property_active(p, today))


def _percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int((Decimal(part) * 100 / Decimal(whole)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def expiry_alerts(
    properties: tuple[Property, ...],
    today: date,
    timestamp: str,
    *,
    warning_days: int = 60,
    high_severity_days: int = 30,
) -> list[AlertItem]:
    """One warning per property whose contract ends within ``warning_days``."""
    alerts: list[AlertItem] = []
    for prop in properties:
        end = parse_date(prop.contract_end)
        if not end.is_valid:
            continue
        days = days_until(end.value, today)
        if days <= warning_days:
            alerts.append(AlertItem(
                type=AlertType.WARNING,
                message=f"Contract for {prop.name} ends in {days} days",
                severity=AlertSeverity.HIGH if days <= high_severity_days else AlertSeverity.MEDIUM,
                timestamp=timestamp,
            ))
    return alerts


def zero_rent_alert(db: Database, timestamp: str) -> AlertItem | None:
    """A single aggregate alert for active tenants with no rent configured."""
    count = sum(1 for t in db.tenants if t.is_active and t.rent_contribution == 0)
    if not count:
        return None
    return AlertItem(
        type=AlertType.DANGER,
        message=f"{count} tenant(s) without rent configured",
        severity=AlertSeverity.HIGH,
        timestamp=timestamp,
    )


def compute_metrics(
    db: Database,
    today: date,
    timestamp: str,
    *,
    warning_days: int = 60,
    high_severity_days: int = 30,
) -> DashboardMetrics:
    """KPIs over active properties and active tenants, plus alerts."""
    active = active_properties(db, today)
    active_tenants = [t for t in db.tenants if t.is_active]

    occupied = len(active_tenants)
    capacity = sum(p.capacity for p in active)
    collected = sum(t.rent_contribution + t.parking_fee for t in active_tenants)
    cost = sum(p.rent_cost + p.parking_cost for p in active)
    target = sum(p.rent_price_uns for p in active)

    alerts = expiry_alerts(
        active, today, timestamp,
        warning_days=warning_days, high_severity_days=high_severity_days,
    )
    zero_rent = zero_rent_alert(db, timestamp)
    if zero_rent is not None:
        alerts.append(zero_rent)

    return DashboardMetrics(
        total_properties=len(active),
        occupied_count=occupied,
        total_capacity=capacity,
        occupancy_rate=_percent(occupied, capacity),
        total_collected=collected,
        total_property_cost=cost,
        total_target=target,
        profit=collected - cost,
        alerts=tuple(alerts),
    )
