"""
Monthly reports over a store snapshot.

Three views feed the month-end close: per-property detail, the payroll
deduction list handed to accounting, and a per-company summary built from
the payroll list. ``build_monthly_snapshot`` freezes all of them together
with the dashboard totals for one billing cycle.
"""

from __future__ import annotations

import re
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date

from estate_kernel.domain.dates import billing_cycle
from estate_kernel.domain.entities import Database
from estate_kernel.domain.metrics import active_properties, compute_metrics

UNASSIGNED_COMPANY = "(unassigned)"

_POSTAL_PREFIX = re.compile(r"〒?\s*\d{3}-?\d{4}\s*")
_CITY = re.compile(r"([^\s〒]+?[市区町村郡])")
_SPACES = re.compile(r"[　 ]")


def extract_area(address: str) -> str:
    """City / ward part of a Japanese address, used to group report rows."""
    if not address:
        return ""
    cleaned = _POSTAL_PREFIX.sub("", address, count=1)
    m = _CITY.search(cleaned)
    if m:
        return m.group(1)
    parts = _SPACES.split(cleaned)
    if len(parts) >= 2 and parts[0]:
        return parts[0]
    return cleaned[:6]


@dataclass(frozen=True)
class PropertyReportRow:
    no: int
    area: str
    property_name: str
    room_number: str
    layout: str
    occupant_count: int
    vacancy: int
    rent_cost: int
    rent_target: int
    profit: int
    notes: str


@dataclass(frozen=True)
class PayrollDeductionRow:
    employee_id: str
    company: str
    name_kana: str
    name: str
    property_name: str
    rent_deduction: int
    parking_deduction: int
    total_deduction: int


@dataclass(frozen=True)
class CompanyReportRow:
    company: str
    property_count: int
    rent_cost: int
    rent_target: int
    profit: int
    payroll_deduction: int
    monthly_profit: int


@dataclass(frozen=True)
class MonthlySnapshot:
    id: str
    cycle_month: str
    cycle_start: str
    cycle_end: str
    closed_at: str
    total_properties: int
    total_tenants: int
    total_collected: int
    total_cost: int
    total_target: int
    profit: int
    occupancy_rate: int
    company_summary: tuple[CompanyReportRow, ...]
    property_detail: tuple[PropertyReportRow, ...]
    payroll_detail: tuple[PayrollDeductionRow, ...]


def property_report_rows(db: Database, today: date) -> tuple[PropertyReportRow, ...]:
    rows = []
    for no, prop in enumerate(active_properties(db, today), start=1):
        occupants = len(db.tenants_of(prop.id))
        rows.append(PropertyReportRow(
            no=no,
            area=extract_area(prop.address),
            property_name=prop.name,
            room_number=prop.room_number,
            layout=prop.type,
            occupant_count=occupants,
            vacancy=max(prop.capacity - occupants, 0),
            rent_cost=prop.rent_cost,
            rent_target=prop.rent_price_uns,
            profit=prop.rent_price_uns - prop.rent_cost,
            notes=f"contract ends {prop.contract_end}" if prop.contract_end else "",
        ))
    return tuple(rows)


def payroll_deduction_rows(db: Database) -> tuple[PayrollDeductionRow, ...]:
    """One row per active tenant housed in a known property."""
    rows = []
    for tenant in db.tenants:
        if not tenant.is_active:
            continue
        prop = db.find_property(tenant.property_id)
        if prop is None:
            continue
        employee = db.find_employee(tenant.employee_id)
        rows.append(PayrollDeductionRow(
            employee_id=tenant.employee_id,
            company=(employee.company if employee else "") or UNASSIGNED_COMPANY,
            name_kana=tenant.name_kana,
            name=employee.name if employee else tenant.name,
            property_name=prop.name,
            rent_deduction=tenant.rent_contribution,
            parking_deduction=tenant.parking_fee,
            total_deduction=tenant.rent_contribution + tenant.parking_fee,
        ))
    return tuple(rows)


def company_summary_rows(db: Database) -> tuple[CompanyReportRow, ...]:
    """
    Payroll deductions grouped by dispatch company.

    A property counts once per company housing at least one of its tenants.
    """
    deductions: OrderedDict[str, int] = OrderedDict()
    property_ids: dict[str, set[int]] = {}
    for tenant in db.tenants:
        if not tenant.is_active or db.find_property(tenant.property_id) is None:
            continue
        employee = db.find_employee(tenant.employee_id)
        company = (employee.company if employee else "") or UNASSIGNED_COMPANY
        deductions[company] = deductions.get(company, 0) + tenant.rent_contribution + tenant.parking_fee
        property_ids.setdefault(company, set()).add(tenant.property_id)

    rows = []
    for company, deduction in deductions.items():
        props = [db.find_property(pid) for pid in sorted(property_ids[company])]
        cost = sum(p.rent_cost for p in props)
        target = sum(p.rent_price_uns for p in props)
        rows.append(CompanyReportRow(
            company=company,
            property_count=len(props),
            rent_cost=cost,
            rent_target=target,
            profit=target - cost,
            payroll_deduction=deduction,
            monthly_profit=deduction - cost,
        ))
    return tuple(rows)


def build_monthly_snapshot(
    db: Database,
    today: date,
    closed_at: str,
    closing_day: int | None = None,
) -> MonthlySnapshot:
    """Freeze totals and report rows for the billing cycle containing ``today``."""
    cycle = billing_cycle(today, db.config.closing_day if closing_day is None else closing_day)
    metrics = compute_metrics(db, today, closed_at)
    return MonthlySnapshot(
        id=f"snapshot-{cycle.month}",
        cycle_month=cycle.month,
        cycle_start=cycle.start.isoformat(),
        cycle_end=cycle.end.isoformat(),
        closed_at=closed_at,
        total_properties=metrics.total_properties,
        total_tenants=metrics.occupied_count,
        total_collected=metrics.total_collected,
        total_cost=metrics.total_property_cost,
        total_target=metrics.total_target,
        profit=metrics.profit,
        occupancy_rate=metrics.occupancy_rate,
        company_summary=company_summary_rows(db),
        property_detail=property_report_rows(db, today),
        payroll_detail=payroll_deduction_rows(db),
    )
