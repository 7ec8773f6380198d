"""
Date policy: tri-state parsing, property activeness, billing cycles.

The activeness rule is fail-open and lives in exactly one place,
``is_property_active``: a contract end that is missing or cannot be parsed
leaves the property active. Parsing never raises; it reports one of
VALID / MISSING / UNPARSEABLE and the caller decides.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any

from estate_kernel.domain.entities import CLOSING_DAYS, Property

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%Y年%m月%d日",
    "%m/%d/%Y",
)


class DateState(str, Enum):
    VALID = "valid"
    MISSING = "missing"
    UNPARSEABLE = "unparseable"


@dataclass(frozen=True)
class DateParse:
    """Result of parsing a date-ish cell value."""

    state: DateState
    value: date | None = None
    raw: Any = None

    @property
    def is_valid(self) -> bool:
        return self.state == DateState.VALID


def parse_date(value: Any) -> DateParse:
    """Parse a cell or field value into a date without raising."""
    if value is None:
        return DateParse(DateState.MISSING)
    if isinstance(value, datetime):
        return DateParse(DateState.VALID, value.date(), value)
    if isinstance(value, date):
        return DateParse(DateState.VALID, value, value)
    s = str(value).strip()
    if not s:
        return DateParse(DateState.MISSING, raw=value)
    for fmt in _DATE_FORMATS:
        try:
            return DateParse(DateState.VALID, datetime.strptime(s, fmt).date(), value)
        except ValueError:
            continue
    try:
        return DateParse(DateState.VALID, datetime.fromisoformat(s.replace("Z", "+00:00")).date(), value)
    except ValueError:
        return DateParse(DateState.UNPARSEABLE, raw=value)


def to_iso(value: Any) -> str | None:
    """Normalize a date-ish value to ``YYYY-MM-DD``; unparseable text is kept verbatim."""
    parsed = parse_date(value)
    if parsed.state == DateState.MISSING:
        return None
    if parsed.is_valid:
        return parsed.value.isoformat()
    return str(value).strip()


def is_property_active(prop: Property, today: date) -> bool:
    """Active iff contract_end is absent, unparseable, or strictly after today."""
    end = parse_date(prop.contract_end)
    if not end.is_valid:
        return True
    return end.value > today


def days_until(target: date, today: date) -> int:
    """Whole calendar days from today to target (negative when past)."""
    return (target - today).days


# -----------------------------------------------------------------------------
# Billing cycle
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class BillingCycle:
    start: date
    end: date
    month: str  # YYYY-MM of the cycle end
    closing_day: int


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def billing_cycle(today: date, closing_day: int) -> BillingCycle:
    """
    Billing period containing ``today``.

    closing_day 0 bills by calendar month. Otherwise a cycle closes on
    ``closing_day`` and the next one opens the day after.
    """
    if closing_day not in CLOSING_DAYS:
        raise ValueError(f"closing_day must be one of {CLOSING_DAYS}, got {closing_day!r}")

    if closing_day == 0:
        last = calendar.monthrange(today.year, today.month)[1]
        start = today.replace(day=1)
        end = today.replace(day=last)
    else:
        if today.day <= closing_day:
            end = today.replace(day=closing_day)
        else:
            y, m = _shift_month(today.year, today.month, 1)
            end = date(y, m, closing_day)
        py, pm = _shift_month(end.year, end.month, -1)
        start = date(py, pm, closing_day) + timedelta(days=1)

    return BillingCycle(start=start, end=end, month=end.strftime("%Y-%m"), closing_day=closing_day)
