"""Date parsing, the fail-open activeness law, and billing cycles."""

from datetime import date, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from estate_kernel.domain.dates import (
    DateState,
    billing_cycle,
    days_until,
    is_property_active,
    parse_date,
    to_iso,
)
from estate_kernel.domain.entities import Property

TODAY = date(2026, 1, 1)


def _prop(contract_end) -> Property:
    return Property(id=1, name="Sakura", contract_end=contract_end)


class TestParseDate:
    @pytest.mark.parametrize(
        "raw",
        ["2026-03-31", "2026/03/31", "2026.03.31", "2026年3月31日", "03/31/2026", "2026-03-31T00:00:00Z"],
    )
    def test_accepted_formats(self, raw):
        parsed = parse_date(raw)
        assert parsed.state == DateState.VALID
        assert parsed.value == date(2026, 3, 31)

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing(self, raw):
        assert parse_date(raw).state == DateState.MISSING

    @pytest.mark.parametrize("raw", ["未定", "2026-13-45", "soon"])
    def test_unparseable(self, raw):
        assert parse_date(raw).state == DateState.UNPARSEABLE

    def test_date_objects_pass_through(self):
        assert parse_date(date(2025, 5, 5)).value == date(2025, 5, 5)

    def test_to_iso(self):
        assert to_iso("2026/01/02") == "2026-01-02"
        assert to_iso(None) is None
        assert to_iso(" 未定 ") == "未定"


class TestIsPropertyActive:
    def test_absent_end_is_active(self):
        assert is_property_active(_prop(None), TODAY)

    def test_unparseable_end_is_active(self):
        assert is_property_active(_prop("not a date"), TODAY)

    def test_future_end_is_active(self):
        assert is_property_active(_prop("2026-01-02"), TODAY)

    def test_end_today_is_inactive(self):
        assert not is_property_active(_prop("2026-01-01"), TODAY)

    def test_past_end_is_inactive(self):
        assert not is_property_active(_prop("2025-12-31"), TODAY)

    @given(st.text().filter(lambda s: parse_date(s).state != DateState.VALID))
    def test_fail_open_for_any_unparseable_text(self, raw):
        assert is_property_active(_prop(raw), TODAY)

    @given(st.dates(min_value=date(1900, 1, 1), max_value=date(2200, 12, 31)))
    def test_valid_end_active_iff_strictly_future(self, end):
        assert is_property_active(_prop(end.isoformat()), TODAY) == (end > TODAY)


def test_days_until():
    assert days_until(TODAY + timedelta(days=30), TODAY) == 30
    assert days_until(TODAY - timedelta(days=1), TODAY) == -1


class TestBillingCycle:
    def test_calendar_month_when_closing_day_zero(self):
        cycle = billing_cycle(date(2026, 2, 10), 0)
        assert cycle.start == date(2026, 2, 1)
        assert cycle.end == date(2026, 2, 28)
        assert cycle.month == "2026-02"

    def test_before_closing_day_ends_this_month(self):
        cycle = billing_cycle(date(2026, 3, 10), 20)
        assert cycle.start == date(2026, 2, 21)
        assert cycle.end == date(2026, 3, 20)
        assert cycle.month == "2026-03"

    def test_on_closing_day_ends_today(self):
        cycle = billing_cycle(date(2026, 3, 15), 15)
        assert cycle.end == date(2026, 3, 15)

    def test_after_closing_day_rolls_into_next_month(self):
        cycle = billing_cycle(date(2025, 12, 26), 25)
        assert cycle.start == date(2025, 12, 26)
        assert cycle.end == date(2026, 1, 25)
        assert cycle.month == "2026-01"

    def test_invalid_closing_day(self):
        with pytest.raises(ValueError):
            billing_cycle(TODAY, 31)

    @given(st.dates(min_value=date(2000, 1, 1), max_value=date(2100, 12, 31)), st.sampled_from([0, 15, 20, 25]))
    def test_today_inside_its_cycle(self, today, closing_day):
        cycle = billing_cycle(today, closing_day)
        assert cycle.start <= today <= cycle.end
