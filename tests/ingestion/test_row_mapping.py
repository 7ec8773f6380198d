"""Mapping engine: column aliases and sheet defaults."""

from datetime import date

from estate_ingestion.mapping.engine import (
    SheetRow,
    map_employee_row,
    map_property_row,
    map_tenant_row,
    sheet_rows,
)


class TestSheetRow:
    def test_first_present_alias_wins(self):
        row = SheetRow(row=1, values={"物件名": "Sakura", "ｱﾊﾟｰﾄ": "Momiji"})
        assert row.get(["ｱﾊﾟｰﾄ", "物件名"]) == "Momiji"

    def test_blank_alias_skipped(self):
        row = SheetRow(row=1, values={"ｱﾊﾟｰﾄ": "  ", "物件名": "Sakura"})
        assert row.get(["ｱﾊﾟｰﾄ", "物件名"]) == "Sakura"

    def test_absent_is_none(self):
        assert SheetRow(row=1, values={}).get(["x"]) is None

    def test_zero_is_a_value(self):
        assert SheetRow(row=1, values={"n": 0}).get(["n"]) == 0


def test_sheet_rows_are_numbered_from_one():
    assert [r.row for r in sheet_rows([{}, {}, {}])] == [1, 2, 3]


class TestMapPropertyRow:
    def test_aliases(self, vocabulary):
        row = SheetRow(1, {"ｱﾊﾟｰﾄ": "Sakura", "入居人数": 3, "家賃": 50000, "USN家賃": 80000, "契約終了": "2026/03/31"})
        payload = map_property_row(row, vocabulary.columns.property, vocabulary.default_capacity)
        assert payload["name"] == "Sakura"
        assert payload["capacity"] == 3
        assert payload["rent_cost"] == 50000
        assert payload["rent_price_uns"] == 80000
        assert payload["contract_end"] == "2026/03/31"
        assert payload["address"] is None

    def test_blank_or_zero_capacity_defaults(self, vocabulary):
        for raw in ("", 0, "0", "?"):
            row = SheetRow(1, {"ｱﾊﾟｰﾄ": "Sakura", "入居人数": raw})
            payload = map_property_row(row, vocabulary.columns.property, vocabulary.default_capacity)
            assert payload["capacity"] == 2


class TestMapTenantRow:
    def test_defaults_for_code_and_entry_date(self, vocabulary):
        row = SheetRow(4, {"ｱﾊﾟｰﾄ": "Sakura", "カナ": "タナカ"})
        payload = map_tenant_row(
            row, vocabulary.columns.tenant, employee_prefix="IMP-", today=date(2026, 1, 1),
        )
        assert payload["employee_id"] == "IMP-4"
        assert payload["entry_date"] == "2026-01-01"
        assert payload["property_name"] == "Sakura"

    def test_values_kept_when_present(self, vocabulary):
        row = SheetRow(1, {"物件名": " Sakura ", "社員№": 1234, "入居日": "2025/04/01", "家賃": 40000})
        payload = map_tenant_row(
            row, vocabulary.columns.tenant, employee_prefix="IMP-", today=date(2026, 1, 1),
        )
        assert payload["employee_id"] == 1234
        assert payload["entry_date"] == "2025/04/01"
        assert payload["property_name"] == "Sakura"
        assert payload["rent_contribution"] == 40000


def test_employee_row_keeps_full_data(vocabulary):
    raw = {"社員No": "E1", "氏名": "Tanaka", "派遣先": "Toyota", "時給": 1500}
    payload = map_employee_row(SheetRow(1, raw), vocabulary.columns.employee)
    assert payload["id"] == "E1"
    assert payload["company"] == "Toyota"
    assert payload["full_data"] == raw
