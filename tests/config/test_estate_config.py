"""Configuration: YAML loading, schema checks, the active-config entrypoint."""

import copy
from pathlib import Path

import pytest
import yaml

import estate_config
from estate_config import get_active_config
from estate_config.loader import compute_checksum, load_config, load_yaml_file, parse_config
from estate_kernel.exceptions import InvalidConfigError

DEFAULTS = Path(estate_config.__file__).parent / "defaults" / "estate.yaml"


@pytest.fixture
def raw():
    return load_yaml_file(DEFAULTS)


class TestDefaults:
    def test_company_and_store(self, estate_config):
        assert estate_config.company_name == "UNS-KIKAKU"
        assert estate_config.closing_day == 0
        assert estate_config.store.storage_key == "uns_db_v7_0"
        assert estate_config.store.schema_version == "7.0"
        assert estate_config.alerts.contract_warning_days == 60
        assert estate_config.alerts.contract_high_severity_days == 30

    def test_vocabulary(self, vocabulary):
        assert "Genzai" in vocabulary.sheet_markers.employee
        assert "物件" in vocabulary.sheet_markers.property
        assert "入居" in vocabulary.sheet_markers.tenant
        assert vocabulary.columns.property["name"] == ("ｱﾊﾟｰﾄ", "物件名")
        assert vocabulary.columns.property["rent_price_uns"] == ("USN家賃", "UNS家賃")
        assert vocabulary.columns.tenant["name_kana"] == ("カナ",)
        assert vocabulary.default_capacity == 2
        assert vocabulary.imported_employee_prefix == "IMP-"

    def test_checksum_is_stable(self, raw, estate_config):
        assert estate_config.checksum == compute_checksum(raw)
        assert len(estate_config.checksum) == 64


def test_active_config_is_traced(captured_logs):
    get_active_config()
    trace = [r for r in captured_logs() if r["message"] == "ESTATE_CONFIG_TRACE"]
    assert trace
    assert trace[-1]["storage_key"] == "uns_db_v7_0"


def test_load_config_from_custom_file(raw, tmp_path):
    custom = copy.deepcopy(raw)
    custom["company"] = {"name": "ACME", "closing_day": 25}
    path = tmp_path / "estate.yaml"
    path.write_text(yaml.safe_dump(custom, allow_unicode=True), encoding="utf-8")

    config = load_config(path)

    assert config.company_name == "ACME"
    assert config.closing_day == 25
    assert config.checksum != compute_checksum(raw)


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config(Path("/nonexistent/estate.yaml"))


class TestSchemaChecks:
    def test_bad_closing_day(self, raw):
        raw["company"]["closing_day"] = 31
        with pytest.raises(InvalidConfigError, match="closing_day"):
            parse_config(raw)

    def test_import_section_required(self, raw):
        del raw["import"]
        with pytest.raises(InvalidConfigError):
            parse_config(raw)

    def test_marker_lists_must_be_non_empty(self, raw):
        raw["import"]["sheet_markers"]["tenant"] = []
        with pytest.raises(InvalidConfigError, match="sheet_markers.tenant"):
            parse_config(raw)

    def test_required_column_aliases(self, raw):
        del raw["import"]["columns"]["tenant"]["name_kana"]
        with pytest.raises(InvalidConfigError, match="columns.tenant.name_kana"):
            parse_config(raw)

    def test_single_header_string_accepted(self, raw):
        raw["import"]["columns"]["property"]["address"] = "住所"
        config = parse_config(raw)
        assert config.vocabulary.columns.property["address"] == ("住所",)

    def test_alert_windows_ordered(self, raw):
        raw["alerts"] = {"contract_warning_days": 20, "contract_high_severity_days": 30}
        with pytest.raises(InvalidConfigError):
            parse_config(raw)

    def test_error_code(self, raw):
        raw["import"]["default_capacity"] = 0
        with pytest.raises(InvalidConfigError) as exc:
            parse_config(raw, source="test.yaml")
        assert exc.value.code == "INVALID_CONFIG"
        assert exc.value.source == "test.yaml"
