"""Canonical store serialization and the persistent store adapters."""

import json

import pytest

from estate_kernel.domain.entities import Config, Database, TenantStatus, default_database
from estate_kernel.exceptions import StoreCorruptedError
from estate_kernel.store import serialization
from estate_kernel.store.base import DEFAULT_STORAGE_KEY, InMemoryStore, PersistentStore
from estate_kernel.store.sqlalchemy_store import SqlAlchemyStore


@pytest.fixture
def populated(make_property, make_tenant, make_employee):
    return Database(
        properties=(make_property(id=1, contract_end="2026-03-31"),),
        tenants=(make_tenant(id=2, property_id=1, status=TenantStatus.INACTIVE),),
        employees=(make_employee(id="E001", company="Toyota", full_data={"社員No": "E001"}),),
        config=Config(company_name="ACME", closing_day=20),
        last_sync="2026-01-01T12:00:00+00:00",
    )


class TestSerialization:
    def test_blob_layout(self, populated):
        data = json.loads(serialization.dumps(populated))
        assert set(data) == {"properties", "tenants", "employees", "config", "version", "last_sync"}
        assert data["config"] == {"companyName": "ACME", "closingDay": 20}
        assert data["version"] == "7.0"
        assert data["tenants"][0]["status"] == "inactive"
        assert data["properties"][0]["rent_price_uns"] == 80000

    def test_loads_restores_equal_database(self, populated):
        assert serialization.loads(serialization.dumps(populated)) == populated

    def test_unknown_keys_ignored(self):
        payload = json.dumps({
            "properties": [{"id": 1, "name": "Sakura", "legacy_field": True}],
            "tenants": [],
        })
        db = serialization.loads(payload)
        assert db.properties[0].name == "Sakura"
        assert db.config == Config()

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            "[]",
            json.dumps({"properties": []}),
            json.dumps({"properties": [{"name": "no id"}], "tenants": []}),
            json.dumps({"properties": ["oops"], "tenants": []}),
            json.dumps({"properties": [], "tenants": [{"id": 1, "employee_id": "E", "name": "A",
                                                       "name_kana": "A", "property_id": 1,
                                                       "status": "moved"}]}),
            json.dumps({"properties": [], "tenants": [], "config": "x"}),
            json.dumps({"properties": [], "tenants": [], "config": {"closingDay": 7}}),
            json.dumps({"properties": [], "tenants": [], "config": {"closingDay": "15"}}),
            json.dumps({"properties": [], "tenants": [], "config": {"companyName": 3}}),
            json.dumps({"properties": [{"id": 1, "name": "Sakura", "capacity": "two"}], "tenants": []}),
            json.dumps({"properties": [{"id": "1", "name": "Sakura"}], "tenants": []}),
            json.dumps({"properties": [{"id": 1, "name": "Sakura", "rent_cost": True}], "tenants": []}),
            json.dumps({"properties": [], "tenants": [], "employees": [{"id": 5, "name": "A"}]}),
        ],
    )
    def test_bad_payloads_raise_value_error(self, payload):
        with pytest.raises(ValueError):
            serialization.loads(payload)

    def test_null_config_and_optional_fields_accepted(self):
        payload = json.dumps({
            "properties": [{"id": 1, "name": "Sakura", "contract_end": None, "created_at": None}],
            "tenants": [],
            "config": None,
        })
        db = serialization.loads(payload)
        assert db.properties[0].contract_end is None
        assert db.config == Config()


class TestInMemoryStore:
    def test_empty_slot_loads_none(self):
        store = InMemoryStore()
        assert store.storage_key == DEFAULT_STORAGE_KEY
        assert store.load() is None

    def test_save_then_load(self, populated):
        store = InMemoryStore()
        store.save(populated)
        assert store.load() == populated
        assert json.loads(store.raw)["config"]["companyName"] == "ACME"

    def test_corrupt_payload(self):
        store = InMemoryStore(payload="{broken")
        with pytest.raises(StoreCorruptedError) as exc:
            store.load()
        assert exc.value.storage_key == DEFAULT_STORAGE_KEY
        assert exc.value.code == "STORE_CORRUPTED"

    def test_mistyped_config_is_corruption(self):
        store = InMemoryStore(payload=json.dumps({"properties": [], "tenants": [], "config": "x"}))
        with pytest.raises(StoreCorruptedError):
            store.load()

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryStore(), PersistentStore)


class TestSqlAlchemyStore:
    def test_empty_slot(self, sqlite_session_factory):
        assert SqlAlchemyStore(sqlite_session_factory).load() is None

    def test_save_load_and_overwrite(self, sqlite_session_factory, populated):
        store = SqlAlchemyStore(sqlite_session_factory)
        store.save(populated)
        assert store.load() == populated

        emptied = default_database(company_name="ACME")
        store.save(emptied)
        assert store.load() == emptied

    def test_slots_are_keyed(self, sqlite_session_factory, populated):
        SqlAlchemyStore(sqlite_session_factory, "a").save(populated)
        assert SqlAlchemyStore(sqlite_session_factory, "b").load() is None

    def test_corrupt_row(self, sqlite_session_factory):
        from estate_kernel.db.engine import session_scope
        from estate_kernel.db.models import StoreSlotModel

        with session_scope(sqlite_session_factory) as session:
            session.add(StoreSlotModel(key=DEFAULT_STORAGE_KEY, version="7.0", payload='{"nope": 1}'))

        with pytest.raises(StoreCorruptedError):
            SqlAlchemyStore(sqlite_session_factory).load()

    def test_from_url(self):
        store = SqlAlchemyStore.from_url("sqlite:///:memory:", storage_key="k")
        assert store.storage_key == "k"
        assert store.load() is None
