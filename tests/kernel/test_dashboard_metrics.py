"""Metrics aggregator: KPIs over active properties, plus derived alerts."""

from datetime import date

from estate_kernel.domain.entities import Database, TenantStatus
from estate_kernel.domain.metrics import AlertSeverity, AlertType, compute_metrics

TODAY = date(2026, 1, 1)
TS = "2026-01-01T12:00:00+00:00"


class TestComputeMetrics:
    def test_empty_store(self):
        m = compute_metrics(Database(), TODAY, TS)
        assert m.total_properties == 0
        assert m.occupancy_rate == 0
        assert m.profit == 0
        assert m.alerts == ()

    def test_totals_over_active_properties(self, make_property, make_tenant):
        db = Database(
            properties=(
                make_property(id=1, capacity=2, rent_cost=50000, parking_cost=5000, rent_price_uns=80000),
                make_property(id=2, capacity=3, rent_cost=60000, rent_price_uns=90000),
                make_property(id=3, capacity=4, rent_cost=1, contract_end="2025-06-30"),  # expired
            ),
            tenants=(
                make_tenant(id=10, property_id=1, rent_contribution=40000, parking_fee=3000),
                make_tenant(id=11, property_id=2, employee_id="E2", rent_contribution=45000),
                make_tenant(id=12, property_id=2, employee_id="E3", rent_contribution=45000,
                            status=TenantStatus.INACTIVE),
            ),
        )
        m = compute_metrics(db, TODAY, TS)
        assert m.total_properties == 2
        assert m.total_capacity == 5
        assert m.occupied_count == 2
        assert m.occupancy_rate == 40
        assert m.total_collected == 88000
        assert m.total_property_cost == 115000
        assert m.total_target == 170000
        assert m.profit == 88000 - 115000

    def test_occupancy_rate_rounds_half_up(self, make_property, make_tenant):
        db = Database(
            properties=(make_property(id=1, capacity=8),),
            tenants=tuple(make_tenant(id=10 + i, employee_id=f"E{i}") for i in range(5)),
        )
        assert compute_metrics(db, TODAY, TS).occupancy_rate == 63  # 62.5

    def test_expiry_alert_severity(self, make_property):
        db = Database(properties=(
            make_property(id=1, name="Near", contract_end="2026-01-20"),
            make_property(id=2, name="Mid", contract_end="2026-02-20"),
            make_property(id=3, name="Far", contract_end="2026-06-01"),
            make_property(id=4, name="Open"),
            make_property(id=5, name="Unknown", contract_end="未定"),
        ))
        alerts = compute_metrics(db, TODAY, TS).alerts
        assert [(a.type, a.severity) for a in alerts] == [
            (AlertType.WARNING, AlertSeverity.HIGH),
            (AlertType.WARNING, AlertSeverity.MEDIUM),
        ]
        assert alerts[0].message == "Contract for Near ends in 19 days"
        assert alerts[1].message == "Contract for Mid ends in 50 days"
        assert all(a.timestamp == TS for a in alerts)

    def test_alert_window_boundaries(self, make_property):
        db = Database(properties=(
            make_property(id=1, name="Thirty", contract_end="2026-01-31"),
            make_property(id=2, name="Sixty", contract_end="2026-03-02"),
            make_property(id=3, name="SixtyOne", contract_end="2026-03-03"),
        ))
        alerts = compute_metrics(db, TODAY, TS).alerts
        assert [a.severity for a in alerts] == [AlertSeverity.HIGH, AlertSeverity.MEDIUM]

    def test_custom_alert_windows(self, make_property):
        db = Database(properties=(make_property(id=1, contract_end="2026-03-02"),))
        alerts = compute_metrics(db, TODAY, TS, warning_days=90, high_severity_days=60).alerts
        assert alerts[0].severity == AlertSeverity.HIGH

    def test_single_aggregate_zero_rent_alert(self, make_property, make_tenant):
        db = Database(
            properties=(make_property(id=1, capacity=5),),
            tenants=(
                make_tenant(id=10, rent_contribution=0),
                make_tenant(id=11, employee_id="E2", rent_contribution=0),
                make_tenant(id=12, employee_id="E3", rent_contribution=0, status=TenantStatus.INACTIVE),
                make_tenant(id=13, employee_id="E4", rent_contribution=30000),
            ),
        )
        alerts = compute_metrics(db, TODAY, TS).alerts
        assert len(alerts) == 1
        assert alerts[0].type == AlertType.DANGER
        assert alerts[0].message == "2 tenant(s) without rent configured"

    def test_pure(self, make_property, make_tenant):
        db = Database(properties=(make_property(id=1),), tenants=(make_tenant(),))
        assert compute_metrics(db, TODAY, TS) == compute_metrics(db, TODAY, TS)
