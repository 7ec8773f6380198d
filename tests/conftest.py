"""
Pytest fixtures for the estate ledger test suite.

Provides:
- Structured logging configured once per session, LogContext cleared per test
- A deterministic clock pinned to 2026-01-01 12:00 UTC
- The default configuration and import vocabulary
- Entity factories and a recording notifier
- In-memory SQLite session factories for the SQLAlchemy store
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest

from estate_config import get_active_config
from estate_kernel.db.engine import create_store_engine, get_session_factory
from estate_kernel.domain.clock import DeterministicClock
from estate_kernel.domain.entities import Employee, Property, Tenant, TenantStatus
from estate_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

FIXED_NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture estate_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "import_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("estate_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Time and config
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def estate_config():
    return get_active_config()


@pytest.fixture
def vocabulary(estate_config):
    return estate_config.vocabulary


# =============================================================================
# Entity factories
# =============================================================================


@pytest.fixture
def make_property():
    def _make(id: int = 1, name: str = "Sakura", **overrides) -> Property:
        fields = {
            "address": "愛知県名古屋市中区栄1-1-1",
            "capacity": 2,
            "rent_cost": 50000,
            "rent_price_uns": 80000,
        }
        fields.update(overrides)
        return Property(id=id, name=name, **fields)

    return _make


@pytest.fixture
def make_tenant():
    def _make(
        id: int = 100,
        property_id: int = 1,
        employee_id: str = "E001",
        status: TenantStatus = TenantStatus.ACTIVE,
        **overrides,
    ) -> Tenant:
        fields = {
            "name": "田中 太郎",
            "name_kana": "タナカ タロウ",
            "rent_contribution": 40000,
            "entry_date": "2025-04-01",
        }
        fields.update(overrides)
        return Tenant(
            id=id,
            employee_id=employee_id,
            property_id=property_id,
            status=status,
            **fields,
        )

    return _make


@pytest.fixture
def make_employee():
    def _make(id: str = "E001", name: str = "田中 太郎", **overrides) -> Employee:
        return Employee(id=id, name=name, **overrides)

    return _make


# =============================================================================
# Notifier
# =============================================================================


class RecordingNotifier:
    """Notifier that keeps every call for assertions."""

    def __init__(self):
        self.calls: list[tuple[str, str, str]] = []

    def notify(self, kind, title, message, duration_ms=None) -> None:
        self.calls.append((getattr(kind, "value", kind), title, message))

    def kinds(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


# =============================================================================
# SQLite store infrastructure
# =============================================================================


@pytest.fixture
def sqlite_session_factory():
    """Fresh in-memory SQLite database with the store tables created."""
    engine = create_store_engine("sqlite:///:memory:")
    factory = get_session_factory(engine)
    yield factory
    engine.dispose()
