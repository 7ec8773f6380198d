"""
estate_services -- Package init and public API.

Responsibility:
    Stateful orchestration over the pure kernel and the ingestion pipeline:
    the CRUD surface that owns the canonical store, and the notifier sink.

Architecture position:
    Services -- the top layer.

    Dependency direction (enforced by tests/architecture/test_layer_boundary.py):
        estate_services/  -> estate_ingestion/, estate_kernel/, estate_config/  (allowed)
        estate_kernel/    -> estate_services/, estate_ingestion/, estate_config/ (FORBIDDEN)
        estate_ingestion/ -> estate_services/                                   (FORBIDDEN)
"""

from estate_services.database_service import DatabaseService
from estate_services.notifier import LoggingNotifier, NotificationKind, Notifier

__all__ = [
    "DatabaseService",
    "LoggingNotifier",
    "NotificationKind",
    "Notifier",
]
