"""Database layer - engine, declarative base, and the store slot table."""

from estate_kernel.db.base import Base, TrackedBase
from estate_kernel.db.engine import create_store_engine, create_tables, get_session_factory, session_scope

__all__ = [
    "Base",
    "TrackedBase",
    "create_store_engine",
    "create_tables",
    "get_session_factory",
    "session_scope",
]
