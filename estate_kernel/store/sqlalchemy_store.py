"""
SQLAlchemy-backed persistent store: one table, one row per storage key.

The row is read and replaced whole; the canonical store is never written
piecemeal.
"""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from estate_kernel.db.engine import create_store_engine, get_session_factory, session_scope
from estate_kernel.db.models import StoreSlotModel
from estate_kernel.domain.entities import Database
from estate_kernel.exceptions import StoreCorruptedError
from estate_kernel.logging_config import get_logger
from estate_kernel.store import serialization
from estate_kernel.store.base import DEFAULT_STORAGE_KEY

logger = get_logger("store.sqlalchemy")


class SqlAlchemyStore:
    """PersistentStore over a SQLAlchemy session factory."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        storage_key: str = DEFAULT_STORAGE_KEY,
    ):
        self._factory = session_factory
        self._storage_key = storage_key

    @classmethod
    def from_url(cls, database_url: str, storage_key: str = DEFAULT_STORAGE_KEY) -> SqlAlchemyStore:
        engine = create_store_engine(database_url)
        return cls(get_session_factory(engine), storage_key)

    @property
    def storage_key(self) -> str:
        return self._storage_key

    def load(self) -> Database | None:
        with session_scope(self._factory) as session:
            slot = session.get(StoreSlotModel, self._storage_key)
            payload = slot.payload if slot is not None else None
        if payload is None:
            logger.debug("store_slot_empty", extra={"storage_key": self._storage_key})
            return None
        try:
            return serialization.loads(payload)
        except ValueError as e:
            raise StoreCorruptedError(self._storage_key, str(e)) from e

    def save(self, db: Database) -> None:
        payload = serialization.dumps(db)
        with session_scope(self._factory) as session:
            slot = session.get(StoreSlotModel, self._storage_key)
            if slot is None:
                session.add(StoreSlotModel(key=self._storage_key, version=db.version, payload=payload))
            else:
                slot.version = db.version
                slot.payload = payload
        logger.debug(
            "store_saved",
            extra={
                "storage_key": self._storage_key,
                "properties": len(db.properties),
                "tenants": len(db.tenants),
                "employees": len(db.employees),
            },
        )
