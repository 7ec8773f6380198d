"""
Persistent store protocol and the in-memory implementation.

Contract:
    PersistentStore.load() returns the stored Database, or None when the
    slot is empty. PersistentStore.save() replaces the slot with the whole
    aggregate. There are no partial writes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from estate_kernel.domain.entities import Database
from estate_kernel.exceptions import StoreCorruptedError
from estate_kernel.store import serialization

DEFAULT_STORAGE_KEY = "uns_db_v7_0"


@runtime_checkable
class PersistentStore(Protocol):
    """Blocking key-value slot holding one serialized Database."""

    @property
    def storage_key(self) -> str:
        ...

    def load(self) -> Database | None:
        """Stored Database, or None if nothing is stored. Raises StoreCorruptedError."""
        ...

    def save(self, db: Database) -> None:
        ...


class InMemoryStore:
    """
    Dict-backed store. Keeps the serialized blob rather than the object so
    a save/load cycle goes through the same encoding as a durable store.
    """

    def __init__(self, storage_key: str = DEFAULT_STORAGE_KEY, payload: str | None = None):
        self._storage_key = storage_key
        self._slots: dict[str, str] = {}
        if payload is not None:
            self._slots[storage_key] = payload

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def raw(self) -> str | None:
        return self._slots.get(self._storage_key)

    def load(self) -> Database | None:
        payload = self._slots.get(self._storage_key)
        if payload is None:
            return None
        try:
            return serialization.loads(payload)
        except ValueError as e:
            raise StoreCorruptedError(self._storage_key, str(e)) from e

    def save(self, db: Database) -> None:
        self._slots[self._storage_key] = serialization.dumps(db)
