"""
ORM model for the persistent store slot.

Contract:
    One row per storage key. ``payload`` is the serialized Database
    (``estate_kernel.store.serialization``); ``version`` copies the schema
    version tag so a blob can be identified without decoding it.
"""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from estate_kernel.db.base import TrackedBase


class StoreSlotModel(TrackedBase):
    """Key-value slot holding one serialized canonical store."""

    __tablename__ = "estate_store_slots"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    version: Mapped[str] = mapped_column(String(20), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
