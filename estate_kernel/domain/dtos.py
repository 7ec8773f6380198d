"""
Shared result DTOs for the estate kernel.

Everything here is a frozen dataclass. These are the error and result
representations that cross component boundaries; none of them raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """
    A single field-level validation error.

    Contract:
        Carries a machine-readable code, human-readable message, optional field
        name, and optional details dict. Produced by the row schemas and the
        CRUD surface.

    Non-goals:
        - Does NOT raise exceptions -- it IS the error representation.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True)
class MutationResult:
    """
    Outcome of one CRUD mutation.

    ``errors`` holds field-level violations from re-validation; ``error`` holds
    a single operational message (entity not found, duplicate assignment).
    ``entity_id`` is the id of the created or changed entity, when there is one.
    """

    success: bool
    errors: tuple[ValidationError, ...] = ()
    error: str | None = None
    count: int | None = None
    entity_id: int | str | None = None

    @classmethod
    def ok(cls, count: int | None = None, entity_id: int | str | None = None) -> MutationResult:
        return cls(success=True, count=count, entity_id=entity_id)

    @classmethod
    def invalid(cls, errors: tuple[ValidationError, ...]) -> MutationResult:
        return cls(success=False, errors=tuple(errors))

    @classmethod
    def failed(cls, error: str) -> MutationResult:
        return cls(success=False, error=error)
