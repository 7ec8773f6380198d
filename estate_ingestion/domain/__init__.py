"""
estate_ingestion.domain -- Pure types and the sheet classifier.

ZERO I/O.
"""

from estate_ingestion.domain.classifier import classify_sheets
from estate_ingestion.domain.types import (
    CandidateSet,
    Classification,
    ImportKind,
    ImportResult,
    RowError,
)

__all__ = [
    "CandidateSet",
    "Classification",
    "ImportKind",
    "ImportResult",
    "RowError",
    "classify_sheets",
]
