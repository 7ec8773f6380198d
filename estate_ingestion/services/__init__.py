"""Ingestion services: the import pipelines and the merge engine."""

from estate_ingestion.services.import_service import ImportService
from estate_ingestion.services.merge_service import MergeCounts, MergeOutcome, MergeService

__all__ = [
    "ImportService",
    "MergeCounts",
    "MergeOutcome",
    "MergeService",
]
