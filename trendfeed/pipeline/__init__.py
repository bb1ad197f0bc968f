"""Article collection pipeline."""

from .orchestrator import (
    CollectionOrchestrator,
    CollectionSummary,
    SourceProgress,
    SourceRunSummary,
    print_collection_summary,
)

__all__ = [
    "CollectionOrchestrator",
    "CollectionSummary",
    "SourceProgress",
    "SourceRunSummary",
    "print_collection_summary",
]
