"""Enrichment of normalized contacts, one at a time or in throttled batches."""

from .batch import BatchRunner
from .service import EnrichmentOrchestrator

__all__ = ["BatchRunner", "EnrichmentOrchestrator"]
