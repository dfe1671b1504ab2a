"""Contact list ingestion and enrichment pipeline for the reseller portal."""

from . import models  # noqa: F401
from .models import (
    CANONICAL_FIELDS,
    BatchError,
    BatchResult,
    ColumnType,
    DataQualityReport,
    EnrichmentOutcome,
    ParsedTable,
)
from .orchestrator import BatchRunner, EnrichmentOrchestrator
from .pipeline import UploadPreview, preview_upload, run_enrichment_job

__all__ = [
    "CANONICAL_FIELDS",
    "BatchError",
    "BatchResult",
    "BatchRunner",
    "ColumnType",
    "DataQualityReport",
    "EnrichmentOrchestrator",
    "EnrichmentOutcome",
    "ParsedTable",
    "UploadPreview",
    "preview_upload",
    "run_enrichment_job",
    "ingestion",
    "lookups",
    "orchestrator",
]
