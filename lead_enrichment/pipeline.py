"""End-to-end helpers: preview an upload, then enrich every row of it."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .config import BatchSettings
from .ingestion.normalizer import NormalizationError, NormalizationErrorReason, normalize, validate_mapping
from .ingestion.parser import parse, read_rows
from .ingestion.quality import assess
from .ingestion.schema import infer_types, suggest_mapping
from .models import BatchResult, ColumnTypeMap, DataQualityReport, FieldMapping, ParsedTable
from .orchestrator.batch import BatchRunner, ProgressCallback
from .orchestrator.service import EnrichmentOrchestrator

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadPreview:
    """Everything shown to a user before they confirm the column mapping."""

    table: ParsedTable
    suggested_mapping: FieldMapping
    data_quality: DataQualityReport
    column_types: ColumnTypeMap

    def as_dict(self) -> Dict[str, Any]:
        data = self.table.as_dict()
        data.update(
            {
                "suggested_mapping": dict(self.suggested_mapping),
                "data_quality": self.data_quality.as_dict(),
                "column_types": {header: kind.value for header, kind in self.column_types.items()},
            }
        )
        return data


def preview_upload(raw_text: str) -> UploadPreview:
    """Parse ``raw_text`` and run every inference over its sample."""

    table = parse(raw_text)
    return UploadPreview(
        table=table,
        suggested_mapping=suggest_mapping(table.headers),
        data_quality=assess(table),
        column_types=infer_types(table),
    )


async def run_enrichment_job(
    raw_text: str,
    mapping: Mapping[str, str],
    orchestrator: EnrichmentOrchestrator,
    settings: Optional[BatchSettings] = None,
    *,
    runner: Optional[BatchRunner] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> BatchResult:
    """Normalize every row of an upload and enrich it in batches.

    Parse and normalization problems are raised before any lookup happens;
    once enrichment starts, failures are reported in the returned result.
    """

    settings = settings or BatchSettings()
    field_mapping = validate_mapping(mapping)
    contacts = normalize(read_rows(raw_text), field_mapping)

    if not contacts:
        raise NormalizationError(
            NormalizationErrorReason.NO_RECORDS,
            "No valid data found after column mapping",
        )
    if len(contacts) > settings.max_records:
        raise NormalizationError(
            NormalizationErrorReason.TOO_MANY_RECORDS,
            f"Upload holds {len(contacts)} records; the limit is {settings.max_records}",
        )

    runner = runner or BatchRunner(orchestrator.enrich_contact, delay_seconds=settings.delay_seconds)
    LOGGER.info("Enriching %s contacts in batches of %s", len(contacts), settings.batch_size)
    result = await runner.enrich_batch(contacts, settings.batch_size, progress_callback=progress_callback)
    LOGGER.info("Enrichment finished: %s enriched, %s errors", result.total_processed, result.total_errors)
    return result


__all__ = ["UploadPreview", "preview_upload", "run_enrichment_job"]
