"""Data models shared by the ingestion, enrichment and export stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# --- Canonical contact schema ---

CANONICAL_FIELDS: Tuple[str, ...] = (
    "email",
    "first_name",
    "last_name",
    "company_name",
    "job_title",
    "phone",
    "linkedin_url",
    "industry",
    "location",
    "company_size",
)

FieldMapping = Dict[str, str]
"""Canonical field name -> source column name."""

NormalizedContact = Dict[str, Any]
"""Canonical field name -> value, possibly augmented with enrichment fields."""


class ColumnType(str, Enum):
    """Value type inferred for a source column."""

    EMAIL = "email"
    URL = "url"
    NUMBER = "number"
    DATE = "date"
    TEXT = "text"
    UNKNOWN = "unknown"


ColumnTypeMap = Dict[str, ColumnType]


# --- Ingestion results ---

@dataclass(frozen=True)
class ParsedTable:
    """Header, preview rows and row count of an uploaded delimited file."""

    headers: Tuple[str, ...]
    sample_rows: Tuple[Dict[str, str], ...]
    total_row_count: int
    delimiter: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "headers": list(self.headers),
            "sample_rows": [dict(row) for row in self.sample_rows],
            "total_row_count": self.total_row_count,
            "delimiter": self.delimiter,
        }


@dataclass(frozen=True)
class DataQualityReport:
    """Coarse quality score of a parsed upload."""

    overall_score: int
    issues: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
        }


# --- Enrichment results ---

@dataclass
class EnrichmentOutcome:
    """Result of enriching a single contact."""

    success: bool
    contact: NormalizedContact
    enrichment_details: Dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None

    @property
    def sources(self) -> List[str]:
        return list(self.enrichment_details)


@dataclass
class BatchError:
    """A contact (or a whole chunk) that could not be enriched."""

    error_message: str
    index: Optional[int] = None
    contact: Optional[NormalizedContact] = None
    batch: Optional[int] = None


@dataclass
class BatchResult:
    """Aggregated outcome of one batch enrichment run."""

    outcomes: List[EnrichmentOutcome] = field(default_factory=list)
    errors: List[BatchError] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return len(self.outcomes)

    @property
    def total_errors(self) -> int:
        return len(self.errors)


__all__ = [
    "CANONICAL_FIELDS",
    "BatchError",
    "BatchResult",
    "ColumnType",
    "ColumnTypeMap",
    "DataQualityReport",
    "EnrichmentOutcome",
    "FieldMapping",
    "NormalizedContact",
    "ParsedTable",
]
