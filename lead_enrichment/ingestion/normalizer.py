"""Projection of raw upload rows onto the canonical contact schema."""
from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Mapping

from ..models import CANONICAL_FIELDS, FieldMapping, NormalizedContact


class NormalizationErrorReason(str, Enum):
    EMPTY_MAPPING = "empty_mapping"
    UNKNOWN_FIELD = "unknown_field"
    NO_RECORDS = "no_records"
    TOO_MANY_RECORDS = "too_many_records"


class NormalizationError(ValueError):
    """Raised when rows cannot be normalized into contacts."""

    def __init__(self, reason: NormalizationErrorReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


def validate_mapping(mapping: Mapping[str, str]) -> FieldMapping:
    """Return a clean copy of ``mapping`` or raise :class:`NormalizationError`.

    Entries with an empty source column are dropped, which is how a user
    un-assigns a suggested column.
    """

    cleaned = {field: column for field, column in mapping.items() if column}
    if not cleaned:
        raise NormalizationError(
            NormalizationErrorReason.EMPTY_MAPPING,
            "At least one column mapping is required",
        )
    unknown = sorted(field for field in cleaned if field not in CANONICAL_FIELDS)
    if unknown:
        raise NormalizationError(
            NormalizationErrorReason.UNKNOWN_FIELD,
            f"Unknown contact fields in mapping: {', '.join(unknown)}",
        )
    return cleaned


def normalize(rows: Iterable[Mapping[str, str]], mapping: Mapping[str, str]) -> List[NormalizedContact]:
    """Build one contact per row holding only the mapped columns present in it."""

    field_mapping = validate_mapping(mapping)
    contacts: List[NormalizedContact] = []
    for row in rows:
        contact: NormalizedContact = {}
        for field, column in field_mapping.items():
            if column in row:
                contact[field] = row[column]
        contacts.append(contact)
    return contacts


__all__ = [
    "NormalizationError",
    "NormalizationErrorReason",
    "normalize",
    "validate_mapping",
]
