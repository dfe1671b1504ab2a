"""Heuristics that map upload columns onto the canonical contact schema."""
from __future__ import annotations

import math
import re
import warnings
from typing import Iterable, List, Mapping, Sequence, Tuple
from urllib.parse import urlparse

import pandas as pd

from ..models import ColumnType, ColumnTypeMap, FieldMapping, ParsedTable

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_HEADER_STRIP_RE = re.compile(r"[^a-z0-9_\s]")

# Evaluated in order; the first field with a matching pattern claims the header.
FIELD_PATTERNS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("email", ("email", "e-mail", "email_address", "mail", "email address")),
    ("first_name", ("first_name", "firstname", "first name", "fname", "given_name")),
    ("last_name", ("last_name", "lastname", "last name", "lname", "surname", "family_name")),
    ("company_name", ("company", "company_name", "organization", "org", "business", "company name")),
    ("job_title", ("title", "job_title", "position", "role", "job title", "job_position")),
    ("phone", ("phone", "telephone", "mobile", "cell", "phone_number", "tel")),
    ("linkedin_url", ("linkedin", "linkedin_url", "linkedin profile", "linkedin_profile")),
    ("industry", ("industry", "sector", "business_type")),
    ("location", ("location", "address", "city", "country", "region")),
    ("company_size", ("company_size", "employees", "employee_count", "size")),
)


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.fullmatch(value))


def is_valid_url(value: str) -> bool:
    """Loose absolute-URL check: a scheme followed by something addressable."""

    if any(char.isspace() for char in value):
        return False
    parsed = urlparse(value)
    if not parsed.scheme or not parsed.scheme[0].isalpha():
        return False
    return bool(parsed.netloc or parsed.path)


def is_number(value: str) -> bool:
    try:
        return not math.isnan(float(value))
    except ValueError:
        return False


def is_date(value: str) -> bool:
    try:
        with warnings.catch_warnings():
            # pandas warns when it falls back to per-element dateutil parsing
            warnings.simplefilter("ignore", UserWarning)
            return not pd.isna(pd.to_datetime(value, errors="coerce"))
    except (ValueError, TypeError, OverflowError):
        return False


def normalize_header(header: str) -> str:
    return _HEADER_STRIP_RE.sub("", header.lower()).strip()


def suggest_mapping(headers: Iterable[str]) -> FieldMapping:
    """Suggest a canonical field for each header.

    Each header is claimed by at most one canonical field. When several headers
    match the same field the last one wins, so the result is a suggestion for
    the user to confirm rather than a guarantee.
    """

    suggestions: FieldMapping = {}
    for header in headers:
        normalized = normalize_header(header)
        if not normalized:
            continue
        for field_name, patterns in FIELD_PATTERNS:
            if any(pattern in normalized for pattern in patterns):
                suggestions[field_name] = header
                break
    return suggestions


def infer_types(table: ParsedTable) -> ColumnTypeMap:
    """Classify every column of ``table`` from its sample values."""

    types: ColumnTypeMap = {}
    for header in table.headers:
        values = _sample_values(table.sample_rows, header)
        types[header] = classify_values(values)
    return types


def classify_values(values: Sequence[str]) -> ColumnType:
    if not values:
        return ColumnType.UNKNOWN
    if any(is_valid_email(value) for value in values):
        return ColumnType.EMAIL
    if any(is_valid_url(value) for value in values):
        return ColumnType.URL
    if all(is_number(value) for value in values):
        return ColumnType.NUMBER
    if any(is_date(value) for value in values):
        return ColumnType.DATE
    return ColumnType.TEXT


def _sample_values(rows: Iterable[Mapping[str, str]], header: str) -> List[str]:
    return [row[header] for row in rows if row.get(header)]


__all__ = [
    "FIELD_PATTERNS",
    "classify_values",
    "infer_types",
    "is_valid_email",
    "is_valid_url",
    "normalize_header",
    "suggest_mapping",
]
