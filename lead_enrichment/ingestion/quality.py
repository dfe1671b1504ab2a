"""Data quality checks run against the preview sample of an upload."""
from __future__ import annotations

from typing import List

from ..models import DataQualityReport, ParsedTable
from .schema import is_valid_email, normalize_header

ISSUE_PENALTY = 10
MIN_VALID_EMAIL_RATIO = 0.8


def assess(table: ParsedTable) -> DataQualityReport:
    """Score ``table`` and list the problems found in its sample rows.

    Every check runs independently. Each issue found costs a fixed penalty
    from a starting score of 100.
    """

    issues: List[str] = []
    recommendations: List[str] = []

    empty_columns = [
        header
        for header in table.headers
        if all(not (row.get(header) or "").strip() for row in table.sample_rows)
    ]
    if empty_columns:
        issues.append(f"Empty columns detected: {', '.join(empty_columns)}")
        recommendations.append("Consider removing empty columns before processing")

    seen = set()
    duplicate_headers = []
    for header in table.headers:
        if header in seen:
            duplicate_headers.append(header)
        seen.add(header)
    if duplicate_headers:
        issues.append(f"Duplicate headers detected: {', '.join(duplicate_headers)}")
        recommendations.append("Rename duplicate column headers")

    for column in dict.fromkeys(table.headers):
        normalized = normalize_header(column)
        if "email" not in normalized and "mail" not in normalized:
            continue
        samples = [row[column] for row in table.sample_rows if row.get(column)]
        if not samples:
            continue
        valid = sum(1 for value in samples if is_valid_email(value))
        if valid / len(samples) < MIN_VALID_EMAIL_RATIO:
            issues.append(f"Poor email format in column: {column}")
            recommendations.append("Clean email data before enrichment")

    score = max(0, 100 - ISSUE_PENALTY * len(issues))
    return DataQualityReport(
        overall_score=score,
        issues=tuple(issues),
        recommendations=tuple(recommendations),
    )


__all__ = ["assess"]
