"""Parser for delimited text uploads (CSV, TSV and friends).

Only single-line records are supported: the input is split on newlines before
tokenizing, so a quoted field containing a newline is broken into two records.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..models import ParsedTable

LOGGER = logging.getLogger(__name__)

CANDIDATE_DELIMITERS = (",", ";", "\t", "|")
SAMPLE_SIZE = 5


class ParseErrorReason(str, Enum):
    EMPTY_INPUT = "empty_input"
    NO_HEADERS = "no_headers"


class ParseError(ValueError):
    """Raised when an upload cannot be turned into a table."""

    _MESSAGES = {
        ParseErrorReason.EMPTY_INPUT: "File appears to be empty",
        ParseErrorReason.NO_HEADERS: "No headers found in CSV file",
    }

    def __init__(self, reason: ParseErrorReason) -> None:
        super().__init__(self._MESSAGES[reason])
        self.reason = reason


def parse(raw_text: str) -> ParsedTable:
    """Parse ``raw_text`` into headers, a preview sample and a row count."""

    lines = _non_blank_lines(raw_text)
    if not lines:
        raise ParseError(ParseErrorReason.EMPTY_INPUT)

    delimiter = detect_delimiter(lines[0])
    headers = _parse_headers(lines[0], delimiter)

    sample_rows = tuple(
        _zip_row(headers, tokenize_line(line, delimiter)) for line in lines[1 : SAMPLE_SIZE + 1]
    )
    table = ParsedTable(
        headers=tuple(headers),
        sample_rows=sample_rows,
        total_row_count=len(lines) - 1,
        delimiter=delimiter,
    )
    LOGGER.debug(
        "Parsed %s columns and %s rows using delimiter %r",
        len(table.headers),
        table.total_row_count,
        delimiter,
    )
    return table


def read_rows(raw_text: str, delimiter: Optional[str] = None) -> List[Dict[str, str]]:
    """Return every data row of ``raw_text`` keyed by header.

    The preview produced by :func:`parse` only holds a handful of rows; this is
    the full dataset used for normalization and enrichment.
    """

    lines = _non_blank_lines(raw_text)
    if not lines:
        raise ParseError(ParseErrorReason.EMPTY_INPUT)

    delimiter = delimiter or detect_delimiter(lines[0])
    headers = _parse_headers(lines[0], delimiter)
    return [_zip_row(headers, tokenize_line(line, delimiter)) for line in lines[1:]]


def detect_delimiter(line: str) -> str:
    """Pick the candidate delimiter occurring most often in ``line``.

    Ties resolve to the earlier candidate, so comma wins any tie it takes part
    in and is also the answer when no candidate occurs at all.
    """

    best, best_count = ",", 0
    for candidate in CANDIDATE_DELIMITERS:
        count = line.count(candidate)
        if count > best_count:
            best, best_count = candidate, count
    return best


def tokenize_line(line: str, delimiter: str = ",") -> List[str]:
    """Split one line into trimmed fields, honouring double-quoted sections."""

    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    index = 0
    length = len(line)

    while index < length:
        char = line[index]
        if char == '"':
            if in_quotes and index + 1 < length and line[index + 1] == '"':
                current.append('"')
                index += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1

    fields.append("".join(current).strip())
    return fields


def _non_blank_lines(raw_text: str) -> List[str]:
    if raw_text.startswith("\ufeff"):
        raw_text = raw_text[1:]
    return [line for line in raw_text.split("\n") if line.strip()]


def _parse_headers(line: str, delimiter: str) -> List[str]:
    headers = tokenize_line(line, delimiter)
    if not any(headers):
        raise ParseError(ParseErrorReason.NO_HEADERS)
    return headers


def _zip_row(headers: Sequence[str], values: Sequence[str]) -> Dict[str, str]:
    row: Dict[str, str] = {}
    for position, header in enumerate(headers):
        row[header] = values[position] if position < len(values) else ""
    return row


__all__ = [
    "CANDIDATE_DELIMITERS",
    "ParseError",
    "ParseErrorReason",
    "detect_delimiter",
    "parse",
    "read_rows",
    "tokenize_line",
]
