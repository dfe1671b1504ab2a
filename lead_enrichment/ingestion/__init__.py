"""Parsing, inspection and normalization of uploaded contact lists."""

from .normalizer import NormalizationError, NormalizationErrorReason, normalize, validate_mapping
from .parser import ParseError, ParseErrorReason, parse, read_rows
from .quality import assess
from .schema import infer_types, suggest_mapping

__all__ = [
    "NormalizationError",
    "NormalizationErrorReason",
    "ParseError",
    "ParseErrorReason",
    "assess",
    "infer_types",
    "normalize",
    "parse",
    "read_rows",
    "suggest_mapping",
    "validate_mapping",
]
