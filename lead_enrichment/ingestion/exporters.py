"""Export utilities for enriched contact data."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, MutableMapping, Optional, Union

import pandas as pd

from ..models import BatchResult, EnrichmentOutcome

PathLike = Union[str, Path]


def export_batch_result(
    result: BatchResult,
    path: PathLike,
    *,
    errors_path: Optional[PathLike] = None,
    include_details: bool = False,
    sheet_name: str = "Contacts",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write enriched contacts (and optionally the failures) to CSV or Excel."""

    output_path = Path(path)
    dataframe = outcomes_to_dataframe(result, include_details=include_details)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)

    if errors_path is not None:
        _write_dataframe(errors_to_dataframe(result), Path(errors_path), sheet_name="Errors", exporter_kwargs=None)
    return output_path


def outcomes_to_dataframe(result: BatchResult, *, include_details: bool = False) -> pd.DataFrame:
    """Flatten successful outcomes into one row per contact."""

    rows = [_outcome_to_row(outcome, include_details=include_details) for outcome in result.outcomes]
    return pd.DataFrame(rows)


def errors_to_dataframe(result: BatchResult) -> pd.DataFrame:
    rows = [
        {
            "index": error.index,
            "batch": error.batch,
            "error": error.error_message,
            "contact": _flatten(error.contact) if error.contact is not None else "",
        }
        for error in result.errors
    ]
    return pd.DataFrame(rows, columns=["index", "batch", "error", "contact"])


def _outcome_to_row(outcome: EnrichmentOutcome, *, include_details: bool) -> MutableMapping[str, object]:
    row: MutableMapping[str, object] = {key: _flatten(value) for key, value in outcome.contact.items()}
    if include_details:
        for source, detail in outcome.enrichment_details.items():
            row[f"details.{source}"] = _flatten(detail)
    return row


def _flatten(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        cleaned: List[str] = [str(item).strip() for item in value if item not in (None, "")]
        return "; ".join(text for text in cleaned if text)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False, default=str)
    return value


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()
    path.parent.mkdir(parents=True, exist_ok=True)

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xlsx", ".xlsm"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["errors_to_dataframe", "export_batch_result", "outcomes_to_dataframe"]
