"""Utilities for reading uploaded contact lists into text for the parser."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse
from zipfile import BadZipFile

import httpx
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from ..config import MAX_FILE_SIZE_BYTES, UploadSettings

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

_TEXT_SUFFIXES = {".csv", ".tsv", ".txt"}
_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


class UploadError(RuntimeError):
    """Raised when an upload cannot be read or retrieved."""


class UnsupportedFileTypeError(UploadError, ValueError):
    """Raised when an unsupported file format is passed to the loader."""


class FileTooLargeError(UploadError, ValueError):
    """Raised when an upload exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"File too large ({size} bytes). Maximum size: {limit // (1024 * 1024)}MB")
        self.size = size
        self.limit = limit


def load_upload_text(path: PathLike, settings: Optional[UploadSettings] = None) -> str:
    """Return the contents of a local upload as delimited text.

    Excel workbooks are converted to CSV so that every format goes through the
    same parser. A file that cannot be read or decoded raises
    :class:`UploadError`.
    """

    settings = settings or UploadSettings()
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    _check_format(suffix, settings)

    try:
        size = file_path.stat().st_size
    except OSError as exc:
        raise UploadError(f"Could not read upload '{file_path}': {exc.strerror or exc}") from exc
    if size > settings.max_file_size_bytes:
        raise FileTooLargeError(size, settings.max_file_size_bytes)

    if suffix in _EXCEL_SUFFIXES:
        return excel_to_text(file_path)
    try:
        return file_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise UploadError(f"Upload '{file_path.name}' is not UTF-8 encoded text") from exc
    except OSError as exc:
        raise UploadError(f"Could not read upload '{file_path}': {exc.strerror or exc}") from exc


def excel_to_text(path: PathLike, sheet_name: Union[str, int] = 0) -> str:
    """Render the first (or named) sheet of a workbook as CSV text."""

    try:
        frame = pd.read_excel(path, sheet_name=sheet_name, dtype=str, engine="openpyxl")
    except (OSError, ValueError, KeyError, ImportError, BadZipFile, InvalidFileException) as exc:
        raise UploadError(f"Could not read workbook '{Path(path).name}': {exc}") from exc
    frame = frame.fillna("")
    LOGGER.debug("Converted workbook %s with %s rows", path, len(frame))
    return frame.to_csv(index=False)


async def fetch_upload_text(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    max_bytes: int = MAX_FILE_SIZE_BYTES,
) -> str:
    """Download a stored upload, rejecting it early when it is too large."""

    parsed = urlparse(url or "")
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise UploadError("Invalid file URL format")

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=30.0)
    try:
        response = await client.get(url)
        if response.status_code >= 400:
            raise UploadError(f"Failed to download file: {response.status_code} {response.reason_phrase}")
        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > max_bytes:
            raise FileTooLargeError(int(declared), max_bytes)
        if len(response.content) > max_bytes:
            raise FileTooLargeError(len(response.content), max_bytes)
        return response.text
    except httpx.HTTPError as exc:
        raise UploadError(f"File download failed: {exc}") from exc
    finally:
        if owns_client:
            await client.aclose()


def _check_format(suffix: str, settings: UploadSettings) -> None:
    if suffix not in _TEXT_SUFFIXES | _EXCEL_SUFFIXES or suffix.lstrip(".") not in settings.supported_formats:
        raise UnsupportedFileTypeError(f"Unsupported file format: {suffix or '(none)'}")


__all__ = [
    "FileTooLargeError",
    "UnsupportedFileTypeError",
    "UploadError",
    "excel_to_text",
    "fetch_upload_text",
    "load_upload_text",
]
