import asyncio

import httpx
import pandas as pd
import pytest

from lead_enrichment.config import UploadSettings
from lead_enrichment.ingestion.loaders import (
    FileTooLargeError,
    UnsupportedFileTypeError,
    UploadError,
    fetch_upload_text,
    load_upload_text,
)
from lead_enrichment.ingestion.parser import parse


@pytest.fixture()
def sample_dataframe():
    return pd.DataFrame(
        [
            {"Email": "ada@example.com", "Company": "Analytical Engines", "Phone": "555-1111"},
            {"Email": "grace@example.com", "Company": "US Navy", "Phone": ""},
        ]
    )


def test_load_csv_upload(sample_dataframe, tmp_path):
    csv_path = tmp_path / "contacts.csv"
    sample_dataframe.to_csv(csv_path, index=False)

    text = load_upload_text(csv_path)
    table = parse(text)

    assert table.headers == ("Email", "Company", "Phone")
    assert table.total_row_count == 2


def test_load_excel_upload_as_csv_text(sample_dataframe, tmp_path):
    pytest.importorskip("openpyxl")
    excel_path = tmp_path / "contacts.xlsx"
    sample_dataframe.to_excel(excel_path, index=False)

    table = parse(load_upload_text(excel_path))

    assert table.headers == ("Email", "Company", "Phone")
    assert table.sample_rows[1] == {"Email": "grace@example.com", "Company": "US Navy", "Phone": ""}


def test_unsupported_extension_is_rejected(tmp_path):
    path = tmp_path / "contacts.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(UnsupportedFileTypeError):
        load_upload_text(path)


def test_format_can_be_disabled_in_settings(tmp_path):
    path = tmp_path / "contacts.txt"
    path.write_text("email\na@x.com\n", encoding="utf-8")

    with pytest.raises(UnsupportedFileTypeError):
        load_upload_text(path, UploadSettings(supported_formats=("csv",)))


def test_oversized_upload_is_rejected(tmp_path):
    path = tmp_path / "contacts.csv"
    path.write_text("email\n" + "a@x.com\n" * 50, encoding="utf-8")

    with pytest.raises(FileTooLargeError) as excinfo:
        load_upload_text(path, UploadSettings(max_file_size_bytes=100))

    assert excinfo.value.limit == 100
    assert excinfo.value.size > 100


def test_missing_upload_raises_upload_error(tmp_path):
    with pytest.raises(UploadError, match="Could not read upload"):
        load_upload_text(tmp_path / "nope.csv")


def test_non_utf8_upload_raises_upload_error(tmp_path):
    path = tmp_path / "contacts.csv"
    path.write_bytes("email,name\nx@y.com,José\n".encode("latin-1"))

    with pytest.raises(UploadError, match="not UTF-8"):
        load_upload_text(path)


def test_corrupt_workbook_raises_upload_error(tmp_path):
    path = tmp_path / "contacts.xlsx"
    path.write_bytes(b"this is not a workbook")

    with pytest.raises(UploadError, match="Could not read workbook"):
        load_upload_text(path)


def test_legacy_xls_is_not_accepted_by_default(tmp_path):
    path = tmp_path / "contacts.xls"
    path.write_bytes(b"\xd0\xcf\x11\xe0")

    with pytest.raises(UnsupportedFileTypeError):
        load_upload_text(path)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_fetch_upload_text_returns_body():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/uploads/contacts.csv"
        return httpx.Response(200, text="email\na@x.com\n")

    async def run() -> str:
        async with _client(handler) as client:
            return await fetch_upload_text("https://files.test/uploads/contacts.csv", client=client)

    assert asyncio.run(run()) == "email\na@x.com\n"


def test_fetch_upload_text_rejects_large_download():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="x" * 64)

    async def run() -> str:
        async with _client(handler) as client:
            return await fetch_upload_text("https://files.test/big.csv", client=client, max_bytes=10)

    with pytest.raises(FileTooLargeError):
        asyncio.run(run())


def test_fetch_upload_text_reports_http_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    async def run() -> str:
        async with _client(handler) as client:
            return await fetch_upload_text("https://files.test/missing.csv", client=client)

    with pytest.raises(UploadError, match="404"):
        asyncio.run(run())


def test_fetch_upload_text_rejects_non_http_urls():
    with pytest.raises(UploadError, match="Invalid file URL format"):
        asyncio.run(fetch_upload_text("ftp://files.test/contacts.csv"))
