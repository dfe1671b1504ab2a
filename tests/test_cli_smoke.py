"""Smoke tests for the CLI entry point."""
from __future__ import annotations

import json

import pandas as pd
import pytest

from lead_enrichment import __main__
from lead_enrichment.cli import main


@pytest.fixture()
def config_path(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "lookups": {
                    "email_validation": {
                        "enabled": True,
                        "class": "lead_enrichment.lookups.sample.StaticEmailValidator",
                    },
                    "company_directory": {
                        "enabled": True,
                        "class": "lead_enrichment.lookups.sample.StaticCompanyDirectory",
                        "options": {"industry": "Software"},
                    },
                },
                "batch": {"batch_size": 2, "delay_seconds": 0},
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def input_path(tmp_path):
    path = tmp_path / "input.csv"
    path.write_text(
        "Email Address,First Name,Last Name,Company\n"
        "jane@example.com,Jane,Doe,Initech\n"
        ",John,Roe,Globex\n",
        encoding="utf-8",
    )
    return path


def test_cli_enriches_with_offline_lookups(tmp_path, config_path, input_path) -> None:
    output_path = tmp_path / "results.csv"
    errors_path = tmp_path / "errors.csv"

    exit_code = main(
        [
            "enrich",
            "--config",
            str(config_path),
            "--log-level",
            "DEBUG",
            str(input_path),
            str(output_path),
            "--errors-output",
            str(errors_path),
        ]
    )

    assert exit_code == 0
    results = pd.read_csv(output_path)
    assert results["email"].tolist() == ["jane@example.com"]
    assert results["industry"].tolist() == ["Software"]
    assert results["linkedin_url"].tolist() == ["https://www.linkedin.com/in/jane-doe/"]
    errors = pd.read_csv(errors_path)
    assert errors["error"].tolist() == ["Missing required fields: email"]


def test_cli_enrich_with_explicit_mapping(tmp_path, config_path, input_path) -> None:
    mapping_path = tmp_path / "mapping.json"
    mapping_path.write_text(json.dumps({"email": "Email Address"}), encoding="utf-8")
    output_path = tmp_path / "results.csv"

    exit_code = main(
        [
            "enrich",
            "--config",
            str(config_path),
            str(input_path),
            str(output_path),
            "--mapping",
            str(mapping_path),
            "--batch-size",
            "1",
        ]
    )

    assert exit_code == 0
    results = pd.read_csv(output_path)
    assert "first_name" not in results.columns
    assert results["email_valid"].tolist() == [True]


def test_cli_preview_prints_json(capsys: pytest.CaptureFixture[str], config_path, input_path) -> None:
    exit_code = main(["preview", str(input_path), "--config", str(config_path)])

    preview = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert preview["total_row_count"] == 2
    assert preview["suggested_mapping"]["email"] == "Email Address"
    assert preview["data_quality"]["overall_score"] == 100


def test_cli_rejects_empty_upload(tmp_path, config_path) -> None:
    empty = tmp_path / "empty.csv"
    empty.write_text("", encoding="utf-8")

    assert main(["preview", str(empty), "--config", str(config_path)]) == 1


def test_cli_rejects_unsupported_file(tmp_path, config_path) -> None:
    upload = tmp_path / "contacts.pdf"
    upload.write_bytes(b"%PDF")

    assert main(["enrich", str(upload), str(tmp_path / "out.csv"), "--config", str(config_path)]) == 1


def test_cli_rejects_missing_upload(tmp_path, config_path) -> None:
    assert main(["preview", str(tmp_path / "nope.csv"), "--config", str(config_path)]) == 1


def test_cli_rejects_non_utf8_upload(tmp_path, config_path) -> None:
    upload = tmp_path / "contacts.csv"
    upload.write_bytes("email,name\nx@y.com,José\n".encode("latin-1"))

    assert main(["enrich", str(upload), str(tmp_path / "out.csv"), "--config", str(config_path)]) == 1
    assert not (tmp_path / "out.csv").exists()


def test_module_entry_point_delegates_to_cli(tmp_path, config_path, input_path) -> None:
    """The package entry point should behave like the CLI."""

    output_path = tmp_path / "results.xlsx"
    pytest.importorskip("openpyxl")

    exit_code = __main__.main(["enrich", str(input_path), str(output_path), "--config", str(config_path)])

    assert exit_code == 0
    assert pd.read_excel(output_path)["email"].tolist() == ["jane@example.com"]


def test_module_entry_point_without_arguments_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = __main__.main([])

    captured = capsys.readouterr()
    assert "python -m lead_enrichment" in captured.out
    assert exit_code == 2


def test_console_script_without_arguments_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main([], prog="lead-enrichment")

    captured = capsys.readouterr()
    assert "usage: lead-enrichment" in captured.out
    assert "enrich" in captured.out
    assert exit_code == 2
