"""Command line interface for previewing and enriching contact uploads."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict

from .config import BatchSettings, ConfigurationError, PipelineSettings, load_settings, settings_from_env
from .factory import build_lookups
from .ingestion.exporters import export_batch_result
from .ingestion.loaders import UploadError, load_upload_text
from .ingestion.normalizer import NormalizationError
from .ingestion.parser import ParseError
from .models import BatchResult
from .orchestrator import EnrichmentOrchestrator
from .pipeline import preview_upload, run_enrichment_job
from .rate_limit import RateLimiter

LOGGER = logging.getLogger(__name__)

_REJECTED = (ConfigurationError, NormalizationError, ParseError, UploadError)


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=None,
        help="Path to a pipeline configuration file (YAML or JSON); defaults to environment variables",
    )
    common.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )

    parser = argparse.ArgumentParser(prog=prog, description="Preview and enrich uploaded contact lists")
    subparsers = parser.add_subparsers(dest="command", required=True)

    preview = subparsers.add_parser(
        "preview", parents=[common], help="Show headers, suggested mapping and data quality"
    )
    preview.add_argument("input", help="Path to the uploaded file (CSV, TSV or Excel)")

    enrich = subparsers.add_parser("enrich", parents=[common], help="Enrich every row of an upload")
    enrich.add_argument("input", help="Path to the uploaded file (CSV, TSV or Excel)")
    enrich.add_argument("output", help="Path where enriched contacts should be written")
    enrich.add_argument(
        "--mapping",
        default=None,
        help="JSON file mapping contact fields to column names; defaults to the suggested mapping",
    )
    enrich.add_argument("--batch-size", type=int, default=None, help="Contacts enriched concurrently per batch")
    enrich.add_argument("--errors-output", default=None, help="Optional path for contacts that failed")
    return parser


def parse_args(argv: list[str] | None = None, prog: str | None = None) -> argparse.Namespace:
    return build_parser(prog).parse_args(argv)


def main(argv: list[str] | None = None, prog: str | None = None) -> int:
    """Run the CLI; without arguments print usage and return 2."""

    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        build_parser(prog).print_help()
        return 2

    args = parse_args(argv, prog)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        settings = load_settings(args.config) if args.config else settings_from_env()
        raw_text = load_upload_text(args.input, settings.upload)
        if args.command == "preview":
            print(json.dumps(preview_upload(raw_text).as_dict(), indent=2))
            return 0
        return _enrich(args, settings, raw_text)
    except _REJECTED as exc:
        LOGGER.error("Upload rejected: %s", exc)
        return 1


def _enrich(args: argparse.Namespace, settings: PipelineSettings, raw_text: str) -> int:
    if args.mapping:
        mapping = _load_mapping(args.mapping)
    else:
        mapping = dict(preview_upload(raw_text).suggested_mapping)
        LOGGER.info("Using suggested mapping: %s", mapping)

    batch_settings = settings.batch
    if args.batch_size is not None:
        batch_settings = replace(batch_settings, batch_size=args.batch_size)

    result = asyncio.run(_run(raw_text, mapping, settings, batch_settings))
    export_batch_result(result, args.output, errors_path=args.errors_output)
    LOGGER.info("Enriched %s contacts, %s failed", result.total_processed, result.total_errors)
    LOGGER.info("Results written to %s", Path(args.output).resolve())
    return 0


async def _run(
    raw_text: str,
    mapping: Dict[str, str],
    settings: PipelineSettings,
    batch_settings: BatchSettings,
) -> BatchResult:
    lookups = build_lookups(settings)
    orchestrator = EnrichmentOrchestrator(
        lookups,
        rate_limiter=RateLimiter(settings.rate_limit.max_calls, settings.rate_limit.window_seconds),
    )
    try:
        return await run_enrichment_job(raw_text, mapping, orchestrator, batch_settings)
    finally:
        await lookups.aclose()


def _load_mapping(path: str) -> Dict[str, str]:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Could not read mapping file '{path}': {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError("Mapping file must contain a JSON object")
    return {str(field): str(column) for field, column in data.items()}


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
