"""Configuration for the enrichment pipeline.

Settings come either from a JSON/YAML file (:func:`load_settings`) or from the
environment (:func:`settings_from_env`). Both produce the same
:class:`PipelineSettings`, validated once when constructed.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}

LOOKUP_NAMES = ("email_validation", "whois", "company_directory", "local_business", "web_scraper")

DEFAULT_BASE_URLS = {
    "email_validation": "https://api.emailvalidation.io/v1",
    "whois": "https://www.whoisxmlapi.com/whoisserver",
    "company_directory": "https://api.lakeb2b.com/v1",
    "local_business": "https://api.localbusinessdata.com",
    "web_scraper": "https://api.webscraper.io",
}

_ENV_KEYS = {
    "email_validation": "EMAIL_CHECK_API_KEY",
    "whois": "WHOIS_API_KEY",
    "company_directory": "LAKE_B2B_API_KEY",
    "local_business": "LOCAL_BUSINESS_DATA_API_KEY",
    "web_scraper": "WEB_SCRAPER_API_KEY",
}

MAX_FILE_SIZE_BYTES = 50 * 1024 * 1024


@dataclass
class LookupSettings:
    """Connection settings for one external lookup service."""

    enabled: bool = False
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout_seconds: float = 10.0
    retry_attempts: int = 3
    retry_delay_seconds: float = 1.0
    class_path: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be positive")
        if self.retry_attempts < 1:
            raise ConfigurationError("retry_attempts must be at least 1")
        if self.retry_delay_seconds < 0:
            raise ConfigurationError("retry_delay_seconds cannot be negative")


@dataclass
class RateLimitSettings:
    max_calls: Optional[int] = 100
    window_seconds: float = 60.0

    def __post_init__(self) -> None:
        if self.max_calls is not None and self.max_calls < 1:
            raise ConfigurationError("rate_limit.max_calls must be at least 1")
        if self.window_seconds <= 0:
            raise ConfigurationError("rate_limit.window_seconds must be positive")


@dataclass
class BatchSettings:
    batch_size: int = 10
    delay_seconds: float = 1.0
    max_records: int = 10000

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ConfigurationError("batch.batch_size must be at least 1")
        if self.delay_seconds < 0:
            raise ConfigurationError("batch.delay_seconds cannot be negative")
        if self.max_records < 1:
            raise ConfigurationError("batch.max_records must be at least 1")


@dataclass
class UploadSettings:
    max_file_size_bytes: int = MAX_FILE_SIZE_BYTES
    supported_formats: Tuple[str, ...] = ("csv", "tsv", "txt", "xlsx", "xlsm")

    def __post_init__(self) -> None:
        if self.max_file_size_bytes < 1:
            raise ConfigurationError("upload.max_file_size_bytes must be positive")
        self.supported_formats = tuple(fmt.lower().lstrip(".") for fmt in self.supported_formats)


@dataclass
class PipelineSettings:
    """Every recognised option of the pipeline, with its default."""

    lookups: Dict[str, LookupSettings] = field(default_factory=dict)
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)
    batch: BatchSettings = field(default_factory=BatchSettings)
    upload: UploadSettings = field(default_factory=UploadSettings)

    def __post_init__(self) -> None:
        unknown = sorted(set(self.lookups) - set(LOOKUP_NAMES))
        if unknown:
            raise ConfigurationError(f"Unknown lookup sections: {', '.join(unknown)}")
        for name in LOOKUP_NAMES:
            self.lookups.setdefault(name, LookupSettings(base_url=DEFAULT_BASE_URLS[name]))

    def lookup(self, name: str) -> LookupSettings:
        return self.lookups[name]


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in '{file_path}': {exc}") from exc

    import yaml

    try:
        return yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in '{file_path}': {exc}") from exc


def load_settings(path: str | Path) -> PipelineSettings:
    return settings_from_mapping(load_configuration(path))


def settings_from_mapping(data: Mapping[str, Any]) -> PipelineSettings:
    """Build :class:`PipelineSettings` from parsed configuration data."""

    if not isinstance(data, Mapping):
        raise ConfigurationError("Configuration root must be a mapping")

    lookups: Dict[str, LookupSettings] = {}
    for name, section in (data.get("lookups") or {}).items():
        section = dict(section or {})
        section.setdefault("base_url", DEFAULT_BASE_URLS.get(name))
        if "class" in section:
            section["class_path"] = section.pop("class")
        lookups[name] = _build(LookupSettings, section, f"lookups.{name}")
        if not lookups[name].enabled:
            LOGGER.debug("Lookup %s is disabled", name)

    return PipelineSettings(
        lookups=lookups,
        rate_limit=_build(RateLimitSettings, data.get("rate_limit") or {}, "rate_limit"),
        batch=_build(BatchSettings, data.get("batch") or {}, "batch"),
        upload=_build(UploadSettings, data.get("upload") or {}, "upload"),
    )


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> PipelineSettings:
    """Build settings from the portal's environment variables.

    A lookup is enabled exactly when its API key variable is set.
    """

    env = os.environ if environ is None else environ
    lookups: Dict[str, LookupSettings] = {}
    for name, variable in _ENV_KEYS.items():
        api_key = env.get(variable) or None
        base_url = DEFAULT_BASE_URLS[name]
        if name == "company_directory":
            base_url = env.get("LAKE_B2B_BASE_URL") or base_url
        lookups[name] = LookupSettings(enabled=bool(api_key), api_key=api_key, base_url=base_url)

    bulk = env.get("ENABLE_BULK_PROCESSING", "true").strip().lower() == "true"
    return PipelineSettings(
        lookups=lookups,
        rate_limit=RateLimitSettings(max_calls=_env_int(env, "MAX_API_CALLS_PER_MINUTE", 100)),
        batch=BatchSettings(
            batch_size=100 if bulk else 10,
            max_records=_env_int(env, "MAX_RECORDS_PER_BATCH", 10000),
        ),
    )


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def _build(cls, section: Mapping[str, Any], label: str):
    try:
        return cls(**section)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid options in '{label}': {exc}") from exc
