"""Factory helpers for constructing lookup collaborators from configuration."""
from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

import httpx

from .config import ConfigurationError, LookupSettings, PipelineSettings
from .lookups import (
    CompanyDirectoryClient,
    EmailValidationClient,
    LocalBusinessClient,
    WebScraperClient,
    WhoisClient,
)
from .lookups.base import (
    CompanyDirectory,
    EmailValidator,
    HttpLookupClient,
    LocalBusinessDirectory,
    WebScraper,
    WhoisLookup,
)

LOGGER = logging.getLogger(__name__)

_DEFAULT_CLASSES = {
    "email_validation": EmailValidationClient,
    "whois": WhoisClient,
    "company_directory": CompanyDirectoryClient,
    "local_business": LocalBusinessClient,
    "web_scraper": WebScraperClient,
}


@dataclass
class EnrichmentLookups:
    """The configured collaborators; ``None`` marks a disabled lookup."""

    email_validation: Optional[EmailValidator] = None
    whois: Optional[WhoisLookup] = None
    company_directory: Optional[CompanyDirectory] = None
    local_business: Optional[LocalBusinessDirectory] = None
    web_scraper: Optional[WebScraper] = None

    def enabled(self) -> List[str]:
        return [item.name for item in fields(self) if getattr(self, item.name) is not None]

    async def aclose(self) -> None:
        for item in fields(self):
            lookup = getattr(self, item.name)
            closer = getattr(lookup, "aclose", None)
            if closer is not None:
                await closer()


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid lookup class path '{path}'")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def _build_lookup(name: str, settings: LookupSettings, client: Optional[httpx.AsyncClient]) -> Any:
    lookup_cls = _load_class(settings.class_path) if settings.class_path else _DEFAULT_CLASSES[name]
    if isinstance(lookup_cls, type) and issubclass(lookup_cls, HttpLookupClient):
        return lookup_cls(settings, client=client)
    return lookup_cls(**settings.options)


def build_lookups(
    settings: PipelineSettings,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> EnrichmentLookups:
    """Instantiate every enabled lookup defined in ``settings``.

    HTTP based lookups share ``client`` when one is given; otherwise each one
    opens its own connection pool on first use.
    """

    built: Dict[str, Any] = {}
    for name, lookup_settings in settings.lookups.items():
        if not lookup_settings.enabled:
            LOGGER.debug("Skipping disabled lookup %s", name)
            continue
        built[name] = _build_lookup(name, lookup_settings, client)
    LOGGER.info("Enabled lookups: %s", ", ".join(sorted(built)) or "none")
    return EnrichmentLookups(**built)
