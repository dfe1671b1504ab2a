"""Enrichment orchestrator that runs every applicable lookup for a contact."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from ..factory import EnrichmentLookups
from ..lookups.base import LookupResult
from ..lookups.social import generate_linkedin_url
from ..merge import merge_enrichment
from ..models import EnrichmentOutcome, NormalizedContact
from ..rate_limit import RateLimiter

LOGGER = logging.getLogger(__name__)

REQUIRED_FIELDS = ("email",)

FREE_MAIL_DOMAINS = frozenset(
    {
        "aol.com",
        "gmail.com",
        "gmx.com",
        "googlemail.com",
        "hotmail.com",
        "icloud.com",
        "live.com",
        "mail.com",
        "me.com",
        "msn.com",
        "outlook.com",
        "proton.me",
        "protonmail.com",
        "yahoo.com",
        "yandex.com",
        "zoho.com",
    }
)


class ContactValidationError(ValueError):
    """Raised when a contact lacks the fields enrichment depends on."""


def derive_company_domain(contact: Mapping[str, Any]) -> Optional[str]:
    """Return the company's web domain, preferring an explicit value.

    Falls back to the domain of the contact's email address unless that
    belongs to a free mail provider.
    """

    explicit = str(contact.get("company_domain") or "").strip().lower()
    if explicit:
        for prefix in ("https://", "http://", "www."):
            if explicit.startswith(prefix):
                explicit = explicit[len(prefix):]
        return explicit.split("/", 1)[0] or None

    email = str(contact.get("email") or "").strip().lower()
    _, _, domain = email.rpartition("@")
    if not domain or "." not in domain or domain in FREE_MAIL_DOMAINS:
        return None
    return domain


class EnrichmentOrchestrator:
    """Runs the configured lookups for one contact and merges their results.

    Each lookup only runs when its inputs are present on the contact and its
    collaborator is configured. A failing lookup is recorded in the outcome
    and never stops the others; :meth:`enrich_contact` itself never raises.
    """

    def __init__(
        self,
        lookups: Optional[EnrichmentLookups] = None,
        *,
        rate_limiter: Optional[RateLimiter] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._lookups = lookups or EnrichmentLookups()
        self._rate_limiter = rate_limiter or RateLimiter(None)
        self._clock = clock

    @property
    def lookups(self) -> EnrichmentLookups:
        return self._lookups

    async def enrich_contact(self, contact: NormalizedContact) -> EnrichmentOutcome:
        details: Dict[str, Any] = {}
        try:
            self._validate_required(contact)
            contributions: List[Mapping[str, Any]] = []
            lookups = self._lookups

            if lookups.email_validation is not None:
                email_data = await self._validate_email(contact["email"])
                details["email_validation"] = email_data
                contributions.append(
                    {"email_valid": email_data.get("valid"), "email_deliverable": email_data.get("deliverable")}
                )

            company_name = contact.get("company_name")
            domain = derive_company_domain(contact)
            if company_name or domain:
                company_data = await self._enrich_company(company_name, domain)
                if company_data:
                    details["company_enrichment"] = company_data
                    contributions.append(company_data)

            if lookups.local_business is not None and (company_name or contact.get("phone")):
                result = await self._call(
                    "local_business",
                    lambda: lookups.local_business.search(
                        company_name, contact.get("phone"), contact.get("location")
                    ),
                )
                if result.ok:
                    details["business_data"] = result.payload
                    contributions.append(result.payload)
                else:
                    details["business_data"] = {"enrichment_error": result.error}

            first_name, last_name = contact.get("first_name"), contact.get("last_name")
            if first_name and last_name and company_name:
                social_data = await self._enrich_social_profiles(first_name, last_name, company_name)
                details["social_profiles"] = social_data
                contributions.append(social_data)

            enriched = merge_enrichment(contact, contributions)
            enriched["enrichment_timestamp"] = self._clock().isoformat()
            enriched["enrichment_sources"] = list(details)
            return EnrichmentOutcome(success=True, contact=enriched, enrichment_details=details)

        except ContactValidationError as exc:
            LOGGER.warning("Skipping contact: %s", exc)
            return EnrichmentOutcome(
                success=False, contact=dict(contact), enrichment_details=details, error_message=str(exc)
            )
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Contact enrichment failed")
            return EnrichmentOutcome(
                success=False,
                contact=dict(contact),
                enrichment_details=details,
                error_message=str(exc) or exc.__class__.__name__,
            )

    # ------------------------------------------------------------------
    def _validate_required(self, contact: Mapping[str, Any]) -> None:
        missing = [name for name in REQUIRED_FIELDS if not contact.get(name)]
        if missing:
            raise ContactValidationError(f"Missing required fields: {', '.join(missing)}")

    async def _call(self, key: str, call: Callable[[], Awaitable[Any]]) -> LookupResult:
        """Consult the rate limiter, run one lookup and capture any failure."""

        try:
            self._rate_limiter.acquire(key)
            result = await call()
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Lookup %s failed: %s", key, exc)
            return LookupResult.failure(str(exc) or exc.__class__.__name__)
        if isinstance(result, LookupResult):
            return result
        return LookupResult.success(result)

    async def _validate_email(self, email: str) -> Dict[str, Any]:
        validator = self._lookups.email_validation
        result = await self._call("email_validation", lambda: validator.validate(email))
        if result.ok:
            return result.payload
        return {"valid": None, "deliverable": None, "reason": "validation_failed", "error": result.error}

    async def _enrich_company(self, name: Optional[str], domain: Optional[str]) -> Dict[str, Any]:
        lookups = self._lookups
        data: Dict[str, Any] = {}
        errors: List[str] = []

        if domain and lookups.whois is not None:
            result = await self._call("whois", lambda: lookups.whois.lookup(domain))
            if result.ok:
                data["domain_info"] = result.payload
                data["company_age_years"] = result.payload.get("age_years")
            else:
                errors.append(f"whois: {result.error}")

        if name and lookups.company_directory is not None:
            result = await self._call("company_directory", lambda: lookups.company_directory.search(name))
            if result.ok:
                data.update(result.payload)
            else:
                errors.append(f"company_directory: {result.error}")

        if domain and lookups.web_scraper is not None:
            result = await self._call("web_scraper", lambda: lookups.web_scraper.scrape_company(domain))
            if result.ok:
                data["website_info"] = result.payload
            else:
                errors.append(f"web_scraper: {result.error}")

        if errors:
            data["enrichment_error"] = "; ".join(errors)
        return data

    async def _enrich_social_profiles(self, first_name: str, last_name: str, company: str) -> Dict[str, Any]:
        profiles: Dict[str, Any] = {"linkedin_url": generate_linkedin_url(first_name, last_name, company)}

        scraper = self._lookups.web_scraper
        if scraper is not None:
            snapshot = dict(profiles)
            result = await self._call("web_scraper", lambda: scraper.verify_profiles(snapshot))
            if result.ok:
                profiles.update(result.payload)
            else:
                profiles["profile_verification_error"] = result.error
        return profiles
