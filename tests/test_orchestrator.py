import asyncio
from datetime import datetime, timezone

from lead_enrichment.factory import EnrichmentLookups
from lead_enrichment.lookups.base import LookupResult
from lead_enrichment.orchestrator import EnrichmentOrchestrator
from lead_enrichment.orchestrator.service import derive_company_domain
from lead_enrichment.rate_limit import RateLimiter

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class DummyEmailValidator:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = []

    async def validate(self, email):
        self.calls.append(email)
        if self.fail:
            raise RuntimeError("validator offline")
        return LookupResult.success({"valid": True, "deliverable": True, "reason": "ok"})


class DummyWhois:
    def __init__(self) -> None:
        self.domains = []

    async def lookup(self, domain):
        self.domains.append(domain)
        return LookupResult.success({"registrar": "Registrar Inc", "age_years": 12})


class FailingWhois:
    async def lookup(self, domain):
        return LookupResult.failure("quota exhausted")


class DummyDirectory:
    async def search(self, name):
        return {"industry": "Manufacturing", "company_size": 250}


class DummyLocalBusiness:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = []

    async def search(self, name, phone, location):
        self.calls.append((name, phone, location))
        if self.fail:
            raise ConnectionError("listing service down")
        return LookupResult.success({"business_rating": 4.7})


class DummyScraper:
    def __init__(self, verify_error: str | None = None) -> None:
        self.verify_error = verify_error
        self.verified = []

    async def scrape_company(self, domain):
        return LookupResult.success({"page_title": domain.upper()})

    async def verify_profiles(self, profiles):
        self.verified.append(dict(profiles))
        if self.verify_error:
            return LookupResult.failure(self.verify_error)
        return LookupResult.success({f"{key}_verified": True for key in profiles})


def _orchestrator(**lookups) -> EnrichmentOrchestrator:
    return EnrichmentOrchestrator(EnrichmentLookups(**lookups), clock=lambda: FIXED_NOW)


def _enrich(orchestrator, contact):
    return asyncio.run(orchestrator.enrich_contact(contact))


def test_contact_without_email_fails_precondition() -> None:
    validator = DummyEmailValidator()
    contact = {"company_name": "Beta", "email": ""}

    outcome = _enrich(_orchestrator(email_validation=validator), contact)

    assert not outcome.success
    assert outcome.error_message == "Missing required fields: email"
    assert outcome.contact == contact
    assert outcome.contact is not contact
    assert validator.calls == []


def test_full_enrichment_merges_every_source() -> None:
    scraper = DummyScraper()
    contact = {
        "email": "ada@acme.test",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "company_name": "Acme",
        "phone": "555-1111",
    }
    orchestrator = _orchestrator(
        email_validation=DummyEmailValidator(),
        whois=DummyWhois(),
        company_directory=DummyDirectory(),
        local_business=DummyLocalBusiness(),
        web_scraper=scraper,
    )

    outcome = _enrich(orchestrator, contact)

    assert outcome.success
    enriched = outcome.contact
    assert enriched["email_valid"] is True
    assert enriched["email_deliverable"] is True
    assert enriched["industry"] == "Manufacturing"
    assert enriched["company_age_years"] == 12
    assert enriched["website_info"] == {"page_title": "ACME.TEST"}
    assert enriched["business_rating"] == 4.7
    assert enriched["linkedin_url"] == "https://www.linkedin.com/in/ada-lovelace/"
    assert enriched["linkedin_url_verified"] is True
    assert enriched["enrichment_timestamp"] == FIXED_NOW.isoformat()
    assert enriched["enrichment_sources"] == [
        "email_validation",
        "company_enrichment",
        "business_data",
        "social_profiles",
    ]
    assert outcome.sources == enriched["enrichment_sources"]
    assert scraper.verified == [{"linkedin_url": "https://www.linkedin.com/in/ada-lovelace/"}]
    assert "enrichment_sources" not in contact


def test_failing_sub_lookups_are_recorded_not_raised() -> None:
    contact = {"email": "ada@acme.test", "company_name": "Acme"}
    orchestrator = _orchestrator(
        email_validation=DummyEmailValidator(fail=True),
        whois=FailingWhois(),
        company_directory=DummyDirectory(),
        local_business=DummyLocalBusiness(fail=True),
    )

    outcome = _enrich(orchestrator, contact)

    assert outcome.success
    details = outcome.enrichment_details
    assert details["email_validation"] == {
        "valid": None,
        "deliverable": None,
        "reason": "validation_failed",
        "error": "validator offline",
    }
    assert details["company_enrichment"]["enrichment_error"] == "whois: quota exhausted"
    assert details["company_enrichment"]["industry"] == "Manufacturing"
    assert details["business_data"] == {"enrichment_error": "listing service down"}
    assert "business_rating" not in outcome.contact
    assert outcome.contact["email_valid"] is None


def test_lookup_values_overwrite_upload_values_except_linkedin_url() -> None:
    contact = {
        "email": "ada@acme.test",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "company_name": "Acme",
        "industry": "Aerospace",
        "linkedin_url": "https://www.linkedin.com/in/the-real-ada/",
    }

    outcome = _enrich(_orchestrator(company_directory=DummyDirectory()), contact)

    assert outcome.contact["industry"] == "Manufacturing"
    assert outcome.contact["company_size"] == 250
    assert outcome.contact["linkedin_url"] == "https://www.linkedin.com/in/the-real-ada/"
    assert outcome.enrichment_details["social_profiles"]["linkedin_url"] == (
        "https://www.linkedin.com/in/ada-lovelace/"
    )


def test_profile_verification_failure_is_kept_in_social_profiles() -> None:
    contact = {"email": "ada@gmail.com", "first_name": "Ada", "last_name": "Lovelace", "company_name": "Acme"}
    scraper = DummyScraper(verify_error="blocked")

    outcome = _enrich(_orchestrator(web_scraper=scraper), contact)

    social = outcome.enrichment_details["social_profiles"]
    assert social["profile_verification_error"] == "blocked"
    # Free mail domains are not scraped as company websites
    assert "company_enrichment" not in outcome.enrichment_details


def test_no_lookups_configured_still_succeeds() -> None:
    outcome = _enrich(_orchestrator(), {"email": "ada@gmail.com"})

    assert outcome.success
    assert outcome.contact["enrichment_sources"] == []
    assert outcome.enrichment_details == {}


def test_rate_limited_lookup_is_recorded_as_failure() -> None:
    clock_value = [0.0]
    whois = DummyWhois()
    orchestrator = EnrichmentOrchestrator(
        EnrichmentLookups(whois=whois),
        rate_limiter=RateLimiter(1, window_seconds=60, clock=lambda: clock_value[0]),
    )

    first = asyncio.run(orchestrator.enrich_contact({"email": "a@acme.test"}))
    second = asyncio.run(orchestrator.enrich_contact({"email": "b@beta.test"}))

    assert first.enrichment_details["company_enrichment"]["domain_info"]["registrar"] == "Registrar Inc"
    assert second.success
    assert second.enrichment_details["company_enrichment"] == {
        "enrichment_error": "whois: Rate limit exceeded for whois"
    }
    assert whois.domains == ["acme.test"]


def test_derive_company_domain() -> None:
    assert derive_company_domain({"email": "Ada@Acme.Test"}) == "acme.test"
    assert derive_company_domain({"email": "ada@gmail.com"}) is None
    assert derive_company_domain({"email": "not-an-email"}) is None
    assert derive_company_domain({"company_domain": "https://www.acme.test/about", "email": "a@b.test"}) == "acme.test"
