"""Clients for the external services used to enrich contacts."""

from .base import HttpLookupClient, LookupResult, ServiceError  # noqa: F401
from .company_directory import CompanyDirectoryClient  # noqa: F401
from .email_validation import EmailValidationClient  # noqa: F401
from .local_business import LocalBusinessClient  # noqa: F401
from .sample import StaticCompanyDirectory, StaticEmailValidator  # noqa: F401
from .social import generate_linkedin_url  # noqa: F401
from .web_scraper import WebScraperClient  # noqa: F401
from .whois import WhoisClient  # noqa: F401

__all__ = [
    "CompanyDirectoryClient",
    "EmailValidationClient",
    "HttpLookupClient",
    "LocalBusinessClient",
    "LookupResult",
    "ServiceError",
    "StaticCompanyDirectory",
    "StaticEmailValidator",
    "WebScraperClient",
    "WhoisClient",
    "generate_linkedin_url",
]
