"""Website scraping through a hosted scraping API."""
from __future__ import annotations

from typing import Any, Dict, Mapping

from .base import HttpLookupClient, LookupResult

COMPANY_PAGE_ELEMENTS = (
    {"selector": "title", "extract": "text"},
    {"selector": 'meta[name="description"]', "extract": "content"},
    {"selector": "h1", "extract": "text"},
    {"selector": ".about, #about", "extract": "text"},
)


class WebScraperClient(HttpLookupClient):
    name = "web_scraper"

    async def scrape_company(self, domain: str) -> LookupResult:
        async def call() -> Dict[str, Any]:
            response = await self._scrape(f"https://{domain}", list(COMPANY_PAGE_ELEMENTS))
            return {
                "page_title": response.get("title"),
                "meta_description": response.get("description"),
                "main_heading": response.get("h1"),
                "about_text": response.get("about"),
            }

        return await self._guarded(call)

    async def verify_profiles(self, profiles: Mapping[str, str]) -> LookupResult:
        """Fetch each profile URL and report which ones resolve to a page."""

        async def call() -> Dict[str, Any]:
            verified: Dict[str, Any] = {}
            for key, url in profiles.items():
                response = await self._scrape(url, [{"selector": "title", "extract": "text"}])
                verified[f"{key}_verified"] = bool(response.get("title"))
            return verified

        return await self._guarded(call)

    async def _scrape(self, url: str, elements: list) -> Mapping[str, Any]:
        response = await self._request(
            "POST",
            f"{self.base_url}/scrape",
            json={"url": url, "elements": elements},
        )
        if not isinstance(response, Mapping):
            raise ValueError("Scraper returned a non-JSON response")
        return response
