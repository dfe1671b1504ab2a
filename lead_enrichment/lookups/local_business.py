"""Local business listings (ratings, hours, address)."""
from __future__ import annotations

from typing import Any, Dict, Optional

from .base import HttpLookupClient, LookupResult, first_result


class LocalBusinessClient(HttpLookupClient):
    name = "local_business"

    async def search(
        self,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        location: Optional[str] = None,
    ) -> LookupResult:
        params = {
            key: value
            for key, value in {"query": name, "phone": phone, "location": location}.items()
            if value
        }

        async def call() -> Dict[str, Any]:
            response = await self._request("GET", f"{self.base_url}/search", params=params)
            business = first_result(response)
            if business is None:
                return {}
            return {
                "business_rating": business.get("rating"),
                "business_reviews_count": business.get("reviews_count"),
                "business_hours": business.get("hours"),
                "business_address": business.get("address"),
                "business_website": business.get("website"),
                "business_categories": business.get("categories") or [],
            }

        return await self._guarded(call)
