"""Company firmographics from the Lake B2B directory."""
from __future__ import annotations

from typing import Any, Dict

from .base import HttpLookupClient, LookupResult, first_result


class CompanyDirectoryClient(HttpLookupClient):
    name = "company_directory"

    async def search(self, name: str) -> LookupResult:
        async def call() -> Dict[str, Any]:
            response = await self._request(
                "POST",
                f"{self.base_url}/company/search",
                json={"company_name": name, "limit": 1},
            )
            company = first_result(response)
            if company is None:
                return {}
            return {
                "company_size": company.get("employee_count"),
                "industry": company.get("industry"),
                "revenue": company.get("annual_revenue"),
                "company_description": company.get("description"),
                "headquarters": company.get("headquarters"),
                "founded_year": company.get("founded_year"),
                "technologies": company.get("technologies") or [],
            }

        return await self._guarded(call)
