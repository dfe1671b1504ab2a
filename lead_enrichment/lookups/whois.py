"""Domain registration lookups through the WhoisXML API."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .base import HttpLookupClient, LookupResult


def registration_age_years(created: str, now: Optional[datetime] = None) -> int:
    """Whole years elapsed since ``created`` (an ISO 8601 timestamp)."""

    created_at = datetime.fromisoformat(created.replace("Z", "+00:00"))
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return int((now - created_at).days // 365)


class WhoisClient(HttpLookupClient):
    name = "whois"

    async def lookup(self, domain: str) -> LookupResult:
        async def call() -> Dict[str, Any]:
            response = await self._request(
                "GET",
                f"{self.base_url}/WhoisService",
                params={
                    "apiKey": self.settings.api_key or "",
                    "domainName": domain,
                    "outputFormat": "JSON",
                },
            )
            record = response["WhoisRecord"]
            created = record.get("createdDate")
            return {
                "created_date": created,
                "updated_date": record.get("updatedDate"),
                "expires_date": record.get("expiresDate"),
                "registrar": record.get("registrarName"),
                "age_years": registration_age_years(created) if created else None,
                "nameservers": (record.get("nameServers") or {}).get("hostNames") or [],
            }

        return await self._guarded(call)

    def _auth_headers(self) -> Dict[str, str]:
        # The key travels as a query parameter
        return {}
