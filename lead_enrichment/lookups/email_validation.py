"""Email deliverability checks through emailvalidation.io."""
from __future__ import annotations

from typing import Any, Dict

from .base import HttpLookupClient, LookupResult


class EmailValidationClient(HttpLookupClient):
    name = "email_validation"

    async def validate(self, email: str) -> LookupResult:
        async def call() -> Dict[str, Any]:
            response = await self._request("POST", f"{self.base_url}/email", json={"email": email})
            return {
                "valid": bool(response.get("valid")),
                "deliverable": bool(response.get("deliverable")),
                "reason": response.get("reason") or "unknown",
                "risk_score": response.get("risk_score"),
                "provider": response.get("provider"),
            }

        return await self._guarded(call)
