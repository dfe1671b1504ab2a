"""Offline lookup implementations that operate on their input alone."""
from __future__ import annotations

from typing import Optional

from ..ingestion.schema import is_valid_email
from .base import LookupResult


class StaticEmailValidator:
    """Treats every syntactically valid address as deliverable."""

    name = "static_email_validation"

    def __init__(self, provider: str = "static") -> None:
        self._provider = provider

    async def validate(self, email: str) -> LookupResult:
        valid = is_valid_email(email)
        return LookupResult.success(
            {
                "valid": valid,
                "deliverable": valid,
                "reason": "syntax_ok" if valid else "invalid_syntax",
                "risk_score": None,
                "provider": self._provider,
            }
        )


class StaticCompanyDirectory:
    """Echoes the searched name back as a minimal company record."""

    name = "static_company_directory"

    def __init__(self, industry: Optional[str] = None) -> None:
        self._industry = industry

    async def search(self, name: str) -> LookupResult:
        payload = {"company_description": f"{name} (offline record)"}
        if self._industry:
            payload["industry"] = self._industry
        return LookupResult.success(payload)
