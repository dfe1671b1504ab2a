"""Shared plumbing for external lookup collaborators."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol

import httpx

from ..config import LookupSettings

LOGGER = logging.getLogger(__name__)


class ServiceError(RuntimeError):
    """Raised by :class:`HttpLookupClient` once every retry has failed."""

    def __init__(self, message: str, *, url: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a single lookup: either a payload or an error message."""

    payload: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, payload: Optional[Mapping[str, Any]] = None) -> "LookupResult":
        return cls(payload=dict(payload or {}))

    @classmethod
    def failure(cls, error: str) -> "LookupResult":
        return cls(error=error or "unknown error")


# --- Collaborator protocols ---

class EmailValidator(Protocol):
    async def validate(self, email: str) -> LookupResult:  # pragma: no cover - runtime protocol
        """Check deliverability of ``email``."""


class WhoisLookup(Protocol):
    async def lookup(self, domain: str) -> LookupResult:  # pragma: no cover - runtime protocol
        """Return registration data for ``domain``."""


class CompanyDirectory(Protocol):
    async def search(self, name: str) -> LookupResult:  # pragma: no cover - runtime protocol
        """Return firmographics for the best match of ``name``."""


class LocalBusinessDirectory(Protocol):
    async def search(
        self, name: Optional[str], phone: Optional[str], location: Optional[str]
    ) -> LookupResult:  # pragma: no cover - runtime protocol
        """Return listing data for a local business."""


class WebScraper(Protocol):
    async def scrape_company(self, domain: str) -> LookupResult:  # pragma: no cover - runtime protocol
        """Return headline content of a company website."""

    async def verify_profiles(self, profiles: Mapping[str, str]) -> LookupResult:  # pragma: no cover
        """Return the subset of ``profiles`` confirmed to exist."""


# --- HTTP base client ---

class HttpLookupClient:
    """Base class for lookup services reached over HTTP with bearer tokens."""

    name = "lookup"

    def __init__(
        self,
        settings: Optional[LookupSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings or LookupSettings(enabled=True)
        self._client = client
        self._owns_client = client is None

    @property
    def base_url(self) -> str:
        return (self.settings.base_url or "").rstrip("/")

    async def __aenter__(self) -> "HttpLookupClient":
        return self

    async def __aexit__(self, exc_type, exc, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout_seconds)
            self._owns_client = True
        return self._client

    def _auth_headers(self) -> Dict[str, str]:
        if not self.settings.api_key:
            return {}
        return {"Authorization": f"Bearer {self.settings.api_key}"}

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request, retrying with a growing delay, and decode the body."""

        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        attempts = self.settings.retry_attempts
        last_error: Optional[Exception] = None
        status_code: Optional[int] = None

        for attempt in range(1, attempts + 1):
            try:
                response = await self._get_client().request(method, url, headers=headers, **kwargs)
                response.raise_for_status()
                if "application/json" in response.headers.get("content-type", ""):
                    return response.json()
                return response.text
            except httpx.HTTPStatusError as exc:
                last_error = exc
                status_code = exc.response.status_code
            except (httpx.HTTPError, ValueError) as exc:
                last_error = exc
            LOGGER.warning("%s request attempt %s/%s failed: %s", self.name, attempt, attempts, last_error)
            if attempt < attempts:
                await asyncio.sleep(self.settings.retry_delay_seconds * attempt)

        raise ServiceError(
            f"Request failed after {attempts} attempts: {last_error}",
            url=url,
            status_code=status_code,
        )

    async def _guarded(self, call) -> LookupResult:
        """Run ``call`` and convert expected failures into a failed result."""

        try:
            return LookupResult.success(await call())
        except (ServiceError, AttributeError, KeyError, TypeError, ValueError) as exc:
            LOGGER.warning("%s lookup failed: %s", self.name, exc)
            return LookupResult.failure(str(exc))


def first_result(response: Any) -> Optional[Dict[str, Any]]:
    """Return the first entry of a ``{"results": [...]}`` response, if any."""

    if not isinstance(response, Mapping):
        return None
    results = response.get("results") or []
    return results[0] if results else None


__all__ = [
    "CompanyDirectory",
    "EmailValidator",
    "HttpLookupClient",
    "LocalBusinessDirectory",
    "LookupResult",
    "ServiceError",
    "WebScraper",
    "WhoisLookup",
    "first_result",
]
