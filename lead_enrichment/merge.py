"""Utility helpers for merging enrichment results into a contact."""
from __future__ import annotations

from typing import Any, Collection, Iterable, Mapping

from .models import NormalizedContact

# Fields where a value from the upload beats a guessed one.
PRESERVED_FIELDS = ("linkedin_url",)


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def merge_enrichment(
    contact: Mapping[str, Any],
    contributions: Iterable[Mapping[str, Any]],
    *,
    preserve: Collection[str] = PRESERVED_FIELDS,
) -> NormalizedContact:
    """Return a copy of ``contact`` updated with every contribution in order.

    Later contributions overwrite earlier ones and the contact's own values,
    except for the ``preserve`` fields the contact already filled in.
    """

    merged = dict(contact)
    kept = {key for key in preserve if _has_value(contact.get(key))}
    for data in contributions:
        merged.update((key, value) for key, value in data.items() if key not in kept)
    return merged


__all__ = ["PRESERVED_FIELDS", "merge_enrichment"]
