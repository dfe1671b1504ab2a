"""Heuristic social profile URLs built from a contact's name."""
from __future__ import annotations

import re
from typing import List

_NON_ALPHA_RE = re.compile(r"[^a-z]")

LINKEDIN_PROFILE_URL = "https://www.linkedin.com/in/{username}/"


def linkedin_username_candidates(first_name: str, last_name: str) -> List[str]:
    """Common LinkedIn username patterns, most likely first."""

    first = _NON_ALPHA_RE.sub("", first_name.lower())
    last = _NON_ALPHA_RE.sub("", last_name.lower())
    return [
        f"{first}-{last}",
        f"{first}{last}",
        f"{first}.{last}",
        f"{first[:1]}{last}",
    ]


def generate_linkedin_url(first_name: str, last_name: str, company: str) -> str:
    """Guess a LinkedIn profile URL for a person.

    Only the most likely candidate is returned; the remaining candidates are
    not tried. ``company`` is accepted so callers can pass the full identity,
    but it does not influence the guess.
    """

    username = linkedin_username_candidates(first_name, last_name)[0]
    return LINKEDIN_PROFILE_URL.format(username=username)
