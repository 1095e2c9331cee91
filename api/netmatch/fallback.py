from __future__ import annotations

from typing import Sequence, TypeVar

from .formatter import DEFAULT_BIO, DEFAULT_LOCATION, DEFAULT_ROLE
from .schemas import CandidateProfile

P = TypeVar("P", bound=CandidateProfile)


def haystack(profile: CandidateProfile) -> str:
    # searched as displayed, so "professional" finds profiles without a role
    parts = [
        profile.name,
        profile.role or DEFAULT_ROLE,
        profile.location or DEFAULT_LOCATION,
        profile.bio or DEFAULT_BIO,
        " ".join(profile.skills),
    ]
    return " ".join(parts).lower()


def matches_query(profile: CandidateProfile, query: str) -> bool:
    needle = (query or "").strip().lower()
    return not needle or needle in haystack(profile)


def basic_filter(candidates: Sequence[P], query: str) -> list[P]:
    """Keep candidates whose text fields contain ``query`` (case-insensitive).

    An empty query lists everything. Input order is preserved.
    """
    return [c for c in candidates if matches_query(c, query)]
