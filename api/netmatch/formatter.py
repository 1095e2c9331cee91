from __future__ import annotations

from typing import Any, Iterable

from .schemas import CandidateProfile, SearchResult


DEFAULT_NAME = "Unknown"
DEFAULT_ROLE = "Professional"
DEFAULT_LOCATION = "Location not specified"
DEFAULT_BIO = "No bio available"


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def relation_names(items: Any, wrapper: str, field: str) -> list[str]:
    """Flatten a PostgREST join such as ``[{"skill": {"skill_name": "React"}}]``.

    Also accepts ``[{"skill_name": "React"}]`` and ``["React"]``. Null or blank
    names are dropped, duplicates keep their first position.
    """
    if not isinstance(items, list):
        return []
    names: list[str] = []
    seen: set[str] = set()
    for item in items:
        if isinstance(item, dict):
            inner = item.get(wrapper, item)
            raw = inner.get(field) if isinstance(inner, dict) else None
        else:
            raw = item
        name = _clean(raw)
        if name and name.lower() not in seen:
            seen.add(name.lower())
            names.append(name)
    return names


def skill_names(record: dict[str, Any]) -> list[str]:
    return relation_names(record.get("skills"), "skill", "skill_name")


def intent_names(record: dict[str, Any]) -> list[str]:
    return relation_names(record.get("intents"), "intent", "intent_name")


def _join_parts(*parts: tuple[str, Any]) -> str:
    text = ""
    for sep, value in parts:
        value = _clean(value)
        if value:
            text = f"{text}{sep}{value}" if text else value
    return text


def education_summaries(items: Any) -> list[str]:
    if not isinstance(items, list):
        return []
    out = []
    for e in items:
        if not isinstance(e, dict):
            continue
        line = _join_parts(("", e.get("degree")), (" in ", e.get("field_of_study")), (" at ", e.get("institution")))
        if line:
            out.append(line)
    return out


def employment_summaries(items: Any) -> list[str]:
    if not isinstance(items, list):
        return []
    out = []
    for e in items:
        if not isinstance(e, dict):
            continue
        line = _join_parts(("", e.get("position")), (" at ", e.get("company")))
        if line:
            out.append(line)
    return out


def format_result(record: dict[str, Any], match_explanation: str | None = None) -> SearchResult:
    return SearchResult(
        id=str(record.get("user_id") or record.get("id") or ""),
        name=_clean(record.get("full_name") or record.get("name")) or DEFAULT_NAME,
        role=_clean(record.get("role")) or DEFAULT_ROLE,
        location=_clean(record.get("location")) or DEFAULT_LOCATION,
        skills=skill_names(record),
        bio=_clean(record.get("bio")) or DEFAULT_BIO,
        match_explanation=match_explanation,
    )


def format_results(records: Iterable[dict[str, Any]]) -> list[SearchResult]:
    return [format_result(r) for r in records]


def to_candidate(record: dict[str, Any]) -> CandidateProfile:
    """Snapshot a raw ``users`` row for matching; no display defaults."""
    return CandidateProfile(
        id=str(record.get("user_id") or record.get("id") or ""),
        name=_clean(record.get("full_name") or record.get("name")) or DEFAULT_NAME,
        role=_clean(record.get("role")),
        location=_clean(record.get("location")),
        bio=_clean(record.get("bio")),
        skills=skill_names(record),
        intents=intent_names(record),
        education=education_summaries(record.get("education")),
        employment=employment_summaries(record.get("employment")),
    )
