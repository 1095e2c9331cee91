from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .schemas import StructuredFilter
from .supabase_client import supabase_insert, supabase_select


USER_FIELDS = (
    "user_id,full_name,bio,location,role,"
    "skills:user_skills(skill:skills(skill_name)),"
    "intents:user_intents(intent:intents(intent_name))"
)
PROFILE_FIELDS = USER_FIELDS + ",education:user_education(*),employment:user_employment(*)"
SKILL_MATCH_FIELDS = "skill_match:user_skills!inner(skill:skills!inner(skill_name))"
INTENT_MATCH_FIELDS = "intent_match:user_intents!inner(intent:intents!inner(intent_name))"
MATCH_FIELDS = (
    "match_id,user_id_1,user_id_2,matched_at,"
    "explanations:match_explanations(explanation_id,explanation_text,llm_model_used,created_at)"
)

# PostgREST reserves these inside filter values
_RESERVED = re.compile(r"[,()\"*%\\:]")


def _pattern(term: str) -> str:
    cleaned = _RESERVED.sub(" ", term).strip()
    return f"*{cleaned}*"


def _exclude(filters: Dict[str, str], user_id: Optional[str]) -> None:
    if user_id:
        filters["user_id"] = f"neq.{user_id}"


async def list_candidates(exclude_user_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Unfiltered directory read used by the fallback path."""
    filters: Dict[str, str] = {}
    _exclude(filters, exclude_user_id)
    return await supabase_select("users", select=USER_FIELDS, filters=filters, order="full_name")


def structured_query(flt: StructuredFilter, exclude_user_id: Optional[str] = None) -> tuple[str, Dict[str, str]]:
    """Translate a StructuredFilter into a PostgREST select and filter params."""
    select = USER_FIELDS
    filters: Dict[str, str] = {}
    _exclude(filters, exclude_user_id)
    skills = [s for s in flt.skills if _RESERVED.sub("", s).strip()]
    if skills:
        select += "," + SKILL_MATCH_FIELDS
        clauses = ",".join(f"skill_name.ilike.{_pattern(s)}" for s in skills)
        filters["skill_match.skill.or"] = f"({clauses})"
    if flt.location and _RESERVED.sub("", flt.location).strip():
        filters["location"] = f"ilike.{_pattern(flt.location)}"
    if flt.intent:
        select += "," + INTENT_MATCH_FIELDS
        filters["intent_match.intent.intent_name"] = f"ilike.{_pattern(str(flt.intent))}"
    return select, filters


async def search_candidates(flt: StructuredFilter, exclude_user_id: Optional[str] = None) -> List[Dict[str, Any]]:
    select, filters = structured_query(flt, exclude_user_id)
    return await supabase_select("users", select=select, filters=filters, order="full_name")


async def get_user_profile(user_id: str) -> Optional[Dict[str, Any]]:
    rows = await supabase_select(
        "users",
        select=PROFILE_FIELDS,
        filters={"user_id": f"eq.{user_id}"},
        limit=1,
    )
    return rows[0] if rows else None


def _pair_filter(user_a: str, user_b: str) -> str:
    return (
        f"(and(user_id_1.eq.{user_a},user_id_2.eq.{user_b}),"
        f"and(user_id_1.eq.{user_b},user_id_2.eq.{user_a}))"
    )


async def find_matches(user_a: str, user_b: str) -> List[Dict[str, Any]]:
    """``matches`` rows for the pair in either column order, oldest first,
    each with its ``explanations`` embedded newest first."""
    return await supabase_select(
        "matches",
        select=MATCH_FIELDS,
        filters={
            "or": _pair_filter(user_a, user_b),
            "explanations.order": "created_at.desc",
        },
        order="matched_at",
    )


async def insert_match(user_id_1: str, user_id_2: str) -> Dict[str, Any]:
    return await supabase_insert("matches", {"user_id_1": user_id_1, "user_id_2": user_id_2})


async def insert_match_explanation(row: Dict[str, Any]) -> Dict[str, Any]:
    return await supabase_insert("match_explanations", row)
