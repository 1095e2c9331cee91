"""Two-path member search.

The AI path interprets the query into a StructuredFilter and pushes it down
to the record store. Whenever that is not possible (unparseable output,
completion or store failure, no rows) the query runs as a plain substring
match over the whole directory instead. Nothing here raises to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from . import interpreter, supabase_repo
from .config import get_settings
from .connectors import groq
from .errors import CompletionError, StoreError
from .fallback import matches_query
from .formatter import format_result, format_results, intent_names, skill_names, to_candidate
from .schemas import SearchResponse, SearchResult, StructuredFilter


logger = logging.getLogger(__name__)

DEFAULT_MATCH_EXPLANATION = "Potential match based on your search criteria."
BLURB_MAX_TOKENS = 150


def matches_filter(record: Dict[str, Any], flt: StructuredFilter) -> bool:
    """Local check of the predicates pushed down by ``search_candidates``."""
    if flt.skills:
        names = [s.lower() for s in skill_names(record)]
        wanted = [s.lower() for s in flt.skills]
        if not any(w in n for w in wanted for n in names):
            return False
    if flt.location:
        if flt.location.lower() not in (record.get("location") or "").lower():
            return False
    if flt.intent:
        if not any(str(flt.intent) in i.lower() for i in intent_names(record)):
            return False
    return True


async def structured_search(flt: StructuredFilter, requesting_user_id: Optional[str]) -> List[Dict[str, Any]]:
    rows = await supabase_repo.search_candidates(flt, exclude_user_id=requesting_user_id)
    return [r for r in rows if matches_filter(r, flt)]


async def fallback_search(query: str, requesting_user_id: Optional[str]) -> List[SearchResult]:
    try:
        rows = await supabase_repo.list_candidates(exclude_user_id=requesting_user_id)
    except StoreError as exc:
        logger.warning("Directory read failed, returning no results: %s", exc.message)
        return []
    return format_results(r for r in rows if matches_query(to_candidate(r), query))


async def _blurb(query: str, result: SearchResult) -> str:
    prompt = (
        "You are a professional networking assistant. Generate a brief, personalized explanation "
        "(1-2 sentences) for why this professional might be a good match for the search below.\n\n"
        f'Search query: "{query}"\n\n'
        "Potential match information:\n"
        f"- Role: {result.role}\n"
        f"- Skills: {', '.join(result.skills) or 'Not specified'}\n"
        f"- Bio: {result.bio}\n"
        f"- Location: {result.location}\n\n"
        "Your response should ONLY be the brief explanation text, with no additional formatting."
    )
    try:
        text = await groq.chat_completion(
            [{"role": "user", "content": prompt}],
            temperature=get_settings().explanation_temperature,
            max_tokens=BLURB_MAX_TOKENS,
        )
    except CompletionError as exc:
        logger.warning("Match blurb unavailable for %s: %s", result.id, exc.message)
        return DEFAULT_MATCH_EXPLANATION
    return text.strip() or DEFAULT_MATCH_EXPLANATION


async def search(query: str, requesting_user_id: Optional[str] = None) -> SearchResponse:
    query = (query or "").strip()
    flt = await interpreter.interpret(query) if query else None

    if flt is not None:
        try:
            rows = await structured_search(flt, requesting_user_id)
        except StoreError as exc:
            logger.info("Structured search failed, falling back: %s", exc.message)
            rows = []
        if rows:
            limit = get_settings().search_explanation_limit
            results: List[SearchResult] = []
            for idx, row in enumerate(rows):
                result = format_result(row)
                if idx < limit:
                    result.match_explanation = await _blurb(query, result)
                else:
                    result.match_explanation = DEFAULT_MATCH_EXPLANATION
                results.append(result)
            return SearchResponse(results=results, interpreted_intent=interpreter.describe(flt))
        logger.info("Structured search returned no rows, falling back")
    elif query:
        logger.info("Query could not be interpreted, falling back")

    return SearchResponse(results=await fallback_search(query, requesting_user_id))
