"""Pairwise match explanations.

An explanation is generated once per unordered pair of profiles and then read
back from the store on every later request. Two concurrent misses for the same
pair may both generate and insert; the newest stored row is the one served.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from . import supabase_repo
from .config import get_settings
from .connectors import groq
from .db import get_session
from .errors import CompletionError, MatchUnavailable, StoreError
from .formatter import to_candidate
from .models import MatchExplanationRecord
from .schemas import CandidateProfile, MatchExplanation


logger = logging.getLogger(__name__)

EXPLANATION_MAX_TOKENS = 500

SYSTEM_PROMPT = (
    "You are a professional networking assistant providing insight on potential professional connections."
)


def pair_key(user_a: str, user_b: str) -> str:
    """Order-independent key for two profile ids."""
    first, second = sorted((str(user_a), str(user_b)))
    return f"{first}_{second}"


def _parse_timestamp(value: Any) -> datetime:
    parsed = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        candidate = value.strip()
        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            parsed = None
    if parsed is None:
        return datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ExplanationStore:
    async def get(self, user_a: str, user_b: str) -> Optional[MatchExplanation]:
        raise NotImplementedError

    async def add(
        self, user_a: str, user_b: str, explanation: MatchExplanation, input_summary: dict[str, Any]
    ) -> None:
        raise NotImplementedError


class SupabaseExplanationStore(ExplanationStore):
    """``match_explanations`` rows hang off a ``matches`` row for the pair.

    ``match_explanations.match_id`` references ``matches.match_id``, so a new
    explanation reuses the oldest ``matches`` row of the pair (either column
    order) or creates one with the ids sorted.
    """

    async def get(self, user_a: str, user_b: str) -> Optional[MatchExplanation]:
        matches = await supabase_repo.find_matches(user_a, user_b)
        rows = [e for m in matches for e in (m.get("explanations") or []) if e.get("explanation_text")]
        if not rows:
            return None
        newest = max(rows, key=lambda e: _parse_timestamp(e.get("created_at")))
        return MatchExplanation(
            pair_key=pair_key(user_a, user_b),
            text=newest["explanation_text"],
            model_used=newest.get("llm_model_used") or "",
            created_at=_parse_timestamp(newest.get("created_at")),
        )

    async def _match_id(self, user_a: str, user_b: str) -> str:
        matches = await supabase_repo.find_matches(user_a, user_b)
        if matches and matches[0].get("match_id"):
            return str(matches[0]["match_id"])
        first, second = sorted((str(user_a), str(user_b)))
        row = await supabase_repo.insert_match(first, second)
        if not row.get("match_id"):
            raise StoreError("matches insert returned no match_id", table="matches", operation="insert")
        return str(row["match_id"])

    async def add(
        self, user_a: str, user_b: str, explanation: MatchExplanation, input_summary: dict[str, Any]
    ) -> None:
        match_id = await self._match_id(user_a, user_b)
        await supabase_repo.insert_match_explanation(
            {
                "match_id": match_id,
                "explanation_text": explanation.text,
                "llm_model_used": explanation.model_used,
                "input_data_summary": input_summary,
                "created_at": explanation.created_at.isoformat(),
            }
        )


class SqlExplanationStore(ExplanationStore):
    """Local SQLModel table keyed by pair key (``EXPLANATION_STORE=sql``)."""

    def __init__(self, engine: Engine | None = None):
        self.engine = engine

    async def get(self, user_a: str, user_b: str) -> Optional[MatchExplanation]:
        key = pair_key(user_a, user_b)
        try:
            with get_session(self.engine) as s:
                rec = s.exec(
                    select(MatchExplanationRecord)
                    .where(MatchExplanationRecord.pair_key == key)
                    .order_by(MatchExplanationRecord.created_at.desc())
                ).first()
        except SQLAlchemyError as exc:
            raise StoreError(f"explanation lookup failed: {exc}", table="match_explanation", operation="select") from exc
        if rec is None:
            return None
        return MatchExplanation(
            pair_key=rec.pair_key,
            text=rec.explanation_text,
            model_used=rec.llm_model_used,
            created_at=rec.created_at,
        )

    async def add(
        self, user_a: str, user_b: str, explanation: MatchExplanation, input_summary: dict[str, Any]
    ) -> None:
        rec = MatchExplanationRecord(
            pair_key=pair_key(user_a, user_b),
            explanation_text=explanation.text,
            llm_model_used=explanation.model_used,
            input_summary_json=json.dumps(input_summary),
            created_at=explanation.created_at,
        )
        try:
            with get_session(self.engine) as s:
                s.add(rec)
                s.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"explanation insert failed: {exc}", table="match_explanation", operation="insert") from exc


def get_explanation_store() -> ExplanationStore:
    if get_settings().explanation_store == "sql":
        return SqlExplanationStore()
    return SupabaseExplanationStore()


def _listing(values: list[str]) -> str:
    return ", ".join(values) if values else "Not provided"


def _profile_block(label: str, p: CandidateProfile) -> str:
    return (
        f"{label}:\n"
        f"- Name: {p.name}\n"
        f"- Role: {p.role or 'Not provided'}\n"
        f"- Skills: {_listing(p.skills)}\n"
        f"- Bio: {p.bio or 'Not provided'}\n"
        f"- Location: {p.location or 'Not provided'}\n"
        f"- Education: {'; '.join(p.education) or 'Not provided'}\n"
        f"- Employment: {'; '.join(p.employment) or 'Not provided'}\n"
        f"- Networking Intents: {_listing(p.intents)}"
    )


def build_prompt(user_a: CandidateProfile, user_b: CandidateProfile) -> str:
    return (
        "Analyze the two professional profiles below and provide a detailed analysis (2-3 paragraphs) "
        "of why they would be a good match for professional networking, considering their skills, "
        "experience, background, and potential synergies.\n\n"
        f"{_profile_block('Profile 1', user_a)}\n\n"
        f"{_profile_block('Profile 2', user_b)}\n\n"
        "Focus on complementary skills, potential collaboration opportunities, and shared interests. "
        "Be specific about how they might benefit from connecting.\n"
        'Do not mention their names in your analysis - use terms like "you" and "this professional" instead.'
    )


async def _lookup(store: ExplanationStore, user_a: str, user_b: str) -> Optional[MatchExplanation]:
    try:
        return await store.get(user_a, user_b)
    except StoreError as exc:
        raise MatchUnavailable(f"explanation lookup failed for {pair_key(user_a, user_b)}") from exc


async def explain(
    user_a: CandidateProfile,
    user_b: CandidateProfile,
    *,
    store: ExplanationStore | None = None,
    regenerate: bool = False,
) -> MatchExplanation:
    store = store or get_explanation_store()
    key = pair_key(user_a.id, user_b.id)
    if not regenerate:
        cached = await _lookup(store, user_a.id, user_b.id)
        if cached is not None:
            return cached
    return await _generate(user_a, user_b, store, key)


async def _generate(
    user_a: CandidateProfile,
    user_b: CandidateProfile,
    store: ExplanationStore,
    key: str,
) -> MatchExplanation:
    settings = get_settings()
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_prompt(user_a, user_b)},
    ]
    try:
        text = await groq.chat_completion(
            messages,
            temperature=settings.explanation_temperature,
            max_tokens=EXPLANATION_MAX_TOKENS,
        )
    except CompletionError as exc:
        raise MatchUnavailable(f"completion failed for {key}: {exc.message}") from exc
    text = text.strip()
    if not text:
        raise MatchUnavailable(f"empty completion for {key}")

    explanation = MatchExplanation(
        pair_key=key,
        text=text,
        model_used=settings.groq_model,
        created_at=datetime.now(timezone.utc),
    )
    summary = {
        "user1": {"id": user_a.id, "name": user_a.name},
        "user2": {"id": user_b.id, "name": user_b.name},
    }
    try:
        await store.add(user_a.id, user_b.id, explanation, summary)
    except StoreError as exc:
        logger.error("Could not persist match explanation %s: %s", key, exc.message)
    return explanation


async def explain_match(
    user_id: str,
    target_user_id: str,
    *,
    store: ExplanationStore | None = None,
    regenerate: bool = False,
) -> MatchExplanation:
    """Load both profiles from the record store and explain the pair."""
    if not user_id or not target_user_id or user_id == target_user_id:
        raise MatchUnavailable("two distinct profile ids are required")
    store = store or get_explanation_store()
    key = pair_key(user_id, target_user_id)
    if not regenerate:
        # cache hit needs no profile reads
        cached = await _lookup(store, user_id, target_user_id)
        if cached is not None:
            return cached
    try:
        row_a = await supabase_repo.get_user_profile(user_id)
        row_b = await supabase_repo.get_user_profile(target_user_id)
    except StoreError as exc:
        raise MatchUnavailable(f"profile lookup failed: {exc.message}") from exc
    if not row_a or not row_b:
        raise MatchUnavailable("profile not found")
    user_a = to_candidate(row_a).model_copy(update={"id": user_id})
    user_b = to_candidate(row_b).model_copy(update={"id": target_user_id})
    return await _generate(user_a, user_b, store, key)
