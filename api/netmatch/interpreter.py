"""Natural-language query interpretation.

``interpret`` asks the completion endpoint to turn a free-text search into a
:class:`StructuredFilter`. Anything short of a usable JSON object (transport
errors included) comes back as ``None`` so the caller can fall back to plain
substring search.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from .config import get_settings
from .connectors import groq
from .errors import CompletionError
from .schemas import Intent, StructuredFilter


logger = logging.getLogger(__name__)

EXTRACTION_MAX_TOKENS = 300

SYSTEM_PROMPT = (
    "You convert search queries on a professional networking platform into structured filters. "
    "You reply with a single JSON object and nothing else."
)

USER_PROMPT = """Search query: "{query}"

Extract the search filters and output ONLY a JSON object with exactly these keys:
{{
  "skills": ["skill1", "skill2"],
  "location": "city or region, or null",
  "intent": "cofounder" | "client" | "teammate" | null,
  "availability": "e.g. full-time, part-time, weekends, or null",
  "workingStyle": "e.g. remote, hybrid, in-person, or null"
}}
Use an empty list for skills and null for every other field the query does not mention.
Do not include any other text, explanation or markdown."""

_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*\s*|\s*```$")
_NULL_WORDS = {"null", "none", "n/a", "any", "unspecified", "not specified"}
_INTENT_ALIASES = {
    "co-founder": Intent.COFOUNDER.value,
    "co founder": Intent.COFOUNDER.value,
    "founder": Intent.COFOUNDER.value,
    "customer": Intent.CLIENT.value,
    "team member": Intent.TEAMMATE.value,
    "team-mate": Intent.TEAMMATE.value,
}


def strip_code_fence(text: str) -> str:
    return _FENCE.sub("", text.strip()).strip()


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        return None
    cleaned = str(value).strip()
    if not cleaned or cleaned.lower() in _NULL_WORDS:
        return None
    return cleaned


def _skills(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        return []
    out: list[str] = []
    seen: set[str] = set()
    for item in value:
        name = _text(item)
        if name and name.lower() not in seen:
            seen.add(name.lower())
            out.append(name)
    return out


def _intent(value: Any) -> Optional[str]:
    name = _text(value)
    if not name:
        return None
    name = name.lower()
    name = _INTENT_ALIASES.get(name, name)
    return name if name in {i.value for i in Intent} else None


def parse_filter(content: str) -> Optional[StructuredFilter]:
    """Parse model output into a filter; ``None`` when unparseable or empty."""
    try:
        data = json.loads(strip_code_fence(content))
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    flt = StructuredFilter(
        skills=_skills(data.get("skills")),
        location=_text(data.get("location")),
        intent=_intent(data.get("intent")),
        availability=_text(data.get("availability")),
        working_style=_text(data.get("workingStyle", data.get("working_style"))),
    )
    return None if flt.is_empty() else flt


async def interpret(query: str) -> Optional[StructuredFilter]:
    if not query or not query.strip():
        return None
    settings = get_settings()
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": USER_PROMPT.format(query=query.strip())},
    ]
    try:
        content = await groq.chat_completion(
            messages,
            temperature=settings.extraction_temperature,
            max_tokens=EXTRACTION_MAX_TOKENS,
        )
    except CompletionError as exc:
        logger.warning("Query interpretation unavailable: %s", exc.message)
        return None
    flt = parse_filter(content)
    if flt is None:
        logger.info("Completion output for query interpretation was unparseable")
    return flt


def describe(flt: StructuredFilter) -> str:
    """Plain-English restatement of a filter for display next to results."""
    text = "Looking for "
    text += f"a {flt.intent}" if flt.intent else "professionals"
    if flt.skills:
        text += f" with {', '.join(flt.skills)} skills"
    if flt.location:
        text += f" in {flt.location}"
    extras = []
    if flt.availability:
        extras.append(f"available {flt.availability}")
    if flt.working_style:
        extras.append(flt.working_style)
    if extras:
        text += f" ({', '.join(extras)})"
    return text
