from __future__ import annotations

import logging
from typing import Any, List

import httpx

from ..config import get_settings
from ..errors import CompletionError


logger = logging.getLogger(__name__)


async def chat_completion(
    messages: List[dict[str, str]],
    *,
    temperature: float,
    max_tokens: int,
    model: str | None = None,
) -> str:
    """Call the Groq chat completions API once and return the assistant text.

    messages: list of {role: 'system'|'user'|'assistant', content: str}

    Raises CompletionError on a missing key, transport failure, timeout,
    non-2xx status or an unexpected body. No retries.
    """
    settings = get_settings()
    model_name = model or settings.groq_model
    if not settings.groq_api_key:
        raise CompletionError("GROQ_API_KEY not configured", model=model_name)

    url = f"{settings.groq_base_url.rstrip('/')}/chat/completions"
    payload: dict[str, Any] = {
        "model": model_name,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    headers = {
        "Authorization": f"Bearer {settings.groq_api_key}",
        "Content-Type": "application/json",
    }
    try:
        async with httpx.AsyncClient(timeout=settings.completion_timeout) as client:
            r = await client.post(url, headers=headers, json=payload)
    except httpx.TimeoutException as exc:
        raise CompletionError("completion request timed out", model=model_name) from exc
    except httpx.HTTPError as exc:
        raise CompletionError(f"completion transport error: {exc}", model=model_name) from exc

    if r.status_code >= 400:
        logger.warning("Completion endpoint returned %s for model %s", r.status_code, model_name)
        raise CompletionError(
            f"completion endpoint returned HTTP {r.status_code}",
            status_code=r.status_code,
            model=model_name,
            details={"body": r.text[:500]},
        )

    try:
        data = r.json()
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise CompletionError("unexpected completion response shape", status_code=r.status_code, model=model_name) from exc
    if not isinstance(content, str):
        raise CompletionError("completion content is not text", status_code=r.status_code, model=model_name)
    return content
