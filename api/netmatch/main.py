from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .db import init_db
from .errors import MatchUnavailable
from .explainer import explain_match
from .logging_setup import setup_logging
from .schemas import MatchRequest, MatchResponse, SearchRequest, SearchResponse
from .search import search


logger = logging.getLogger(__name__)

settings = get_settings()
app = FastAPI(title=settings.app_name, version="0.1.0", debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup() -> None:
    setup_logging(get_settings().log_level)
    if get_settings().explanation_store == "sql":
        init_db()


@app.get("/health")
async def health() -> dict:
    current = get_settings()
    return {
        "status": "ok",
        "completion": current.completion_configured,
        "supabase": current.supabase_configured,
    }


@app.post("/search", response_model=SearchResponse, response_model_exclude_none=True)
async def post_search(payload: SearchRequest) -> SearchResponse:
    return await search(payload.query, requesting_user_id=payload.user_id)


@app.post("/match-analysis", response_model=MatchResponse, response_model_exclude_none=True)
async def post_match_analysis(payload: MatchRequest, regenerate: bool = False) -> MatchResponse:
    try:
        explanation = await explain_match(payload.user_id, payload.target_user_id, regenerate=regenerate)
    except MatchUnavailable as exc:
        logger.info("Match analysis unavailable for %s/%s: %s", payload.user_id, payload.target_user_id, exc.message)
        return MatchResponse(unavailable=True)
    return MatchResponse(analysis=explanation.text)
