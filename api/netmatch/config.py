from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


def _load_env() -> None:
    base_path = Path(__file__).resolve()
    candidates = [
        base_path.parents[1] / ".env",  # api/.env
        base_path.parents[2] / ".env",  # repo root .env
    ]
    for path in candidates:
        if path.exists():
            load_dotenv(dotenv_path=path, override=False)
    load_dotenv(override=False)


_load_env()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


@dataclass
class Settings:
    # Base
    app_name: str = "netmatch-api"
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # CORS/frontends
    cors_origins: list[str] = field(
        default_factory=lambda: os.getenv(
            "CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"
        ).split(",")
    )

    # Explanation store: "supabase" (matches/match_explanations) or "sql" (DATABASE_URL)
    explanation_store: str = field(
        default_factory=lambda: os.getenv("EXPLANATION_STORE", "supabase").strip().lower()
    )
    db_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./netmatch.db"))

    # Supabase record store
    supabase_url: str | None = field(default_factory=lambda: os.getenv("SUPABASE_URL"))
    supabase_key: str | None = field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    )
    store_timeout: float = field(default_factory=lambda: _env_float("STORE_TIMEOUT", 20.0))

    # Completion endpoint (Groq, OpenAI-compatible)
    groq_api_key: str | None = field(default_factory=lambda: os.getenv("GROQ_API_KEY"))
    groq_base_url: str = field(
        default_factory=lambda: os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
    )
    groq_model: str = field(default_factory=lambda: os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile"))
    completion_timeout: float = field(default_factory=lambda: _env_float("COMPLETION_TIMEOUT", 30.0))
    extraction_temperature: float = field(default_factory=lambda: _env_float("EXTRACTION_TEMPERATURE", 0.1))
    explanation_temperature: float = field(default_factory=lambda: _env_float("EXPLANATION_TEMPERATURE", 0.7))

    # Search
    search_explanation_limit: int = field(
        default_factory=lambda: int(os.getenv("SEARCH_EXPLANATION_LIMIT", "5"))
    )

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def completion_configured(self) -> bool:
        return bool(self.groq_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
