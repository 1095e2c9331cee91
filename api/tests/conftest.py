from __future__ import annotations

import pytest

from netmatch import config, db

GROQ_BASE = "https://groq.test/openai/v1"
SUPABASE_BASE = "https://project.supabase.test"


def _clear_caches() -> None:
    config.get_settings.cache_clear()
    db.get_engine.cache_clear()


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-groq-key")
    monkeypatch.setenv("GROQ_BASE_URL", GROQ_BASE)
    monkeypatch.setenv("GROQ_MODEL", "llama-test")
    monkeypatch.setenv("SUPABASE_URL", SUPABASE_BASE)
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.delenv("EXPLANATION_STORE", raising=False)
    monkeypatch.setenv("SEARCH_EXPLANATION_LIMIT", "5")
    _clear_caches()
    yield
    _clear_caches()


@pytest.fixture
def engine():
    engine = db.make_engine("sqlite://")
    db.init_db(engine)
    yield engine
    engine.dispose()


def _skills(*names):
    return [{"skill": {"skill_name": n}} for n in names]


def _intents(*names):
    return [{"intent": {"intent_name": n}} for n in names]


@pytest.fixture
def directory():
    """Raw ``users`` rows as PostgREST returns them with embedded joins."""
    return [
        {
            "user_id": "u-ana",
            "full_name": "Ana Ruiz",
            "role": "Frontend Engineer",
            "location": "Austin, TX",
            "bio": "Building design systems.",
            "skills": _skills("React", "TypeScript"),
            "intents": _intents("cofounder"),
        },
        {
            "user_id": "u-ben",
            "full_name": "Ben Okafor",
            "role": "Data Scientist",
            "location": "Berlin",
            "bio": None,
            "skills": _skills("Python", "React Native"),
            "intents": _intents("client"),
        },
        {
            "user_id": "u-cy",
            "full_name": "Cy Tan",
            "role": None,
            "location": "Austin",
            "bio": "Backend and infra.",
            "skills": _skills("Go", None),
            "intents": [],
        },
        {
            "user_id": "u-dee",
            "full_name": "Dee Park",
            "role": "Product Designer",
            "location": None,
            "bio": "Figma all day, some React.",
            "skills": [],
            "intents": _intents("teammate"),
        },
    ]


def completion_body(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def completion():
    return completion_body
