import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MatchExplanationRecord(SQLModel, table=True):
    __tablename__ = "match_explanation"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    pair_key: str = Field(index=True)
    explanation_text: str
    llm_model_used: str
    input_summary_json: Optional[str] = None  # JSON: {"user1": {...}, "user2": {...}}
    created_at: datetime = Field(default_factory=_utcnow, index=True)
