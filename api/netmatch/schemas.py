from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Intent(str, Enum):
    COFOUNDER = "cofounder"
    CLIENT = "client"
    TEAMMATE = "teammate"


class StructuredFilter(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    skills: list[str] = []
    location: Optional[str] = None
    intent: Optional[Intent] = None
    availability: Optional[str] = None
    working_style: Optional[str] = Field(default=None, alias="workingStyle")

    def is_empty(self) -> bool:
        return not (self.skills or self.location or self.intent or self.availability or self.working_style)


class CandidateProfile(BaseModel):
    id: str
    name: str
    role: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: list[str] = []  # unique, in relation order
    intents: list[str] = []
    education: list[str] = []  # e.g. "BSc in Physics at MIT"
    employment: list[str] = []  # e.g. "Engineer at Acme"


class SearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    role: str
    location: str
    skills: list[str] = []
    bio: str
    match_explanation: Optional[str] = Field(default=None, alias="matchExplanation")


class MatchExplanation(BaseModel):
    pair_key: str
    text: str
    model_used: str
    created_at: datetime


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str = ""
    user_id: Optional[str] = Field(default=None, alias="userId")


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    results: list[SearchResult] = []
    interpreted_intent: Optional[str] = Field(default=None, alias="interpretedIntent")


class MatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    target_user_id: str = Field(alias="targetUserId")


class MatchResponse(BaseModel):
    analysis: Optional[str] = None
    unavailable: Optional[bool] = None
