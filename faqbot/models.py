from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FAQRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None  # assigned by storage on insert
    category: str  # closed-set label, shared by many records
    question: str  # training example only, never read at answer time
    answer: str

    @field_validator("category", "answer")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class Prediction(BaseModel):
    label: str
    score: float  # 0..1
    backend: str  # "tfidf" | "fuzzy"


class ChatResponse(BaseModel):
    text: str
    category: str
    score: float
    matched: bool  # False when the fallback answer was used
    meta: Dict[str, Any] = Field(default_factory=dict)
