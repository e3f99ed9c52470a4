"""Content Schemas — subjects, chapters and bank MCQs.

Invariants:
    - correct_option normalized to "a".."d"
    - key_points stripped of blank entries
    - Batch MCQ creation requires 1..100 questions
    - Update payloads may omit a NOT NULL field but never set it to null
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from skillsharp.core.scoring import normalize_option


def reject_nulls(model: BaseModel, *fields: str) -> None:
    """Raise when a field that maps to a NOT NULL column was sent as null."""
    nulls = [f for f in fields if f in model.model_fields_set and getattr(model, f) is None]
    if nulls:
        raise ValueError(f"{', '.join(nulls)} cannot be null")


class SubjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)


class SubjectUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)

    @model_validator(mode="after")
    def check_nulls(self):
        reject_nulls(self, "name")
        return self


def _clean_points(points: list[str] | None) -> list[str] | None:
    if points is None:
        return None
    return [p.strip() for p in points if p and p.strip()]


class ChapterCreate(BaseModel):
    subject_id: UUID
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    key_points: list[str] = Field(default_factory=list, max_length=50)
    order_index: int = Field(0, ge=0)
    is_premium: bool = False

    @field_validator("key_points")
    @classmethod
    def clean_key_points(cls, v: list[str]) -> list[str]:
        return _clean_points(v) or []


class ChapterUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    key_points: list[str] | None = Field(None, max_length=50)
    order_index: int | None = Field(None, ge=0)
    is_premium: bool | None = None

    @field_validator("key_points")
    @classmethod
    def clean_key_points(cls, v: list[str] | None) -> list[str] | None:
        return _clean_points(v)

    @model_validator(mode="after")
    def check_nulls(self):
        reject_nulls(self, "name", "key_points", "order_index", "is_premium")
        return self


class QuestionIn(BaseModel):
    """One MCQ as typed into a form or uploaded."""
    question: str = Field(min_length=1, max_length=5000)
    option_a: str = Field(min_length=1, max_length=1000)
    option_b: str = Field(min_length=1, max_length=1000)
    option_c: str = Field(min_length=1, max_length=1000)
    option_d: str = Field(min_length=1, max_length=1000)
    correct_option: str
    explanation: str | None = Field(None, max_length=5000)

    @field_validator("correct_option")
    @classmethod
    def normalize_correct_option(cls, v: str) -> str:
        return normalize_option(v)


class McqBatchCreate(BaseModel):
    chapter_id: UUID
    mcqs: list[QuestionIn] = Field(min_length=1, max_length=100)


class McqUpdate(BaseModel):
    chapter_id: UUID | None = None
    question: str | None = Field(None, min_length=1, max_length=5000)
    option_a: str | None = Field(None, min_length=1, max_length=1000)
    option_b: str | None = Field(None, min_length=1, max_length=1000)
    option_c: str | None = Field(None, min_length=1, max_length=1000)
    option_d: str | None = Field(None, min_length=1, max_length=1000)
    correct_option: str | None = None
    explanation: str | None = Field(None, max_length=5000)

    @field_validator("correct_option")
    @classmethod
    def normalize_correct_option(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return normalize_option(v)
