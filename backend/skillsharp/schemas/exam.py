"""Exam Schemas — exam authoring, enrollment and answer payloads.

Invariants:
    - duration_minutes within 1..600
    - closes_at strictly after opens_at when both present
    - ExamUpdate never nulls title, duration_minutes or is_active
    - Answers name their question source (bank | custom)
"""

from datetime import datetime
from uuid import UUID
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from skillsharp.core.codes import normalize_code
from skillsharp.core.scoring import normalize_option
from skillsharp.schemas.content import QuestionIn, reject_nulls


def _check_window(opens_at: datetime | None, closes_at: datetime | None) -> None:
    if opens_at is not None and closes_at is not None and closes_at <= opens_at:
        raise ValueError("closes_at must be after opens_at")


class ExamCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    subject_id: UUID | None = None
    exam_date: datetime | None = None
    duration_minutes: int | None = Field(None, ge=1, le=600)
    opens_at: datetime | None = None
    closes_at: datetime | None = None

    @model_validator(mode="after")
    def validate_window(self):
        _check_window(self.opens_at, self.closes_at)
        return self


class ExamUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    exam_date: datetime | None = None
    duration_minutes: int | None = Field(None, ge=1, le=600)
    opens_at: datetime | None = None
    closes_at: datetime | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def validate_window(self):
        reject_nulls(self, "title", "duration_minutes", "is_active")
        _check_window(self.opens_at, self.closes_at)
        return self


class EnrollByCode(BaseModel):
    exam_code: str = Field(min_length=1, max_length=20)

    @field_validator("exam_code")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_code(v)


class ExamAnswerSubmit(BaseModel):
    question_id: UUID
    source: Literal["bank", "custom"]
    selected_option: str

    @field_validator("selected_option")
    @classmethod
    def normalize_selected(cls, v: str) -> str:
        return normalize_option(v)


class CustomQuestionBatch(BaseModel):
    questions: list[QuestionIn] = Field(min_length=1, max_length=100)
