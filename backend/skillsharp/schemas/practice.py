"""Practice Schemas — answer checks and chapter test submissions."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from skillsharp.core.scoring import normalize_option


class AnswerCheck(BaseModel):
    mcq_id: UUID
    selected_option: str

    @field_validator("selected_option")
    @classmethod
    def normalize_selected(cls, v: str) -> str:
        return normalize_option(v)


class PracticeSubmission(BaseModel):
    """Answers keyed by MCQ id. Questions left out count as skipped."""
    answers: dict[UUID, str] = Field(default_factory=dict)
    started_at: datetime | None = None

    @field_validator("answers")
    @classmethod
    def normalize_answers(cls, v: dict[UUID, str]) -> dict[UUID, str]:
        return {mcq_id: normalize_option(option) for mcq_id, option in v.items()}
