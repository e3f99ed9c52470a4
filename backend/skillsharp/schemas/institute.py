"""Institute Schemas — join requests and membership decisions."""

from pydantic import BaseModel, Field, field_validator

from skillsharp.core.codes import normalize_code


class JoinInstituteRequest(BaseModel):
    institute_code: str = Field(min_length=1, max_length=20)

    @field_validator("institute_code")
    @classmethod
    def normalize(cls, v: str) -> str:
        v = normalize_code(v)
        if not v:
            raise ValueError("institute_code cannot be empty")
        return v


class MembershipDecision(BaseModel):
    is_approved: bool
