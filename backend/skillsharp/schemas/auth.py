"""Auth Schemas — signup, login and password change payloads.

Invariants:
    - Emails lower-cased and stripped
    - Passwords 6-128 chars
    - institute_code optional on student signup, normalized upper-case
"""

from pydantic import BaseModel, EmailStr, Field, field_validator

from skillsharp.core.codes import normalize_code


class _EmailNormalized(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class SignupRequest(_EmailNormalized):
    password: str = Field(min_length=6, max_length=128)
    full_name: str = Field(min_length=1, max_length=200)
    mobile_number: str | None = Field(None, max_length=30)
    institute_code: str | None = Field(None, max_length=20)

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full_name cannot be empty or whitespace")
        return v

    @field_validator("institute_code")
    @classmethod
    def normalize_institute_code(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return normalize_code(v) or None


class InstituteSignupRequest(_EmailNormalized):
    name: str = Field(min_length=2, max_length=200)
    password: str = Field(min_length=6, max_length=128)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("name must be at least 2 characters")
        return v


class LoginRequest(_EmailNormalized):
    password: str = Field(min_length=1, max_length=128)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=6, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: str
    user_id: str
    role: str
    device_info: str
