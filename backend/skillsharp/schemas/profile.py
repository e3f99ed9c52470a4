"""Profile Schemas — self-service profile edits and theme preference.

Invariants:
    - Theme ids must exist in core.themes catalogs
"""

from pydantic import BaseModel, Field, field_validator

from skillsharp.core.themes import is_valid_color_theme, is_valid_bg_theme


class ProfileUpdate(BaseModel):
    full_name: str | None = Field(None, min_length=1, max_length=200)
    mobile_number: str | None = Field(None, max_length=30)


class ThemeUpdate(BaseModel):
    color_theme: str | None = None
    bg_theme: str | None = None

    @field_validator("color_theme")
    @classmethod
    def check_color(cls, v: str | None) -> str | None:
        if v is not None and not is_valid_color_theme(v):
            raise ValueError(f"unknown color theme '{v}'")
        return v

    @field_validator("bg_theme")
    @classmethod
    def check_bg(cls, v: str | None) -> str | None:
        if v is not None and not is_valid_bg_theme(v):
            raise ValueError(f"unknown background theme '{v}'")
        return v
