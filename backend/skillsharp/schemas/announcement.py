"""Announcement Schemas."""

from pydantic import BaseModel, Field, model_validator

from skillsharp.schemas.content import reject_nulls


class AnnouncementCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=5000)
    contact_info: str | None = Field(None, max_length=500)
    is_active: bool = True


class AnnouncementUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    message: str | None = Field(None, min_length=1, max_length=5000)
    contact_info: str | None = Field(None, max_length=500)
    is_active: bool | None = None

    @model_validator(mode="after")
    def check_nulls(self):
        reject_nulls(self, "title", "message", "is_active")
        return self
