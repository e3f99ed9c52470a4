"""Admin Schemas — block/unblock toggles and role grants."""

from typing import Literal

from pydantic import BaseModel


class ActiveUpdate(BaseModel):
    is_active: bool


class RoleUpdate(BaseModel):
    role: Literal["content_creator"] = "content_creator"
    granted: bool
