from __future__ import annotations

from pydantic import BaseModel, Field


class UserActivity(BaseModel):
    """Display values for the dashboard's activity panels, recomputed per render."""

    last_login: str = Field(serialization_alias="lastLogin")
    member_since: str = Field(serialization_alias="memberSince")
    active_sessions: int = Field(ge=0, serialization_alias="activeSessions")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {"lastLogin": "10/19/2026", "memberSince": "3/2/2025", "activeSessions": 2}
        },
    }
