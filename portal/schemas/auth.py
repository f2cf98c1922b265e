from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class SessionUser(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    image: str | None = None


class ServerSession(BaseModel):
    """The signed-in visitor as seen by server-side handlers."""

    user: SessionUser | None = None
    expires: datetime
    session_token: str | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "user": {"id": "4f1c...", "name": "Ada", "email": "ada@example.com", "image": None},
                "expires": "2026-11-18T12:00:00Z",
            }
        }
    }

    def public_dict(self) -> dict:
        """Shape returned by ``GET /api/auth/session``; the persisted token stays server side."""

        return self.model_dump(mode="json", exclude={"session_token"})


class CsrfResponse(BaseModel):
    csrfToken: str


class ProviderOut(BaseModel):
    id: str
    name: str
    type: str
    signinUrl: str
    callbackUrl: str
