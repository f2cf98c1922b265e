from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..deps.auth import require_session
from ..schemas.activity import UserActivity
from ..schemas.auth import ServerSession
from ..services.activity import get_user_activity

router = APIRouter(prefix="/api/v1/activity", tags=["activity"])


@router.get("", response_model=UserActivity, summary="Activity summary for the signed-in user")
def api_activity(session: ServerSession = Depends(require_session), db: Session = Depends(get_db)):
    return get_user_activity(db, session.user.id or "")
