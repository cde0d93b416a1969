from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import Optional
from slowapi import Limiter
from slowapi.util import get_remote_address
from newsdesk.core.auth import get_current_user_id
from newsdesk.core.database import get_db
from newsdesk.schemas.preferences import Preferences, PreferencesUpdate
from newsdesk.services.preferences import PreferenceStore

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/", response_model=Optional[Preferences])
async def get_preferences(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """The user's preferences, or null if they never set any."""
    return PreferenceStore(db).get(user_id)


@router.put("/", response_model=Preferences)
@limiter.limit("30/minute")
async def update_preferences(
    request: Request,
    changes: PreferencesUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    preferences = PreferenceStore(db).update(user_id, changes)
    if preferences is None:
        raise HTTPException(status_code=500, detail="Failed to update preferences")
    return preferences
