from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from slowapi import Limiter
from slowapi.util import get_remote_address
from newsdesk.core.auth import get_current_user_id
from newsdesk.core.database import get_db
from newsdesk.schemas.interaction import (
    InteractionCreate,
    InteractionOptions,
    InteractionResult,
)
from newsdesk.services.interactions import InteractionService

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.post("/", response_model=InteractionResult)
@limiter.limit("120/minute")
async def record_interaction(
    request: Request,
    interaction: InteractionCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    options = InteractionOptions(
        **interaction.model_dump(include=set(InteractionOptions.model_fields))
    )
    recorded = InteractionService(db, user_id).record_interaction(
        interaction.article_id, interaction.action, options
    )
    if not recorded:
        raise HTTPException(status_code=404, detail="Article not found")
    return InteractionResult(recorded=True)
