from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from datetime import datetime
from newsdesk.core.auth import get_current_user_id
from newsdesk.core.database import get_db
from newsdesk.schemas.source import Source as SourceSchema
from newsdesk.services.fetch_scheduler import fetch_scheduler

router = APIRouter()


@router.get("/", response_model=List[SourceSchema])
async def load_sources(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """List active sources and whether each is due for a refetch."""
    now = datetime.utcnow()
    sources = fetch_scheduler.load_sources(db)
    return [
        SourceSchema.model_validate(source).model_copy(
            update={"is_due": fetch_scheduler.is_due(source, now)}
        )
        for source in sources
    ]
