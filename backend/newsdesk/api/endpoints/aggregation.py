from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from newsdesk.core.auth import get_current_user_id
from newsdesk.core.database import get_db
from newsdesk.schemas.feed import AggregationResult
from newsdesk.services.fetch_scheduler import fetch_scheduler

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)
logger = logging.getLogger(__name__)


@router.post("/run", response_model=AggregationResult)
@limiter.limit("10/minute")
async def aggregate_news(
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Fetch all due sources now.

    Always answers with counts and error strings. A run that is already in
    flight makes this return immediately with an explanatory error.
    """
    logger.info(f"User {user_id} triggered aggregation")
    return await fetch_scheduler.run_aggregation(db)
