from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from newsdesk.api.validation import LimitParam, SkipParam
from newsdesk.core.auth import get_current_user_id
from newsdesk.core.database import get_db
from newsdesk.schemas.feed import PersonalizedFeed
from newsdesk.services.feed_composer import FeedComposer

router = APIRouter()


@router.get("/", response_model=PersonalizedFeed)
async def get_personalized_feed(
    limit: int = LimitParam,
    offset: int = SkipParam,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    One page of the user's feed.

    Pagination is newest-first; articles within the page are then ordered by
    the user's relevance score.
    """
    return FeedComposer(db).get_feed(user_id, limit=limit, offset=offset)
