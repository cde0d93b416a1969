from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from newsdesk.api.validation import FolderParam
from newsdesk.core.auth import get_current_user_id
from newsdesk.core.database import get_db
from newsdesk.schemas.saved_article import (
    SavedArticle as SavedArticleSchema,
    SavedArticleCreate,
    SavedArticleWithArticle,
    SaveOptions,
)
from newsdesk.services.interactions import InteractionService

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)
logger = logging.getLogger(__name__)


@router.post("/", response_model=SavedArticleSchema)
@limiter.limit("60/minute")
async def save_article(
    request: Request,
    saved_article_data: SavedArticleCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Save an article into a folder.

    Saving an already saved article updates its folder, tags and notes.
    """
    options = SaveOptions(
        **saved_article_data.model_dump(include=set(SaveOptions.model_fields))
    )
    saved = InteractionService(db, user_id).save_article(
        saved_article_data.article_id, options
    )
    if saved is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return saved


@router.get("/", response_model=List[SavedArticleWithArticle])
async def get_saved_articles(
    folder: Optional[str] = FolderParam,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Saved, non-archived articles, most recently saved first."""
    return InteractionService(db, user_id).get_saved_articles(folder)


@router.delete("/{article_id}")
@limiter.limit("60/minute")
async def remove_saved_article(
    request: Request,
    article_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if not InteractionService(db, user_id).remove_saved_article(article_id):
        raise HTTPException(status_code=404, detail="Saved article not found")
    logger.info(f"User {user_id} removed saved article {article_id}")
    return {"message": "Article removed from saved"}
