from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime
from newsdesk.api.validation import (
    MinRelevanceParam,
    SearchQueryParam,
    validate_terms,
)
from newsdesk.core.auth import get_current_user_id
from newsdesk.core.database import get_db
from newsdesk.schemas.article import Article as ArticleSchema, ArticleSearchFilters
from newsdesk.services.article_store import ArticleStore

router = APIRouter()


@router.get("/search", response_model=List[ArticleSchema])
async def search_articles(
    q: str = SearchQueryParam,
    categories: Optional[List[str]] = Query(None),
    sources: Optional[List[int]] = Query(None),
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    min_relevance: Optional[float] = MinRelevanceParam,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Text search over title, summary and content, newest first."""
    try:
        filters = ArticleSearchFilters(
            categories=validate_terms(categories, "categories"),
            sources=sources,
            date_from=date_from,
            date_to=date_to,
            min_relevance=min_relevance,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(
                include_url=False, include_context=False, include_input=False
            ),
        )

    return ArticleStore(db).search(q, filters)


@router.get("/{article_id}", response_model=ArticleSchema)
async def get_article(
    article_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    article = ArticleStore(db).get(article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article
