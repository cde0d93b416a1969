"""
Personalized feed assembly.

Ranking is page-local: preference filters and pagination run in the query
(newest first), then only the returned page is re-sorted by relevance. An
article on page 2 can therefore outscore everything on page 1. This keeps a
feed request to one bounded query and keeps pages stable as the user scrolls.
"""

from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload
from newsdesk.core.config import settings
from newsdesk.models.article import Article
from newsdesk.models.preferences import UserNewsPreferences
from newsdesk.schemas.article import Article as ArticleSchema
from newsdesk.schemas.feed import PersonalizedFeed, Recommendations
from newsdesk.services.article_store import like_pattern
from newsdesk.services.interactions import InteractionService
from newsdesk.services.preferences import PreferenceStore
from newsdesk.services.relevance import score_articles
import logging

logger = logging.getLogger(__name__)

TRENDING_WINDOW = timedelta(hours=24)
BREAKING_WINDOW = timedelta(hours=6)


def apply_preference_filters(
    query: Query, preferences: Optional[UserNewsPreferences]
) -> Query:
    """Restrict an Article query to what the user's preferences allow."""
    if preferences is None:
        return query

    if preferences.categories:
        query = query.filter(Article.in_categories(preferences.categories))

    if preferences.excluded_sources:
        query = query.filter(Article.source_id.notin_(preferences.excluded_sources))

    for keyword in preferences.excluded_keywords or []:
        query = query.filter(~Article.title.ilike(like_pattern(keyword), escape="\\"))

    return query


def _to_schema(articles: List[Article]) -> List[ArticleSchema]:
    return [ArticleSchema.model_validate(article) for article in articles]


class FeedComposer:
    def __init__(self, db: Session, now: Optional[datetime] = None):
        self.db = db
        self.now = now

    def _now(self) -> datetime:
        return self.now or datetime.utcnow()

    def _articles(self) -> Query:
        return self.db.query(Article).options(selectinload(Article.category_links))

    def get_feed(self, user_id: str, limit: int = 20, offset: int = 0) -> PersonalizedFeed:
        """
        One page of the user's feed plus recommendation buckets.

        Without preferences the feed is unfiltered and stays newest-first.
        Storage failures degrade to an empty feed.
        """
        preferences = PreferenceStore(self.db).get(user_id)

        try:
            query = apply_preference_filters(self._articles(), preferences)
            total_count = query.order_by(None).count()
            page = (
                query.order_by(Article.published_at.desc(), Article.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to get personalized feed for {user_id}: {str(e)}")
            return PersonalizedFeed()

        signals = []
        if preferences is not None and preferences.ai_personalization_enabled:
            signals = InteractionService(self.db, user_id).recent_signals(
                preferences.reading_history_retention_days or 30
            )

        scores = score_articles(page, preferences, signals, now=self._now())

        if preferences is not None:
            # Stable sort keeps newest-first order among equal scores
            page = sorted(page, key=lambda article: -scores[article.id])

        return PersonalizedFeed(
            articles=_to_schema(page),
            total_count=total_count,
            relevance_scores=scores,
            recommendations=self.get_recommendations(preferences),
        )

    def get_recommendations(
        self, preferences: Optional[UserNewsPreferences]
    ) -> Recommendations:
        now = self._now()
        limit = settings.RECOMMENDATION_LIMIT
        day_ago = now - TRENDING_WINDOW

        try:
            trending = (
                self._articles()
                .filter(Article.published_at >= day_ago)
                .order_by(Article.relevance_score.desc(), Article.published_at.desc())
                .limit(limit)
                .all()
            )
            breaking = (
                self._articles()
                .filter(Article.published_at >= now - BREAKING_WINDOW)
                .order_by(Article.published_at.desc())
                .limit(limit)
                .all()
            )
            industry = []
            if preferences is not None and preferences.industries:
                industry = (
                    self._articles()
                    .filter(
                        Article.in_categories(preferences.industries),
                        Article.published_at >= day_ago,
                    )
                    .order_by(
                        Article.relevance_score.desc(), Article.published_at.desc()
                    )
                    .limit(limit)
                    .all()
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load recommendations: {str(e)}")
            return Recommendations()

        return Recommendations(
            trending=_to_schema(trending),
            for_you=[],  # reserved
            breaking=_to_schema(breaking),
            industry=_to_schema(industry),
        )
