from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload
from newsdesk.core.repository import Repository
from newsdesk.models.article import Article
from newsdesk.models.interaction import InteractionAction, NewsInteraction
from newsdesk.models.saved_article import SavedArticle
from newsdesk.schemas.interaction import InteractionOptions
from newsdesk.schemas.saved_article import SaveOptions
from newsdesk.services.relevance import InteractionSignal, action_weight
import logging

logger = logging.getLogger(__name__)

ENGAGEMENT_COUNTERS = {
    InteractionAction.VIEWED.value: "views",
    InteractionAction.CLICKED.value: "clicks",
    InteractionAction.SAVED.value: "saves",
    InteractionAction.SHARED.value: "shares",
}


class InteractionService:
    """Reading history and saved articles of one user."""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id
        self.repository = Repository(db)

    def _article_exists(self, article_id: int) -> bool:
        return (
            self.db.query(Article.id).filter(Article.id == article_id).first()
            is not None
        )

    def record_interaction(
        self,
        article_id: int,
        action: InteractionAction,
        options: Optional[InteractionOptions] = None,
    ) -> bool:
        """
        Record an action on an article. Repeating an action updates the existing
        row. The article's base relevance and engagement counters are refreshed.
        """
        options = options or InteractionOptions()
        action = InteractionAction(action)

        try:
            if not self._article_exists(article_id):
                logger.warning(
                    f"User {self.user_id} interacted with unknown article {article_id}"
                )
                return False

            values = {
                "user_id": self.user_id,
                "article_id": article_id,
                "action": action.value,
                "reading_time_seconds": options.reading_time_seconds,
                "scroll_depth": options.scroll_depth,
                "feedback": options.feedback.value if options.feedback else None,
                "notes": options.notes,
            }
            # A repeat without details must not erase earlier details
            self.repository.upsert_by_key(
                NewsInteraction,
                values,
                conflict_keys=("user_id", "article_id", "action"),
                update_columns=[k for k, v in values.items() if v is not None],
            )
            self._refresh_article_metrics(article_id)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to record interaction: {str(e)}")
            self.db.rollback()
            return False

        logger.debug(f"User {self.user_id} {action.value} article {article_id}")
        return True

    def _refresh_article_metrics(self, article_id: int) -> None:
        counts = dict(
            self.db.query(NewsInteraction.action, func.count(NewsInteraction.id))
            .filter(NewsInteraction.article_id == article_id)
            .group_by(NewsInteraction.action)
            .all()
        )
        total = sum(counts.values())

        article = (
            self.db.query(Article)
            .filter(Article.id == article_id)
            .populate_existing()
            .one()
        )
        if total:
            weighted = sum(action_weight(a) * n for a, n in counts.items())
            article.relevance_score = round(weighted / total, 4)

        metrics = dict(article.engagement_metrics or {})
        for action, counter in ENGAGEMENT_COUNTERS.items():
            metrics[counter] = counts.get(action, 0)
        article.engagement_metrics = metrics

    def recent_signals(self, retention_days: int) -> List[InteractionSignal]:
        """Interactions inside the retention window, joined with their articles."""
        since = datetime.utcnow() - timedelta(days=retention_days)
        try:
            interactions = (
                self.db.query(NewsInteraction)
                .options(
                    joinedload(NewsInteraction.article).selectinload(
                        Article.category_links
                    )
                )
                .filter(
                    NewsInteraction.user_id == self.user_id,
                    NewsInteraction.created_at >= since,
                )
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load interactions for {self.user_id}: {str(e)}")
            return []

        return [
            InteractionSignal(
                action=interaction.action,
                categories=interaction.article.categories if interaction.article else [],
                sentiment=interaction.article.sentiment if interaction.article else None,
                reading_time_seconds=interaction.reading_time_seconds,
            )
            for interaction in interactions
        ]

    def save_article(
        self, article_id: int, options: Optional[SaveOptions] = None
    ) -> Optional[SavedArticle]:
        """Save (or re-save, updating folder/tags/notes) an article for the user."""
        options = options or SaveOptions()

        try:
            if not self._article_exists(article_id):
                return None

            self.repository.upsert_by_key(
                SavedArticle,
                {
                    "user_id": self.user_id,
                    "article_id": article_id,
                    "folder": options.folder,
                    "tags": options.tags,
                    "notes": options.notes,
                    "priority": options.priority,
                    "reminder_date": options.reminder_date,
                    "updated_at": datetime.utcnow(),
                },
                conflict_keys=("user_id", "article_id"),
            )
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save article {article_id}: {str(e)}")
            self.db.rollback()
            return None

        self.record_interaction(article_id, InteractionAction.SAVED)

        logger.info(f"User {self.user_id} saved article {article_id}")
        return (
            self.db.query(SavedArticle)
            .filter(
                SavedArticle.user_id == self.user_id,
                SavedArticle.article_id == article_id,
            )
            .populate_existing()
            .first()
        )

    def get_saved_articles(self, folder: Optional[str] = None) -> List[SavedArticle]:
        try:
            query = (
                self.db.query(SavedArticle)
                .options(
                    joinedload(SavedArticle.article).selectinload(
                        Article.category_links
                    )
                )
                .filter(
                    SavedArticle.user_id == self.user_id,
                    SavedArticle.is_archived == False,
                )
            )
            if folder:
                query = query.filter(SavedArticle.folder == folder)
            return query.order_by(SavedArticle.created_at.desc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to get saved articles: {str(e)}")
            return []

    def remove_saved_article(self, article_id: int) -> bool:
        try:
            deleted = (
                self.db.query(SavedArticle)
                .filter(
                    SavedArticle.user_id == self.user_id,
                    SavedArticle.article_id == article_id,
                )
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to remove saved article: {str(e)}")
            self.db.rollback()
            return False
        return deleted > 0
