"""
Periodic digests of a user's most relevant articles.

Generation is idempotent. A digest whose period overlaps the requested one
short-circuits to ``None``; concurrent callers that both pass that check are
separated by the unique (user_id, digest_type, period_key) constraint, and the
loser also gets ``None``.
"""

from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from newsdesk.core.config import settings
from newsdesk.core.logging_config import log_pipeline_event
from newsdesk.core.repository import Repository
from newsdesk.models.article import Article
from newsdesk.models.digest import DigestType, NewsDigest
from newsdesk.models.preferences import UserNewsPreferences
from newsdesk.services.feed_composer import apply_preference_filters
from newsdesk.services.interactions import InteractionService
from newsdesk.services.preferences import PreferenceStore
from newsdesk.services.relevance import average_sentiment, score_articles
import logging

logger = logging.getLogger(__name__)

DIGEST_PERIODS = {
    DigestType.DAILY: timedelta(days=1),
    DigestType.WEEKLY: timedelta(days=7),
    DigestType.MONTHLY: timedelta(days=30),
}
CANDIDATE_POOL_SIZE = 200
MAX_KEY_TRENDS = 5
MAX_ACTION_ITEMS = 5


def digest_period_key(digest_type: DigestType, period_start: datetime, period_end: datetime) -> date:
    """Calendar bucket that at most one digest of a type may occupy per user."""
    day = period_end.date()
    if digest_type == DigestType.DAILY:
        return day
    if digest_type == DigestType.WEEKLY:
        return day - timedelta(days=day.weekday())
    if digest_type == DigestType.MONTHLY:
        return day.replace(day=1)
    return period_start.date()


def is_digest_due(notification_settings: Optional[dict], now: datetime) -> bool:
    """Whether the user's local digest time has passed today (now is naive UTC)."""
    notification_settings = notification_settings or {}
    if not notification_settings.get("daily_digest", True):
        return False

    try:
        zone = ZoneInfo(notification_settings.get("timezone") or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {notification_settings.get('timezone')!r}, using UTC")
        zone = ZoneInfo("UTC")

    try:
        hours, minutes = (int(p) for p in notification_settings.get("digest_time", "09:00").split(":"))
        digest_time = time(hours, minutes)
    except ValueError:
        digest_time = time(9, 0)

    local_now = now.replace(tzinfo=ZoneInfo("UTC")).astimezone(zone)
    return local_now.time() >= digest_time


class DigestGenerator:
    def __init__(self, db: Session, now: Optional[datetime] = None):
        self.db = db
        self.now = now
        self.repository = Repository(db)

    def _now(self) -> datetime:
        return self.now or datetime.utcnow()

    def generate_daily_digest(self, user_id: str) -> Optional[NewsDigest]:
        """Digest of the last 24 hours, or None if one already covers that period."""
        return self.generate_digest(user_id, DigestType.DAILY)

    def generate_digest(
        self, user_id: str, digest_type: DigestType = DigestType.DAILY
    ) -> Optional[NewsDigest]:
        digest_type = DigestType(digest_type)
        if digest_type not in DIGEST_PERIODS:
            raise ValueError(f"Cannot derive a period for {digest_type.value} digests")

        period_end = self._now()
        period_start = period_end - DIGEST_PERIODS[digest_type]

        try:
            existing = self.find_overlapping(user_id, digest_type, period_start, period_end)
        except SQLAlchemyError as e:
            logger.error(f"Failed to check existing digests for {user_id}: {str(e)}")
            return None

        if existing is not None:
            log_pipeline_event(
                "digest.skipped",
                f"{digest_type.value} digest already exists",
                user_id=user_id,
                digest_id=existing.id,
            )
            return None

        digest = self.build_digest(user_id, digest_type, period_start, period_end)

        if not self.repository.insert_unique(digest):
            log_pipeline_event(
                "digest.skipped",
                f"Concurrent {digest_type.value} digest won the insert",
                user_id=user_id,
            )
            return None

        log_pipeline_event(
            "digest.created",
            f"Created {digest_type.value} digest with {len(digest.article_ids)} articles",
            user_id=user_id,
            digest_id=digest.id,
        )
        return digest

    def find_overlapping(
        self,
        user_id: str,
        digest_type: DigestType,
        period_start: datetime,
        period_end: datetime,
    ) -> Optional[NewsDigest]:
        return (
            self.db.query(NewsDigest)
            .filter(
                NewsDigest.user_id == user_id,
                NewsDigest.digest_type == digest_type.value,
                NewsDigest.period_end > period_start,
                NewsDigest.period_start < period_end,
            )
            .first()
        )

    def build_digest(
        self,
        user_id: str,
        digest_type: DigestType,
        period_start: datetime,
        period_end: datetime,
    ) -> NewsDigest:
        """Assemble (but do not persist) a digest over [period_start, period_end)."""
        preferences = PreferenceStore(self.db).get(user_id)
        selected, candidate_count = self.select_articles(
            user_id, preferences, period_start, period_end
        )
        articles = [article for article, _ in selected]
        scores = [score for _, score in selected]

        key_trends = self.extract_key_trends(articles)
        sentiment = average_sentiment(article.sentiment for article in articles)

        return NewsDigest(
            user_id=user_id,
            digest_type=digest_type.value,
            period_start=period_start,
            period_end=period_end,
            period_key=digest_period_key(digest_type, period_start, period_end),
            article_ids=[article.id for article in articles],
            summary=self.compose_summary(
                digest_type, period_start, period_end, len(articles), key_trends
            ),
            key_trends=key_trends,
            action_items=self.collect_action_items(articles),
            personalization_score=(
                round(sum(scores) / len(scores), 2) if scores else 0.0
            ),
            was_sent=False,
            was_read=False,
            extra_metadata={
                "market_sentiment": (
                    round(sentiment, 2) if sentiment is not None else None
                ),
                "candidate_count": candidate_count,
            },
        )

    def select_articles(
        self,
        user_id: str,
        preferences: Optional[UserNewsPreferences],
        period_start: datetime,
        period_end: datetime,
    ) -> Tuple[List[Tuple[Article, float]], int]:
        """Top articles of the period scoring above the digest threshold."""
        try:
            query = (
                self.db.query(Article)
                .options(selectinload(Article.category_links))
                .filter(
                    Article.published_at >= period_start,
                    Article.published_at < period_end,
                )
            )
            candidates = (
                apply_preference_filters(query, preferences)
                .order_by(Article.published_at.desc())
                .limit(CANDIDATE_POOL_SIZE)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load digest candidates for {user_id}: {str(e)}")
            return [], 0

        signals = []
        if preferences is not None and preferences.ai_personalization_enabled:
            signals = InteractionService(self.db, user_id).recent_signals(
                preferences.reading_history_retention_days or 30
            )
        scores = score_articles(candidates, preferences, signals, now=period_end)

        ranked = sorted(
            (
                (article, scores[article.id])
                for article in candidates
                if scores[article.id] > settings.DIGEST_MIN_RELEVANCE
            ),
            key=lambda pair: (pair[1], pair[0].published_at),
            reverse=True,
        )
        return ranked[: settings.DIGEST_MAX_ARTICLES], len(candidates)

    def extract_key_trends(self, articles: List[Article]) -> List[str]:
        """Most frequent tags and categories across the selected articles."""
        counts: Counter = Counter()
        for article in articles:
            counts.update(set(article.tags or []) | set(article.categories))
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [name for name, _ in ranked[:MAX_KEY_TRENDS]]

    def collect_action_items(self, articles: List[Article]) -> List[str]:
        items: List[str] = []
        for article in articles:
            for item in article.ai_action_items or []:
                if item not in items:
                    items.append(item)
        return items[:MAX_ACTION_ITEMS]

    def compose_summary(
        self,
        digest_type: DigestType,
        period_start: datetime,
        period_end: datetime,
        article_count: int,
        key_trends: List[str],
    ) -> str:
        summary = (
            f"Your {digest_type.value} news digest for "
            f"{period_start:%b %d, %Y} - {period_end:%b %d, %Y}: "
        )
        if article_count == 0:
            return summary + "no articles matched your interests."
        summary += f"{article_count} article{'s' if article_count != 1 else ''} selected"
        if key_trends:
            summary += f", top topics: {', '.join(key_trends[:3])}"
        return summary + "."

    def get_digest(self, user_id: str, digest_id: int) -> Optional[NewsDigest]:
        try:
            return (
                self.db.query(NewsDigest)
                .filter(NewsDigest.id == digest_id, NewsDigest.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to get digest {digest_id}: {str(e)}")
            return None

    def mark_digest_as_read(self, user_id: str, digest_id: int) -> bool:
        """Set was_read once; read_at keeps the first read time."""
        return self._mark(user_id, digest_id, "was_read", "read_at")

    def mark_digest_as_sent(self, user_id: str, digest_id: int) -> bool:
        return self._mark(user_id, digest_id, "was_sent", "sent_at")

    def _mark(self, user_id: str, digest_id: int, flag: str, timestamp: str) -> bool:
        try:
            digest = self.get_digest(user_id, digest_id)
            if digest is None:
                return False
            if not getattr(digest, flag):
                setattr(digest, flag, True)
                setattr(digest, timestamp, self._now())
                self.db.commit()
            return True
        except SQLAlchemyError as e:
            logger.error(f"Failed to update digest {digest_id}: {str(e)}")
            self.db.rollback()
            return False

    def generate_daily_digests_for_all_users(self) -> Dict[str, int]:
        """Create due daily digests for every user who opted in."""
        results = {"users": 0, "created": 0, "skipped": 0, "failed": 0}
        now = self._now()

        try:
            preferences = self.db.query(UserNewsPreferences).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load digest subscribers: {str(e)}")
            return results

        for prefs in preferences:
            if not is_digest_due(prefs.notification_settings, now):
                continue
            results["users"] += 1
            try:
                if self.generate_daily_digest(prefs.user_id) is not None:
                    results["created"] += 1
                else:
                    results["skipped"] += 1
            except Exception as e:
                results["failed"] += 1
                self.db.rollback()
                logger.error(
                    f"Failed to generate digest for user {prefs.user_id}: {str(e)}"
                )

        return results
