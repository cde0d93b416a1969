"""
Article normalization and idempotent persistence.

Normalization enriches a parsed feed item (summary fallback, tags, sentiment,
merged categories); the store upserts it keyed on (source_id, external_id) so
re-fetching a feed updates rows in place instead of duplicating them.
"""

import hashlib
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from bs4 import BeautifulSoup
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from newsdesk.core.config import settings
from newsdesk.core.repository import Repository
from newsdesk.models.article import Article, ArticleCategory
from newsdesk.models.source import Source
from newsdesk.schemas.article import ArticleSearchFilters
from newsdesk.services.feed_parser import ParsedArticle
import logging

logger = logging.getLogger(__name__)

# Neutral starting point, refined later by interactions and per-user scoring
BASE_RELEVANCE_SCORE = 0.5

TAG_KEYWORDS = [
    "ai",
    "machine learning",
    "blockchain",
    "cloud",
    "cybersecurity",
    "startup",
    "funding",
    "ipo",
    "acquisition",
    "layoffs",
    "remote work",
    "hybrid",
    "career",
    "hiring",
    "interview",
]

POSITIVE_WORDS = [
    "success",
    "growth",
    "innovation",
    "breakthrough",
    "opportunity",
    "rising",
    "profit",
]
NEGATIVE_WORDS = ["layoff", "decline", "loss", "risk", "threat", "falling", "crisis"]
SENTIMENT_STEP = 0.2

# Columns a re-fetch may overwrite. Relevance, engagement and AI fields are
# owned by later stages and survive re-fetches.
REFETCH_UPDATE_COLUMNS = [
    "title",
    "summary",
    "content",
    "author",
    "published_at",
    "url",
    "image_url",
    "tags",
    "sentiment",
    "metadata",
    "updated_at",
]


def generate_external_id(url: str) -> str:
    """Stable identity for an article: SHA-256 of its canonical URL."""
    return hashlib.sha256(url.strip().encode("utf-8")).hexdigest()


def strip_html(text: Optional[str]) -> str:
    if not text:
        return ""
    return BeautifulSoup(text, "html.parser").get_text(" ", strip=True)


def generate_summary(content: Optional[str], max_length: Optional[int] = None) -> str:
    """First max_length characters of the stripped content, ellipsised when cut."""
    max_length = max_length or settings.SUMMARY_MAX_LENGTH
    cleaned = strip_html(content)
    if len(cleaned) > max_length:
        return cleaned[: max_length - 3] + "..."
    return cleaned


def merge_categories(*groups: Iterable[str]) -> List[str]:
    """Order-preserving union of category lists."""
    merged: List[str] = []
    for group in groups:
        for name in group or []:
            name = name.strip()
            if name and name not in merged:
                merged.append(name)
    return merged


def extract_tags(parsed: ParsedArticle) -> List[str]:
    tags = [t.strip().lower() for t in parsed.tags if t and t.strip()]

    text = f"{parsed.title} {parsed.summary or ''} {parsed.content or ''}".lower()
    tags.extend(keyword for keyword in TAG_KEYWORDS if keyword in text)

    return list(dict.fromkeys(tags))


def analyze_sentiment(parsed: ParsedArticle) -> float:
    """Vocabulary heuristic: +0.2 per positive word, -0.2 per negative word, in [-1, 1]."""
    text = f"{parsed.title} {parsed.summary or ''}".lower()

    sentiment = 0.0
    sentiment += SENTIMENT_STEP * sum(1 for word in POSITIVE_WORDS if word in text)
    sentiment -= SENTIMENT_STEP * sum(1 for word in NEGATIVE_WORDS if word in text)

    return round(max(-1.0, min(1.0, sentiment)), 2)


class ArticleNormalizer:
    def process(self, source: Source, parsed: ParsedArticle) -> Dict[str, Any]:
        """Turn a parsed item into the column values of a stored article."""
        now = datetime.utcnow()
        return {
            "source_id": source.id,
            "external_id": generate_external_id(parsed.url),
            "title": parsed.title,
            "summary": parsed.summary or generate_summary(parsed.content),
            "content": parsed.content,
            "author": parsed.author,
            "published_at": parsed.published_at or now,
            "url": parsed.url,
            "image_url": parsed.image_url,
            "categories": merge_categories(source.categories, parsed.categories),
            "tags": extract_tags(parsed),
            "sentiment": analyze_sentiment(parsed),
            "relevance_score": BASE_RELEVANCE_SCORE,
            "metadata": {
                "source": source.name,
                "original_categories": list(parsed.categories),
            },
            "updated_at": now,
        }


class ArticleStore:
    def __init__(self, db: Session):
        self.db = db
        self.repository = Repository(db)
        self.normalizer = ArticleNormalizer()

    def save(self, source_id: int, values: Dict[str, Any]) -> bool:
        """
        Upsert one normalized article on (source_id, external_id).

        Returns:
            True if the row was written, False if the write failed.
        """
        values = dict(values, source_id=source_id)
        categories = values.pop("categories", [])

        try:
            self.repository.upsert_by_key(
                Article,
                values,
                conflict_keys=("source_id", "external_id"),
                update_columns=REFETCH_UPDATE_COLUMNS,
            )
            article = (
                self.db.query(Article)
                .filter_by(source_id=source_id, external_id=values["external_id"])
                .populate_existing()
                .one()
            )
            self._sync_categories(article, categories)
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            logger.error(f"Skipping article {values.get('url')}: {str(e)}")
            self.db.rollback()
            return False

    def _sync_categories(self, article: Article, categories: List[str]) -> None:
        wanted = set(categories)
        current = {link.name for link in article.category_links}
        for link in list(article.category_links):
            if link.name not in wanted:
                article.category_links.remove(link)
        for name in categories:
            if name not in current:
                article.category_links.append(ArticleCategory(name=name))

    def save_all(self, source: Source, parsed_articles: List[ParsedArticle]) -> int:
        """Normalize and store a batch; failures on single articles are skipped."""
        saved = 0
        for parsed in parsed_articles:
            values = self.normalizer.process(source, parsed)
            if self.save(source.id, values):
                saved += 1
        logger.info(f"Stored {saved}/{len(parsed_articles)} articles from {source.name}")
        return saved

    def get(self, article_id: int) -> Optional[Article]:
        try:
            return self.db.query(Article).filter(Article.id == article_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load article {article_id}: {str(e)}")
            return None

    def search(
        self, query: str, filters: Optional[ArticleSearchFilters] = None
    ) -> List[Article]:
        """Case-insensitive text search over title, summary and content."""
        filters = filters or ArticleSearchFilters()
        pattern = like_pattern(query)

        try:
            q = (
                self.db.query(Article)
                .options(selectinload(Article.category_links))
                .filter(
                    or_(
                        Article.title.ilike(pattern, escape="\\"),
                        Article.summary.ilike(pattern, escape="\\"),
                        Article.content.ilike(pattern, escape="\\"),
                    )
                )
            )

            if filters.categories:
                q = q.filter(Article.in_categories(filters.categories))
            if filters.date_from:
                q = q.filter(Article.published_at >= filters.date_from)
            if filters.date_to:
                q = q.filter(Article.published_at <= filters.date_to)
            if filters.sources:
                q = q.filter(Article.source_id.in_(filters.sources))
            if filters.min_relevance is not None:
                q = q.filter(Article.relevance_score >= filters.min_relevance)

            return (
                q.order_by(Article.published_at.desc())
                .limit(settings.SEARCH_RESULT_LIMIT)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to search articles: {str(e)}")
            return []


def like_pattern(term: str) -> str:
    """Substring LIKE pattern with wildcards in the term escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
