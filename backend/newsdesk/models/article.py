from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Float,
    JSON,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from typing import Iterable, List
from newsdesk.core.database import Base


class Article(Base):
    __tablename__ = "news_articles"

    id = Column(Integer, primary_key=True, index=True)
    source_id = Column(
        Integer, ForeignKey("news_sources.id", ondelete="CASCADE"), nullable=False
    )
    external_id = Column(String, nullable=False)  # Stable hash of the canonical URL

    # Parsed feed data
    title = Column(String, nullable=False)
    summary = Column(Text)
    content = Column(Text)
    author = Column(String)
    published_at = Column(DateTime, index=True)
    url = Column(String, nullable=False)
    image_url = Column(String)

    # Enrichment
    tags = Column(JSON, default=list)
    sentiment = Column(Float, nullable=True)  # -1.0 to 1.0
    relevance_score = Column(Float, default=0.5, index=True)  # Base, refined by interactions
    engagement_metrics = Column(JSON, default=dict)  # views, clicks, saves, shares
    ai_summary = Column(Text)
    ai_key_points = Column(JSON, default=list)
    ai_action_items = Column(JSON, default=list)
    extra_metadata = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    source = relationship("Source", back_populates="articles")
    category_links = relationship(
        "ArticleCategory",
        back_populates="article",
        cascade="all, delete-orphan",
        order_by="ArticleCategory.id",
    )

    # (source_id, external_id) is the deduplication key
    __table_args__ = (
        UniqueConstraint(
            "source_id", "external_id", name="uq_news_articles_source_external"
        ),
    )

    @property
    def categories(self) -> List[str]:
        return [link.name for link in self.category_links]

    @categories.setter
    def categories(self, names: Iterable[str]) -> None:
        wanted = list(dict.fromkeys(names))
        existing = {link.name: link for link in self.category_links}
        self.category_links = [
            existing.get(name) or ArticleCategory(name=name) for name in wanted
        ]

    @classmethod
    def in_categories(cls, names: Iterable[str]):
        """Filter clause: article has at least one of the given categories."""
        return cls.id.in_(
            select(ArticleCategory.article_id).where(
                ArticleCategory.name.in_(list(names))
            )
        )


class ArticleCategory(Base):
    """One category label of an article, kept as rows so feeds can filter on it."""

    __tablename__ = "news_article_categories"

    id = Column(Integer, primary_key=True)
    article_id = Column(
        Integer,
        ForeignKey("news_articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String, nullable=False, index=True)

    article = relationship("Article", back_populates="category_links")

    __table_args__ = (
        UniqueConstraint("article_id", "name", name="uq_news_article_category"),
    )
