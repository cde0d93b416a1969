import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    Float,
    JSON,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from newsdesk.core.config import settings
from newsdesk.core.database import Base


class SourceType(str, enum.Enum):
    RSS = "rss"
    API = "api"
    SCRAPER = "scraper"
    NEWSLETTER = "newsletter"


class Source(Base):
    __tablename__ = "news_sources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    url = Column(String, nullable=False, unique=True)  # Origin site
    feed_url = Column(String, nullable=True)  # RSS/API endpoint, falls back to url
    source_type = Column(String, nullable=False, default=SourceType.RSS.value)
    categories = Column(JSON, default=list)  # Category hints merged into articles
    reliability_score = Column(Float, default=0.8)  # 0.0 to 1.0
    is_active = Column(Boolean, default=True, index=True)
    last_fetched = Column(DateTime, nullable=True)  # Last successful fetch
    fetch_frequency_minutes = Column(
        Integer, nullable=False, default=lambda: settings.DEFAULT_FETCH_CADENCE_MINUTES
    )
    extra_metadata = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    articles = relationship(
        "Article", back_populates="source", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("fetch_frequency_minutes > 0", name="ck_news_sources_cadence"),
        CheckConstraint(
            "source_type IN ('rss', 'api', 'scraper', 'newsletter')",
            name="ck_news_sources_type",
        ),
    )
