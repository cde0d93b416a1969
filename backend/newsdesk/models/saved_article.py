from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    Boolean,
    ForeignKey,
    JSON,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from newsdesk.core.database import Base


class SavedArticle(Base):
    __tablename__ = "saved_articles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    article_id = Column(
        Integer,
        ForeignKey("news_articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    folder = Column(String, default="default")
    tags = Column(JSON, default=list)
    notes = Column(Text, nullable=True)
    priority = Column(Integer, default=0)  # 0 (low) to 5 (high)
    is_archived = Column(Boolean, default=False)
    reminder_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    article = relationship("Article")

    __table_args__ = (
        UniqueConstraint("user_id", "article_id", name="uq_saved_article_user"),
        Index("idx_saved_articles_user_folder", "user_id", "folder"),
    )
