import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    Float,
    ForeignKey,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from newsdesk.core.database import Base


class InteractionAction(str, enum.Enum):
    VIEWED = "viewed"
    CLICKED = "clicked"
    SAVED = "saved"
    SHARED = "shared"
    HIDDEN = "hidden"
    REPORTED = "reported"


class InteractionFeedback(str, enum.Enum):
    HELPFUL = "helpful"
    NOT_HELPFUL = "not_helpful"
    IRRELEVANT = "irrelevant"


class NewsInteraction(Base):
    __tablename__ = "news_interactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    article_id = Column(
        Integer, ForeignKey("news_articles.id", ondelete="CASCADE"), nullable=False
    )
    action = Column(String, nullable=False)
    reading_time_seconds = Column(Integer, nullable=True)
    scroll_depth = Column(Float, nullable=True)  # 0.0 to 1.0
    feedback = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    article = relationship("Article")

    # Same action is recorded once per (user, article)
    __table_args__ = (
        UniqueConstraint(
            "user_id", "article_id", "action", name="uq_news_interaction_action"
        ),
        Index("idx_news_interactions_user_article", "user_id", "article_id"),
    )
