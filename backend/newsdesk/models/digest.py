import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    Boolean,
    Float,
    JSON,
    UniqueConstraint,
)
from datetime import datetime
from newsdesk.core.database import Base


class DigestType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class NewsDigest(Base):
    __tablename__ = "news_digests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    digest_type = Column(String, nullable=False)
    period_start = Column(DateTime, nullable=False)
    period_end = Column(DateTime, nullable=False)
    # Calendar bucket of the period (day / ISO week start / month start).
    # Unique per user and type so concurrent generation cannot insert twice.
    period_key = Column(Date, nullable=False)

    article_ids = Column(JSON, default=list)
    summary = Column(Text, nullable=False)
    key_trends = Column(JSON, default=list)
    action_items = Column(JSON, default=list)
    personalization_score = Column(Float, nullable=True)

    # Monotonic delivery state
    was_sent = Column(Boolean, default=False)
    sent_at = Column(DateTime, nullable=True)
    was_read = Column(Boolean, default=False)
    read_at = Column(DateTime, nullable=True)
    user_feedback = Column(String, nullable=True)

    extra_metadata = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint(
            "user_id", "digest_type", "period_key", name="uq_news_digest_period"
        ),
    )
