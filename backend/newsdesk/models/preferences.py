from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from datetime import datetime
from newsdesk.core.database import Base


DEFAULT_NOTIFICATION_SETTINGS = {
    "daily_digest": True,
    "breaking_news": False,
    "weekly_summary": True,
    "digest_time": "09:00",
    "timezone": "UTC",
}


class UserNewsPreferences(Base):
    __tablename__ = "user_news_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, unique=True, index=True)

    # Declared interests
    categories = Column(JSON, default=list)
    keywords = Column(JSON, default=list)
    companies = Column(JSON, default=list)
    industries = Column(JSON, default=list)

    # Exclusions
    excluded_sources = Column(JSON, default=list)  # Source ids
    excluded_keywords = Column(JSON, default=list)  # Matched against titles

    notification_settings = Column(
        JSON, default=lambda: dict(DEFAULT_NOTIFICATION_SETTINGS)
    )
    reading_history_retention_days = Column(Integer, default=30)
    ai_personalization_enabled = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
