from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List
import re

DIGEST_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class NotificationSettings(BaseModel):
    daily_digest: bool = True
    breaking_news: bool = False
    weekly_summary: bool = True
    digest_time: str = "09:00"
    timezone: str = "UTC"

    @field_validator("digest_time")
    @classmethod
    def validate_digest_time(cls, v: str) -> str:
        if not DIGEST_TIME_PATTERN.match(v):
            raise ValueError("digest_time must be HH:MM (24h)")
        return v


class NotificationSettingsUpdate(BaseModel):
    daily_digest: Optional[bool] = None
    breaking_news: Optional[bool] = None
    weekly_summary: Optional[bool] = None
    digest_time: Optional[str] = None
    timezone: Optional[str] = None

    @field_validator("digest_time")
    @classmethod
    def validate_digest_time(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not DIGEST_TIME_PATTERN.match(v):
            raise ValueError("digest_time must be HH:MM (24h)")
        return v


def _normalize_terms(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    cleaned = [v.strip() for v in values if v and v.strip()]
    return list(dict.fromkeys(cleaned))


class PreferencesUpdate(BaseModel):
    """Partial update; only fields that are set are written."""

    categories: Optional[List[str]] = None
    keywords: Optional[List[str]] = None
    companies: Optional[List[str]] = None
    industries: Optional[List[str]] = None
    excluded_sources: Optional[List[int]] = None
    excluded_keywords: Optional[List[str]] = None
    notification_settings: Optional[NotificationSettingsUpdate] = None
    reading_history_retention_days: Optional[int] = Field(default=None, ge=1, le=365)
    ai_personalization_enabled: Optional[bool] = None

    @field_validator(
        "categories",
        "keywords",
        "companies",
        "industries",
        "excluded_keywords",
    )
    @classmethod
    def normalize_terms(cls, v):
        return _normalize_terms(v)


class Preferences(BaseModel):
    id: int
    user_id: str
    categories: List[str] = []
    keywords: List[str] = []
    companies: List[str] = []
    industries: List[str] = []
    excluded_sources: List[int] = []
    excluded_keywords: List[str] = []
    notification_settings: NotificationSettings
    reading_history_retention_days: int = 30
    ai_personalization_enabled: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
