from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List
from .article import Article


class SaveOptions(BaseModel):
    folder: str = Field(default="default", min_length=1, max_length=100)
    tags: List[str] = []
    notes: Optional[str] = Field(default=None, max_length=2000)
    priority: int = Field(default=0, ge=0, le=5)
    reminder_date: Optional[datetime] = None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        """Strip and lowercase tags, dropping blanks and duplicates."""
        cleaned = [t.strip().lower() for t in v if t and t.strip()]
        for tag in cleaned:
            if len(tag) > 50:
                raise ValueError("Tag name cannot exceed 50 characters")
        return list(dict.fromkeys(cleaned))


class SavedArticleCreate(SaveOptions):
    article_id: int = Field(gt=0)


class SavedArticle(BaseModel):
    id: int
    user_id: str
    article_id: int
    folder: str
    tags: List[str] = []
    notes: Optional[str] = None
    priority: int = 0
    is_archived: bool = False
    reminder_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SavedArticleWithArticle(SavedArticle):
    """SavedArticle with full article details included."""

    article: Article

    class Config:
        from_attributes = True
