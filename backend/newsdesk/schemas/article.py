from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional, List, Dict, Any


class Article(BaseModel):
    id: int
    source_id: int
    external_id: str
    title: str
    summary: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    published_at: Optional[datetime] = None
    url: str
    image_url: Optional[str] = None
    categories: List[str] = []
    tags: List[str] = []
    sentiment: Optional[float] = None
    relevance_score: Optional[float] = None
    engagement_metrics: Dict[str, int] = {}
    ai_summary: Optional[str] = None
    ai_key_points: Optional[List[str]] = None
    ai_action_items: Optional[List[str]] = None
    extra_metadata: Dict[str, Any] = Field(default={}, serialization_alias="metadata")
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ArticleSearchFilters(BaseModel):
    """Filters accepted by article search. Invalid input raises a validation error."""

    categories: Optional[List[str]] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    sources: Optional[List[int]] = None
    min_relevance: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_date_range(self):
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self
