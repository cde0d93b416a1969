from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict, Any
from newsdesk.models.source import SourceType


class SourceBase(BaseModel):
    name: str
    url: str
    feed_url: Optional[str] = None
    source_type: SourceType = SourceType.RSS
    categories: List[str] = []
    reliability_score: float = Field(default=0.8, ge=0.0, le=1.0)
    is_active: bool = True
    fetch_frequency_minutes: int = Field(default=360, gt=0)


class Source(SourceBase):
    id: int
    last_fetched: Optional[datetime] = None
    extra_metadata: Dict[str, Any] = Field(default={}, serialization_alias="metadata")
    is_due: Optional[bool] = None  # Filled in by the listing endpoint

    class Config:
        from_attributes = True
