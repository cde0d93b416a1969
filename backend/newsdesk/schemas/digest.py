from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict, Any


class Digest(BaseModel):
    id: int
    user_id: str
    digest_type: str
    period_start: datetime
    period_end: datetime
    article_ids: List[int] = []
    summary: str
    key_trends: List[str] = []
    action_items: List[str] = []
    personalization_score: Optional[float] = None
    was_sent: bool = False
    sent_at: Optional[datetime] = None
    was_read: bool = False
    read_at: Optional[datetime] = None
    user_feedback: Optional[str] = None
    extra_metadata: Dict[str, Any] = Field(default={}, serialization_alias="metadata")
    created_at: datetime

    class Config:
        from_attributes = True


class DigestStateChange(BaseModel):
    updated: bool
