from pydantic import BaseModel, Field
from typing import Optional
from newsdesk.models.interaction import InteractionAction, InteractionFeedback


class InteractionOptions(BaseModel):
    reading_time_seconds: Optional[int] = Field(default=None, ge=0)
    scroll_depth: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    feedback: Optional[InteractionFeedback] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


class InteractionCreate(InteractionOptions):
    article_id: int = Field(gt=0)
    action: InteractionAction


class InteractionResult(BaseModel):
    recorded: bool
