from pydantic import BaseModel, Field
from typing import Optional


class Feedback(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5, description="Star rating, 1 to 5")
    comments: Optional[str] = None
    helpful: Optional[bool] = None


class FeedbackRequest(BaseModel):
    session_id: str = Field(..., min_length=1, description="Session being closed")
    feedback: Feedback
