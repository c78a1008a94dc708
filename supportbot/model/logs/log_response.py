from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SessionLog(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_email: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    feedback_rating: Optional[int] = None
    feedback_comments: Optional[str] = None
    feedback_helpful: Optional[bool] = None
    message_count: int = 0


class MessageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: Optional[str] = None
    content: str
    sender: str
    category: Optional[str] = None
    timestamp: datetime


class UnknownQuestionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: Optional[str] = None
    question: str
    timestamp: datetime
    reviewed: bool


class InappropriateLogRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: Optional[str] = None
    content: str
    user_ip: Optional[str] = None
    timestamp: datetime
