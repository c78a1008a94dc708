from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from supportbot.db.session import Base, utcnow


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    # Caller-supplied or generated UUID
    id = Column(String(36), primary_key=True)
    user_email = Column(Text, nullable=True)
    start_time = Column(DateTime, default=utcnow, nullable=False)
    # Set once, when the session is ended
    end_time = Column(DateTime, nullable=True)
    # 1..5
    feedback_rating = Column(Integer, nullable=True)
    feedback_comments = Column(Text, nullable=True)
    feedback_helpful = Column(Boolean, nullable=True)
