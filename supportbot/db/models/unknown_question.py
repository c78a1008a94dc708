from sqlalchemy import Boolean, Column, DateTime, String, Text

from supportbot.db.session import Base, utcnow


class UnknownQuestion(Base):
    __tablename__ = "unknown_questions"

    id = Column(String(36), primary_key=True)
    session_id = Column(String(36), nullable=True)
    question = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    # Flipped by the admin review workflow
    reviewed = Column(Boolean, default=False, nullable=False)
