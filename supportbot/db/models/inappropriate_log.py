from sqlalchemy import Column, DateTime, String, Text

from supportbot.db.session import Base, utcnow


class InappropriateLog(Base):
    __tablename__ = "inappropriate_logs"

    id = Column(String(36), primary_key=True)
    session_id = Column(String(36), nullable=True)
    content = Column(Text, nullable=False)
    user_ip = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
