from sqlalchemy import Column, DateTime, String, Text

from supportbot.db.session import Base, utcnow


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True)
    # Owning session; not a foreign key, orphans are accepted
    session_id = Column(String(36), index=True, nullable=True)
    content = Column(Text, nullable=False)
    # user | bot
    sender = Column(Text, nullable=False)
    # Category label, set on bot messages
    category = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
