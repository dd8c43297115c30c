from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from noraliva.database import Base, utcnow

class ChatLog(Base):
    """Messages exchanged with Ace"""
    __tablename__ = "chat_logs"

    id = Column(Integer, primary_key=True, index=True)
    learner_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    role = Column(String, nullable=False)  # "user" or "assistant"
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)
