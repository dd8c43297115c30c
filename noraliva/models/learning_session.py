from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from noraliva.database import Base, utcnow

class LearningSession(Base):
    """A learner's practice session in one domain"""
    __tablename__ = "learning_sessions"

    id = Column(Integer, primary_key=True, index=True)
    learner_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    domain = Column(String, nullable=False)
    status = Column(String, nullable=False, default="active")  # "active" or "completed"
    started_at = Column(DateTime, default=utcnow)
    ended_at = Column(DateTime)
