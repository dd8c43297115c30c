from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from noraliva.database import Base, utcnow

class Attempt(Base):
    """Append-only log of answers"""
    __tablename__ = "attempts"

    id = Column(Integer, primary_key=True, index=True)
    learner_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    exercise_id = Column(Integer, ForeignKey("exercises.id"), nullable=False, index=True)
    correct = Column(Boolean, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    learner = relationship("Profile", back_populates="attempts")
    exercise = relationship("Exercise")
