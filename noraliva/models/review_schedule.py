from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from noraliva.database import Base, utcnow

class ReviewSchedule(Base):
    """Authoritative "what's due" row per (learner, skill)"""
    __tablename__ = "review_schedule"
    __table_args__ = (UniqueConstraint("learner_id", "skill_id", name="uq_review_schedule_learner_skill"),)

    id = Column(Integer, primary_key=True, index=True)
    learner_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    next_review_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
