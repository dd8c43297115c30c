from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from noraliva.database import Base, utcnow

class SkillMastery(Base):
    """Materialized Beta-Binomial summary per (learner, skill), overwritten on each attempt"""
    __tablename__ = "skill_mastery"
    __table_args__ = (UniqueConstraint("learner_id", "skill_id", name="uq_skill_mastery_learner_skill"),)

    id = Column(Integer, primary_key=True, index=True)
    learner_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False)

    mastery_probability = Column(Float, nullable=False, default=0.3)
    confidence_score = Column(Float, nullable=False, default=0.0)  # prior weight + attempts
    attempts_count = Column(Integer, nullable=False, default=0)

    last_attempt_at = Column(DateTime)
    next_review_at = Column(DateTime)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    learner = relationship("Profile", back_populates="skill_mastery")
    skill = relationship("Skill")
