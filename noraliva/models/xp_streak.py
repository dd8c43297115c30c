from sqlalchemy import Column, Integer, Boolean, Date, DateTime, ForeignKey, UniqueConstraint
from noraliva.database import Base, utcnow

class XpStreak(Base):
    """XP, daily streak and 7-day challenge progress per (learner, domain)"""
    __tablename__ = "xp_streaks"
    __table_args__ = (UniqueConstraint("learner_id", "domain_id", name="uq_xp_streak_learner_domain"),)

    id = Column(Integer, primary_key=True, index=True)
    learner_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    domain_id = Column(Integer, ForeignKey("domains.id"), nullable=False)
    xp = Column(Integer, nullable=False, default=0)
    streak = Column(Integer, nullable=False, default=0)
    challenge_day = Column(Integer, nullable=False, default=0)  # 0..7
    last_completed_date = Column(Date)
    committed = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
