from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from noraliva.database import Base, utcnow

class Profile(Base):
    """Parent or learner account profile"""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, index=True)  # "liv", "elle", ...
    role = Column(String, nullable=False)  # "parent" or "learner"
    display_name = Column(String, nullable=False)
    parent_id = Column(Integer, ForeignKey("profiles.id"))
    age = Column(Integer)
    grade_label = Column(String)
    challenge_style = Column(String, nullable=False, default="gentle")  # "strict" or "gentle"
    created_at = Column(DateTime, default=utcnow)

    parent = relationship("Profile", remote_side=[id], back_populates="children")
    children = relationship("Profile", back_populates="parent")
    attempts = relationship("Attempt", back_populates="learner")
    skill_mastery = relationship("SkillMastery", back_populates="learner")
