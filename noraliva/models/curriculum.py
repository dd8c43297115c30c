from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from noraliva.database import Base

class Domain(Base):
    """Top-level learning area, e.g. math or reading"""
    __tablename__ = "domains"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)

    units = relationship("Unit", back_populates="domain")
    skills = relationship("Skill", back_populates="domain")


class Unit(Base):
    """Optional grouping of skills inside a domain"""
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    domain_id = Column(Integer, ForeignKey("domains.id"), nullable=False)
    slug = Column(String, nullable=False)
    name = Column(String, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    domain = relationship("Domain", back_populates="units")
    skills = relationship("Skill", back_populates="unit")


class Skill(Base):
    """Unit of mastery tracking"""
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    domain_id = Column(Integer, ForeignKey("domains.id"), nullable=False)
    unit_id = Column(Integer, ForeignKey("units.id"))  # null when domain has no units
    slug = Column(String, nullable=False)
    name = Column(String, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    domain = relationship("Domain", back_populates="skills")
    unit = relationship("Unit", back_populates="skills")
    lessons = relationship("Lesson", back_populates="skill")


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    title = Column(String, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    skill = relationship("Skill", back_populates="lessons")
    exercises = relationship("Exercise", back_populates="lesson")


class Exercise(Base):
    """Single question; immutable once created"""
    __tablename__ = "exercises"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False)
    prompt = Column(String, nullable=False)
    answer = Column(String)
    sort_order = Column(Integer, nullable=False, default=0)

    lesson = relationship("Lesson", back_populates="exercises")
