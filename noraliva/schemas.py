from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

class ProfileCreate(BaseModel):
    """Schema for creating a parent or learner profile"""
    slug: Optional[str] = None
    role: str = "learner"
    display_name: str
    parent_id: Optional[int] = None
    age: Optional[int] = None
    grade_label: Optional[str] = None
    challenge_style: str = "gentle"

class ProfileResponse(ProfileCreate):
    id: int

    class Config:
        from_attributes = True

class CurriculumRow(BaseModel):
    """One exercise row from an imported curriculum sheet"""
    domain: str
    unit: Optional[str] = None
    skill: str
    lesson: str
    prompt: str
    answer: Optional[str] = None

class ExerciseCandidate(BaseModel):
    """Exercise flattened with its skill, in curriculum order"""
    id: int
    lesson_id: int
    skill_id: int
    prompt: str
    sort_order: int = 0
    answer: Optional[str] = None

    class Config:
        from_attributes = True

class SkillMasterySnapshot(BaseModel):
    """Per-skill mastery inputs to exercise selection"""
    mastery_probability: float = 0.3
    confidence_score: float = 0.0
    next_review_at: Optional[datetime] = None

class SubmitAnswerResult(BaseModel):
    """Outcome of recording one answer"""
    attempt_id: int
    skill_id: int
    correct: bool
    mastery_probability: float
    confidence_score: float
    attempts_count: int
    next_review_at: datetime

class AttemptRow(BaseModel):
    id: int
    correct: bool
    created_at: datetime
    prompt: str

class MasteryRow(BaseModel):
    skill_name: str
    mastery_probability: float
    confidence_score: float
    attempts_count: int
    next_review_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ChildProgress(BaseModel):
    """One child's recent activity for the parent view"""
    id: int
    display_name: str
    role: str
    attempts: List[AttemptRow] = Field(default_factory=list)
    mastery: List[MasteryRow] = Field(default_factory=list)

class XpStreakState(BaseModel):
    """XP, streak and 7-day challenge state for one learner in one domain"""
    xp: int = 0
    streak: int = 0
    challenge_day: int = Field(default=0, ge=0, le=7)
    committed: bool = False
    last_completed_date: Optional[date] = None

    class Config:
        from_attributes = True
