from typing import Optional
from sqlalchemy.orm import Session
from noraliva.models import XpStreak
from noraliva.schemas import XpStreakState
from noraliva.crud.curriculum import get_domain_by_slug, get_domain_slug_for_exercise
from noraliva.streaks import award_correct_answer
from noraliva.database import utcnow

def get_xp_streak(db: Session, learner_id: int, domain_id: int) -> XpStreakState:
    """Stored XP/streak state, or a fresh default state"""
    row = db.query(XpStreak).filter(
        XpStreak.learner_id == learner_id,
        XpStreak.domain_id == domain_id
    ).first()
    if not row:
        return XpStreakState()
    return XpStreakState.model_validate(row)

def get_xp_streak_by_slug(db: Session, learner_id: int, domain_slug: str) -> XpStreakState:
    domain = get_domain_by_slug(db, domain_slug)
    if not domain:
        return XpStreakState()
    return get_xp_streak(db, learner_id, domain.id)

def upsert_xp_streak(db: Session, learner_id: int, domain_slug: str, state: XpStreakState) -> XpStreak:
    """
    Save XP/streak state for a learner in a domain.

    Raises:
        ValueError: if the domain does not exist
    """
    domain = get_domain_by_slug(db, domain_slug)
    if not domain:
        raise ValueError(f"Domain not found: {domain_slug}")

    row = db.query(XpStreak).filter(
        XpStreak.learner_id == learner_id,
        XpStreak.domain_id == domain.id
    ).first()
    if row is None:
        row = XpStreak(learner_id=learner_id, domain_id=domain.id)
        db.add(row)

    for key, value in state.model_dump().items():
        setattr(row, key, value)
    row.updated_at = utcnow()

    db.commit()
    db.refresh(row)
    return row

def award_answer_xp(db: Session, learner_id: int, exercise_id: int) -> Optional[XpStreakState]:
    """
    Grant correct-answer XP in the exercise's domain and save it.

    Returns the new state, or None when the exercise does not exist.
    """
    domain_slug = get_domain_slug_for_exercise(db, exercise_id)
    if domain_slug is None:
        return None

    state = award_correct_answer(get_xp_streak_by_slug(db, learner_id, domain_slug))
    upsert_xp_streak(db, learner_id, domain_slug, state)
    return state
