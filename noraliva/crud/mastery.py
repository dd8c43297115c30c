import logging
from datetime import datetime
from sqlalchemy import case, func
from sqlalchemy.orm import Session
from noraliva.models import Attempt, Exercise, Lesson, Profile, SkillMastery, ReviewSchedule
from noraliva.mastery import MasteryEngine
from noraliva.schemas import SkillMasterySnapshot, SubmitAnswerResult
from noraliva.crud.curriculum import get_skill_id_for_exercise
from noraliva.database import utcnow
from typing import Dict, Iterable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

def _skill_attempts(db: Session, learner_id: int, skill_id: int):
    return db.query(Attempt).join(
        Exercise, Attempt.exercise_id == Exercise.id
    ).join(
        Lesson, Exercise.lesson_id == Lesson.id
    ).filter(
        Attempt.learner_id == learner_id,
        Lesson.skill_id == skill_id
    )

def count_skill_attempts(db: Session, learner_id: int, skill_id: int) -> Tuple[int, int]:
    """(attempts, correct) from the attempt log for a learner and skill"""
    attempts, correct = _skill_attempts(db, learner_id, skill_id).with_entities(
        func.count(Attempt.id),
        func.coalesce(func.sum(case((Attempt.correct.is_(True), 1), else_=0)), 0)
    ).one()
    return int(attempts), int(correct)

def _learner_lock(db: Session, learner_id: int):
    """Row lock on the learner profile; held until commit"""
    return db.query(Profile).filter(Profile.id == learner_id).with_for_update()

def get_skill_mastery(db: Session, learner_id: int, skill_id: int) -> Optional[SkillMastery]:
    return db.query(SkillMastery).filter(
        SkillMastery.learner_id == learner_id,
        SkillMastery.skill_id == skill_id
    ).first()

def get_review_schedule(db: Session, learner_id: int, skill_id: int) -> Optional[ReviewSchedule]:
    return db.query(ReviewSchedule).filter(
        ReviewSchedule.learner_id == learner_id,
        ReviewSchedule.skill_id == skill_id
    ).first()

def _upsert_mastery(
    db: Session,
    row: Optional[SkillMastery],
    learner_id: int,
    skill_id: int,
    probability: float,
    confidence: float,
    attempts: int,
    last_attempt_at: Optional[datetime],
    next_review_at: Optional[datetime]
) -> SkillMastery:
    if row is None:
        row = SkillMastery(learner_id=learner_id, skill_id=skill_id)
        db.add(row)
    row.mastery_probability = probability
    row.confidence_score = confidence
    row.attempts_count = attempts
    row.last_attempt_at = last_attempt_at
    row.next_review_at = next_review_at
    row.updated_at = utcnow()
    return row

def _upsert_review(db: Session, learner_id: int, skill_id: int, next_review_at: datetime) -> ReviewSchedule:
    review = get_review_schedule(db, learner_id, skill_id)
    if review is None:
        review = ReviewSchedule(learner_id=learner_id, skill_id=skill_id, next_review_at=next_review_at)
        db.add(review)
    else:
        review.next_review_at = next_review_at
        review.updated_at = utcnow()
    return review

def submit_answer(
    db: Session,
    learner_id: int,
    exercise_id: int,
    correct: bool,
    now: Optional[datetime] = None
) -> SubmitAnswerResult:
    """
    Record one answer and refresh the learner's mastery and review schedule.

    Prior counts come from the attempt log, not the cached mastery row, so
    the stored probability always equals a replay of the log. The learner's
    profile row is locked for the transaction, which serializes writers for
    that learner even before the first mastery row exists.

    Raises:
        ValueError: if the exercise does not exist
    """
    now = now or utcnow()

    skill_id = get_skill_id_for_exercise(db, exercise_id)
    if skill_id is None:
        raise ValueError("Exercise not found")

    _learner_lock(db, learner_id).first()

    mastery_row = get_skill_mastery(db, learner_id, skill_id)

    prior_attempts, prior_correct = count_skill_attempts(db, learner_id, skill_id)

    attempt = Attempt(learner_id=learner_id, exercise_id=exercise_id, correct=correct, created_at=now)
    db.add(attempt)

    probability, confidence, attempts = MasteryEngine.update_mastery(prior_attempts, prior_correct, correct)
    next_review_at = MasteryEngine.schedule_next_review(correct, probability, now)

    _upsert_mastery(db, mastery_row, learner_id, skill_id, probability, confidence, attempts, now, next_review_at)
    _upsert_review(db, learner_id, skill_id, next_review_at)

    db.commit()
    db.refresh(attempt)

    logger.info(
        "Learner %s skill %s: %s, mastery %.3f after %d attempts, next review %s",
        learner_id, skill_id, "correct" if correct else "incorrect",
        probability, attempts, next_review_at.isoformat()
    )

    return SubmitAnswerResult(
        attempt_id=attempt.id,
        skill_id=skill_id,
        correct=correct,
        mastery_probability=probability,
        confidence_score=confidence,
        attempts_count=attempts,
        next_review_at=next_review_at
    )

def recompute_skill_mastery(db: Session, learner_id: int, skill_id: int) -> Optional[SkillMastery]:
    """
    Rebuild a mastery row from the full attempt log.

    The review schedule is re-derived from the last attempt. Returns None
    (and writes nothing) when the learner never attempted the skill.
    """
    log = _skill_attempts(db, learner_id, skill_id).order_by(Attempt.created_at, Attempt.id).all()
    if not log:
        return None

    probability, confidence, attempts = MasteryEngine.replay_mastery(a.correct for a in log)
    last = log[-1]
    next_review_at = MasteryEngine.schedule_next_review(last.correct, probability, last.created_at)

    row = _upsert_mastery(
        db, get_skill_mastery(db, learner_id, skill_id), learner_id, skill_id,
        probability, confidence, attempts, last.created_at, next_review_at
    )
    _upsert_review(db, learner_id, skill_id, next_review_at)
    db.commit()
    db.refresh(row)
    return row

def get_correct_exercise_ids(db: Session, learner_id: int) -> Set[int]:
    """Exercises the learner has answered correctly at least once"""
    rows = db.query(Attempt.exercise_id).filter(
        Attempt.learner_id == learner_id,
        Attempt.correct.is_(True)
    ).distinct().all()
    return {row[0] for row in rows}

def get_mastery_by_skill(db: Session, learner_id: int, skill_ids: Iterable[int]) -> Dict[int, SkillMasterySnapshot]:
    """
    Mastery snapshots for the given skills.

    Review schedule rows override next_review_at; a skill with only a
    review row gets default mastery (0.3, confidence 0).
    """
    skill_ids = list(skill_ids)
    if not skill_ids:
        return {}

    mastery_by_skill: Dict[int, SkillMasterySnapshot] = {}

    for row in db.query(SkillMastery).filter(
        SkillMastery.learner_id == learner_id,
        SkillMastery.skill_id.in_(skill_ids)
    ).all():
        mastery_by_skill[row.skill_id] = SkillMasterySnapshot(
            mastery_probability=row.mastery_probability if row.mastery_probability is not None else 0.3,
            confidence_score=row.confidence_score if row.confidence_score is not None else 0.0,
            next_review_at=row.next_review_at
        )

    for review in db.query(ReviewSchedule).filter(
        ReviewSchedule.learner_id == learner_id,
        ReviewSchedule.skill_id.in_(skill_ids)
    ).all():
        existing = mastery_by_skill.get(review.skill_id)
        if existing is None:
            mastery_by_skill[review.skill_id] = SkillMasterySnapshot(next_review_at=review.next_review_at)
        else:
            mastery_by_skill[review.skill_id] = existing.model_copy(update={"next_review_at": review.next_review_at})

    return mastery_by_skill

def get_due_review_skill_ids(
    db: Session,
    learner_id: int,
    skill_ids: Iterable[int],
    now: Optional[datetime] = None
) -> Set[int]:
    """Skills due for review according to either the review schedule or the mastery row"""
    now = now or utcnow()
    skill_ids = list(skill_ids)
    if not skill_ids:
        return set()

    due = {
        row[0] for row in db.query(ReviewSchedule.skill_id).filter(
            ReviewSchedule.learner_id == learner_id,
            ReviewSchedule.skill_id.in_(skill_ids),
            ReviewSchedule.next_review_at <= now
        ).all()
    }
    due.update(
        row[0] for row in db.query(SkillMastery.skill_id).filter(
            SkillMastery.learner_id == learner_id,
            SkillMastery.skill_id.in_(skill_ids),
            SkillMastery.next_review_at.is_not(None),
            SkillMastery.next_review_at <= now
        ).all()
    )
    return due

def get_learner_mastery(db: Session, learner_id: int) -> List[SkillMastery]:
    """All mastery rows for a learner"""
    return db.query(SkillMastery).filter(
        SkillMastery.learner_id == learner_id
    ).order_by(SkillMastery.skill_id).all()
