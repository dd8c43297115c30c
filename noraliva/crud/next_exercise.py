import logging
from datetime import datetime
from sqlalchemy.orm import Session
from noraliva.crud.curriculum import get_domain_by_slug, get_ordered_exercises
from noraliva.crud.mastery import get_correct_exercise_ids, get_due_review_skill_ids, get_mastery_by_skill
from noraliva.database import utcnow
from noraliva.schemas import ExerciseCandidate
from noraliva.selection import select_next_exercise_with_mastery
from typing import Optional

logger = logging.getLogger(__name__)

def get_next_exercise(
    db: Session,
    learner_id: int,
    domain_slug: str,
    last_exercise_id: Optional[int] = None,
    now: Optional[datetime] = None
) -> Optional[ExerciseCandidate]:
    """
    Next exercise for a learner in a domain.

    Prioritizes due spaced reviews, then edge-of-learning skills, then
    curriculum order. Never returns last_exercise_id. Returns None for an
    unknown domain or an empty curriculum.
    """
    now = now or utcnow()

    domain = get_domain_by_slug(db, domain_slug)
    if not domain:
        logger.warning("Unknown domain '%s'", domain_slug)
        return None

    exercises = get_ordered_exercises(db, domain.id)
    if not exercises:
        return None

    skill_ids = list(dict.fromkeys(ex.skill_id for ex in exercises))

    return select_next_exercise_with_mastery(
        exercises,
        get_correct_exercise_ids(db, learner_id),
        get_mastery_by_skill(db, learner_id, skill_ids),
        get_due_review_skill_ids(db, learner_id, skill_ids, now),
        last_exercise_id
    )
