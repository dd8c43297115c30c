from sqlalchemy.orm import Session
from noraliva.models import Attempt, Exercise, Skill, SkillMastery
from noraliva.schemas import AttemptRow, ChildProgress, MasteryRow
from noraliva.crud.profile import list_children
from typing import List

RECENT_ATTEMPTS_LIMIT = 50

def get_parent_view_data(db: Session, parent_id: int) -> List[ChildProgress]:
    """Children of a parent with their latest attempts and skill mastery"""
    result = []

    for child in list_children(db, parent_id):
        attempt_rows = db.query(Attempt, Exercise.prompt).outerjoin(
            Exercise, Attempt.exercise_id == Exercise.id
        ).filter(
            Attempt.learner_id == child.id
        ).order_by(Attempt.created_at.desc(), Attempt.id.desc()).limit(RECENT_ATTEMPTS_LIMIT).all()

        mastery_rows = db.query(SkillMastery, Skill.name).outerjoin(
            Skill, SkillMastery.skill_id == Skill.id
        ).filter(
            SkillMastery.learner_id == child.id
        ).order_by(Skill.sort_order, SkillMastery.skill_id).all()

        result.append(ChildProgress(
            id=child.id,
            display_name=child.display_name or child.role,
            role=child.role,
            attempts=[
                AttemptRow(id=a.id, correct=a.correct, created_at=a.created_at, prompt=prompt or "—")
                for a, prompt in attempt_rows
            ],
            mastery=[
                MasteryRow(
                    skill_name=name or "—",
                    mastery_probability=m.mastery_probability,
                    confidence_score=m.confidence_score,
                    attempts_count=m.attempts_count,
                    next_review_at=m.next_review_at,
                    updated_at=m.updated_at
                )
                for m, name in mastery_rows
            ]
        ))

    return result
