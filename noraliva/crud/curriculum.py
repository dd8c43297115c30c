import logging
from sqlalchemy.orm import Session
from noraliva.models import Domain, Unit, Skill, Lesson, Exercise
from noraliva.schemas import CurriculumRow, ExerciseCandidate
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

def _slugify(name: str) -> str:
    return "-".join(name.lower().split())

def create_domain(db: Session, slug: str, name: Optional[str] = None) -> Domain:
    db_domain = Domain(slug=slug.lower(), name=name or slug.title())
    db.add(db_domain)
    db.commit()
    db.refresh(db_domain)
    return db_domain

def get_domain_by_slug(db: Session, slug: str) -> Optional[Domain]:
    return db.query(Domain).filter(Domain.slug == slug.lower()).first()

def add_unit(db: Session, domain_id: int, name: str, sort_order: int = 0) -> Unit:
    unit = Unit(domain_id=domain_id, slug=_slugify(name), name=name, sort_order=sort_order)
    db.add(unit)
    db.commit()
    db.refresh(unit)
    return unit

def add_skill(
    db: Session,
    domain_id: int,
    name: str,
    sort_order: int = 0,
    unit_id: Optional[int] = None
) -> Skill:
    skill = Skill(domain_id=domain_id, unit_id=unit_id, slug=_slugify(name), name=name, sort_order=sort_order)
    db.add(skill)
    db.commit()
    db.refresh(skill)
    return skill

def add_lesson(db: Session, skill_id: int, title: str, sort_order: int = 0) -> Lesson:
    lesson = Lesson(skill_id=skill_id, title=title, sort_order=sort_order)
    db.add(lesson)
    db.commit()
    db.refresh(lesson)
    return lesson

def add_exercise(
    db: Session,
    lesson_id: int,
    prompt: str,
    sort_order: int = 0,
    answer: Optional[str] = None
) -> Exercise:
    exercise = Exercise(lesson_id=lesson_id, prompt=prompt, answer=answer, sort_order=sort_order)
    db.add(exercise)
    db.commit()
    db.refresh(exercise)
    return exercise

def import_curriculum_rows(db: Session, rows: List[CurriculumRow]) -> int:
    """
    Create domains, units, skills, lessons and exercises from parsed rows.

    Row order becomes sort order at every level. Existing domains, units,
    skills and lessons are matched by name and reused. Returns the number of
    exercises created.
    """
    domains: Dict[str, Domain] = {}
    units: Dict[Tuple[int, str], Unit] = {}
    skills: Dict[Tuple[int, str], Skill] = {}
    lessons: Dict[Tuple[int, str], Lesson] = {}
    created = 0

    for row in rows:
        domain_slug = _slugify(row.domain)
        domain = domains.get(domain_slug) or get_domain_by_slug(db, domain_slug)
        if domain is None:
            domain = Domain(slug=domain_slug, name=row.domain)
            db.add(domain)
            db.flush()
        domains[domain_slug] = domain

        unit_id = None
        if row.unit:
            key = (domain.id, row.unit)
            unit = units.get(key) or db.query(Unit).filter(
                Unit.domain_id == domain.id, Unit.name == row.unit
            ).first()
            if unit is None:
                count = db.query(Unit).filter(Unit.domain_id == domain.id).count()
                unit = Unit(domain_id=domain.id, slug=_slugify(row.unit), name=row.unit, sort_order=count)
                db.add(unit)
                db.flush()
            units[key] = unit
            unit_id = unit.id

        key = (domain.id, row.skill)
        skill = skills.get(key) or db.query(Skill).filter(
            Skill.domain_id == domain.id, Skill.name == row.skill
        ).first()
        if skill is None:
            count = db.query(Skill).filter(Skill.domain_id == domain.id).count()
            skill = Skill(domain_id=domain.id, unit_id=unit_id, slug=_slugify(row.skill), name=row.skill, sort_order=count)
            db.add(skill)
            db.flush()
        skills[key] = skill

        key = (skill.id, row.lesson)
        lesson = lessons.get(key) or db.query(Lesson).filter(
            Lesson.skill_id == skill.id, Lesson.title == row.lesson
        ).first()
        if lesson is None:
            count = db.query(Lesson).filter(Lesson.skill_id == skill.id).count()
            lesson = Lesson(skill_id=skill.id, title=row.lesson, sort_order=count)
            db.add(lesson)
            db.flush()
        lessons[key] = lesson

        count = db.query(Exercise).filter(Exercise.lesson_id == lesson.id).count()
        db.add(Exercise(lesson_id=lesson.id, prompt=row.prompt, answer=row.answer, sort_order=count))
        db.flush()
        created += 1

    db.commit()
    logger.info("Imported %d exercises", created)
    return created

def get_ordered_exercises(db: Session, domain_id: int) -> List[ExerciseCandidate]:
    """
    All exercises of a domain in curriculum order.

    Order is unit, skill, lesson, exercise (by sort_order then id); skills
    without a unit come before units.
    """
    rows = db.query(Exercise, Lesson.skill_id).join(
        Lesson, Exercise.lesson_id == Lesson.id
    ).join(
        Skill, Lesson.skill_id == Skill.id
    ).outerjoin(
        Unit, Skill.unit_id == Unit.id
    ).filter(
        Skill.domain_id == domain_id
    ).order_by(
        Unit.sort_order.is_not(None),
        Unit.sort_order,
        Unit.id,
        Skill.sort_order,
        Skill.id,
        Lesson.sort_order,
        Lesson.id,
        Exercise.sort_order,
        Exercise.id
    ).all()

    return [
        ExerciseCandidate(
            id=exercise.id,
            lesson_id=exercise.lesson_id,
            skill_id=skill_id,
            prompt=exercise.prompt,
            sort_order=exercise.sort_order,
            answer=exercise.answer
        )
        for exercise, skill_id in rows
    ]

def get_skill_id_for_exercise(db: Session, exercise_id: int) -> Optional[int]:
    """Resolve exercise -> lesson -> skill"""
    row = db.query(Lesson.skill_id).join(
        Exercise, Exercise.lesson_id == Lesson.id
    ).filter(Exercise.id == exercise_id).first()
    return row[0] if row else None

def get_domain_slug_for_exercise(db: Session, exercise_id: int) -> Optional[str]:
    """Resolve exercise -> lesson -> skill -> domain slug"""
    row = db.query(Domain.slug).join(
        Skill, Skill.domain_id == Domain.id
    ).join(
        Lesson, Lesson.skill_id == Skill.id
    ).join(
        Exercise, Exercise.lesson_id == Lesson.id
    ).filter(Exercise.id == exercise_id).first()
    return row[0] if row else None
