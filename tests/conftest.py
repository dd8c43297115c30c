"""Shared test fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from noraliva.database import Base, init_db
from noraliva.crud import add_exercise, add_lesson, add_skill, add_unit, create_domain, create_profile
from noraliva.schemas import ProfileCreate


@pytest.fixture
def db():
    """Fresh in-memory SQLite session per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def parent(db):
    return create_profile(db, ProfileCreate(slug="mum", role="parent", display_name="Mum"))


@pytest.fixture
def learner(db, parent):
    return create_profile(db, ProfileCreate(
        slug="liv",
        role="learner",
        display_name="Liv",
        parent_id=parent.id,
        age=7,
        grade_label="Grade 2",
        challenge_style="strict",
    ))


@pytest.fixture
def math_curriculum(db):
    """Math domain: two skills (adding, subtracting), two exercises each."""
    domain = create_domain(db, "math", "Math")
    unit = add_unit(db, domain.id, "Numbers", sort_order=0)
    adding = add_skill(db, domain.id, "Adding within 20", sort_order=0, unit_id=unit.id)
    subtracting = add_skill(db, domain.id, "Subtracting within 20", sort_order=1, unit_id=unit.id)

    add_lesson_1 = add_lesson(db, adding.id, "Make ten", sort_order=0)
    sub_lesson_1 = add_lesson(db, subtracting.id, "Take away", sort_order=0)

    exercises = {
        "add_1": add_exercise(db, add_lesson_1.id, "3 + 4 = ?", sort_order=0, answer="7"),
        "add_2": add_exercise(db, add_lesson_1.id, "6 + 5 = ?", sort_order=1, answer="11"),
        "sub_1": add_exercise(db, sub_lesson_1.id, "9 − 2 = ?", sort_order=0, answer="7"),
        "sub_2": add_exercise(db, sub_lesson_1.id, "12 − 5 = ?", sort_order=1, answer="7"),
    }
    return {
        "domain": domain,
        "skills": {"adding": adding, "subtracting": subtracting},
        "exercises": exercises,
    }
