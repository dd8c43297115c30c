"""Tests for answer submission and mastery persistence."""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.dialects import postgresql

from noraliva.crud import (
    count_skill_attempts,
    get_correct_exercise_ids,
    get_due_review_skill_ids,
    get_mastery_by_skill,
    get_review_schedule,
    get_skill_mastery,
    recompute_skill_mastery,
    submit_answer,
)
from noraliva.crud.mastery import _learner_lock
from noraliva.mastery import replay_mastery
from noraliva.models import Attempt, SkillMastery

NOW = datetime(2025, 3, 1, 12, 0, 0)


class TestSubmitAnswer:
    def test_first_answer_creates_rows(self, db, learner, math_curriculum):
        exercise = math_curriculum["exercises"]["add_1"]
        skill = math_curriculum["skills"]["adding"]

        result = submit_answer(db, learner.id, exercise.id, True, now=NOW)

        assert result.skill_id == skill.id
        assert result.mastery_probability == pytest.approx(1.6 / 3)
        assert result.confidence_score == pytest.approx(3)
        assert result.attempts_count == 1
        assert result.next_review_at == NOW + timedelta(days=1)

        row = get_skill_mastery(db, learner.id, skill.id)
        assert row.attempts_count == 1
        assert row.last_attempt_at == NOW
        assert row.next_review_at == result.next_review_at
        assert get_review_schedule(db, learner.id, skill.id).next_review_at == result.next_review_at

    def test_incorrect_answer_schedules_ten_minutes(self, db, learner, math_curriculum):
        exercise = math_curriculum["exercises"]["sub_1"]
        result = submit_answer(db, learner.id, exercise.id, False, now=NOW)
        assert result.next_review_at == NOW + timedelta(minutes=10)
        assert result.mastery_probability == pytest.approx(0.6 / 3)

    def test_row_is_overwritten_not_appended(self, db, learner, math_curriculum):
        ex1 = math_curriculum["exercises"]["add_1"]
        ex2 = math_curriculum["exercises"]["add_2"]
        skill = math_curriculum["skills"]["adding"]

        submit_answer(db, learner.id, ex1.id, True, now=NOW)
        submit_answer(db, learner.id, ex2.id, False, now=NOW + timedelta(minutes=1))
        result = submit_answer(db, learner.id, ex1.id, True, now=NOW + timedelta(minutes=2))

        assert db.query(SkillMastery).filter(SkillMastery.learner_id == learner.id).count() == 1
        assert db.query(Attempt).count() == 3
        assert result.attempts_count == 3
        assert count_skill_attempts(db, learner.id, skill.id) == (3, 2)

    def test_mastery_matches_replay_of_log(self, db, learner, math_curriculum):
        exercises = math_curriculum["exercises"]
        outcomes = [True, False, True, True, False, True, True]
        result = None
        for i, correct in enumerate(outcomes):
            exercise = exercises["add_1"] if i % 2 == 0 else exercises["add_2"]
            result = submit_answer(db, learner.id, exercise.id, correct, now=NOW + timedelta(minutes=i))

        expected = replay_mastery(outcomes)
        assert (result.mastery_probability, result.confidence_score, result.attempts_count) == pytest.approx(expected)

    def test_skills_are_tracked_separately(self, db, learner, math_curriculum):
        exercises = math_curriculum["exercises"]
        submit_answer(db, learner.id, exercises["add_1"].id, True, now=NOW)
        result = submit_answer(db, learner.id, exercises["sub_1"].id, True, now=NOW)
        assert result.attempts_count == 1

    def test_unknown_exercise(self, db, learner, math_curriculum):
        with pytest.raises(ValueError, match="Exercise not found"):
            submit_answer(db, learner.id, 9999, True, now=NOW)
        assert db.query(Attempt).count() == 0

    def test_learner_row_locked_before_first_mastery_row(self, db, learner, math_curriculum):
        exercise = math_curriculum["exercises"]["add_1"]
        skill_id = math_curriculum["skills"]["adding"].id
        seen_mastery_rows = []

        def lock(session, learner_id):
            seen_mastery_rows.append(get_skill_mastery(session, learner_id, skill_id))
            return _learner_lock(session, learner_id)

        with patch("noraliva.crud.mastery._learner_lock", side_effect=lock) as mock_lock:
            submit_answer(db, learner.id, exercise.id, True, now=NOW)

        mock_lock.assert_called_once_with(db, learner.id)
        assert seen_mastery_rows == [None]

        sql = str(_learner_lock(db, learner.id).statement.compile(dialect=postgresql.dialect()))
        assert "FROM profiles" in sql
        assert sql.rstrip().endswith("FOR UPDATE")


class TestRecompute:
    def test_rebuilds_drifted_row(self, db, learner, math_curriculum):
        exercise = math_curriculum["exercises"]["add_1"]
        skill = math_curriculum["skills"]["adding"]
        submit_answer(db, learner.id, exercise.id, True, now=NOW)
        submit_answer(db, learner.id, exercise.id, True, now=NOW + timedelta(minutes=5))

        row = get_skill_mastery(db, learner.id, skill.id)
        row.mastery_probability = 0.01
        row.attempts_count = 99
        db.commit()

        rebuilt = recompute_skill_mastery(db, learner.id, skill.id)
        assert rebuilt.attempts_count == 2
        assert rebuilt.mastery_probability == pytest.approx(2.6 / 4)
        assert rebuilt.next_review_at == NOW + timedelta(minutes=5, days=1)

    def test_no_attempts(self, db, learner, math_curriculum):
        skill = math_curriculum["skills"]["adding"]
        assert recompute_skill_mastery(db, learner.id, skill.id) is None


class TestSnapshots:
    def test_correct_exercise_ids(self, db, learner, math_curriculum):
        exercises = math_curriculum["exercises"]
        submit_answer(db, learner.id, exercises["add_1"].id, True, now=NOW)
        submit_answer(db, learner.id, exercises["add_1"].id, True, now=NOW)
        submit_answer(db, learner.id, exercises["sub_1"].id, False, now=NOW)
        assert get_correct_exercise_ids(db, learner.id) == {exercises["add_1"].id}

    def test_mastery_by_skill_and_due(self, db, learner, math_curriculum):
        exercises = math_curriculum["exercises"]
        skills = math_curriculum["skills"]
        submit_answer(db, learner.id, exercises["add_1"].id, True, now=NOW)
        submit_answer(db, learner.id, exercises["sub_1"].id, False, now=NOW)
        skill_ids = [skills["adding"].id, skills["subtracting"].id]

        snapshots = get_mastery_by_skill(db, learner.id, skill_ids)
        assert snapshots[skills["adding"].id].confidence_score == pytest.approx(3)
        assert snapshots[skills["subtracting"].id].next_review_at == NOW + timedelta(minutes=10)

        assert get_due_review_skill_ids(db, learner.id, skill_ids, NOW) == set()
        assert get_due_review_skill_ids(db, learner.id, skill_ids, NOW + timedelta(minutes=10)) == {skills["subtracting"].id}
        assert get_due_review_skill_ids(db, learner.id, skill_ids, NOW + timedelta(days=2)) == set(skill_ids)

    def test_empty_skill_list(self, db, learner):
        assert get_mastery_by_skill(db, learner.id, []) == {}
        assert get_due_review_skill_ids(db, learner.id, [], NOW) == set()

    def test_due_when_only_review_schedule_is_due(self, db, learner, math_curriculum):
        exercise = math_curriculum["exercises"]["add_1"]
        skill_id = math_curriculum["skills"]["adding"].id
        submit_answer(db, learner.id, exercise.id, True, now=NOW)

        get_review_schedule(db, learner.id, skill_id).next_review_at = NOW - timedelta(minutes=1)
        db.commit()

        assert get_skill_mastery(db, learner.id, skill_id).next_review_at > NOW
        assert get_due_review_skill_ids(db, learner.id, [skill_id], NOW) == {skill_id}

    def test_due_when_only_mastery_row_is_due(self, db, learner, math_curriculum):
        exercise = math_curriculum["exercises"]["add_1"]
        skill_id = math_curriculum["skills"]["adding"].id
        submit_answer(db, learner.id, exercise.id, True, now=NOW)

        get_skill_mastery(db, learner.id, skill_id).next_review_at = NOW - timedelta(minutes=1)
        db.commit()

        assert get_review_schedule(db, learner.id, skill_id).next_review_at > NOW
        assert get_due_review_skill_ids(db, learner.id, [skill_id], NOW) == {skill_id}
