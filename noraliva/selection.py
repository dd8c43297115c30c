"""
Next-exercise selection.

Pure policy over caller-supplied snapshots: due spaced reviews first, then
the skill closest to the learner's edge of learning, then curriculum order.
Exercises are any objects exposing ``id`` and ``skill_id``, in curriculum order.
"""

import logging
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Set

from noraliva.mastery import (
    DEFAULT_CONFIDENCE_SCORE,
    DEFAULT_MASTERY_PROBABILITY,
    MasteryEngine,
)

logger = logging.getLogger(__name__)


def _correct_ids(correct_attempts: Iterable[Any]) -> Set[Hashable]:
    """Accept either exercise ids or attempt objects carrying exercise_id"""
    ids = set()
    for attempt in correct_attempts:
        ids.add(getattr(attempt, "exercise_id", attempt))
    return ids


def _first_unanswered(exercises: Sequence[Any], correct: Set[Hashable]) -> Optional[Any]:
    """First exercise without a correct attempt, else the first one (review repeat)"""
    if not exercises:
        return None
    for exercise in exercises:
        if exercise.id not in correct:
            return exercise
    return exercises[0]


def select_next_exercise(exercises: Sequence[Any], correct_attempts: Iterable[Any]) -> Optional[Any]:
    """
    Next exercise in curriculum order.

    Picks the first exercise the learner has not yet answered correctly; once
    every exercise has a correct attempt, starts over from the first one.
    """
    return _first_unanswered(list(exercises), _correct_ids(correct_attempts))


def _field(mastery: Any, name: str) -> Any:
    if isinstance(mastery, Mapping):
        return mastery.get(name)
    return getattr(mastery, name, None)


def rank_skills(
    exercises: Sequence[Any],
    mastery_by_skill: Mapping[Hashable, Any]
) -> List[Hashable]:
    """Distinct candidate skills ordered by edge-of-learning score, ties by first appearance"""
    skill_order: List[Hashable] = []
    for exercise in exercises:
        if exercise.skill_id not in skill_order:
            skill_order.append(exercise.skill_id)

    scores: Dict[Hashable, float] = {}
    for skill_id in skill_order:
        mastery = mastery_by_skill.get(skill_id)
        probability = _field(mastery, "mastery_probability")
        confidence = _field(mastery, "confidence_score")
        scores[skill_id] = MasteryEngine.edge_of_learning_score(
            DEFAULT_MASTERY_PROBABILITY if probability is None else probability,
            DEFAULT_CONFIDENCE_SCORE if confidence is None else confidence,
        )

    # sorted() is stable, so equal scores keep first-appearance order
    return sorted(skill_order, key=lambda skill_id: scores[skill_id], reverse=True)


def select_next_exercise_with_mastery(
    exercises: Sequence[Any],
    correct_attempts: Iterable[Any],
    mastery_by_skill: Optional[Mapping[Hashable, Any]] = None,
    due_review_skill_ids: Optional[Iterable[Hashable]] = None,
    last_exercise_id: Optional[Hashable] = None
) -> Optional[Any]:
    """
    Choose the single next exercise to present.

    Args:
        exercises: Candidates in curriculum order, each with id and skill_id
        correct_attempts: Exercise ids (or attempts) the learner got right
        mastery_by_skill: skill_id -> object with mastery_probability and confidence_score
        due_review_skill_ids: Skills whose spaced review is due now
        last_exercise_id: Exercise just served; never repeated immediately

    Returns:
        The chosen exercise, or None when no candidate remains
    """
    candidates = [ex for ex in exercises if last_exercise_id is None or ex.id != last_exercise_id]
    if not candidates:
        return None

    correct = _correct_ids(correct_attempts)
    due = set(due_review_skill_ids or ())

    # 1. Spaced reviews that are due
    due_candidates = [ex for ex in candidates if ex.skill_id in due]
    if due_candidates:
        chosen = _first_unanswered(due_candidates, correct)
        logger.debug("Selected exercise %s from due review skill %s", chosen.id, chosen.skill_id)
        return chosen

    # 2. Edge of learning
    if mastery_by_skill:
        for skill_id in rank_skills(candidates, mastery_by_skill):
            skill_candidates = [ex for ex in candidates if ex.skill_id == skill_id]
            chosen = _first_unanswered(skill_candidates, correct)
            if chosen is not None:
                logger.debug("Selected exercise %s from edge-of-learning skill %s", chosen.id, skill_id)
                return chosen

    # 3. Curriculum order
    return _first_unanswered(candidates, correct)
