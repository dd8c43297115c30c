from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple

from noraliva.database import utcnow

# Beta prior with mean 0.3 and pseudo-count weight 2
PRIOR_MEAN = 0.3
PRIOR_WEIGHT = 2
PRIOR_ALPHA = PRIOR_MEAN * PRIOR_WEIGHT  # pseudo-successes
PRIOR_BETA = (1 - PRIOR_MEAN) * PRIOR_WEIGHT  # pseudo-failures

# Defaults for skills with no stored mastery row
DEFAULT_MASTERY_PROBABILITY = PRIOR_MEAN
DEFAULT_CONFIDENCE_SCORE = 0.0

RETRY_DELAY = timedelta(minutes=10)

# Edge-of-learning shape: triangular peak at 0.55, confidence bonus fading out by 20
EDGE_PEAK = 0.55
EDGE_CONFIDENCE_HORIZON = 20
EDGE_DISTANCE_WEIGHT = 0.7
EDGE_CONFIDENCE_WEIGHT = 0.3
UNKNOWN_SKILL_SCORE = 0.5


class MasteryEngine:
    """
    Bayesian skill mastery estimate plus spaced review scheduling.

    Mastery is the posterior mean of a Beta-Binomial model: with prior
    Beta(a, b), after s successes in n attempts the estimate is (a+s)/(a+b+n).
    All methods are pure; persisting their output is the caller's job.
    """

    @staticmethod
    def update_mastery(
        attempts_count: int,
        correct_count: int,
        correct: bool
    ) -> Tuple[float, float, int]:
        """
        Fold one new attempt into prior counts for a (learner, skill) pair.

        Args:
            attempts_count: Attempts recorded before this one
            correct_count: Correct attempts recorded before this one
            correct: Outcome of the new attempt

        Returns:
            (mastery_probability, confidence_score, new_attempts_count)

        Raises:
            ValueError: for negative counts or more correct answers than attempts
        """
        if attempts_count < 0 or correct_count < 0:
            raise ValueError(
                f"Counts must be non-negative (attempts={attempts_count}, correct={correct_count})"
            )
        if correct_count > attempts_count:
            raise ValueError(
                f"correct_count ({correct_count}) cannot exceed attempts_count ({attempts_count})"
            )

        n = attempts_count + 1
        s = correct_count + (1 if correct else 0)
        total = PRIOR_ALPHA + PRIOR_BETA + n

        return (PRIOR_ALPHA + s) / total, total, n

    @staticmethod
    def replay_mastery(outcomes: Iterable[bool]) -> Tuple[float, float, int]:
        """
        Rebuild mastery from an ordered attempt log.

        Returns the prior itself, (0.3, 2.0, 0), for an empty log.
        """
        probability = DEFAULT_MASTERY_PROBABILITY
        confidence = float(PRIOR_ALPHA + PRIOR_BETA)
        attempts = 0
        correct_count = 0

        for correct in outcomes:
            probability, confidence, new_attempts = MasteryEngine.update_mastery(
                attempts, correct_count, correct
            )
            attempts = new_attempts
            if correct:
                correct_count += 1

        return probability, confidence, attempts

    @staticmethod
    def schedule_next_review(
        correct: bool,
        mastery_probability: float,
        now: Optional[datetime] = None
    ) -> datetime:
        """
        Next due time for spaced review.

        Incorrect answers come back after 10 minutes. Correct answers wait
        1 day below 0.7 mastery, 3 days in [0.7, 0.9) and 7 days from 0.9 up.
        """
        base = now if now is not None else utcnow()

        if not correct:
            return base + RETRY_DELAY

        if mastery_probability >= 0.9:
            days = 7
        elif mastery_probability >= 0.7:
            days = 3
        else:
            days = 1

        return base + timedelta(days=days)

    @staticmethod
    def edge_of_learning_score(mastery_probability: float, confidence_score: float) -> float:
        """
        Practice value of a skill in [0, 1]; highest near mastery 0.55.

        A skill with no recorded confidence scores exactly 0.5 so it competes
        with mid-mastery skills without automatically beating them.
        """
        if confidence_score <= 0:
            return UNKNOWN_SKILL_SCORE

        dist_from_mid = max(0.0, 1 - abs(mastery_probability - EDGE_PEAK) / EDGE_PEAK)
        low_confidence_bonus = max(0.0, 1 - confidence_score / EDGE_CONFIDENCE_HORIZON)

        return EDGE_DISTANCE_WEIGHT * dist_from_mid + EDGE_CONFIDENCE_WEIGHT * low_confidence_bonus

    @staticmethod
    def is_due_for_review(next_review_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
        """Check if a skill's review time has arrived"""
        if next_review_at is None:
            return False
        return next_review_at <= (now if now is not None else utcnow())


# Module-level aliases for callers that prefer plain functions
update_mastery = MasteryEngine.update_mastery
replay_mastery = MasteryEngine.replay_mastery
schedule_next_review = MasteryEngine.schedule_next_review
edge_of_learning_score = MasteryEngine.edge_of_learning_score
is_due_for_review = MasteryEngine.is_due_for_review
