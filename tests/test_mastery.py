"""Tests for the mastery estimator, review scheduler and edge-of-learning scorer."""

from datetime import datetime, timedelta

import pytest

from noraliva.database import utcnow
from noraliva.mastery import (
    MasteryEngine,
    edge_of_learning_score,
    is_due_for_review,
    replay_mastery,
    schedule_next_review,
    update_mastery,
)

BASE = datetime(2025, 3, 1, 12, 0, 0)


# ---------------------------------------------------------------------------
# update_mastery
# ---------------------------------------------------------------------------


class TestUpdateMastery:
    def test_first_correct_attempt_from_prior(self):
        """Prior Beta(0.6, 1.4); one success gives 1.6 / 3."""
        probability, confidence, attempts = update_mastery(0, 0, True)
        assert probability == pytest.approx(1.6 / 3)
        assert confidence == pytest.approx(3)
        assert attempts == 1

    def test_correct_attempt_raises_mastery(self):
        probability, _, attempts = update_mastery(5, 4, True)
        assert probability == pytest.approx(5.6 / 8)
        assert attempts == 6

    def test_incorrect_attempt_lowers_mastery(self):
        before, _, _ = update_mastery(4, 4, True)
        after, _, attempts = update_mastery(5, 5, False)
        assert after < before
        assert attempts == 6

    def test_confidence_is_prior_weight_plus_attempts(self):
        for attempts in range(0, 30, 7):
            for correct in (0, attempts // 2, attempts):
                _, confidence, _ = update_mastery(attempts, correct, True)
                assert confidence == pytest.approx(attempts + 1 + 2)

    def test_confidence_strictly_increases(self):
        confidences = [update_mastery(n, 0, False)[1] for n in range(10)]
        assert all(b > a for a, b in zip(confidences, confidences[1:]))

    def test_probability_stays_in_unit_interval(self):
        for attempts in range(0, 25):
            for correct in range(0, attempts + 1):
                for latest in (True, False):
                    probability, _, _ = update_mastery(attempts, correct, latest)
                    assert 0 <= probability <= 1

    @pytest.mark.parametrize("attempts,correct", [(-1, 0), (0, -1), (2, 3)])
    def test_rejects_malformed_counts(self, attempts, correct):
        with pytest.raises(ValueError):
            update_mastery(attempts, correct, True)


class TestReplayMastery:
    def test_replay_matches_single_update_from_totals(self):
        outcomes = [True, False, True, True, False, True]
        replayed = replay_mastery(outcomes)
        direct = update_mastery(5, 3, True)
        assert replayed == pytest.approx(direct)

    def test_empty_log_is_prior(self):
        assert replay_mastery([]) == pytest.approx((0.3, 2.0, 0))

    def test_order_does_not_change_probability(self):
        a = replay_mastery([True, True, False, False])
        b = replay_mastery([False, True, False, True])
        assert a[0] == pytest.approx(b[0])


# ---------------------------------------------------------------------------
# schedule_next_review
# ---------------------------------------------------------------------------


class TestScheduleNextReview:
    @pytest.mark.parametrize("probability", [0.0, 0.3, 0.69, 0.7, 0.95, 1.0])
    def test_incorrect_always_ten_minutes(self, probability):
        assert schedule_next_review(False, probability, BASE) == BASE + timedelta(minutes=10)

    @pytest.mark.parametrize("probability,days", [
        (0.0, 1),
        (0.5, 1),
        (0.6999, 1),
        (0.7, 3),
        (0.8, 3),
        (0.8999, 3),
        (0.9, 7),
        (0.95, 7),
        (1.0, 7),
    ])
    def test_correct_bands(self, probability, days):
        assert schedule_next_review(True, probability, BASE) == BASE + timedelta(days=days)

    def test_month_rollover(self):
        end_of_jan = datetime(2025, 1, 30, 9, 0)
        assert schedule_next_review(True, 0.95, end_of_jan) == datetime(2025, 2, 6, 9, 0)

    def test_year_rollover(self):
        new_years_eve = datetime(2024, 12, 31, 23, 55)
        assert schedule_next_review(True, 0.8, new_years_eve) == datetime(2025, 1, 3, 23, 55)
        assert schedule_next_review(False, 0.8, new_years_eve) == datetime(2025, 1, 1, 0, 5)

    def test_due_time_always_in_future(self):
        for correct in (True, False):
            assert schedule_next_review(correct, 0.5, BASE) > BASE

    def test_defaults_to_now(self):
        before = utcnow()
        scheduled = MasteryEngine.schedule_next_review(False, 0.5)
        assert scheduled >= before + timedelta(minutes=10)


# ---------------------------------------------------------------------------
# edge_of_learning_score
# ---------------------------------------------------------------------------


class TestEdgeOfLearningScore:
    def test_unknown_skill_scores_half(self):
        assert edge_of_learning_score(0.5, 0) == 0.5
        assert edge_of_learning_score(0.9, -1) == 0.5

    def test_peak_beats_extremes(self):
        assert edge_of_learning_score(0.55, 10) > edge_of_learning_score(0.2, 10)
        assert edge_of_learning_score(0.55, 10) > edge_of_learning_score(0.95, 10)

    def test_exact_values(self):
        assert edge_of_learning_score(0.55, 10) == pytest.approx(0.7 + 0.15)
        assert edge_of_learning_score(0.55, 20) == pytest.approx(0.7)
        assert edge_of_learning_score(0.0, 40) == pytest.approx(0.0)

    def test_lower_confidence_breaks_ties(self):
        assert edge_of_learning_score(0.55, 3) > edge_of_learning_score(0.55, 15)

    def test_range(self):
        for p in [i / 20 for i in range(21)]:
            for c in [0, 0.5, 2, 3, 10, 20, 100]:
                assert 0 <= edge_of_learning_score(p, c) <= 1


class TestIsDueForReview:
    def test_none_is_never_due(self):
        assert not is_due_for_review(None, BASE)

    def test_boundary_is_due(self):
        assert is_due_for_review(BASE, BASE)
        assert not is_due_for_review(BASE + timedelta(seconds=1), BASE)
