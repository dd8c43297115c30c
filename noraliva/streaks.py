"""
XP, daily streak and 7-day challenge rules.

Pure state transitions on XpStreakState; the crud layer persists the result.
"""

from datetime import date, timedelta
from typing import Optional, Tuple

from noraliva.schemas import XpStreakState

MISSION_XP = 25
CORRECT_ANSWER_XP = 10
CHALLENGE_DAYS = 7
GENTLE_STREAK_CAP = 3


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _is_yesterday(day: Optional[date], today: date) -> bool:
    return day is not None and day == today - timedelta(days=1)


def commit_to_challenge(state: XpStreakState) -> XpStreakState:
    """Opt in to the 7-day challenge"""
    return state.model_copy(update={"committed": True})


def complete_mission(state: XpStreakState, today: Optional[date] = None) -> XpStreakState:
    """
    Record today's mission as done.

    Completing twice on the same day changes nothing. The streak continues
    only from yesterday; otherwise it restarts at 1. The challenge day only
    advances for committed learners and never passes day 7.
    """
    today = today or date.today()

    if state.last_completed_date == today:
        return state

    next_streak = state.streak + 1 if _is_yesterday(state.last_completed_date, today) else 1
    next_day = (
        _clamp(state.challenge_day + 1, 0, CHALLENGE_DAYS) if state.committed else state.challenge_day
    )

    return state.model_copy(update={
        "xp": state.xp + MISSION_XP,
        "streak": next_streak,
        "challenge_day": next_day,
        "last_completed_date": today,
    })


def award_correct_answer(state: XpStreakState) -> XpStreakState:
    return state.model_copy(update={"xp": state.xp + CORRECT_ANSWER_XP})


def soft_reset_message(challenge_style: str) -> str:
    if challenge_style == "strict":
        return "We missed a day. That's okay, want to start again today and keep the streak going?"
    return "We missed a day. No worries, let's pick up where we left off."


def apply_missed_day(
    state: XpStreakState,
    challenge_style: str,
    today: Optional[date] = None
) -> Tuple[XpStreakState, Optional[str]]:
    """
    Enforce missed-day rules for committed learners on load.

    Strict learners restart the challenge and streak from zero; gentle
    learners keep a small streak (at most 3). Returns the new state and a
    message to show, or None when nothing was missed.
    """
    today = today or date.today()

    if not state.committed or state.last_completed_date is None:
        return state, None
    if state.last_completed_date == today or _is_yesterday(state.last_completed_date, today):
        return state, None

    if challenge_style == "strict":
        updated = state.model_copy(update={"challenge_day": 0, "streak": 0})
    else:
        updated = state.model_copy(update={"streak": _clamp(state.streak, 0, GENTLE_STREAK_CAP)})

    return updated, soft_reset_message(challenge_style)
