"""Built-in learner profiles"""

from pydantic import BaseModel
from typing import Dict, Optional

DEFAULT_NUMBER_BAND = 20


class LearnerProfile(BaseModel):
    """Static description of a learner used for content and tone"""
    id: str
    display_name: str
    age: int
    grade_label: str
    challenge_style: str  # "strict" resets on a missed day (kind tone), "gentle" softens
    number_band: int = DEFAULT_NUMBER_BAND  # arithmetic stays within this number


LEARNERS: Dict[str, LearnerProfile] = {
    "liv": LearnerProfile(
        id="liv",
        display_name="Liv",
        age=7,
        grade_label="Grade 2",
        challenge_style="strict",
        number_band=20,
    ),
    "elle": LearnerProfile(
        id="elle",
        display_name="Elle",
        age=5,
        grade_label="Grade 1",
        challenge_style="gentle",
        number_band=10,
    ),
}


def get_learner_profile(raw: Optional[str]) -> LearnerProfile:
    """Look up a built-in profile by slug, falling back to a gentle generic learner"""
    key = (raw or "").lower()
    if key in LEARNERS:
        return LEARNERS[key]

    return LearnerProfile(
        id="liv",
        display_name=raw[0].upper() + raw[1:] if raw else "Learner",
        age=0,
        grade_label="Learner",
        challenge_style="gentle",
    )
