from noraliva.models.profile import Profile
from noraliva.models.curriculum import Domain, Unit, Skill, Lesson, Exercise
from noraliva.models.attempt import Attempt
from noraliva.models.skill_mastery import SkillMastery
from noraliva.models.review_schedule import ReviewSchedule
from noraliva.models.learning_session import LearningSession
from noraliva.models.xp_streak import XpStreak
from noraliva.models.chat_log import ChatLog

__all__ = [
    "Profile",
    "Domain",
    "Unit",
    "Skill",
    "Lesson",
    "Exercise",
    "Attempt",
    "SkillMastery",
    "ReviewSchedule",
    "LearningSession",
    "XpStreak",
    "ChatLog",
]
