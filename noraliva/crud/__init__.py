from noraliva.crud.profile import create_profile, get_profile, get_profile_by_slug, list_children
from noraliva.crud.curriculum import (
    create_domain,
    get_domain_by_slug,
    add_unit,
    add_skill,
    add_lesson,
    add_exercise,
    import_curriculum_rows,
    get_ordered_exercises,
    get_skill_id_for_exercise,
    get_domain_slug_for_exercise
)
from noraliva.crud.mastery import (
    submit_answer,
    count_skill_attempts,
    get_skill_mastery,
    get_review_schedule,
    recompute_skill_mastery,
    get_correct_exercise_ids,
    get_mastery_by_skill,
    get_due_review_skill_ids,
    get_learner_mastery
)
from noraliva.crud.next_exercise import get_next_exercise
from noraliva.crud.learning_session import (
    start_learning_session,
    end_learning_session,
    get_learning_sessions
)
from noraliva.crud.xp_streak import get_xp_streak, get_xp_streak_by_slug, upsert_xp_streak, award_answer_xp
from noraliva.crud.parent_view import get_parent_view_data
from noraliva.crud.chat_log import log_chat_message, get_chat_history

__all__ = [
    "create_profile",
    "get_profile",
    "get_profile_by_slug",
    "list_children",
    "create_domain",
    "get_domain_by_slug",
    "add_unit",
    "add_skill",
    "add_lesson",
    "add_exercise",
    "import_curriculum_rows",
    "get_ordered_exercises",
    "get_skill_id_for_exercise",
    "get_domain_slug_for_exercise",
    "submit_answer",
    "count_skill_attempts",
    "get_skill_mastery",
    "get_review_schedule",
    "recompute_skill_mastery",
    "get_correct_exercise_ids",
    "get_mastery_by_skill",
    "get_due_review_skill_ids",
    "get_learner_mastery",
    "get_next_exercise",
    "start_learning_session",
    "end_learning_session",
    "get_learning_sessions",
    "get_xp_streak",
    "get_xp_streak_by_slug",
    "upsert_xp_streak",
    "award_answer_xp",
    "get_parent_view_data",
    "log_chat_message",
    "get_chat_history",
]
