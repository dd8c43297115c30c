"""
Daily mission generator.

Missions are reproducible: the seed key "<learner>:<domain>:<date>:<kind>"
is hashed with 32-bit FNV-1a and feeds an xorshift32 generator, so the same
learner, domain and date always produce the same questions.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Sequence, TypeVar

from noraliva.learners import DEFAULT_NUMBER_BAND, LEARNERS

T = TypeVar("T")

MASK_32 = 0xFFFFFFFF
FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619

QUESTIONS_PER_MATH_MISSION = 3
ADDITION_SHARE = 0.6


class MissionQuestion(BaseModel):
    id: str
    prompt: str
    options: List[str]
    correct_index: int
    skill: str


class MissionNode(BaseModel):
    id: str
    title: str
    subtitle: str
    predicted_struggle: bool = False


class Mission(BaseModel):
    id: str
    title: str
    nodes: List[MissionNode] = Field(default_factory=list)
    questions: List[MissionQuestion] = Field(default_factory=list)


def hash_seed(key: str) -> int:
    """FNV-1a over the UTF-16 code units of key"""
    h = FNV_OFFSET_BASIS
    data = key.encode("utf-16-le")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * FNV_PRIME) & MASK_32
    return h


class SeededRandom:
    """xorshift32 generator producing floats in [0, 1)"""

    def __init__(self, key: str):
        self.state = hash_seed(key) or 1

    def random(self) -> float:
        x = self.state
        x ^= (x << 13) & MASK_32
        x ^= x >> 17
        x ^= (x << 5) & MASK_32
        self.state = x & MASK_32
        return self.state / 0x100000000

    def randint(self, low: int, high: int) -> int:
        """Inclusive on both ends"""
        return int(self.random() * (high - low + 1)) + low

    def shuffled(self, items: Sequence[T]) -> List[T]:
        """Fisher-Yates shuffle of a copy"""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = int(self.random() * (i + 1))
            result[i], result[j] = result[j], result[i]
        return result


def base_nodes() -> List[MissionNode]:
    return [
        MissionNode(id="warmup", title="Warm-up", subtitle="Easy start"),
        MissionNode(id="skill", title="Skill", subtitle="Today's focus"),
        MissionNode(id="practice", title="Practice", subtitle="A few tries", predicted_struggle=True),
        MissionNode(id="miniBoss", title="Mini Boss", subtitle="Show what you know"),
        MissionNode(id="celebrate", title="Celebrate", subtitle="Victory!"),
    ]


def _numeric_options(rng: SeededRandom, correct: int) -> List[str]:
    """Correct answer plus up to two nearby non-negative distractors, shuffled"""
    candidates = [max(0, correct + rng.randint(-3, 3)) for _ in range(4)]
    distractors = [str(n) for n in candidates if n != correct][:2]
    return rng.shuffled([str(correct)] + distractors)


def build_math_mission(learner_id: str, domain_id: str, date_key: str) -> Mission:
    rng = SeededRandom(f"{learner_id}:{domain_id}:{date_key}:math")
    # Exact slug match; "Elle" is not the built-in "elle"
    profile = LEARNERS.get(learner_id)
    within = profile.number_band if profile else DEFAULT_NUMBER_BAND

    questions = []
    for i in range(QUESTIONS_PER_MATH_MISSION):
        add_not_sub = rng.random() < ADDITION_SHARE
        a = rng.randint(1, within - 1)
        b = rng.randint(1, within - 1)

        if add_not_sub:
            # Keep the sum inside the band
            b = rng.randint(1, max(1, within - a))
            correct = a + b
            prompt = f"{a} + {b} = ?"
            skill = f"Adding within {within}"
        else:
            bigger = rng.randint(max(2, a + 1), within)
            smaller = rng.randint(1, bigger - 1)
            correct = bigger - smaller
            prompt = f"{bigger} − {smaller} = ?"
            skill = f"Subtracting within {within}"

        options = _numeric_options(rng, correct)
        questions.append(MissionQuestion(
            id=f"q{i + 1}",
            prompt=prompt,
            options=options,
            correct_index=options.index(str(correct)),
            skill=skill,
        ))

    return Mission(
        id=f"{learner_id}:{domain_id}:{date_key}",
        title="7-Day Star Trail" if within <= 10 else "7-Day Math Quest",
        nodes=base_nodes(),
        questions=questions,
    )


READING_BANK = [
    MissionQuestion(
        id="sight-1",
        prompt="Which word is 'the'?",
        options=["ta", "the", "tho"],
        correct_index=1,
        skill="Sight word recognition",
    ),
    MissionQuestion(
        id="rhyme-1",
        prompt="Which word rhymes with “cat”?",
        options=["dog", "sun", "hat"],
        correct_index=2,
        skill="Rhyming",
    ),
    MissionQuestion(
        id="sound-1",
        prompt="Which word starts with the same sound as “ball”?",
        options=["cat", "bag", "sun"],
        correct_index=1,
        skill="Initial sound",
    ),
]


def build_reading_mission(learner_id: str, domain_id: str, date_key: str) -> Mission:
    rng = SeededRandom(f"{learner_id}:{domain_id}:{date_key}:reading")
    questions = [q.model_copy() for q in rng.shuffled(READING_BANK)[:3]]

    return Mission(
        id=f"{learner_id}:{domain_id}:{date_key}",
        title="Reading Mission",
        nodes=base_nodes(),
        questions=questions,
    )


def build_placeholder_mission(learner_id: str, domain_id: str, date_key: str) -> Mission:
    rng = SeededRandom(f"{learner_id}:{domain_id}:{date_key}:placeholder")
    plus_two = 1 + rng.randint(1, 3)
    options = rng.shuffled(["1", "2", str(plus_two)])

    return Mission(
        id=f"{learner_id}:{domain_id}:{date_key}",
        title="Daily Mission",
        nodes=base_nodes(),
        questions=[
            MissionQuestion(
                id="placeholder-1",
                prompt="This is a practice question. What is 1 + 1?",
                options=options,
                correct_index=options.index("2"),
                skill="Getting started",
            )
        ],
    )


def get_daily_mission(learner_id: str, domain_id: str, date_key: Optional[str] = None) -> Mission:
    """
    Build the mission for a learner, domain and day.

    Args:
        learner_id: Learner slug, e.g. "liv"
        domain_id: Domain slug; "math" and "reading" have dedicated builders
        date_key: Day in YYYY-MM-DD form (defaults to today)
    """
    if date_key is None:
        from datetime import date
        date_key = date.today().isoformat()

    key = domain_id.lower()
    if key == "math":
        return build_math_mission(learner_id, domain_id, date_key)
    if key == "reading":
        return build_reading_mission(learner_id, domain_id, date_key)
    return build_placeholder_mission(learner_id, domain_id, date_key)
