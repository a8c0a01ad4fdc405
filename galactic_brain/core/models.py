"""Records shared by the progression engine and its collaborators."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from galactic_brain.core.missions import Difficulty, MissionSpec

logger = logging.getLogger(__name__)

MAX_FUEL = 100
MIN_FUEL = 0
MAX_NAME_LENGTH = 12
OPTION_COUNT = 4


class DestinationId(str, Enum):
    NATURE = "NATURE"
    SCIENCE = "SCIENCE"
    HISTORY = "HISTORY"
    SPACE = "SPACE"
    OCEAN = "OCEAN"
    ART = "ART"


class Outcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"


def clamp_fuel(value: int) -> int:
    """Keep fuel inside [0, 100]."""
    return max(MIN_FUEL, min(MAX_FUEL, value))


@dataclass(frozen=True)
class PlayerProfile:
    name: str = ""
    fuel: int = MAX_FUEL
    score: int = 0
    badges: Tuple[DestinationId, ...] = ()
    difficulty: Difficulty = Difficulty.EASY

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", self.name[:MAX_NAME_LENGTH])
        object.__setattr__(self, "fuel", clamp_fuel(int(self.fuel)))
        object.__setattr__(self, "score", max(0, int(self.score)))
        object.__setattr__(self, "difficulty", Difficulty.parse(self.difficulty))
        unique: Tuple[DestinationId, ...] = ()
        for badge in self.badges:
            badge = DestinationId(badge)
            if badge not in unique:
                unique += (badge,)
        object.__setattr__(self, "badges", unique)

    def has_badge(self, destination_id: DestinationId) -> bool:
        return destination_id in self.badges

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "fuel": self.fuel,
            "score": self.score,
            "badges": [badge.value for badge in self.badges],
            "difficulty": self.difficulty.value,
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "PlayerProfile":
        """Build a profile from a persisted record, defaulting whatever is unusable."""
        if not isinstance(payload, Mapping):
            return cls()
        name = payload.get("name", "")
        try:
            fuel = int(float(payload.get("fuel", MAX_FUEL)))
        except (TypeError, ValueError):
            fuel = MAX_FUEL
        try:
            score = int(payload.get("score", 0))
        except (TypeError, ValueError):
            score = 0
        badges = []
        raw_badges = payload.get("badges", [])
        if isinstance(raw_badges, (list, tuple)):
            for raw in raw_badges:
                try:
                    badges.append(DestinationId(raw))
                except ValueError:
                    logger.warning("Ignoring unknown badge %r in saved profile", raw)
        return cls(
            name=name if isinstance(name, str) else "",
            fuel=fuel,
            score=score,
            badges=tuple(badges),
            difficulty=Difficulty.parse(payload.get("difficulty")),
        )


@dataclass(frozen=True)
class Destination:
    """A themed planet. Only ``completed`` ever changes."""

    id: DestinationId
    name: str
    color: str
    icon: str
    description: str
    position: Tuple[float, float]
    completed: bool = False


@dataclass(frozen=True)
class Question:
    prompt: str
    options: Tuple[str, ...]
    correct_answer_index: int
    explanation: str = ""

    def is_correct(self, selected_index: int) -> bool:
        return selected_index == self.correct_answer_index


@dataclass(frozen=True)
class MissionRunState:
    """Progress through one mission; replaced, never mutated, on every step."""

    destination_id: DestinationId
    difficulty: Difficulty
    spec: MissionSpec
    questions: Tuple[Question, ...]
    current_index: int = 0
    correct_count: int = 0
    last_answer: Optional[int] = None
    last_outcome: Optional[Outcome] = None
    padded: int = 0

    @property
    def current_question(self) -> Question:
        return self.questions[self.current_index]

    @property
    def question_number(self) -> int:
        """1-based position of the current question."""
        return self.current_index + 1

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def answered(self) -> bool:
        return self.last_answer is not None

    @property
    def is_last_question(self) -> bool:
        return self.current_index >= len(self.questions) - 1


@dataclass(frozen=True)
class MissionResult:
    destination_id: DestinationId
    passed: bool
    correct_count: int
    question_count: int


@dataclass(frozen=True)
class AnswerResult:
    state: MissionRunState
    profile: PlayerProfile
    correct: bool
