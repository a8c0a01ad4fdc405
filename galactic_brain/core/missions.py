"""Mission sizing and reward tables per difficulty tier."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union["Difficulty", str, None]) -> "Difficulty":
        """Return the matching tier, or EASY for anything unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.EASY


@dataclass(frozen=True)
class MissionSpec:
    question_count: int
    pass_threshold: int


@dataclass(frozen=True)
class Rewards:
    score_gain: int
    fuel_gain: int
    fuel_loss: int


_MISSIONS: Dict[Difficulty, MissionSpec] = {
    Difficulty.EASY: MissionSpec(question_count=3, pass_threshold=2),
    Difficulty.MEDIUM: MissionSpec(question_count=4, pass_threshold=3),
    Difficulty.HARD: MissionSpec(question_count=5, pass_threshold=4),
}

_REWARDS: Dict[Difficulty, Rewards] = {
    Difficulty.EASY: Rewards(score_gain=50, fuel_gain=5, fuel_loss=5),
    Difficulty.MEDIUM: Rewards(score_gain=75, fuel_gain=8, fuel_loss=8),
    Difficulty.HARD: Rewards(score_gain=100, fuel_gain=10, fuel_loss=10),
}


def mission_config(difficulty: Union[Difficulty, str, None]) -> MissionSpec:
    """Question count and pass threshold for a difficulty tier."""
    return _MISSIONS[Difficulty.parse(difficulty)]


def mission_rewards(difficulty: Union[Difficulty, str, None]) -> Rewards:
    """Score gain and fuel gain/loss per answer for a difficulty tier."""
    return _REWARDS[Difficulty.parse(difficulty)]
