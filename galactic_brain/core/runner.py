"""Mission runner: one answer per question, then advance, then a pass/fail result.

Every function takes the current records and returns new ones; nothing is
mutated in place. Score and fuel rewards use the difficulty the mission was
started with, so changing tiers cannot affect a mission already under way.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence, Union

from galactic_brain.core.errors import AlreadyAnswered, InvariantViolation
from galactic_brain.core.missions import Difficulty, mission_config, mission_rewards
from galactic_brain.core.models import (
    OPTION_COUNT,
    AnswerResult,
    DestinationId,
    MissionResult,
    MissionRunState,
    Outcome,
    PlayerProfile,
    Question,
    clamp_fuel,
)


def start_mission(
    destination_id: DestinationId,
    difficulty: Difficulty,
    questions: Sequence[Question],
    padded: int = 0,
) -> MissionRunState:
    """Fresh run state: first question, nothing answered yet."""
    if not questions:
        raise InvariantViolation("a mission needs at least one question")
    difficulty = Difficulty.parse(difficulty)
    return MissionRunState(
        destination_id=DestinationId(destination_id),
        difficulty=difficulty,
        spec=mission_config(difficulty),
        questions=tuple(questions),
        padded=padded,
    )


def answer(state: MissionRunState, profile: PlayerProfile, selected_index: int) -> AnswerResult:
    """Record the answer to the current question and apply its reward or penalty."""
    if state.answered:
        raise AlreadyAnswered(f"question {state.question_number} already has an answer")
    if not isinstance(selected_index, int) or isinstance(selected_index, bool):
        raise InvariantViolation(f"answer index {selected_index!r} is not an option number")
    if not 0 <= selected_index < OPTION_COUNT:
        raise InvariantViolation(f"answer index {selected_index} is out of range")

    rewards = mission_rewards(state.difficulty)
    correct = state.current_question.is_correct(selected_index)
    if correct:
        profile = replace(
            profile,
            score=profile.score + rewards.score_gain,
            fuel=clamp_fuel(profile.fuel + rewards.fuel_gain),
        )
        state = replace(
            state,
            correct_count=state.correct_count + 1,
            last_answer=selected_index,
            last_outcome=Outcome.CORRECT,
        )
    else:
        profile = replace(profile, fuel=clamp_fuel(profile.fuel - rewards.fuel_loss))
        state = replace(state, last_answer=selected_index, last_outcome=Outcome.INCORRECT)
    return AnswerResult(state=state, profile=profile, correct=correct)


def advance(state: MissionRunState) -> Union[MissionRunState, MissionResult]:
    """Move to the next question, or finish the mission after the last one."""
    if not state.answered:
        raise InvariantViolation(f"question {state.question_number} has not been answered")
    if not state.is_last_question:
        return replace(
            state,
            current_index=state.current_index + 1,
            last_answer=None,
            last_outcome=None,
        )
    return MissionResult(
        destination_id=state.destination_id,
        passed=state.correct_count >= state.spec.pass_threshold,
        correct_count=state.correct_count,
        question_count=state.total_questions,
    )
