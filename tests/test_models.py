"""Tests for galactic_brain.core.models – profile and mission records."""

from __future__ import annotations

from dataclasses import replace

import pytest

from conftest import make_question
from galactic_brain.core.missions import Difficulty, mission_config
from galactic_brain.core.models import (
    DestinationId,
    MissionRunState,
    PlayerProfile,
    clamp_fuel,
)


# ---------------------------------------------------------------------------
# clamp_fuel
# ---------------------------------------------------------------------------

class TestClampFuel:
    @pytest.mark.parametrize("raw, expected", [(-5, 0), (0, 0), (55, 55), (100, 100), (130, 100)])
    def test_clamps(self, raw, expected):
        assert clamp_fuel(raw) == expected


# ---------------------------------------------------------------------------
# PlayerProfile
# ---------------------------------------------------------------------------

class TestPlayerProfile:
    def test_defaults(self):
        p = PlayerProfile()
        assert p.name == ""
        assert p.fuel == 100
        assert p.score == 0
        assert p.badges == ()
        assert p.difficulty is Difficulty.EASY

    def test_name_truncated_to_twelve(self):
        assert PlayerProfile(name="Commander Zork").name == "Commander Zo"
        assert len(PlayerProfile(name="x" * 40).name) == 12

    def test_fuel_clamped_on_construction(self):
        assert PlayerProfile(fuel=250).fuel == 100
        assert PlayerProfile(fuel=-3).fuel == 0

    def test_badges_deduplicated_in_order(self):
        p = PlayerProfile(badges=(DestinationId.ART, "ART", DestinationId.OCEAN))
        assert p.badges == (DestinationId.ART, DestinationId.OCEAN)

    def test_difficulty_string_parsed(self):
        assert PlayerProfile(difficulty="hard").difficulty is Difficulty.HARD  # type: ignore[arg-type]

    def test_frozen(self):
        with pytest.raises(AttributeError):
            PlayerProfile().fuel = 10  # type: ignore[misc]

    def test_to_dict(self):
        p = PlayerProfile(name="Ada", fuel=80, score=150, badges=(DestinationId.SPACE,), difficulty=Difficulty.MEDIUM)
        assert p.to_dict() == {
            "name": "Ada",
            "fuel": 80,
            "score": 150,
            "badges": ["SPACE"],
            "difficulty": "medium",
        }

    def test_from_dict_restores(self):
        p = PlayerProfile.from_dict(
            {"name": "Ada", "fuel": 80, "score": 150, "badges": ["SPACE"], "difficulty": "medium"}
        )
        assert p == PlayerProfile(name="Ada", fuel=80, score=150, badges=(DestinationId.SPACE,), difficulty=Difficulty.MEDIUM)


class TestPlayerProfileFromDictEdgeCases:
    @pytest.mark.parametrize("payload", [None, [], "profile", 42])
    def test_non_mapping_gives_defaults(self, payload):
        assert PlayerProfile.from_dict(payload) == PlayerProfile()

    def test_bad_numbers_default(self):
        p = PlayerProfile.from_dict({"name": "Bo", "fuel": "lots", "score": None})
        assert p.fuel == 100
        assert p.score == 0

    def test_unknown_badges_dropped(self):
        p = PlayerProfile.from_dict({"badges": ["ART", "PLUTO"]})
        assert p.badges == (DestinationId.ART,)

    def test_unknown_difficulty_is_easy(self):
        assert PlayerProfile.from_dict({"difficulty": "legendary"}).difficulty is Difficulty.EASY

    def test_non_string_name_ignored(self):
        assert PlayerProfile.from_dict({"name": 7}).name == ""

    def test_out_of_range_fuel_clamped(self):
        assert PlayerProfile.from_dict({"fuel": 999}).fuel == 100


# ---------------------------------------------------------------------------
# MissionRunState
# ---------------------------------------------------------------------------

class TestMissionRunState:
    @pytest.fixture()
    def state(self) -> MissionRunState:
        return MissionRunState(
            destination_id=DestinationId.NATURE,
            difficulty=Difficulty.EASY,
            spec=mission_config(Difficulty.EASY),
            questions=(make_question(0), make_question(1), make_question(2)),
        )

    def test_fresh_state(self, state: MissionRunState):
        assert state.current_index == 0
        assert state.correct_count == 0
        assert state.last_answer is None
        assert state.last_outcome is None
        assert not state.answered

    def test_current_question(self, state: MissionRunState):
        assert state.current_question.prompt == "Question 0?"

    def test_numbering(self, state: MissionRunState):
        assert state.question_number == 1
        assert state.total_questions == 3

    def test_is_last_question(self, state: MissionRunState):
        assert not state.is_last_question
        assert replace(state, current_index=2).is_last_question


class TestQuestion:
    def test_is_correct(self):
        q = make_question(correct=2)
        assert q.is_correct(2)
        assert not q.is_correct(1)
