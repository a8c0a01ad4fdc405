"""Game phases and the table of legal transitions between them."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from galactic_brain.core.errors import IllegalTransition


class Phase(str, Enum):
    MENU = "MENU"
    MAP = "MAP"
    TRAVELING = "TRAVELING"
    TRIVIA = "TRIVIA"
    GAME_OVER = "GAME_OVER"
    VICTORY = "VICTORY"


class Trigger(str, Enum):
    START = "start"
    DEPART = "depart"
    TRAVEL_FAILED = "travel-failed"
    TRAVEL_CANCELLED = "travel-cancelled"
    ARRIVE = "arrive"
    MISSION_CONTINUES = "mission-continues"
    OUT_OF_FUEL = "out-of-fuel"
    ALL_COMPLETE = "all-complete"
    RESET = "reset"
    HOME = "home"


TRANSITIONS: Dict[Tuple[Phase, Trigger], Phase] = {
    (Phase.MENU, Trigger.START): Phase.MAP,
    (Phase.MAP, Trigger.DEPART): Phase.TRAVELING,
    (Phase.MAP, Trigger.HOME): Phase.MENU,
    (Phase.MAP, Trigger.OUT_OF_FUEL): Phase.GAME_OVER,
    (Phase.TRAVELING, Trigger.TRAVEL_FAILED): Phase.MAP,
    (Phase.TRAVELING, Trigger.TRAVEL_CANCELLED): Phase.MAP,
    (Phase.TRAVELING, Trigger.ARRIVE): Phase.TRIVIA,
    (Phase.TRIVIA, Trigger.MISSION_CONTINUES): Phase.MAP,
    (Phase.TRIVIA, Trigger.OUT_OF_FUEL): Phase.GAME_OVER,
    (Phase.TRIVIA, Trigger.ALL_COMPLETE): Phase.VICTORY,
    (Phase.TRIVIA, Trigger.HOME): Phase.MENU,
    (Phase.GAME_OVER, Trigger.RESET): Phase.MAP,
    (Phase.VICTORY, Trigger.RESET): Phase.MAP,
}


def next_phase(phase: Phase, trigger: Trigger) -> Phase:
    """Return the phase reached by ``trigger`` from ``phase``.

    Every (phase, trigger) pair missing from ``TRANSITIONS`` is illegal.
    """
    try:
        return TRANSITIONS[(phase, trigger)]
    except KeyError:
        raise IllegalTransition(f"{trigger.value!r} is not allowed in phase {phase.value}") from None


def is_allowed(phase: Phase, trigger: Trigger) -> bool:
    return (phase, trigger) in TRANSITIONS
