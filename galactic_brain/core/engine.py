"""Progression state machine: owns the player profile, the planets and the phase."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from galactic_brain.core import runner
from galactic_brain.core.content import ContentProvider
from galactic_brain.core.destinations import DestinationRepository
from galactic_brain.core.errors import IllegalTransition, InvariantViolation, ProviderFailure, TravelCancelled
from galactic_brain.core.missions import Difficulty
from galactic_brain.core.models import (
    Destination,
    DestinationId,
    MissionResult,
    MissionRunState,
    PlayerProfile,
)
from galactic_brain.core.phases import Phase, Trigger, is_allowed, next_phase
from galactic_brain.core.progress import PLANETS_KEY, PLAYER_KEY, ProgressStore
from galactic_brain.core.travel import TravelSequencer, TravelStage, TravelTimings

logger = logging.getLogger(__name__)

TRAVEL_FAILED_NOTICE = "Communications with the planet failed! Try again."


class GameEvent(str, Enum):
    CLICK = "click"
    TRAVEL_START = "travel-start"
    ANSWER_CORRECT = "answer-correct"
    ANSWER_INCORRECT = "answer-incorrect"
    MISSION_PASS = "mission-pass"
    MISSION_FAIL = "mission-fail"
    GAME_OVER = "game-over"
    VICTORY = "victory"


class GameEngine(QObject):
    """Top-level controller for one player's run.

    Commands that are not legal in the current phase are rejected: they log a
    warning, change nothing and return ``False``/``None``. Every committed
    change bumps ``version`` and is written through the progress store.
    """

    phase_changed = Signal(str)
    event_emitted = Signal(str)
    travel_stage_changed = Signal(str)
    notice = Signal(str)

    def __init__(
        self,
        destinations: DestinationRepository,
        progress_store: ProgressStore,
        provider: ContentProvider,
        timings: Optional[TravelTimings] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._catalogue = destinations
        self._store = progress_store
        self._sequencer = TravelSequencer(provider, timings, on_stage=self._on_travel_stage)
        self._phase = Phase.MENU
        self._selected: Optional[DestinationId] = None
        self._mission: Optional[MissionRunState] = None
        self._version = 0
        self._profile, self._destinations = self._restore()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def profile(self) -> PlayerProfile:
        return self._profile

    @property
    def destinations(self) -> List[Destination]:
        return list(self._destinations.values())

    def destination(self, destination_id: DestinationId) -> Destination:
        return self._destinations[DestinationId(destination_id)]

    @property
    def selected_destination(self) -> Optional[DestinationId]:
        return self._selected

    @property
    def mission(self) -> Optional[MissionRunState]:
        return self._mission

    @property
    def version(self) -> int:
        return self._version

    @property
    def all_completed(self) -> bool:
        return all(d.completed for d in self._destinations.values())

    # ------------------------------------------------------------------
    # Menu
    # ------------------------------------------------------------------

    def set_name(self, name: str) -> bool:
        if not self._require(Phase.MENU, "set name"):
            return False
        if not name.strip():
            logger.warning("Ignoring blank pilot name")
            return False
        self._commit_profile(replace(self._profile, name=name))
        return True

    def set_difficulty(self, difficulty: Difficulty) -> bool:
        if not self._require(Phase.MENU, "set difficulty"):
            return False
        self._commit_profile(replace(self._profile, difficulty=Difficulty.parse(difficulty)))
        self.event_emitted.emit(GameEvent.CLICK.value)
        return True

    def start(self, name: Optional[str] = None) -> bool:
        """Leave the menu for the planet map. Needs a non-blank pilot name."""
        if name is not None and not self.set_name(name):
            return False
        if not self._profile.name.strip():
            logger.warning("Cannot start without a pilot name")
            return False
        if not self._fire(Trigger.START):
            return False
        self.event_emitted.emit(GameEvent.CLICK.value)
        if self._profile.fuel <= 0:
            # a restored run that already ran dry can only be reset
            self._fire(Trigger.OUT_OF_FUEL)
            self.event_emitted.emit(GameEvent.GAME_OVER.value)
        return True

    # ------------------------------------------------------------------
    # Map and travel
    # ------------------------------------------------------------------

    def select_destination(self, destination_id: DestinationId) -> bool:
        """Select a planet. Returns True when it was already selected (a confirmation)."""
        if not self._require(Phase.MAP, "select a destination"):
            return False
        destination_id = self._known_destination(destination_id)
        if destination_id is None:
            return False
        if self._selected == destination_id:
            return True
        self._selected = destination_id
        self._version += 1
        self.event_emitted.emit(GameEvent.CLICK.value)
        return False

    def clear_selection(self) -> None:
        if self._phase is Phase.MAP and self._selected is not None:
            self._selected = None
            self._version += 1

    async def interact(self, destination_id: DestinationId) -> bool:
        """Tap a planet: the first tap selects it, a second tap on it travels there."""
        if self.select_destination(destination_id):
            return await self.travel(destination_id)
        return False

    async def travel(self, destination_id: DestinationId) -> bool:
        """Fly to the selected planet and land in its mission.

        Returns True once the TRIVIA phase has been entered. A failed fetch
        brings the player back to the map with a notice and no other change.
        """
        if not self._require(Phase.MAP, "travel"):
            return False
        destination_id = self._known_destination(destination_id)
        if destination_id is None:
            return False
        if self._selected != destination_id:
            logger.warning("Cannot travel to %s: it is not the selected destination", destination_id.value)
            return False
        if self._profile.fuel <= 0:
            logger.info("Cannot travel to %s: fuel tank is empty", destination_id.value)
            return False

        self._fire(Trigger.DEPART)
        self.event_emitted.emit(GameEvent.TRAVEL_START.value)
        try:
            mission = await self._sequencer.begin(destination_id, self._profile.difficulty, self._profile.fuel)
        except ProviderFailure as e:
            logger.warning("Travel to %s failed: %s", destination_id.value, e)
            self._fire(Trigger.TRAVEL_FAILED)
            self.notice.emit(TRAVEL_FAILED_NOTICE)
            return False
        except TravelCancelled:
            self._fire(Trigger.TRAVEL_CANCELLED)
            return False
        except asyncio.CancelledError:
            # the awaiting task itself was cancelled, e.g. on loop shutdown
            if self._phase is Phase.TRAVELING:
                self._fire(Trigger.TRAVEL_CANCELLED)
            raise

        self._mission = mission
        self._fire(Trigger.ARRIVE)
        return True

    def cancel_travel(self) -> bool:
        if self._phase is not Phase.TRAVELING:
            return False
        return self._sequencer.cancel()

    # ------------------------------------------------------------------
    # Trivia
    # ------------------------------------------------------------------

    def answer(self, selected_index: int) -> Optional[bool]:
        """Answer the current question. Returns correctness, or None if rejected."""
        if not self._require(Phase.TRIVIA, "answer") or self._mission is None:
            return None
        try:
            result = runner.answer(self._mission, self._profile, selected_index)
        except InvariantViolation as e:
            logger.warning("Ignoring answer: %s", e)
            return None
        self._mission = result.state
        self._commit_profile(result.profile)
        event = GameEvent.ANSWER_CORRECT if result.correct else GameEvent.ANSWER_INCORRECT
        self.event_emitted.emit(event.value)
        return result.correct

    def advance(self) -> Optional[MissionResult]:
        """Go to the next question; after the last one, resolve the mission.

        Returns the MissionResult when the mission ends, otherwise None.
        """
        if not self._require(Phase.TRIVIA, "advance") or self._mission is None:
            return None
        try:
            step = runner.advance(self._mission)
        except InvariantViolation as e:
            logger.warning("Ignoring advance: %s", e)
            return None
        if isinstance(step, MissionRunState):
            self._mission = step
            self._version += 1
            self.event_emitted.emit(GameEvent.CLICK.value)
            return None
        self._resolve(step)
        return step

    def _resolve(self, result: MissionResult) -> None:
        self._mission = None
        if result.passed:
            self._award_badge(result.destination_id)
            self.event_emitted.emit(GameEvent.MISSION_PASS.value)
        else:
            self.event_emitted.emit(GameEvent.MISSION_FAIL.value)
        logger.info(
            "Mission at %s %s with %d/%d correct",
            result.destination_id.value,
            "passed" if result.passed else "failed",
            result.correct_count,
            result.question_count,
        )

        if self._profile.fuel <= 0:
            self._fire(Trigger.OUT_OF_FUEL)
            self.event_emitted.emit(GameEvent.GAME_OVER.value)
        elif self.all_completed:
            self._fire(Trigger.ALL_COMPLETE)
            self.event_emitted.emit(GameEvent.VICTORY.value)
        else:
            self._selected = None
            self._fire(Trigger.MISSION_CONTINUES)
            self.event_emitted.emit(GameEvent.CLICK.value)

    def _award_badge(self, destination_id: DestinationId) -> None:
        if self._profile.has_badge(destination_id):
            return
        self._destinations[destination_id] = replace(self._destinations[destination_id], completed=True)
        self._commit_profile(replace(self._profile, badges=self._profile.badges + (destination_id,)))
        self._persist_destinations()
        logger.info("Badge earned for %s", destination_id.value)

    # ------------------------------------------------------------------
    # Leaving a run
    # ------------------------------------------------------------------

    def return_to_menu(self) -> bool:
        """Back to the title screen. A mission in progress is abandoned."""
        if not self._fire(Trigger.HOME):
            return False
        self._mission = None
        self._selected = None
        self.event_emitted.emit(GameEvent.CLICK.value)
        return True

    def reset(self) -> bool:
        """Start a new run after game over or victory, keeping only the pilot name."""
        if not is_allowed(self._phase, Trigger.RESET):
            logger.warning("Cannot reset in phase %s", self._phase.value)
            return False
        self._destinations = {
            key: replace(destination, completed=False) for key, destination in self._destinations.items()
        }
        self._selected = None
        self._mission = None
        self._profile = PlayerProfile(name=self._profile.name)
        self._store.remove(PLANETS_KEY)
        self._persist_profile()
        self._fire(Trigger.RESET)
        self.event_emitted.emit(GameEvent.CLICK.value)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fire(self, trigger: Trigger) -> bool:
        try:
            target = next_phase(self._phase, trigger)
        except IllegalTransition as e:
            logger.warning("Rejected transition: %s", e)
            return False
        logger.info("Phase %s -> %s (%s)", self._phase.value, target.value, trigger.value)
        self._phase = target
        self._version += 1
        self.phase_changed.emit(target.value)
        return True

    def _require(self, phase: Phase, action: str) -> bool:
        if self._phase is phase:
            return True
        logger.warning("Cannot %s in phase %s", action, self._phase.value)
        return False

    def _known_destination(self, destination_id: DestinationId) -> Optional[DestinationId]:
        try:
            return DestinationId(destination_id)
        except ValueError:
            logger.warning("Unknown destination %r", destination_id)
            return None

    def _on_travel_stage(self, stage: TravelStage) -> None:
        self.travel_stage_changed.emit(stage.value)

    def _commit_profile(self, profile: PlayerProfile) -> None:
        self._profile = profile
        self._version += 1
        self._persist_profile()

    def _persist_profile(self) -> None:
        self._store.save(PLAYER_KEY, self._profile.to_dict())

    def _persist_destinations(self) -> None:
        self._store.save(
            PLANETS_KEY,
            [{"id": d.id.value, "completed": d.completed} for d in self._destinations.values()],
        )

    def _restore(self) -> Tuple[PlayerProfile, Dict[DestinationId, Destination]]:
        """Load saved state, making badges and completion flags agree."""
        profile = PlayerProfile.from_dict(self._store.load(PLAYER_KEY))

        completed = set(profile.badges)
        saved_planets = self._store.load(PLANETS_KEY)
        if isinstance(saved_planets, list):
            for entry in saved_planets:
                if not isinstance(entry, dict) or not entry.get("completed"):
                    continue
                try:
                    completed.add(DestinationId(entry.get("id")))
                except ValueError:
                    logger.warning("Ignoring unknown planet %r in saved progress", entry.get("id"))

        destinations = {
            d.id: replace(d, completed=d.id in completed) for d in self._catalogue.all()
        }
        missing = tuple(d for d in destinations if d in completed and not profile.has_badge(d))
        if missing:
            profile = replace(profile, badges=profile.badges + missing)
        return profile, destinations
