from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from galactic_brain.core.content import ContentProvider, pad_questions
from galactic_brain.core.errors import ProviderFailure, TravelCancelled, TravelRejected
from galactic_brain.core.missions import Difficulty, mission_config
from galactic_brain.core.models import DestinationId, MissionRunState, Question
from galactic_brain.core.runner import start_mission

logger = logging.getLogger(__name__)


class TravelStage(str, Enum):
    WARP = "warp"
    LANDING = "landing"


@dataclass(frozen=True)
class TravelTimings:
    """Seconds spent in each travel stage. ``warp_seconds`` is a floor, not a cap."""

    warp_seconds: float = 2.5
    landing_seconds: float = 1.5


class TravelSequencer:
    """Runs the warp/landing sequence that turns a destination into a ready mission.

    The warp timer and the question fetch run side by side and both must finish
    before landing starts; a failed fetch ends the sequence straight away.
    """

    def __init__(
        self,
        provider: ContentProvider,
        timings: Optional[TravelTimings] = None,
        on_stage: Optional[Callable[[TravelStage], None]] = None,
    ) -> None:
        self._provider = provider
        self._timings = timings or TravelTimings()
        self._on_stage = on_stage
        self._pending: List[asyncio.Future] = []
        self._cancelled = False

    @property
    def in_flight(self) -> bool:
        return bool(self._pending)

    async def begin(
        self,
        destination_id: DestinationId,
        difficulty: Difficulty,
        fuel: int,
    ) -> MissionRunState:
        if fuel <= 0:
            raise TravelRejected("Not enough fuel to travel")
        if self._pending:
            raise TravelRejected("A travel sequence is already in flight")

        destination_id = DestinationId(destination_id)
        difficulty = Difficulty.parse(difficulty)
        count = mission_config(difficulty).question_count
        self._cancelled = False

        self._set_stage(TravelStage.WARP)
        timer = asyncio.create_task(asyncio.sleep(self._timings.warp_seconds))
        fetch = asyncio.create_task(self._fetch(destination_id, difficulty, count))
        self._pending = [timer, fetch]
        try:
            _, fetched = await asyncio.gather(timer, fetch)
            questions, padded = pad_questions(fetched, count)

            self._set_stage(TravelStage.LANDING)
            landing = asyncio.create_task(asyncio.sleep(self._timings.landing_seconds))
            self._pending.append(landing)
            await landing
        except asyncio.CancelledError:
            if not self._cancelled:
                raise
            logger.info("Travel to %s cancelled", destination_id.value)
            raise TravelCancelled(f"Travel to {destination_id.value} was cancelled") from None
        finally:
            self._release()

        return start_mission(destination_id, difficulty, questions, padded)

    def cancel(self) -> bool:
        """Abandon the in-flight sequence. Safe to call more than once."""
        if not self._pending:
            return False
        self._cancelled = True
        for future in self._pending:
            future.cancel()
        return True

    async def _fetch(self, destination_id: DestinationId, difficulty: Difficulty, count: int) -> List[Question]:
        try:
            return list(await self._provider.fetch_questions(destination_id, difficulty, count))
        except ProviderFailure:
            raise
        except Exception as e:
            logger.exception("Content provider crashed while fetching %s questions", destination_id.value)
            raise ProviderFailure(str(e)) from e

    def _release(self) -> None:
        for future in self._pending:
            if not future.done():
                future.cancel()
        self._pending = []

    def _set_stage(self, stage: TravelStage) -> None:
        logger.debug("Travel stage: %s", stage.value)
        if self._on_stage is not None:
            self._on_stage(stage)
