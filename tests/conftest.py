"""Shared fixtures for the Galactic Brain test suite."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import pytest
from PySide6.QtCore import QCoreApplication

from galactic_brain.core.destinations import DestinationRepository
from galactic_brain.core.engine import GameEngine
from galactic_brain.core.errors import ProviderFailure
from galactic_brain.core.missions import Difficulty
from galactic_brain.core.models import DestinationId, Question
from galactic_brain.core.progress import ProgressStore
from galactic_brain.core.travel import TravelTimings

NO_WAIT = TravelTimings(warp_seconds=0, landing_seconds=0)


def make_question(n: int = 0, correct: int = 1) -> Question:
    return Question(
        prompt=f"Question {n}?",
        options=("A", "B", "C", "D"),
        correct_answer_index=correct,
        explanation=f"Fact {n}",
    )


class StubProvider:
    """Content provider that returns canned questions, fails on demand, and records calls."""

    def __init__(
        self,
        returned: Optional[int] = None,
        fail: bool = False,
        delay: float = 0.0,
    ) -> None:
        self.returned = returned
        self.fail = fail
        self.delay = delay
        self.calls: List[tuple] = []
        self.finished = False

    async def fetch_questions(self, destination_id: DestinationId, difficulty: Difficulty, count: int) -> List[Question]:
        self.calls.append((destination_id, difficulty, count))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ProviderFailure("no signal")
        n = count if self.returned is None else self.returned
        self.finished = True
        return [make_question(i) for i in range(n)]


@pytest.fixture(scope="session", autouse=True)
def qt_core_app() -> QCoreApplication:
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture()
def store(tmp_path: Path) -> ProgressStore:
    """ProgressStore backed by a temp file so tests don't touch ~/.galactic_brain."""
    return ProgressStore(tmp_path / "progress.json")


@pytest.fixture()
def catalogue() -> DestinationRepository:
    return DestinationRepository()


@pytest.fixture()
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture()
def engine(catalogue: DestinationRepository, store: ProgressStore, provider: StubProvider) -> GameEngine:
    return GameEngine(catalogue, store, provider, timings=NO_WAIT)
