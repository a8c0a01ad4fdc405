"""Application entry point: a terminal front end for the Galactic Brain engine."""

import asyncio
import logging
import sys
from typing import Optional

from galactic_brain.core.content import QuestionBankProvider
from galactic_brain.core.destinations import DestinationRepository
from galactic_brain.core.engine import GameEngine
from galactic_brain.core.missions import Difficulty
from galactic_brain.core.models import DestinationId
from galactic_brain.core.phases import Phase
from galactic_brain.core.progress import ProgressStore


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


async def _ask(prompt: str) -> str:
    return (await asyncio.to_thread(input, prompt)).strip()


def _print_status(engine: GameEngine) -> None:
    p = engine.profile
    print(f"\n{p.name} | fuel {p.fuel} | score {p.score} | badges {len(p.badges)}/{len(engine.destinations)}")


async def _menu(engine: GameEngine) -> bool:
    name = await _ask(f"Pilot name [{engine.profile.name}]: ") or engine.profile.name
    engine.set_name(name)
    choice = await _ask(f"Difficulty (easy/medium/hard) [{engine.profile.difficulty.value}]: ")
    if choice:
        engine.set_difficulty(Difficulty.parse(choice))
    return engine.start()


async def _map(engine: GameEngine) -> Optional[bool]:
    _print_status(engine)
    destinations = engine.destinations
    for number, d in enumerate(destinations, start=1):
        mark = "*" if d.completed else " "
        print(f" {number}. [{mark}] {d.name}: {d.description}")
    choice = await _ask("Fly to planet number (m = menu, q = quit): ")
    if choice == "q":
        return None
    if choice == "m":
        return engine.return_to_menu()
    if not choice.isdigit() or not 1 <= int(choice) <= len(destinations):
        return False
    target: DestinationId = destinations[int(choice) - 1].id
    engine.select_destination(target)
    return await engine.travel(target)


async def _trivia(engine: GameEngine) -> None:
    mission = engine.mission
    if mission is None:
        return
    question = mission.current_question
    print(f"\nQuestion {mission.question_number}/{mission.total_questions}: {question.prompt}")
    for letter, option in zip("ABCD", question.options):
        print(f"  {letter}) {option}")
    choice = (await _ask("Your answer: ")).upper()
    if choice not in ("A", "B", "C", "D"):
        return
    correct = engine.answer("ABCD".index(choice))
    if correct is not None:
        print("Correct!" if correct else f"Not quite. {question.options[question.correct_answer_index]}.")
        if question.explanation:
            print(question.explanation)
    result = engine.advance()
    if result is not None:
        threshold = mission.spec.pass_threshold
        verdict = "MISSION COMPLETE" if result.passed else "MISSION FAILED"
        print(f"{verdict}: {result.correct_count}/{result.question_count} (needed {threshold})")


async def play(engine: GameEngine) -> None:
    engine.travel_stage_changed.connect(
        lambda stage: print("WARP SPEED ENGAGED..." if stage == "warp" else "Arriving at sector...")
    )
    engine.notice.connect(lambda message: print(f"!! {message}"))

    while True:
        if engine.phase is Phase.MENU:
            await _menu(engine)
        elif engine.phase is Phase.MAP:
            if await _map(engine) is None:
                return
        elif engine.phase is Phase.TRIVIA:
            await _trivia(engine)
        elif engine.phase in (Phase.GAME_OVER, Phase.VICTORY):
            title = "OUT OF FUEL" if engine.phase is Phase.GAME_OVER else "GALACTIC CHAMPION"
            print(f"\n{title}! Final score: {engine.profile.score}")
            if (await _ask("Play again? [y/N]: ")).lower() != "y":
                return
            engine.reset()


def run() -> None:
    """Load the planets and saved progress, then play in the terminal."""
    configure_logging()
    engine = GameEngine(
        destinations=DestinationRepository(),
        progress_store=ProgressStore(),
        provider=QuestionBankProvider(),
    )
    try:
        asyncio.run(play(engine))
    except (KeyboardInterrupt, EOFError):
        print()
    sys.exit(0)
