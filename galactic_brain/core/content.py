"""Trivia content: the provider contract, record parsing and the offline question bank."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import yaml

from galactic_brain.core.errors import ProviderFailure
from galactic_brain.core.missions import Difficulty
from galactic_brain.core.models import OPTION_COUNT, DestinationId, Question

logger = logging.getLogger(__name__)

DEFAULT_BANK = Path(__file__).resolve().parent.parent / "data" / "question_bank.yaml"


class ContentProvider(Protocol):
    async def fetch_questions(
        self,
        destination_id: DestinationId,
        difficulty: Difficulty,
        count: int,
    ) -> List[Question]:
        """Return between 1 and ``count`` questions, or raise ProviderFailure."""
        ...


def parse_question(record: Any) -> Question:
    """Convert one provider record into a Question.

    Accepts the provider's wire keys (``question``, ``options``,
    ``correctAnswerIndex``, ``explanation``).
    """
    if not isinstance(record, Mapping):
        raise ProviderFailure(f"question record must be a mapping, got {type(record).__name__}")
    prompt = record.get("question")
    if not prompt or not isinstance(prompt, str):
        raise ProviderFailure("question record has a missing or invalid 'question'")
    options = record.get("options")
    if not isinstance(options, (list, tuple)) or len(options) != OPTION_COUNT:
        raise ProviderFailure(f"question {prompt!r} must have exactly {OPTION_COUNT} options")
    index = record.get("correctAnswerIndex")
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < OPTION_COUNT:
        raise ProviderFailure(f"question {prompt!r} has an invalid 'correctAnswerIndex'")
    explanation = record.get("explanation", "")
    return Question(
        prompt=prompt.strip(),
        options=tuple(str(option) for option in options),
        correct_answer_index=index,
        explanation=str(explanation or "").strip(),
    )


def parse_questions(payload: Any) -> List[Question]:
    """Parse a list of records, or a mapping holding them under ``questions``."""
    if isinstance(payload, Mapping):
        payload = payload.get("questions")
    if not isinstance(payload, (list, tuple)):
        raise ProviderFailure("provider response has no question list")
    questions = [parse_question(record) for record in payload]
    if not questions:
        raise ProviderFailure("provider returned no questions")
    return questions


def pad_questions(questions: Sequence[Question], count: int) -> Tuple[Tuple[Question, ...], int]:
    """Stretch ``questions`` to ``count`` by repeating the first one.

    Returns the padded tuple and how many repeats were added. Extra questions
    beyond ``count`` are dropped.
    """
    if not questions:
        raise ProviderFailure("provider returned no questions")
    padded = max(0, count - len(questions))
    if padded:
        logger.warning(
            "Provider returned %d of %d questions; repeating the first %d time(s)",
            len(questions),
            count,
            padded,
        )
    result = tuple(questions[:count]) + (questions[0],) * padded
    return result, padded


class QuestionBankProvider:
    """Serves questions from a YAML bank grouped by destination and subtopic.

    Each mission picks one subtopic of the destination at random and samples
    up to ``count`` of its questions.
    """

    def __init__(self, bank_path: Optional[Path] = None, rng: Optional[random.Random] = None) -> None:
        self._bank_path = bank_path or DEFAULT_BANK
        self._rng = rng or random.Random()
        self._bank: Optional[Dict[DestinationId, Dict[str, List[Question]]]] = None

    def subtopics(self, destination_id: DestinationId) -> List[str]:
        return list(self._load().get(DestinationId(destination_id), {}))

    async def fetch_questions(
        self,
        destination_id: DestinationId,
        difficulty: Difficulty,
        count: int,
    ) -> List[Question]:
        topics = self._load().get(DestinationId(destination_id))
        if not topics:
            raise ProviderFailure(f"No questions available for {DestinationId(destination_id).value}")
        subtopic = self._rng.choice(sorted(topics))
        pool = topics[subtopic]
        selected = self._rng.sample(pool, min(max(1, count), len(pool)))
        logger.info(
            "Serving %d %s question(s) about %r for %s",
            len(selected),
            Difficulty.parse(difficulty).value,
            subtopic,
            DestinationId(destination_id).value,
        )
        return selected

    def _load(self) -> Dict[DestinationId, Dict[str, List[Question]]]:
        if self._bank is not None:
            return self._bank
        try:
            raw = yaml.safe_load(self._bank_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ProviderFailure(f"Could not read question bank {self._bank_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ProviderFailure(f"{self._bank_path.name}: expected a mapping of destinations")

        bank: Dict[DestinationId, Dict[str, List[Question]]] = {}
        for key, topics in raw.items():
            try:
                destination_id = DestinationId(key)
            except ValueError:
                logger.warning("Skipping unknown destination %r in %s", key, self._bank_path.name)
                continue
            if not isinstance(topics, dict):
                raise ProviderFailure(f"{self._bank_path.name}: {key} must map subtopics to questions")
            bank[destination_id] = {
                str(topic).strip(): parse_questions(records) for topic, records in topics.items()
            }
        self._bank = bank
        return bank
