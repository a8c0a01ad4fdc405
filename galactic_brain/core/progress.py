from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

PLAYER_KEY = "gb_player"
PLANETS_KEY = "gb_planets"


class ProgressStore:
    """Key-value store for the player profile and planet completion flags.
    File: ~/.galactic_brain/progress.json. Writes are best effort: failures are
    logged and the in-memory copy stays authoritative."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or Path.home() / ".galactic_brain" / "progress.json"
        self._data = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def save(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()

    def _load(self) -> Dict[str, Any]:
        if not self._file_path.exists():
            return {}
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring progress file %s: expected a JSON object", self._file_path)
            return {}
        return payload

    def _save(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)
