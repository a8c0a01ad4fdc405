from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import yaml

from galactic_brain.core.models import Destination, DestinationId

DEFAULT_CATALOGUE = Path(__file__).resolve().parent.parent / "data" / "destinations.yaml"


class DestinationRepository:
    """The fixed set of six planets, in map order."""

    def __init__(self, catalogue_path: Optional[Path] = None) -> None:
        self._catalogue_path = catalogue_path or DEFAULT_CATALOGUE
        self._destinations = self._load_destinations()

    def all(self) -> List[Destination]:
        return list(self._destinations.values())

    def get(self, destination_id: DestinationId) -> Destination:
        return self._destinations[DestinationId(destination_id)]

    def _load_destinations(self) -> Dict[DestinationId, Destination]:
        path = self._catalogue_path
        if not path.exists():
            raise FileNotFoundError(f"Destination catalogue not found: {path}")

        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict) or not isinstance(raw.get("destinations"), list):
            raise ValueError(f"{path.name}: expected YAML with a 'destinations' list")

        destinations: Dict[DestinationId, Destination] = {}
        for entry in raw["destinations"]:
            if not isinstance(entry, dict):
                raise ValueError(f"{path.name}: each destination must be a mapping")
            try:
                destination_id = DestinationId(entry.get("id"))
            except ValueError:
                raise ValueError(f"{path.name}: unknown destination id {entry.get('id')!r}") from None
            if destination_id in destinations:
                raise ValueError(f"{path.name}: duplicate destination {destination_id.value}")
            name = entry.get("name")
            if not name or not isinstance(name, str):
                raise ValueError(f"{path.name}: {destination_id.value} has a missing or invalid 'name'")
            position = entry.get("position") or {}
            destinations[destination_id] = Destination(
                id=destination_id,
                name=name.strip(),
                color=str(entry.get("color", "#ffffff")),
                icon=str(entry.get("icon", "")),
                description=str(entry.get("description", "")).strip(),
                position=(float(position.get("x", 50)), float(position.get("y", 50))),
            )

        missing = [d.value for d in DestinationId if d not in destinations]
        if missing:
            raise ValueError(f"{path.name}: missing destinations {', '.join(missing)}")
        return destinations
