from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

from nihush.core.clues import CLUE_STAGES


@dataclass(frozen=True)
class Personality:
    name: str
    clues: Tuple[str, ...]


def default_personalities_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "personalities.yaml"


class PersonalityRepository:
    """Read-only set of personalities loaded from YAML."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else default_personalities_path()
        self._personalities = self._load_personalities()

    @property
    def path(self) -> Path:
        return self._path

    def all(self) -> List[Personality]:
        return list(self._personalities)

    def __len__(self) -> int:
        return len(self._personalities)

    def _load_personalities(self) -> Tuple[Personality, ...]:
        if not self._path.exists():
            raise FileNotFoundError(f"Personalities file not found: {self._path}")

        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            raw = raw.get("personalities")
        if not isinstance(raw, list):
            raise ValueError(f"{self._path.name}: expected a list of personalities")

        personalities: List[Personality] = []
        for position, item in enumerate(raw, start=1):
            if not isinstance(item, dict):
                raise ValueError(f"{self._path.name}: entry {position} is not a mapping")
            name = item.get("name")
            if not name or not isinstance(name, str) or not name.strip():
                raise ValueError(f"{self._path.name}: entry {position} has missing or invalid 'name'")
            clues = item.get("clues")
            if not isinstance(clues, list):
                raise ValueError(f"{self._path.name}: '{name.strip()}' has no 'clues' list")
            cleaned = tuple(str(clue).strip() for clue in clues if clue is not None and str(clue).strip())
            if len(cleaned) != CLUE_STAGES or len(cleaned) != len(clues):
                raise ValueError(
                    f"{self._path.name}: '{name.strip()}' needs exactly {CLUE_STAGES} non-empty clues"
                )
            personalities.append(Personality(name=name.strip(), clues=cleaned))

        if not personalities:
            raise ValueError(f"{self._path.name}: no personalities defined")
        return tuple(personalities)
