from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = PROJECT_ROOT / "data"
DB_PATH = Path(os.getenv("DIALOGUE_COACH_DB_PATH") or DATA_DIR / "dialogue_coach.db")

MAX_TILES = 12
MAX_DISTRACTORS = 2
DEFAULT_LEARNER_ROLE = os.getenv("DIALOGUE_COACH_LEARNER_ROLE", "staff").strip().lower() or "staff"


@dataclass(frozen=True)
class ExerciseSettings:
    learner_role: str = DEFAULT_LEARNER_ROLE
    max_tiles: int = MAX_TILES
    max_distractors: int = MAX_DISTRACTORS


def ensure_dirs() -> None:
    for path in [DATA_DIR, DB_PATH.parent]:
        path.mkdir(parents=True, exist_ok=True)
