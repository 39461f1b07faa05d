from __future__ import annotations

import random
from dataclasses import dataclass

from dialogue_coach.config import MAX_DISTRACTORS
from dialogue_coach.content.models import Dialogue, DialogueLine, normalize_role
from dialogue_coach.exercises.randomness import shuffled


@dataclass(frozen=True)
class Option:
    text: str
    is_correct: bool
    secondary_text: str | None = None

    def to_dict(self) -> dict:
        return {"text": self.text, "secondary_text": self.secondary_text, "is_correct": self.is_correct}


def generate_distractors(
    correct: DialogueLine,
    dialogue: Dialogue,
    pool_role: str,
    *,
    rng: random.Random | None = None,
    limit: int = MAX_DISTRACTORS,
) -> list[str]:
    """Pick up to ``limit`` wrong answers from lines spoken by ``pool_role``.

    An empty result is valid: the caller then shows a single-option question.
    """
    role = normalize_role(pool_role)
    pool = [
        line.primary_text
        for line in dialogue.lines
        if line.speaker == role and line.primary_text != correct.primary_text
    ]
    return shuffled(pool, rng)[: max(0, min(limit, len(pool)))]


def build_option_set(
    correct: DialogueLine,
    dialogue: Dialogue,
    pool_role: str,
    *,
    rng: random.Random | None = None,
    limit: int = MAX_DISTRACTORS,
) -> list[Option]:
    wrong_texts = generate_distractors(correct, dialogue, pool_role, rng=rng, limit=limit)
    options = [Option(text=correct.primary_text, is_correct=True, secondary_text=correct.secondary_text)]
    options.extend(
        Option(text=text, is_correct=False, secondary_text=dialogue.secondary_text_for(text))
        for text in wrong_texts
    )
    return shuffled(options, rng)
