from __future__ import annotations

import random

from dialogue_coach.config import MAX_DISTRACTORS, MAX_TILES
from dialogue_coach.content.models import Dialogue, normalize_role, other_role
from dialogue_coach.exercises.chunker import Tile, build_tiles
from dialogue_coach.exercises.distractors import Option, build_option_set

PRACTICE = "practice"
SELECT = "select"
STRUCTURE = "structure"
MODES = (PRACTICE, SELECT, STRUCTURE)

CORRECT = "correct"
INCORRECT = "incorrect"


def normalize_mode(value: object) -> str:
    mode = str(value or "").strip().lower()
    if mode not in MODES:
        raise ValueError(f"unsupported mode: {value!r}")
    return mode


def percentage(correct: int, total: int) -> int:
    # Half-up rounding, so 12.5% reads as 13 rather than banker's 12.
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


class ExerciseEngine:
    mode = ""

    def __init__(self, dialogue: Dialogue, *, rng: random.Random | None = None) -> None:
        self.dialogue = dialogue
        self.rng = rng
        self._reset()

    def _reset(self) -> None:
        self.cursor = -1
        self.revealed: list[int] = []
        self.awaiting_answer = False
        self.last_result: str | None = None
        self.started = False
        self.done = False

    def start(self) -> None:
        raise NotImplementedError

    def restart(self) -> None:
        self._reset()
        self.start()

    def is_complete(self) -> bool:
        return self.done

    def score(self) -> int | None:
        return None

    def snapshot(self) -> dict:
        return {
            "mode": self.mode,
            "dialogue_id": self.dialogue.id,
            "cursor": self.cursor,
            "revealed": list(self.revealed),
            "awaiting_answer": self.awaiting_answer,
            "last_result": self.last_result,
            "complete": self.done,
            "score": self.score() if self.done else None,
        }

    def _reveal(self, index: int) -> None:
        if index not in self.revealed:
            self.revealed.append(index)

    def _reveal_range(self, start: int, stop: int) -> None:
        for index in range(start, stop):
            self._reveal(index)

    def _require_active(self) -> None:
        if not self.started:
            raise ValueError("exercise has not been started")
        if self.done:
            raise ValueError("exercise is already complete")


class PracticeEngine(ExerciseEngine):
    """Sequential read-through; every advance reveals one more line."""

    mode = PRACTICE

    def start(self) -> None:
        if self.started:
            raise ValueError("exercise already started")
        self.started = True
        self.cursor = 0
        self._reveal(0)

    def advance(self) -> None:
        self._require_active()
        if self.cursor >= len(self.dialogue.lines) - 1:
            self.done = True
            return
        self.cursor += 1
        self._reveal(self.cursor)

    def snapshot(self) -> dict:
        return {**super().snapshot(), "total_lines": len(self.dialogue.lines)}


class QuestionEngine(ExerciseEngine):
    """Walks the learner's lines as questions, auto-revealing the gap lines between them."""

    def __init__(self, dialogue: Dialogue, *, learner_role: str, rng: random.Random | None = None) -> None:
        self.learner_role = normalize_role(learner_role)
        self.pool_role = other_role(self.learner_role)
        self.question_indices = dialogue.indices_for(self.learner_role)
        super().__init__(dialogue, rng=rng)

    def _reset(self) -> None:
        super()._reset()
        self.question_number = -1
        self.correct_count = 0

    @property
    def total_questions(self) -> int:
        return len(self.question_indices)

    def start(self) -> None:
        if self.started:
            raise ValueError("exercise already started")
        self.started = True
        if not self.question_indices:
            self._finish(after=-1)
            return
        self._reveal_range(0, self.question_indices[0])
        self._open_question(0)

    def advance(self) -> None:
        self._require_active()
        if self.awaiting_answer:
            raise ValueError("current question has not been answered")
        current = self.question_indices[self.question_number]
        self._reveal(current)

        next_number = self.question_number + 1
        if next_number >= self.total_questions:
            self._finish(after=current)
            return
        self._reveal_range(current + 1, self.question_indices[next_number])
        self._open_question(next_number)

    def score(self) -> int:
        return percentage(self.correct_count, self.total_questions)

    def snapshot(self) -> dict:
        return {
            **super().snapshot(),
            "learner_role": self.learner_role,
            "question_number": self.question_number,
            "total_questions": self.total_questions,
            "correct_count": self.correct_count,
        }

    def _open_question(self, number: int) -> None:
        self.question_number = number
        self.cursor = self.question_indices[number]
        self.awaiting_answer = True
        self.last_result = None
        self._prepare_question(self.cursor)

    def _record(self, correct: bool) -> str:
        self.last_result = CORRECT if correct else INCORRECT
        if correct:
            self.correct_count += 1
        self.awaiting_answer = False
        return self.last_result

    def _finish(self, *, after: int) -> None:
        self._reveal_range(after + 1, len(self.dialogue.lines))
        self.awaiting_answer = False
        self.done = True

    def _prepare_question(self, line_index: int) -> None:
        raise NotImplementedError


class SelectEngine(QuestionEngine):
    mode = SELECT

    def __init__(
        self,
        dialogue: Dialogue,
        *,
        learner_role: str,
        rng: random.Random | None = None,
        max_distractors: int = MAX_DISTRACTORS,
    ) -> None:
        self.max_distractors = max_distractors
        super().__init__(dialogue, learner_role=learner_role, rng=rng)

    def _reset(self) -> None:
        super()._reset()
        self.options: list[Option] = []
        self.selected_index: int | None = None

    def _prepare_question(self, line_index: int) -> None:
        self.options = build_option_set(
            self.dialogue.lines[line_index],
            self.dialogue,
            self.pool_role,
            rng=self.rng,
            limit=self.max_distractors,
        )
        self.selected_index = None

    def select(self, option_index: int) -> str:
        self._require_active()
        if not self.awaiting_answer:
            # Only the first pick counts.
            return self.last_result or INCORRECT
        if not 0 <= option_index < len(self.options):
            raise ValueError(f"option index out of range: {option_index}")
        self.selected_index = option_index
        return self._record(self.options[option_index].is_correct)

    def snapshot(self) -> dict:
        return {
            **super().snapshot(),
            "options": [option.to_dict() for option in self.options] if not self.done else [],
            "selected_index": self.selected_index,
        }


class StructureEngine(QuestionEngine):
    mode = STRUCTURE

    def __init__(
        self,
        dialogue: Dialogue,
        *,
        learner_role: str,
        rng: random.Random | None = None,
        max_tiles: int = MAX_TILES,
    ) -> None:
        self.max_tiles = max_tiles
        super().__init__(dialogue, learner_role=learner_role, rng=rng)

    def _reset(self) -> None:
        super()._reset()
        self.tiles: list[Tile] = []
        self.placed: list[str] = []

    def _prepare_question(self, line_index: int) -> None:
        self.tiles = build_tiles(self.dialogue.lines[line_index].primary_text, max_tiles=self.max_tiles, rng=self.rng)
        self.placed = []

    def place(self, tile_id: str) -> None:
        tile = self._tile(tile_id)
        if not self.awaiting_answer or tile.is_placed:
            return
        tile.is_placed = True
        self.placed.append(tile.id)

    def unplace(self, tile_id: str) -> None:
        tile = self._tile(tile_id)
        if not self.awaiting_answer or not tile.is_placed:
            return
        tile.is_placed = False
        self.placed.remove(tile.id)

    def toggle(self, tile_id: str) -> None:
        if self._tile(tile_id).is_placed:
            self.unplace(tile_id)
        else:
            self.place(tile_id)

    def arrangement(self) -> str:
        texts = {tile.id: tile.text for tile in self.tiles}
        return " ".join(texts[tile_id] for tile_id in self.placed)

    def submit_arrangement(self, tile_order: list[str] | None = None) -> str:
        self._require_active()
        if not self.awaiting_answer:
            return self.last_result or INCORRECT
        if tile_order is not None:
            self._apply_order(tile_order)
        expected = self.dialogue.lines[self.cursor].primary_text
        return self._record(self.arrangement() == expected)

    def snapshot(self) -> dict:
        return {
            **super().snapshot(),
            "tiles": [tile.to_dict() for tile in self.tiles] if not self.done else [],
            "placed": list(self.placed),
        }

    def _apply_order(self, tile_order: list[str]) -> None:
        if len(set(tile_order)) != len(tile_order):
            raise ValueError("a tile can only be placed once")
        for tile_id in tile_order:
            self._tile(tile_id)
        for tile in self.tiles:
            tile.is_placed = tile.id in tile_order
        self.placed = list(tile_order)

    def _tile(self, tile_id: str) -> Tile:
        self._require_active()
        for tile in self.tiles:
            if tile.id == tile_id:
                return tile
        raise ValueError(f"unknown tile: {tile_id}")


def create_engine(
    mode: str,
    dialogue: Dialogue,
    *,
    learner_role: str,
    rng: random.Random | None = None,
    max_tiles: int = MAX_TILES,
    max_distractors: int = MAX_DISTRACTORS,
) -> ExerciseEngine:
    normalized = normalize_mode(mode)
    if normalized == PRACTICE:
        return PracticeEngine(dialogue, rng=rng)
    if normalized == SELECT:
        return SelectEngine(dialogue, learner_role=learner_role, rng=rng, max_distractors=max_distractors)
    return StructureEngine(dialogue, learner_role=learner_role, rng=rng, max_tiles=max_tiles)
