from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from dialogue_coach.exercises.engines import MODES, PRACTICE, SELECT, STRUCTURE, normalize_mode

logger = logging.getLogger(__name__)


class PersistenceFailure(RuntimeError):
    """The progress store could not be read or written."""


@dataclass
class ModeProgress:
    completed: bool = False
    best_score: int | None = None

    def to_dict(self) -> dict:
        payload: dict = {"completed": self.completed}
        if self.best_score is not None:
            payload["best_score"] = self.best_score
        return payload

    @classmethod
    def from_dict(cls, data: dict | None) -> ModeProgress:
        data = data or {}
        best = data.get("best_score", data.get("bestScore"))
        return cls(completed=bool(data.get("completed", False)), best_score=None if best is None else int(best))


@dataclass
class ConversationProgress:
    practice: ModeProgress = field(default_factory=ModeProgress)
    select: ModeProgress = field(default_factory=ModeProgress)
    structure: ModeProgress = field(default_factory=ModeProgress)

    def for_mode(self, mode: str) -> ModeProgress:
        return getattr(self, normalize_mode(mode))

    def completed_count(self) -> int:
        return sum(1 for mode in MODES if self.for_mode(mode).completed)

    def to_dict(self) -> dict:
        return {mode: self.for_mode(mode).to_dict() for mode in MODES}

    @classmethod
    def from_dict(cls, data: dict | None) -> ConversationProgress:
        data = data or {}
        return cls(**{mode: ModeProgress.from_dict(data.get(mode)) for mode in MODES})


class ProgressStore(Protocol):
    def load_progress(self, learner_key: str) -> dict[str, dict]: ...

    def save_progress(self, learner_key: str, dialogue_id: str, progress: dict) -> None: ...


class ProgressLedger:
    """Per-learner record of completed modes and the mastery gate between them.

    The in-memory mapping is authoritative for the session; every completion is
    written through to ``store`` when one is attached, and a failed write is
    logged without undoing the update.
    """

    def __init__(
        self,
        learner_key: str,
        *,
        store: ProgressStore | None = None,
        initial: dict[str, ConversationProgress] | None = None,
    ) -> None:
        self.learner_key = learner_key
        self.store = store
        self._progress: dict[str, ConversationProgress] = dict(initial or {})

    @classmethod
    def load(cls, learner_key: str, store: ProgressStore) -> ProgressLedger:
        try:
            raw = store.load_progress(learner_key)
        except PersistenceFailure as exc:
            logger.warning("Could not load progress for %s, starting empty: %s", learner_key, exc)
            raw = {}
        return cls(learner_key, store=store, initial=cls._parse(raw))

    @classmethod
    def from_dict(cls, learner_key: str, data: dict, *, store: ProgressStore | None = None) -> ProgressLedger:
        return cls(learner_key, store=store, initial=cls._parse(data))

    def to_dict(self) -> dict[str, dict]:
        return {dialogue_id: progress.to_dict() for dialogue_id, progress in self._progress.items()}

    def get_progress(self, dialogue_id: str) -> ConversationProgress:
        current = self._progress.get(dialogue_id)
        if current is None:
            return ConversationProgress()
        return ConversationProgress.from_dict(current.to_dict())

    def complete_mode(self, dialogue_id: str, mode: str, score: int | None = None) -> None:
        mode = normalize_mode(mode)
        current = self._progress.get(dialogue_id) or ConversationProgress()
        if mode == SELECT:
            previous_best = current.select.best_score or 0
            updated = ModeProgress(completed=score == 100, best_score=max(previous_best, int(score or 0)))
        else:
            updated = ModeProgress(completed=True)
        setattr(current, mode, updated)
        self._progress[dialogue_id] = current
        logger.info("Learner %s completed %s on %s (score=%s)", self.learner_key, mode, dialogue_id, score)
        self._persist(dialogue_id, current)

    def is_mode_unlocked(self, dialogue_id: str, mode: str) -> bool:
        mode = normalize_mode(mode)
        progress = self._progress.get(dialogue_id) or ConversationProgress()
        if mode == PRACTICE:
            return True
        if mode == SELECT:
            return progress.practice.completed
        if mode == STRUCTURE:
            # completed currently implies best_score == 100.
            return progress.select.completed and progress.select.best_score == 100
        return False

    def unlocked_modes(self, dialogue_id: str) -> dict[str, bool]:
        return {mode: self.is_mode_unlocked(dialogue_id, mode) for mode in MODES}

    def get_overall_progress(self, dialogue_id: str) -> int:
        progress = self._progress.get(dialogue_id)
        return progress.completed_count() if progress else 0

    def _persist(self, dialogue_id: str, progress: ConversationProgress) -> None:
        if self.store is None:
            return
        try:
            self.store.save_progress(self.learner_key, dialogue_id, progress.to_dict())
        except PersistenceFailure as exc:
            logger.warning("Failed to persist progress for %s on %s: %s", self.learner_key, dialogue_id, exc)

    @staticmethod
    def _parse(data: dict | None) -> dict[str, ConversationProgress]:
        return {str(dialogue_id): ConversationProgress.from_dict(item) for dialogue_id, item in (data or {}).items()}
