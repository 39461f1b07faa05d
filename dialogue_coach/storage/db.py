from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from dialogue_coach.config import DB_PATH
from dialogue_coach.content.ingest import dialogue_from_payload
from dialogue_coach.content.models import Dialogue
from dialogue_coach.content.samples import sample_dialogues
from dialogue_coach.exercises.engines import MODES
from dialogue_coach.progress.identity import LearnerIdentity
from dialogue_coach.progress.ledger import PersistenceFailure

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, db_path: Path = DB_PATH) -> None:
        self.db_path = db_path

    @contextmanager
    def connect(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def initialize(self) -> None:
        schema_path = Path(__file__).with_name("schema.sql")
        with self.connect() as conn:
            conn.executescript(schema_path.read_text(encoding="utf-8"))

    def upsert_learner(self, identity: LearnerIdentity) -> dict:
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO learners (learner_key, group_id, student_name)
                VALUES (?, ?, ?)
                ON CONFLICT(learner_key) DO UPDATE SET
                  group_id = excluded.group_id,
                  student_name = excluded.student_name
                """,
                (identity.key, identity.group_id, identity.student_name),
            )
            row = conn.execute("SELECT * FROM learners WHERE learner_key = ?", (identity.key,)).fetchone()
        return dict(row)

    def list_learners(self, *, group_id: str | None = None) -> list[dict]:
        with self.connect() as conn:
            if group_id:
                rows = conn.execute(
                    "SELECT * FROM learners WHERE group_id = ? ORDER BY student_name",
                    (group_id,),
                ).fetchall()
            else:
                rows = conn.execute("SELECT * FROM learners ORDER BY group_id, student_name").fetchall()
        return [dict(row) for row in rows]

    def clear_progress(self, learner_key: str) -> int:
        with self.connect() as conn:
            cur = conn.execute("DELETE FROM mode_progress WHERE learner_key = ?", (learner_key,))
        return int(cur.rowcount or 0)

    def save_dialogue(self, dialogue: Dialogue) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO dialogues (id, title, description, unit, lines_json)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                  title = excluded.title,
                  description = excluded.description,
                  unit = excluded.unit,
                  lines_json = excluded.lines_json
                """,
                (
                    dialogue.id,
                    dialogue.title,
                    dialogue.description,
                    dialogue.unit,
                    json.dumps([line.to_dict() for line in dialogue.lines], ensure_ascii=False),
                ),
            )

    def get_dialogue(self, dialogue_id: str) -> Dialogue | None:
        with self.connect() as conn:
            row = conn.execute("SELECT * FROM dialogues WHERE id = ?", (dialogue_id,)).fetchone()
        if row is not None:
            return _row_to_dialogue(row)
        if self.count_dialogues() == 0:
            return next((item for item in sample_dialogues() if item.id == dialogue_id), None)
        return None

    def count_dialogues(self) -> int:
        with self.connect() as conn:
            row = conn.execute("SELECT COUNT(*) AS total FROM dialogues").fetchone()
        return int(row["total"])

    def list_dialogues(self) -> list[Dialogue]:
        with self.connect() as conn:
            rows = conn.execute("SELECT * FROM dialogues ORDER BY created_at DESC, id").fetchall()
        if not rows:
            return sample_dialogues()
        return [_row_to_dialogue(row) for row in rows]

    def load_progress(self, learner_key: str) -> dict[str, dict]:
        try:
            with self.connect() as conn:
                rows = conn.execute(
                    """
                    SELECT dialogue_id, mode, completed, best_score
                    FROM mode_progress
                    WHERE learner_key = ?
                    ORDER BY dialogue_id, mode
                    """,
                    (learner_key,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"could not read progress for {learner_key}") from exc

        progress: dict[str, dict] = {}
        for row in rows:
            entry: dict = {"completed": bool(row["completed"])}
            if row["best_score"] is not None:
                entry["best_score"] = int(row["best_score"])
            progress.setdefault(str(row["dialogue_id"]), {})[str(row["mode"])] = entry
        return progress

    def save_progress(self, learner_key: str, dialogue_id: str, progress: dict) -> None:
        rows = [
            (
                learner_key,
                dialogue_id,
                mode,
                int(bool((progress.get(mode) or {}).get("completed"))),
                (progress.get(mode) or {}).get("best_score"),
            )
            for mode in MODES
            if mode in progress
        ]
        try:
            with self.connect() as conn:
                conn.executemany(
                    """
                    INSERT INTO mode_progress (learner_key, dialogue_id, mode, completed, best_score)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(learner_key, dialogue_id, mode) DO UPDATE SET
                      completed = excluded.completed,
                      best_score = excluded.best_score,
                      updated_at = CURRENT_TIMESTAMP
                    """,
                    rows,
                )
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"could not save progress for {learner_key} on {dialogue_id}") from exc
        logger.debug("Saved progress for %s on %s", learner_key, dialogue_id)


def _row_to_dialogue(row: sqlite3.Row) -> Dialogue:
    return dialogue_from_payload(
        {
            "id": row["id"],
            "title": row["title"],
            "description": row["description"],
            "unit": row["unit"],
            "lines": json.loads(row["lines_json"] or "[]"),
        }
    )
