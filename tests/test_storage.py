from __future__ import annotations

import sqlite3

from dialogue_coach.content.ingest import dialogue_from_text
from dialogue_coach.progress.identity import parse_learner_key
from dialogue_coach.progress.ledger import ProgressLedger
from dialogue_coach.storage.db import Database


def test_empty_store_falls_back_to_samples(temp_db):
    ids = [item.id for item in temp_db.list_dialogues()]
    assert ids == ["weather-1", "check-in-1"]
    assert temp_db.get_dialogue("weather-1") is not None


def test_saved_dialogues_replace_samples(temp_db, greeting):
    temp_db.save_dialogue(greeting)

    assert [item.id for item in temp_db.list_dialogues()] == ["greeting"]
    loaded = temp_db.get_dialogue("greeting")
    assert loaded == greeting
    assert temp_db.get_dialogue("weather-1") is None


def test_save_dialogue_upserts(temp_db):
    temp_db.save_dialogue(dialogue_from_text("A: Hi", "First", dialogue_id="d1"))
    temp_db.save_dialogue(dialogue_from_text("A: Hi\nB: Hello", "Second", dialogue_id="d1"))

    loaded = temp_db.get_dialogue("d1")
    assert loaded.title == "Second"
    assert len(loaded.lines) == 2
    assert temp_db.count_dialogues() == 1


def test_progress_persists_across_ledgers(temp_db):
    ledger = ProgressLedger.load("group1:Mia", temp_db)
    ledger.complete_mode("weather-1", "practice")
    ledger.complete_mode("weather-1", "select", 80)

    reloaded = ProgressLedger.load("group1:Mia", temp_db)
    progress = reloaded.get_progress("weather-1")
    assert progress.practice.completed
    assert progress.select.best_score == 80
    assert not reloaded.is_mode_unlocked("weather-1", "structure")

    other = ProgressLedger.load("group2:Mia", temp_db)
    assert other.get_overall_progress("weather-1") == 0


def test_clear_progress_resets_learner(temp_db):
    ledger = ProgressLedger.load("group1:Mia", temp_db)
    ledger.complete_mode("weather-1", "practice")

    assert temp_db.clear_progress("group1:Mia") == 3
    assert temp_db.load_progress("group1:Mia") == {}


def test_learners_are_upserted_by_key(temp_db):
    temp_db.upsert_learner(parse_learner_key("group1:Mia"))
    temp_db.upsert_learner(parse_learner_key("group1:Mia"))
    temp_db.upsert_learner(parse_learner_key("group2:Phong"))

    assert [row["learner_key"] for row in temp_db.list_learners()] == ["group1:Mia", "group2:Phong"]
    assert len(temp_db.list_learners(group_id="group2")) == 1


def test_write_failure_is_logged_and_not_raised(tmp_path, caplog):
    db = Database(tmp_path / "broken.db")
    db.initialize()
    with sqlite3.connect(db.db_path) as conn:
        conn.execute("DROP TABLE mode_progress")

    ledger = ProgressLedger("group1:Mia", store=db)
    ledger.complete_mode("weather-1", "practice")

    assert ledger.is_mode_unlocked("weather-1", "select")
    assert "Failed to persist progress" in caplog.text

    reloaded = ProgressLedger.load("group1:Mia", db)
    assert reloaded.get_overall_progress("weather-1") == 0
