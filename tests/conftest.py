from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import dialogue_coach.app as app_module
from dialogue_coach.content.ingest import dialogue_from_text
from dialogue_coach.storage.db import Database


@pytest.fixture()
def temp_db(tmp_path):
    db = Database(tmp_path / "dialogue_coach_test.db")
    db.initialize()
    return db


@pytest.fixture()
def client(temp_db, monkeypatch):
    monkeypatch.setattr(app_module, "db", temp_db)
    monkeypatch.setattr(app_module, "sessions", {})
    with TestClient(app_module.app) as c:
        yield c


@pytest.fixture()
def greeting():
    return dialogue_from_text(
        "A: Hi\nB: Hello\nA: How are you?\nB: Fine, thanks.",
        "Greeting",
        dialogue_id="greeting",
    )


@pytest.fixture()
def rng():
    return random.Random(1234)
