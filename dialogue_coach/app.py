from __future__ import annotations

import logging
import random
import uuid
from contextlib import asynccontextmanager

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from dialogue_coach.api.schemas import (
    ArrangementRequest,
    CompleteModeRequest,
    LearnerRequest,
    SelectRequest,
    SessionRequest,
    TextDialogueRequest,
    TileRequest,
)
from dialogue_coach.config import ExerciseSettings, ensure_dirs
from dialogue_coach.content.ingest import DialogueValidationError, dialogue_from_payload, dialogue_from_text
from dialogue_coach.content.models import Dialogue
from dialogue_coach.exercises.engines import (
    SelectEngine,
    StructureEngine,
    create_engine,
    normalize_mode,
)
from dialogue_coach.progress.identity import learner_key as make_learner_key
from dialogue_coach.progress.identity import parse_learner_key
from dialogue_coach.progress.ledger import ProgressLedger
from dialogue_coach.storage.db import Database

logger = logging.getLogger(__name__)

db = Database()
settings = ExerciseSettings()
sessions: dict[str, dict] = {}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    ensure_dirs()
    db.initialize()
    yield


app = FastAPI(title="Dialogue Coach", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/api/learners")
def register_learner(req: LearnerRequest) -> dict:
    try:
        identity = parse_learner_key(make_learner_key(req.group_id, req.student_name))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True, "learner": db.upsert_learner(identity)}


@app.get("/api/learners")
def learners(group_id: str | None = Query(default=None)) -> dict:
    return {"ok": True, "items": db.list_learners(group_id=group_id)}


@app.delete("/api/learners/{key}/progress")
def reset_learner_progress(key: str) -> dict:
    _require_learner_key(key)
    return {"ok": True, "deleted": db.clear_progress(key)}


@app.get("/api/dialogues")
def dialogues() -> dict:
    items = db.list_dialogues()
    return {
        "ok": True,
        "items": [
            {
                "id": item.id,
                "title": item.title,
                "description": item.description,
                "unit": item.unit,
                "line_count": len(item.lines),
            }
            for item in items
        ],
    }


@app.get("/api/dialogues/{dialogue_id}")
def dialogue_detail(dialogue_id: str) -> dict:
    return {"ok": True, "dialogue": _load_dialogue(dialogue_id).to_dict()}


@app.post("/api/dialogues")
def add_dialogue(payload: dict = Body(...)) -> dict:
    try:
        dialogue = dialogue_from_payload(payload)
    except DialogueValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    db.save_dialogue(dialogue)
    return {"ok": True, "dialogue": dialogue.to_dict()}


@app.post("/api/dialogues/text")
def add_dialogue_from_text(req: TextDialogueRequest) -> dict:
    try:
        dialogue = dialogue_from_text(req.text, req.title, dialogue_id=req.id)
    except DialogueValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    db.save_dialogue(dialogue)
    return {"ok": True, "dialogue": dialogue.to_dict()}


@app.get("/api/progress")
def progress_overview(learner_key: str = Query(...)) -> dict:
    _require_learner_key(learner_key)
    ledger = ProgressLedger.load(learner_key, db)
    return {
        "ok": True,
        "learner_key": learner_key,
        "items": [_progress_payload(ledger, item.id) for item in db.list_dialogues()],
    }


@app.get("/api/progress/{dialogue_id}")
def dialogue_progress(dialogue_id: str, learner_key: str = Query(...)) -> dict:
    _require_learner_key(learner_key)
    ledger = ProgressLedger.load(learner_key, db)
    return {"ok": True, **_progress_payload(ledger, dialogue_id)}


@app.post("/api/progress/{dialogue_id}/complete")
def complete_mode(dialogue_id: str, req: CompleteModeRequest) -> dict:
    _require_learner_key(req.learner_key)
    try:
        mode = normalize_mode(req.mode)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    ledger = ProgressLedger.load(req.learner_key, db)
    ledger.complete_mode(dialogue_id, mode, req.score)
    return {"ok": True, **_progress_payload(ledger, dialogue_id)}


@app.post("/api/sessions")
def start_session(req: SessionRequest) -> dict:
    _require_learner_key(req.learner_key)
    dialogue = _load_dialogue(req.dialogue_id)
    try:
        mode = normalize_mode(req.mode)
        ledger = ProgressLedger.load(req.learner_key, db)
        if not ledger.is_mode_unlocked(dialogue.id, mode):
            raise HTTPException(status_code=403, detail=f"{mode} mode is locked for this dialogue")
        engine = create_engine(
            mode,
            dialogue,
            learner_role=req.learner_role,
            rng=random.Random(req.seed) if req.seed is not None else None,
            max_tiles=settings.max_tiles,
            max_distractors=settings.max_distractors,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    engine.start()

    session_id = uuid.uuid4().hex
    sessions[session_id] = {"engine": engine, "learner_key": req.learner_key, "recorded": False}
    _record_if_complete(sessions[session_id])
    return _session_payload(session_id)


@app.get("/api/sessions/{session_id}")
def session_state(session_id: str) -> dict:
    _get_session(session_id)
    return _session_payload(session_id)


@app.post("/api/sessions/{session_id}/advance")
def advance_session(session_id: str) -> dict:
    session = _get_session(session_id)
    _apply(session, session["engine"].advance)
    return _session_payload(session_id)


@app.post("/api/sessions/{session_id}/select")
def select_option(session_id: str, req: SelectRequest) -> dict:
    session = _get_session(session_id)
    engine = session["engine"]
    if not isinstance(engine, SelectEngine):
        raise HTTPException(status_code=400, detail="session is not a select exercise")
    _apply(session, engine.select, req.option_index)
    return _session_payload(session_id)


@app.post("/api/sessions/{session_id}/tiles")
def toggle_tile(session_id: str, req: TileRequest) -> dict:
    session = _get_session(session_id)
    engine = session["engine"]
    if not isinstance(engine, StructureEngine):
        raise HTTPException(status_code=400, detail="session is not a structure exercise")
    _apply(session, engine.toggle, req.tile_id)
    return _session_payload(session_id)


@app.post("/api/sessions/{session_id}/submit")
def submit_arrangement(session_id: str, req: ArrangementRequest) -> dict:
    session = _get_session(session_id)
    engine = session["engine"]
    if not isinstance(engine, StructureEngine):
        raise HTTPException(status_code=400, detail="session is not a structure exercise")
    _apply(session, engine.submit_arrangement, req.tile_order)
    return _session_payload(session_id)


@app.post("/api/sessions/{session_id}/restart")
def restart_session(session_id: str) -> dict:
    session = _get_session(session_id)
    session["engine"].restart()
    session["recorded"] = False
    _record_if_complete(session)
    return _session_payload(session_id)


def _apply(session: dict, action, *args) -> None:
    try:
        action(*args)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    _record_if_complete(session)


def _record_if_complete(session: dict) -> None:
    engine = session["engine"]
    if session["recorded"] or not engine.is_complete():
        return
    ledger = ProgressLedger.load(session["learner_key"], db)
    ledger.complete_mode(engine.dialogue.id, engine.mode, engine.score())
    session["recorded"] = True
    logger.info("Recorded %s result for %s on %s", engine.mode, session["learner_key"], engine.dialogue.id)


def _session_payload(session_id: str) -> dict:
    session = sessions[session_id]
    engine = session["engine"]
    ledger = ProgressLedger.load(session["learner_key"], db)
    return {
        "ok": True,
        "session_id": session_id,
        "state": engine.snapshot(),
        "progress": _progress_payload(ledger, engine.dialogue.id),
    }


def _progress_payload(ledger: ProgressLedger, dialogue_id: str) -> dict:
    return {
        "dialogue_id": dialogue_id,
        "progress": ledger.get_progress(dialogue_id).to_dict(),
        "unlocked": ledger.unlocked_modes(dialogue_id),
        "overall": ledger.get_overall_progress(dialogue_id),
    }


def _get_session(session_id: str) -> dict:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="session not found")
    return session


def _load_dialogue(dialogue_id: str) -> Dialogue:
    dialogue = db.get_dialogue(dialogue_id)
    if dialogue is None:
        raise HTTPException(status_code=404, detail=f"dialogue {dialogue_id} not found")
    return dialogue


def _require_learner_key(key: str) -> None:
    try:
        parse_learner_key(key)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
