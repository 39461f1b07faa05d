from __future__ import annotations

from pydantic import BaseModel, Field

from dialogue_coach.config import DEFAULT_LEARNER_ROLE


class LearnerRequest(BaseModel):
    group_id: str
    student_name: str


class TextDialogueRequest(BaseModel):
    title: str
    text: str
    id: str | None = None


class CompleteModeRequest(BaseModel):
    learner_key: str
    mode: str
    score: int | None = Field(default=None, ge=0, le=100)


class SessionRequest(BaseModel):
    learner_key: str
    dialogue_id: str
    mode: str = Field(default="practice")
    learner_role: str = Field(default=DEFAULT_LEARNER_ROLE)
    seed: int | None = None


class SelectRequest(BaseModel):
    option_index: int = Field(ge=0)


class ArrangementRequest(BaseModel):
    tile_order: list[str] | None = None


class TileRequest(BaseModel):
    tile_id: str
