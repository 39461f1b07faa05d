from __future__ import annotations

import json
import re
import uuid

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dialogue_coach.content.models import Dialogue, DialogueLine, normalize_role

LABELLED_LINE_PATTERN = re.compile(r"^\s*(staff|guest|a|b)\s*:\s*(.+)$", re.IGNORECASE)


class DialogueValidationError(ValueError):
    """Raised when dialogue input is malformed; no Dialogue is constructed."""


class LinePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    speaker: str
    primary_text: str = Field(default="", alias="primaryText")
    secondary_text: str | None = Field(default=None, alias="secondaryText")
    english: str | None = None
    vietnamese: str | None = None

    @field_validator("speaker")
    @classmethod
    def _known_speaker(cls, value: str) -> str:
        return normalize_role(value)

    def text(self) -> str:
        return _collapse_whitespace(self.primary_text or self.english or "")

    def translation(self) -> str | None:
        value = (self.secondary_text or self.vietnamese or "").strip()
        return value or None


class DialoguePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: str
    description: str | None = None
    unit: str | None = None
    lines: list[LinePayload]

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title is empty")
        return value.strip()


def dialogue_from_payload(payload: object) -> Dialogue:
    if not isinstance(payload, dict):
        raise DialogueValidationError("dialogue payload must be an object")
    try:
        parsed = DialoguePayload.model_validate(payload)
    except ValidationError as exc:
        raise DialogueValidationError(_summarize_errors(exc)) from exc

    lines = [
        DialogueLine(speaker=item.speaker, primary_text=item.text(), secondary_text=item.translation())
        for item in parsed.lines
        if item.text()
    ]
    if not lines:
        raise DialogueValidationError("dialogue has no lines")

    dialogue_id = (parsed.id or "").strip() or f"json-{uuid.uuid4().hex[:12]}"
    return _build_dialogue(
        id=dialogue_id,
        title=parsed.title,
        lines=lines,
        description=_clean_optional(parsed.description),
        unit=_clean_optional(parsed.unit),
    )


def dialogue_from_json(text: str) -> Dialogue:
    try:
        payload = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise DialogueValidationError("invalid JSON format") from exc
    return dialogue_from_payload(payload)


def dialogue_from_text(text: str, title: str, *, dialogue_id: str | None = None) -> Dialogue:
    """Parse ``Label: utterance`` lines; unlabelled lines are dropped."""
    normalized_title = str(title or "").strip()
    if not normalized_title:
        raise DialogueValidationError("title is empty")

    lines: list[DialogueLine] = []
    for raw_line in str(text or "").splitlines():
        match = LABELLED_LINE_PATTERN.match(raw_line)
        if not match:
            continue
        utterance = _collapse_whitespace(match.group(2))
        if not utterance:
            continue
        lines.append(DialogueLine(speaker=normalize_role(match.group(1)), primary_text=utterance))

    if not lines:
        raise DialogueValidationError("no labelled lines found; start each line with 'A:' or 'B:'")

    return _build_dialogue(
        id=(dialogue_id or "").strip() or f"custom-{uuid.uuid4().hex[:12]}",
        title=normalized_title,
        lines=lines,
    )


def _build_dialogue(**kwargs) -> Dialogue:
    try:
        return Dialogue(**kwargs)
    except ValueError as exc:
        raise DialogueValidationError(str(exc)) from exc


def _collapse_whitespace(text: str) -> str:
    # Tile answers are rebuilt with single spaces, so stored lines use them too.
    return " ".join(str(text).split())


def _clean_optional(value: str | None) -> str | None:
    cleaned = (value or "").strip()
    return cleaned or None


def _summarize_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "invalid dialogue"
