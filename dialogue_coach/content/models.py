from __future__ import annotations

from dataclasses import dataclass

STAFF = "staff"
GUEST = "guest"
ROLES = (STAFF, GUEST)
ROLE_ALIASES = {
    "staff": STAFF,
    "a": STAFF,
    "guest": GUEST,
    "b": GUEST,
}


def normalize_role(value: object) -> str:
    key = str(value or "").strip().lower()
    role = ROLE_ALIASES.get(key)
    if role is None:
        raise ValueError(f"unknown speaker role: {value!r}")
    return role


def other_role(role: str) -> str:
    return GUEST if normalize_role(role) == STAFF else STAFF


@dataclass(frozen=True)
class DialogueLine:
    speaker: str
    primary_text: str
    secondary_text: str | None = None

    def to_dict(self) -> dict:
        payload = {"speaker": self.speaker, "primary_text": self.primary_text}
        if self.secondary_text:
            payload["secondary_text"] = self.secondary_text
        return payload


@dataclass(frozen=True)
class Dialogue:
    id: str
    title: str
    lines: tuple[DialogueLine, ...]
    description: str | None = None
    unit: str | None = None

    def __post_init__(self) -> None:
        if not str(self.id or "").strip():
            raise ValueError("dialogue id is empty")
        if not str(self.title or "").strip():
            raise ValueError("dialogue title is empty")
        if not self.lines:
            raise ValueError("dialogue has no lines")
        object.__setattr__(self, "lines", tuple(self.lines))
        for line in self.lines:
            if line.speaker not in ROLES:
                raise ValueError(f"unknown speaker role: {line.speaker!r}")
            if not line.primary_text.strip():
                raise ValueError("dialogue line text is empty")

    @property
    def speakers(self) -> frozenset[str]:
        return frozenset(line.speaker for line in self.lines)

    def indices_for(self, role: str) -> list[int]:
        role = normalize_role(role)
        return [idx for idx, line in enumerate(self.lines) if line.speaker == role]

    def secondary_text_for(self, text: str) -> str | None:
        for line in self.lines:
            if line.primary_text == text:
                return line.secondary_text
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "unit": self.unit,
            "lines": [line.to_dict() for line in self.lines],
        }
