from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LearnerIdentity:
    group_id: str
    student_name: str

    @property
    def key(self) -> str:
        return learner_key(self.group_id, self.student_name)


def learner_key(group_id: str, student_name: str) -> str:
    group = str(group_id or "").strip()
    name = str(student_name or "").strip()
    if not group or not name:
        raise ValueError("group id and student name are required")
    return f"{group}:{name}"


def parse_learner_key(key: str) -> LearnerIdentity:
    group, sep, name = str(key or "").partition(":")
    if not sep or not group.strip() or not name.strip():
        raise ValueError(f"invalid learner key: {key!r}")
    return LearnerIdentity(group_id=group.strip(), student_name=name.strip())
