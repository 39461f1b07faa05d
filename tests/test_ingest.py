from __future__ import annotations

import pytest

from dialogue_coach.content.ingest import (
    DialogueValidationError,
    dialogue_from_json,
    dialogue_from_payload,
    dialogue_from_text,
)
from dialogue_coach.content.models import GUEST, STAFF
from dialogue_coach.progress.identity import learner_key, parse_learner_key


def test_free_text_with_letter_labels():
    dialogue = dialogue_from_text("A: Hi\nB: Hello", "Greeting")

    assert [line.speaker for line in dialogue.lines] == [STAFF, GUEST]
    assert [line.primary_text for line in dialogue.lines] == ["Hi", "Hello"]
    assert dialogue.id.startswith("custom-")


def test_free_text_accepts_role_names_and_drops_noise():
    text = """
    Staff: Good evening, room service.
    (phone rings)
    guest:   Hi, I'd like   to order dinner.
    Manager: not a role
    """
    dialogue = dialogue_from_text(text, "Room Service", dialogue_id="room-service")

    assert dialogue.id == "room-service"
    assert len(dialogue.lines) == 2
    assert dialogue.lines[1].primary_text == "Hi, I'd like to order dinner."


def test_free_text_without_labels_fails():
    with pytest.raises(DialogueValidationError):
        dialogue_from_text("Hello there\nGeneral Kenobi", "Unlabelled")


def test_free_text_requires_title():
    with pytest.raises(DialogueValidationError):
        dialogue_from_text("A: Hi", "   ")


def test_structured_payload_with_camel_case_fields():
    dialogue = dialogue_from_payload(
        {
            "id": "room-service",
            "title": "Room Service",
            "lines": [
                {"speaker": "A", "primaryText": "Good evening, room service.", "secondaryText": "Chào buổi tối."},
                {"speaker": "B", "primaryText": "Hi, I'd like to order dinner."},
            ],
        }
    )

    assert dialogue.id == "room-service"
    assert dialogue.lines[0].secondary_text == "Chào buổi tối."
    assert dialogue.lines[1].secondary_text is None


def test_structured_payload_with_legacy_field_names():
    dialogue = dialogue_from_payload(
        {
            "title": "Room Service",
            "unit": "Unit 3",
            "lines": [{"speaker": "staff", "english": "Good evening.", "vietnamese": "Chào buổi tối."}],
        }
    )

    assert dialogue.id.startswith("json-")
    assert dialogue.unit == "Unit 3"
    assert dialogue.lines[0].primary_text == "Good evening."


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "Empty", "lines": []},
        {"title": "Blank lines", "lines": [{"speaker": "A", "primaryText": "   "}]},
        {"title": "", "lines": [{"speaker": "A", "primaryText": "Hi"}]},
        {"lines": [{"speaker": "A", "primaryText": "Hi"}]},
        {"title": "No lines"},
        {"title": "Not a list", "lines": "A: Hi"},
        {"title": "Bad speaker", "lines": [{"speaker": "narrator", "primaryText": "Once upon a time"}]},
        ["not", "an", "object"],
    ],
)
def test_invalid_payloads_are_rejected(payload):
    with pytest.raises(DialogueValidationError):
        dialogue_from_payload(payload)


def test_json_text_ingestion():
    dialogue = dialogue_from_json('{"title": "Short", "lines": [{"speaker": "B", "primaryText": "Thanks!"}]}')
    assert dialogue.lines[0].speaker == GUEST

    with pytest.raises(DialogueValidationError):
        dialogue_from_json("{not json")


def test_learner_key_round_trip():
    key = learner_key("group1", " Mia ")
    assert key == "group1:Mia"
    identity = parse_learner_key(key)
    assert identity.group_id == "group1"
    assert identity.student_name == "Mia"
    assert identity.key == key

    with pytest.raises(ValueError):
        learner_key("", "Mia")
    with pytest.raises(ValueError):
        parse_learner_key("no-separator")
