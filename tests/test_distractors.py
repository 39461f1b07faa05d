from __future__ import annotations

import random

from dialogue_coach.content.models import GUEST, STAFF, Dialogue
from dialogue_coach.content.samples import sample_dialogues
from dialogue_coach.exercises.distractors import build_option_set, generate_distractors


def _weather():
    return next(item for item in sample_dialogues() if item.id == "weather-1")


def test_distractors_come_from_opposite_role_and_exclude_answer():
    dialogue = _weather()
    guest_texts = {line.primary_text for line in dialogue.lines if line.speaker == GUEST}
    correct = dialogue.lines[0]

    for seed in range(20):
        wrong = generate_distractors(correct, dialogue, GUEST, rng=random.Random(seed))
        assert len(wrong) == 2
        assert len(set(wrong)) == 2
        assert correct.primary_text not in wrong
        assert set(wrong) <= guest_texts


def test_distractors_exclude_identical_text_in_pool():
    dialogue = _weather()
    correct = dialogue.lines[1]  # a guest line, so the pool contains it
    for seed in range(10):
        wrong = generate_distractors(correct, dialogue, GUEST, rng=random.Random(seed))
        assert correct.primary_text not in wrong


def test_option_set_has_three_entries_with_one_correct(rng):
    dialogue = _weather()
    options = build_option_set(dialogue.lines[2], dialogue, GUEST, rng=rng)

    assert len(options) == 3
    assert sum(1 for option in options if option.is_correct) == 1
    correct = next(option for option in options if option.is_correct)
    assert correct.text == dialogue.lines[2].primary_text
    assert correct.secondary_text == dialogue.lines[2].secondary_text


def test_option_translations_are_looked_up_by_text(rng):
    dialogue = _weather()
    translations = {line.primary_text: line.secondary_text for line in dialogue.lines}
    for option in build_option_set(dialogue.lines[0], dialogue, GUEST, rng=rng):
        assert option.secondary_text == translations[option.text]


def test_empty_pool_gives_single_option(greeting):
    staff_only = Dialogue(
        id="solo",
        title="Solo",
        lines=tuple(line for line in greeting.lines if line.speaker == STAFF),
    )
    assert generate_distractors(staff_only.lines[0], staff_only, GUEST) == []

    options = build_option_set(staff_only.lines[0], staff_only, GUEST)
    assert len(options) == 1
    assert options[0].is_correct


def test_small_pool_returns_what_is_available(greeting, rng):
    # Only one staff line differs from "Hi".
    wrong = generate_distractors(greeting.lines[0], greeting, STAFF, rng=rng)
    assert wrong == ["How are you?"]


def test_injected_rng_makes_choice_reproducible():
    dialogue = _weather()
    first = build_option_set(dialogue.lines[4], dialogue, GUEST, rng=random.Random(99))
    second = build_option_set(dialogue.lines[4], dialogue, GUEST, rng=random.Random(99))
    assert first == second
