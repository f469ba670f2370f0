import copy
import json
from pathlib import Path

import pytest

from seedforge.content.dna import (
    load_presets_json,
    load_question_banks_json,
    presets_from_payload,
    question_banks_from_payload,
)
from seedforge.gen.choices import GENRES
from seedforge.gen.dna import DnaAnswers, extract_visible_genes, map_answers_to_choices


def _banks_payload() -> dict:
    return json.loads(Path("content/dna/question_banks.json").read_text(encoding="utf-8"))


def test_default_question_banks_cover_every_genre() -> None:
    banks = load_question_banks_json()
    by_genre = banks.by_genre()

    assert set(by_genre) == set(GENRES)
    for genre, bank in by_genre.items():
        expected = 4 if genre == "narrative" else 3
        assert len(bank.questions) == expected
        assert all(len(question.options) >= 3 for question in bank.questions)


def test_bad_verb_is_reported_with_its_path() -> None:
    payload = _banks_payload()
    broken = copy.deepcopy(payload)
    broken["banks"][0]["questions"][1]["options"][0]["mapping"]["verbs"] = ["explore", "teleport"]

    with pytest.raises(ValueError, match=r"questions\[1\]\.options\[0\]\.mapping\.verbs\[1\] must be one of"):
        question_banks_from_payload(broken)


def test_bad_bank_documents_are_rejected() -> None:
    payload = _banks_payload()

    with pytest.raises(ValueError, match="unsupported question bank schema_version: 9"):
        question_banks_from_payload({**payload, "schema_version": 9})
    with pytest.raises(ValueError, match="question bank must contain list field: banks"):
        question_banks_from_payload({"schema_version": 1})

    duplicated = copy.deepcopy(payload)
    duplicated["banks"].append(copy.deepcopy(payload["banks"][0]))
    with pytest.raises(ValueError, match="duplicate question bank genre: action"):
        question_banks_from_payload(duplicated)

    bad_scalar = copy.deepcopy(payload)
    bad_scalar["banks"][0]["questions"][0]["options"][0]["mapping"]["visual_style"] = "sepia"
    with pytest.raises(ValueError, match=r"mapping\.visual_style must be one of"):
        question_banks_from_payload(bad_scalar)


def test_default_presets_load() -> None:
    presets = load_presets_json().by_id()

    assert len(presets) == 6
    assert presets["plumber_soul"].choices.genre == "action"
    assert presets["plumber_soul"].choices.chaos_level == 15
    assert presets["number_master"].choices.chaos_level == 0


def test_preset_with_invalid_choices_names_the_preset() -> None:
    payload = {
        "schema_version": 1,
        "presets": [
            {
                "preset_id": "broken",
                "name": "Broken",
                "icon": "",
                "story": "",
                "choices": {"genre": "action", "visual_style": "pixel", "verbs": []},
            }
        ],
    }

    with pytest.raises(ValueError, match=r"presets\[0\]\.choices invalid"):
        presets_from_payload(payload)


def test_answers_map_onto_genre_defaults() -> None:
    banks = load_question_banks_json()
    answers = DnaAnswers(genre="action", answers={"scene": "factory", "style": "charge", "rhythm": "fire"})

    choices = map_answers_to_choices(answers, banks)

    assert choices.world_difference == "sound_solid"
    assert choices.visual_style == "retro_crt"
    assert choices.character_archetype == "fugitive"
    assert choices.verbs == ("jump", "shoot")
    assert choices.gravity == "shifting"
    assert choices.difficulty_style == "hardcore"
    assert choices.game_pace == "fast"
    assert choices.skill_luck_ratio == "skill_heavy"


def test_unanswered_verbs_fall_back_to_sorted_defaults() -> None:
    banks = load_question_banks_json()

    choices = map_answers_to_choices(DnaAnswers(genre="action", answers={"scene": "garden"}), banks)

    assert choices.verbs == ("collect", "jump")
    assert choices.visual_style == "watercolor"


def test_scene_description_becomes_custom_element() -> None:
    banks = load_question_banks_json()

    long_text = map_answers_to_choices(DnaAnswers(genre="card", scene_description="z" * 80), banks)
    blank = map_answers_to_choices(DnaAnswers(genre="card", scene_description="   "), banks)

    assert long_text.custom_element == "z" * 50
    assert blank.custom_element == ""


def test_unknown_answers_are_ignored_and_chaos_is_clamped() -> None:
    banks = load_question_banks_json()
    answers = DnaAnswers(
        genre="board",
        answers={"scene": "no_such_option", "mood": "bright"},
        chaos_level=150,
    )

    choices = map_answers_to_choices(answers, banks)

    assert choices.chaos_level == 100
    assert extract_visible_genes(answers, banks) == []


def test_visible_genes_follow_question_order() -> None:
    banks = load_question_banks_json()
    answers = DnaAnswers(genre="action", answers={"rhythm": "zen", "scene": "mind"})

    genes = extract_visible_genes(answers, banks)

    assert [label for _, label in genes] == ["Countless floating orbs of light", "An easy stroll"]


def test_dna_answers_validation() -> None:
    with pytest.raises(ValueError, match="genre must be one of"):
        DnaAnswers(genre="sports")
    with pytest.raises(ValueError, match="answers.scene must be a string"):
        DnaAnswers.from_dict({"genre": "action", "answers": {"scene": 3}})

    parsed = DnaAnswers.from_dict({"genre": "rhythm", "answers": {"scene": "stage"}, "chaos_level": 40})
    assert parsed.chaos_level == 40
