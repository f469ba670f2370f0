import logging
from dataclasses import replace

import pytest

from seedforge.gen.choices import CORE_VERBS, GENRE_DEFAULTS, GENRES
from seedforge.gen.hash import spec_hash
from seedforge.gen.pipeline import (
    choices_from_decoded,
    default_minimal_spec,
    generate,
    generate_from_seed_code,
)
from seedforge.gen.seed_code import UNRECONSTRUCTIBLE, decode_seed_code
from seedforge.gen.validation import validate_meaningful_play


def test_same_choices_and_seed_reproduce_identical_spec() -> None:
    choices = GENRE_DEFAULTS["action"]

    first = generate(choices, seed=424242)
    second = generate(choices, seed=424242)

    assert first == second
    assert spec_hash(first) == spec_hash(second)


def test_unseeded_generation_replays_from_its_seed_code() -> None:
    choices = replace(GENRE_DEFAULTS["card"], custom_element="trap card", chaos_level=20)

    spec = generate(choices)
    decoded = decode_seed_code(spec.seed_code)
    replayed = generate_from_seed_code(spec.seed_code, base_choices=choices)

    assert decoded.internal_seed == spec.internal_seed
    assert spec_hash(replayed) == spec_hash(spec)


def test_custom_world_survives_replay_with_base_choices() -> None:
    choices = replace(GENRE_DEFAULTS["rhythm"], world_difference="the moon hums in minor keys")

    spec = generate(choices, seed=99)
    replayed = generate_from_seed_code(spec.seed_code, base_choices=choices)

    assert "-CSTM" in spec.seed_code
    assert replayed.narrative.world_difference == "the moon hums in minor keys"
    assert spec_hash(replayed) == spec_hash(spec)


@pytest.mark.parametrize("genre", GENRES)
def test_player_leads_entities_and_layout_excludes_genre_data(genre: str) -> None:
    spec = generate(GENRE_DEFAULTS[genre], seed=7)

    assert spec.entities[0].entity_id == "player"
    assert spec.entities[0].color == spec.world.palette["player"]
    if genre == "action":
        assert len(spec.entities) > 1
        assert spec.genre_data == {}
    else:
        assert len(spec.entities) == 1
        assert spec.genre_data


def test_spec_identity_fields() -> None:
    spec = generate(GENRE_DEFAULTS["action"], seed=255)

    assert spec.game_id == "game_ff"
    assert spec.internal_seed == 255
    assert spec.name == "The Wanderer's Jump & Collect World"
    assert spec.description.startswith(
        "Action Adventure: A steady jump & collect game set in a world where In this world, colors"
    )
    assert spec.description.endswith("...")
    assert spec.to_dict()["schema_version"] == 1


def test_chaos_level_is_clamped_before_generation() -> None:
    spec = generate(replace(GENRE_DEFAULTS["board"], chaos_level=250), seed=1)

    assert spec.chaos.level == 100
    assert spec.seed_code.split("-")[3].endswith("100")
    assert spec.chaos.max_active_mutations == 999
    assert spec.systems[-1].system_type == "chaos"


def test_narrative_genre_reuses_its_scene_graph() -> None:
    spec = generate(GENRE_DEFAULTS["narrative"], seed=3)

    assert spec.narrative.graph.template != "diamond"
    assert spec.narrative.graph.to_dict()["nodes"] == spec.genre_data["narrative"]["nodes"]


def test_unreconstructible_code_falls_back_to_minimal_spec(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="seedforge.gen.pipeline"):
        spec = generate_from_seed_code("not-a-code")

    assert spec_hash(spec) == spec_hash(default_minimal_spec())
    assert "unreconstructible" in caplog.text


def test_choices_from_decoded_rejects_sentinel_and_moves_verb_first() -> None:
    with pytest.raises(ValueError, match="could not be decoded"):
        choices_from_decoded(UNRECONSTRUCTIBLE)

    decoded = decode_seed_code("ACTN-GRAB-FLOT-TIME010-0000001")
    choices = choices_from_decoded(decoded)

    assert choices.verbs == ("collect", "jump")
    assert choices.gravity == "low"
    assert choices.world_difference == "time_uneven"
    assert choices.chaos_level == 10


def test_validator_findings_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    choices = replace(GENRE_DEFAULTS["action"], difficulty_style="relaxed", game_pace="slow")

    with caplog.at_level(logging.INFO, logger="seedforge.gen.pipeline"):
        generate(choices, seed=11)

    assert "[Difficulty]" in caplog.text


@pytest.mark.parametrize("genre", GENRES)
@pytest.mark.parametrize("verb", CORE_VERBS)
def test_every_verb_generates_in_every_genre(genre: str, verb: str) -> None:
    choices = replace(GENRE_DEFAULTS[genre], verbs=(verb,))

    spec = generate(choices, seed=2718)

    assert spec.verbs == (verb,)
    assert len(spec.feedback_loops) == 3
    assert generate_from_seed_code(spec.seed_code, base_choices=choices) == spec


@pytest.mark.parametrize("verb", CORE_VERBS)
def test_single_verb_games_link_scoring_to_the_verb(verb: str) -> None:
    spec = generate(replace(GENRE_DEFAULTS["action"], verbs=(verb,)), seed=5)

    result = validate_meaningful_play(spec)

    assert not any("No scoring rule" in warning for warning in result.warnings)


def test_description_uses_plain_separator() -> None:
    spec = generate(GENRE_DEFAULTS["puzzle_logic"], seed=1)

    assert spec.description.startswith("Logic Puzzle: A steady ")
