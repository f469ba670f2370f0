from dataclasses import replace

import pytest

from seedforge.gen.choices import GENRE_DEFAULTS, GENRES
from seedforge.gen.genres.board import BOARD_HEIGHT, BOARD_WIDTH
from seedforge.gen.genres.card import UNIQUE_CARD_ID
from seedforge.gen.genres.puzzle import PACE_PUZZLE_COUNTS, verify_puzzle
from seedforge.gen.genres.registry import GENRE_GENERATORS, get_genre_generator
from seedforge.gen.genres.rhythm import LANE_COUNT
from seedforge.gen.rng import SeededRandom
from seedforge.gen.spec import NarrativeGraph
from seedforge.gen.world import build_world_config


def _generate(choices, seed: int = 1234):
    world = build_world_config(choices)
    return get_genre_generator(choices.genre).generate(SeededRandom(seed).random, choices, world)


def test_registry_covers_every_genre() -> None:
    assert set(GENRE_GENERATORS) == set(GENRES)
    with pytest.raises(ValueError, match="no generator registered"):
        get_genre_generator("racing")


@pytest.mark.parametrize("genre", GENRES)
def test_same_seed_reproduces_genre_content(genre: str) -> None:
    choices = GENRE_DEFAULTS[genre]

    assert _generate(choices, seed=77) == _generate(choices, seed=77)


@pytest.mark.parametrize("genre", GENRES)
def test_layout_and_genre_data_are_mutually_exclusive(genre: str) -> None:
    content = _generate(GENRE_DEFAULTS[genre])
    generator = get_genre_generator(genre)

    if genre == "action":
        assert content.entities
        assert content.data == {}
    else:
        assert content.entities == ()
        assert list(content.data) == [generator.data_key]


def test_action_layout_has_unique_ids_and_all_entity_kinds() -> None:
    content = _generate(GENRE_DEFAULTS["action"])
    ids = [entity.entity_id for entity in content.entities]

    assert len(ids) == len(set(ids))
    assert ids[0] == "platform_start"
    assert {entity.entity_type for entity in content.entities} == {"platform", "enemy", "collectible"}


def test_card_custom_element_becomes_leading_legendary() -> None:
    choices = replace(GENRE_DEFAULTS["card"], custom_element="trap card")
    deck = _generate(choices).data["card"]["player_deck"]

    assert deck[0]["id"] == UNIQUE_CARD_ID
    assert deck[0]["name"] == "trap card EX"
    assert deck[0]["rarity"] == "legendary"
    assert 26 <= len(deck) <= 31


def test_card_without_custom_element_has_no_unique_card() -> None:
    deck = _generate(GENRE_DEFAULTS["card"]).data["card"]["player_deck"]

    assert all(card["id"] != UNIQUE_CARD_ID for card in deck)
    assert 25 <= len(deck) <= 30


def test_board_pieces_occupy_distinct_home_rows() -> None:
    board = _generate(GENRE_DEFAULTS["board"]).data["board"]

    assert len(board["terrain"]) == BOARD_HEIGHT
    assert all(len(row) == BOARD_WIDTH for row in board["terrain"])
    positions = [(piece["x"], piece["y"]) for piece in board["pieces"]]
    assert len(positions) == len(set(positions))
    for piece in board["pieces"]:
        if piece["owner"] == "player":
            assert piece["y"] in (BOARD_HEIGHT - 1, BOARD_HEIGHT - 2)
        else:
            assert piece["y"] in (0, 1)


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_every_generated_puzzle_is_solvable(seed: int) -> None:
    choices = replace(GENRE_DEFAULTS["puzzle_logic"], difficulty_style="hardcore")
    puzzles = _generate(choices, seed=seed).data["puzzle"]["puzzles"]

    assert len(puzzles) == PACE_PUZZLE_COUNTS[choices.game_pace]
    assert all(verify_puzzle(puzzle) for puzzle in puzzles)


def test_rhythm_chart_is_time_ordered_within_lanes() -> None:
    chart = _generate(GENRE_DEFAULTS["rhythm"]).data["rhythm"]
    notes = chart["notes"]

    assert notes
    assert [(note["time"], note["lane"]) for note in notes] == sorted(
        (note["time"], note["lane"]) for note in notes
    )
    assert all(0 <= note["lane"] < LANE_COUNT for note in notes)
    assert all(note["time"] < chart["song_duration"] for note in notes)
    assert 120 <= chart["bpm"] < 150


def test_narrative_scene_graph_is_structurally_valid() -> None:
    payload = _generate(GENRE_DEFAULTS["narrative"]).data["narrative"]
    graph = NarrativeGraph.from_dict(payload)

    graph.validate()
    assert graph.ending_nodes()
    assert graph.template
