import json

import pytest

from seedforge.gen.choices import GENRE_DEFAULTS, GENRES
from seedforge.gen.hash import payload_hash, spec_hash
from seedforge.gen.pipeline import generate, generate_from_seed_code


@pytest.mark.parametrize("genre", GENRES)
def test_deterministic_seed_produces_identical_hash(genre: str) -> None:
    choices = GENRE_DEFAULTS[genre].with_chaos_level(55)

    assert spec_hash(generate(choices, seed=42)) == spec_hash(generate(choices, seed=42))


def test_different_seeds_diverge() -> None:
    choices = GENRE_DEFAULTS["card"]

    assert spec_hash(generate(choices, seed=1)) != spec_hash(generate(choices, seed=2))


def test_hash_survives_json_round_trip() -> None:
    spec = generate(GENRE_DEFAULTS["narrative"], seed=77)

    reloaded = json.loads(json.dumps(spec.to_dict()))

    assert payload_hash(reloaded) == spec_hash(spec)


def test_seed_code_alone_reproduces_canonical_world_specs() -> None:
    spec = generate(GENRE_DEFAULTS["puzzle_logic"].with_chaos_level(10), seed=600)

    replayed = generate_from_seed_code(spec.seed_code, base_choices=GENRE_DEFAULTS["puzzle_logic"])

    assert spec_hash(replayed) == spec_hash(spec)
