from dataclasses import replace

import pytest

from seedforge.gen.choices import GENRE_DEFAULTS
from seedforge.gen.rng import UINT32_MASK
from seedforge.gen.seed_code import (
    UNRECONSTRUCTIBLE,
    decode_internal_seed,
    decode_seed_code,
    encode_internal_seed,
    encode_seed_code,
)


def test_seed_code_round_trip_preserves_fields() -> None:
    choices = GENRE_DEFAULTS["action"].with_chaos_level(42)

    code = encode_seed_code(choices, 0xDEADBEEF)
    decoded = decode_seed_code(code)

    assert code.startswith("ACTN-JUMP-NORM-COLR042-")
    assert decoded.is_valid
    assert decoded.genre == "action"
    assert decoded.verb == "jump"
    assert decoded.gravity == "normal"
    assert decoded.world_difference == "colors_alive"
    assert decoded.chaos_level == 42
    assert decoded.internal_seed == 0xDEADBEEF


def test_internal_seed_encoding_covers_full_32_bit_range() -> None:
    assert encode_internal_seed(0) == "0000000"
    assert encode_internal_seed(42) == "0000018"
    assert decode_internal_seed(encode_internal_seed(UINT32_MASK)) == UINT32_MASK
    assert decode_internal_seed("ZZZZZZZ") is None
    assert decode_internal_seed("00000I0") is None


def test_custom_world_encodes_as_cstm() -> None:
    choices = replace(GENRE_DEFAULTS["rhythm"], world_difference="a city made of glass", chaos_level=100)

    code = encode_seed_code(choices, 9)
    decoded = decode_seed_code(code)

    assert code.split("-")[3] == "CSTM100"
    assert decoded.world_difference == "custom"
    assert decoded.chaos_level == 100


def test_decode_is_case_insensitive() -> None:
    code = encode_seed_code(GENRE_DEFAULTS["card"], 123456)

    assert decode_seed_code(code.lower()) == decode_seed_code(code)


@pytest.mark.parametrize(
    "code",
    [
        None,
        "",
        "ACTN-JUMP",
        "XXXX-JUMP-NORM-COLR000-0000001",
        "ACTN-FLAP-NORM-COLR000-0000001",
        "ACTN-JUMP-NORM-COLR101-0000001",
        "ACTN-JUMP-NORM-COLRabc-0000001",
        "ACTN-JUMP-NORM-COLR000-00001",
        "ACTN-JUMP-NORM-WXYZ000-0000001",
    ],
)
def test_unparseable_codes_decode_to_sentinel(code: object) -> None:
    decoded = decode_seed_code(code)

    assert decoded == UNRECONSTRUCTIBLE
    assert not decoded.is_valid
