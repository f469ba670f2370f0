"""Shareable seed codes.

Format ``GENRE-VERB-GRAV-WRLDccc-SSSSSSS``::

    ACTN-JUMP-NORM-COLR050-1K3Z9QA

GENRE, VERB, GRAV and WRLD are four-letter codes, ``ccc`` is the chaos level
as three decimal digits and ``SSSSSSS`` is the internal seed written in base
34 (digits and capitals without I and O). Seven base-34 digits cover the
whole 32-bit range, so the realized seed survives the round trip unchanged.

Decoding never raises. Anything that does not parse yields
``UNRECONSTRUCTIBLE`` and callers fall back to a minimal default game.
"""

from __future__ import annotations

from dataclasses import dataclass

from seedforge.gen.choices import ChoiceVector, clamp_chaos_level
from seedforge.gen.rng import UINT32_MASK

SEED_ALPHABET = "0123456789ABCDEFGHJKLMNPQRSTUVWXYZ"
SEED_DIGITS = 7
SEGMENT_SEPARATOR = "-"
CUSTOM_WORLD_CODE = "CSTM"
CUSTOM_WORLD_KEY = "custom"

GENRE_CODES = {
    "action": "ACTN",
    "narrative": "NARR",
    "card": "CARD",
    "board": "BORD",
    "puzzle_logic": "PUZL",
    "rhythm": "RTHM",
}
VERB_CODES = {
    "jump": "JUMP",
    "shoot": "SHOT",
    "collect": "GRAB",
    "dodge": "DODG",
    "build": "BILD",
    "explore": "XPLR",
    "push": "PUSH",
    "activate": "ACTV",
    "craft": "CRFT",
    "defend": "DFND",
    "dash": "DASH",
}
GRAVITY_CODES = {
    "normal": "NORM",
    "low": "FLOT",
    "shifting": "SHFT",
    "reverse": "RVRS",
}
WORLD_CODES = {
    "colors_alive": "COLR",
    "sound_solid": "SOND",
    "memory_touch": "MMRY",
    "time_uneven": "TIME",
}

CODE_TO_GENRE = {code: key for key, code in GENRE_CODES.items()}
CODE_TO_VERB = {code: key for key, code in VERB_CODES.items()}
CODE_TO_GRAVITY = {code: key for key, code in GRAVITY_CODES.items()}
CODE_TO_WORLD = {code: key for key, code in WORLD_CODES.items()}
CODE_TO_WORLD[CUSTOM_WORLD_CODE] = CUSTOM_WORLD_KEY


@dataclass(frozen=True)
class DecodedSeed:
    """Fields a seed code captures. ``verb is None`` marks a failed decode."""

    internal_seed: int
    genre: str | None = None
    verb: str | None = None
    gravity: str | None = None
    world_difference: str | None = None
    chaos_level: int = 0

    @property
    def is_valid(self) -> bool:
        return self.verb is not None


UNRECONSTRUCTIBLE = DecodedSeed(internal_seed=0)


def encode_internal_seed(seed: int) -> str:
    base = len(SEED_ALPHABET)
    remaining = int(seed) & UINT32_MASK
    digits: list[str] = []
    for _ in range(SEED_DIGITS):
        remaining, digit = divmod(remaining, base)
        digits.append(SEED_ALPHABET[digit])
    return "".join(reversed(digits))


def decode_internal_seed(segment: str) -> int | None:
    if len(segment) != SEED_DIGITS:
        return None
    base = len(SEED_ALPHABET)
    value = 0
    for char in segment:
        index = SEED_ALPHABET.find(char)
        if index < 0:
            return None
        value = value * base + index
    if value > UINT32_MASK:
        return None
    return value


def encode_seed_code(choices: ChoiceVector, internal_seed: int) -> str:
    world_code = WORLD_CODES.get(choices.world_difference, CUSTOM_WORLD_CODE)
    chaos = clamp_chaos_level(choices.chaos_level)
    return SEGMENT_SEPARATOR.join(
        [
            GENRE_CODES[choices.genre],
            VERB_CODES[choices.primary_verb],
            GRAVITY_CODES[choices.gravity],
            f"{world_code}{chaos:03d}",
            encode_internal_seed(internal_seed),
        ]
    )


def decode_seed_code(code: object) -> DecodedSeed:
    if not isinstance(code, str):
        return UNRECONSTRUCTIBLE
    parts = code.strip().upper().split(SEGMENT_SEPARATOR)
    if len(parts) != 5:
        return UNRECONSTRUCTIBLE
    genre_code, verb_code, gravity_code, world_segment, seed_segment = parts

    genre = CODE_TO_GENRE.get(genre_code)
    verb = CODE_TO_VERB.get(verb_code)
    gravity = CODE_TO_GRAVITY.get(gravity_code)
    if genre is None or verb is None or gravity is None:
        return UNRECONSTRUCTIBLE

    if len(world_segment) != 7:
        return UNRECONSTRUCTIBLE
    world = CODE_TO_WORLD.get(world_segment[:4])
    chaos_text = world_segment[4:]
    if world is None or not (chaos_text.isascii() and chaos_text.isdigit()):
        return UNRECONSTRUCTIBLE
    chaos = int(chaos_text)
    if chaos > 100:
        return UNRECONSTRUCTIBLE

    seed = decode_internal_seed(seed_segment)
    if seed is None:
        return UNRECONSTRUCTIBLE

    return DecodedSeed(
        internal_seed=seed,
        genre=genre,
        verb=verb,
        gravity=gravity,
        world_difference=world,
        chaos_level=chaos,
    )
