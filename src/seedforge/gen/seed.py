from __future__ import annotations

import secrets
import time

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.rng import UINT32_MASK

DJB2_START = 5381


def hash_string(text: str) -> int:
    """djb2 over the code points of ``text``, wrapped to 32 bits."""
    value = DJB2_START
    for char in text:
        value = ((value << 5) + value + ord(char)) & UINT32_MASK
    return value


def choice_fingerprint(choices: ChoiceVector) -> str:
    return "|".join(
        [
            choices.genre,
            choices.visual_style,
            ",".join(choices.verbs),
            choices.gravity,
            choices.boundary,
            choices.world_difference,
            choices.character_archetype,
            choices.difficulty_style,
            str(choices.chaos_level),
        ]
    )


def derive_internal_seed(
    choices: ChoiceVector,
    *,
    clock_ms: int | None = None,
    entropy: int | None = None,
) -> int:
    """Hash the choices and salt with wall-clock time and an independent draw.

    Two calls with identical choices normally differ. A generation is only
    reproducible from its realized seed, which the seed code captures.
    """
    base = hash_string(choice_fingerprint(choices))
    now_ms = int(time.time() * 1000) if clock_ms is None else int(clock_ms)
    noise = secrets.randbits(32) if entropy is None else int(entropy)
    salt = (now_ms ^ noise) & UINT32_MASK
    return (base ^ salt) & UINT32_MASK
