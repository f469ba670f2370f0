"""Choice vector -> game specification.

Stages run in a fixed order over a single draw stream so a realized seed
always reproduces the same specification:

1. clamp chaos, derive (or accept) the internal seed, open the stream
2. protagonist
3. world configuration
4. genre content through the genre registry
5. systems, 6. rules, 7. feedback loops (no draws)
8. narrative (no draws)
9. chaos configuration, 10. difficulty curve, 11. seed code
12. assemble, then run the advisory validators

Only stage 4 consumes draws today. Later stages must keep it that way or
append their draws after it.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from seedforge.chaos.engine import build_chaos_config
from seedforge.gen.choices import GENRE_DEFAULTS, ChoiceVector, is_canonical_world_difference
from seedforge.gen.difficulty import build_difficulty_config
from seedforge.gen.genres.registry import get_genre_generator
from seedforge.gen.mechanics import build_feedback_loops, build_rules, build_systems
from seedforge.gen.narrative import build_narrative_config
from seedforge.gen.rng import UINT32_MASK, SeededRandom
from seedforge.gen.seed import derive_internal_seed
from seedforge.gen.seed_code import CUSTOM_WORLD_KEY, DecodedSeed, decode_seed_code, encode_seed_code
from seedforge.gen.spec import GameSpecification
from seedforge.gen.validation import ValidationResult, validate_difficulty, validate_meaningful_play
from seedforge.gen.world import build_protagonist, build_world_config, character_for

logger = logging.getLogger(__name__)

GENRE_NAMES = {
    "action": "Action Adventure",
    "narrative": "Mystery Story",
    "card": "Card Duel",
    "board": "Tactics Board",
    "puzzle_logic": "Logic Puzzle",
    "rhythm": "Rhythm Action",
}
DESCRIPTION_WORLD_LIMIT = 80
MINIMAL_SPEC_SEED = 0


def verb_label(verbs: tuple[str, ...]) -> str:
    return " & ".join(verb.capitalize() for verb in verbs)


def game_name(choices: ChoiceVector) -> str:
    character = character_for(choices.character_archetype)
    return f"{character.name_template}'s {verb_label(choices.verbs) or 'Mystery'} World"


def game_description(choices: ChoiceVector, world_text: str) -> str:
    label = (verb_label(choices.verbs) or "mystery").lower()
    return (
        f"{GENRE_NAMES[choices.genre]}: A {choices.difficulty_style} {label} game set in a world "
        f"where {world_text[:DESCRIPTION_WORLD_LIMIT]}..."
    )


def _log_findings(name: str, result: ValidationResult) -> None:
    for warning in result.warnings:
        logger.warning("[%s] %s", name, warning)
    for suggestion in result.suggestions:
        logger.info("[%s] %s", name, suggestion)


def generate(choices: ChoiceVector, *, seed: int | None = None) -> GameSpecification:
    """Synthesize a specification.

    Without ``seed`` a fresh salted seed is derived, so two calls normally
    differ. Pass the seed realized by an earlier call (or decoded from its
    seed code) to replay it exactly.
    """
    choices = choices.with_chaos_level(choices.chaos_level)
    internal_seed = derive_internal_seed(choices) if seed is None else int(seed) & UINT32_MASK
    draw = SeededRandom(internal_seed).random
    logger.debug("generating %s game with seed %s", choices.genre, internal_seed)

    world = build_world_config(choices)
    player = build_protagonist(choices, world.palette["player"])
    logger.debug("protagonist and world ready (%sx%s)", world.width, world.height)

    generator = get_genre_generator(choices.genre)
    content = generator.generate(draw, choices, world)
    logger.debug("genre content: %s entities, data keys %s", len(content.entities), sorted(content.data))

    systems = build_systems(choices)
    rules = build_rules(choices)
    loops = build_feedback_loops(choices)
    narrative = build_narrative_config(choices, content.data)
    chaos = build_chaos_config(choices.chaos_level)
    difficulty = build_difficulty_config(choices)
    seed_code = encode_seed_code(choices, internal_seed)
    logger.debug("mechanics, narrative and chaos ready; seed code %s", seed_code)

    spec = GameSpecification(
        game_id=f"game_{internal_seed:x}",
        seed_code=seed_code,
        name=game_name(choices),
        description=game_description(choices, narrative.world_difference),
        genre=choices.genre,
        visual_style=choices.visual_style,
        verbs=choices.verbs,
        world=world,
        entities=(player,) + content.entities,
        genre_data=dict(content.data),
        systems=tuple(systems),
        rules=tuple(rules),
        feedback_loops=tuple(loops),
        narrative=narrative,
        difficulty=difficulty,
        chaos=chaos,
        internal_seed=internal_seed,
    )

    _log_findings("MeaningfulPlay", validate_meaningful_play(spec))
    _log_findings("Difficulty", validate_difficulty(spec))
    return spec


def choices_from_decoded(decoded: DecodedSeed, base_choices: ChoiceVector | None = None) -> ChoiceVector:
    """Overlay the fields a seed code carries onto ``base_choices``.

    The decoded verb moves to the front of the verb list. A custom world keeps
    the base text when the base is custom too, since codes do not carry it.
    """
    if not decoded.is_valid:
        raise ValueError("seed code could not be decoded")
    base = base_choices if base_choices is not None else GENRE_DEFAULTS[decoded.genre]
    verbs = (decoded.verb,) + tuple(verb for verb in base.verbs if verb != decoded.verb)

    world_difference = decoded.world_difference or base.world_difference
    if world_difference == CUSTOM_WORLD_KEY and not is_canonical_world_difference(base.world_difference):
        world_difference = base.world_difference

    return replace(
        base,
        genre=decoded.genre,
        verbs=verbs,
        gravity=decoded.gravity,
        world_difference=world_difference,
        chaos_level=decoded.chaos_level,
    )


def default_minimal_spec() -> GameSpecification:
    return generate(GENRE_DEFAULTS["action"], seed=MINIMAL_SPEC_SEED)


def generate_from_seed_code(code: str, *, base_choices: ChoiceVector | None = None) -> GameSpecification:
    decoded = decode_seed_code(code)
    if not decoded.is_valid:
        logger.warning("seed code %r is unreconstructible; using the minimal default game", code)
        return default_minimal_spec()
    choices = choices_from_decoded(decoded, base_choices)
    return generate(choices, seed=decoded.internal_seed)
