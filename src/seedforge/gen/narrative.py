"""World narrative: description, seed events, diamond event chain and graph.

The diamond chain branches after the intro and converges before the climax::

    intro -> branch -> {high, low, wild} -> converge -> climax -> resolution

Chaos tiers wrap every diamond event in increasingly surreal prose. Seed
events fill in the beats the diamond does not already cover. Nothing here
consumes draws.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.spec import (
    ENDING_FLAG,
    EventChoice,
    NarrativeChoice,
    NarrativeConfig,
    NarrativeEvent,
    NarrativeGraph,
    NarrativeNode,
)
from seedforge.gen.world import character_for

DIAMOND_PREFIX = "diamond"
CUSTOM_PHRASE_LIMIT = 80

WORLD_TEMPLATES = {
    "colors_alive": (
        "In this world, colors are living beings. They drift through the air, merge when they "
        "collide, and can be captured -- but never truly tamed. The landscape shifts hue with the "
        "mood of its inhabitants, and darkness is not merely the absence of light but a predator "
        "that devours pigment."
    ),
    "sound_solid": (
        "Here, sounds crystallize into solid objects the moment they leave their source. A shout "
        "becomes a jagged shard, a melody turns into a spiraling bridge, and silence is the most "
        "dangerous terrain of all -- an invisible void where nothing can exist."
    ),
    "memory_touch": (
        "Memories can be touched, held, and traded like precious gems. Forgotten moments litter "
        "the ground as translucent stones, and the most powerful beings are those who carry the "
        "heaviest recollections. Losing a memory means losing a piece of yourself -- literally."
    ),
    "time_uneven": (
        "Time flows at different speeds in different places. Step into a golden zone and hours "
        "pass in seconds; cross a silver border and a heartbeat stretches into minutes. The world "
        "is a patchwork of temporal pockets, and mastering the map of time is the key to survival."
    ),
}

WORLD_PHRASES = {
    "colors_alive": "colors are living beings",
    "sound_solid": "sounds crystallize into solid objects",
    "memory_touch": "memories can be touched and traded",
    "time_uneven": "time flows at different speeds",
}

ARCHETYPE_DESCRIPTIONS = {
    "explorer": (
        "You are driven by insatiable curiosity. Every horizon hides a question, and every "
        "question deserves pursuit. The unknown is not frightening -- it is an invitation."
    ),
    "guardian": (
        "You stand between the vulnerable and the void. Your strength is measured not in what "
        "you can destroy, but in what you can preserve when everything else falls apart."
    ),
    "fugitive": (
        "You are always one step ahead -- or one step behind. The world wants to catch you, cage "
        "you, define you. Your only power is motion, and you intend to keep moving."
    ),
    "collector": (
        "Every fragment matters. Every shard, every echo, every forgotten scrap of this world "
        "calls to you. Completion is not a goal; it is a hunger that sharpens with every piece "
        "you find."
    ),
}

ARCHETYPE_HOOKS: dict[str, tuple[str, tuple[tuple[str, str], ...]]] = {
    "explorer": (
        "A passage you have never seen before shimmers into existence. It was not here a moment "
        "ago -- or was it always here, waiting for someone curious enough to notice?",
        (("Enter without hesitation", "boost_speed"), ("Observe from a distance first", "reveal_map")),
    ),
    "guardian": (
        "A faint cry echoes through the terrain. Something small and fragile needs protection "
        "-- but reaching it means crossing dangerous ground.",
        (("Rush to help", "gain_ally"), ("Find a safer path", "boost_defense")),
    ),
    "fugitive": (
        "The shadows behind you grow longer. Whatever pursues you is closer now. You can feel "
        "its attention like a hand on your shoulder.",
        (("Sprint forward recklessly", "boost_speed"), ("Set a false trail", "slow_enemies")),
    ),
    "collector": (
        "A glimmer catches your eye -- something rare, half-buried beneath the surface. But "
        "extracting it will take time you may not have.",
        (("Dig it out now", "rare_collectible"), ("Mark the spot and return later", "reveal_collectibles")),
    ),
}

VERB_PHRASES = {
    "jump": "leap and soar",
    "shoot": "aim and fire",
    "collect": "gather and hoard",
    "dodge": "weave and evade",
    "build": "create and construct",
    "explore": "wander and discover",
    "push": "push and rearrange",
    "activate": "trigger and unlock",
    "craft": "combine and forge",
    "defend": "shield and protect",
    "dash": "rush and blur",
}


@dataclass(frozen=True)
class ProseTier:
    threshold: int
    prefix: str
    suffix: str


CHAOS_PROSE_TIERS = (
    ProseTier(0, "", ""),
    ProseTier(20, "Strange ripples cross the sky. ", " Something feels off."),
    ProseTier(40, "Reality shudders. ", " The rules you thought you knew are bending."),
    ProseTier(60, "The world glitches -- colors bleed, edges dissolve. ", " Nothing is certain anymore."),
    ProseTier(80, "EVERYTHING IS FOLDING. Geometry screams. ", " You are not sure you are still yourself."),
)


@dataclass(frozen=True)
class DiamondSlot:
    suffix: str
    trigger: str
    text: str
    choices: tuple[tuple[str, str], ...] = ()


DIAMOND_INTRO = DiamondSlot(
    "intro",
    "game_start",
    "You awaken in a world where {world}. As a {character}, you feel the pull of your purpose "
    "immediately. The air itself seems to acknowledge your arrival.",
)
DIAMOND_BRANCH = DiamondSlot(
    "branch",
    "score_25",
    "The path ahead splits. The world of {world} offers you a choice that will shape your "
    "journey. Your instinct to {verb} could serve you well -- but which direction?",
    (
        ("Take the high road -- risk and reward", "path_high"),
        ("Take the low road -- caution and certainty", "path_low"),
        ("Forge your own path through the unknown", "path_wild"),
    ),
)
DIAMOND_PATHS = (
    DiamondSlot(
        "path_high",
        "path_high",
        "The high road reveals breathtaking vistas of {world}. Danger walks beside you, but so "
        "does wonder. Your ability to {verb} is tested at every turn.",
    ),
    DiamondSlot(
        "path_low",
        "path_low",
        "The low road is quieter, darker. In the shadows of {world}, you find secrets others "
        "have overlooked. Patience rewards those who {verb} carefully.",
    ),
    DiamondSlot(
        "path_wild",
        "path_wild",
        "There is no path here -- only the raw substance of {world}. You carve your own way, and "
        "the world reshapes itself around your will to {verb}.",
    ),
)
DIAMOND_CONVERGE = DiamondSlot(
    "converge",
    "score_60",
    "All roads lead to this place. The threads of {world} pull tight, and you stand at the "
    "nexus. Whatever choices you made, the world has been watching -- and it remembers.",
)
DIAMOND_CLIMAX = DiamondSlot(
    "climax",
    "score_80",
    "This is the moment. The heart of {world} beats in time with yours. Everything you know "
    "about how to {verb} will be tested now. As a {character}, this is what you were made for.",
    (("Face the challenge head-on", "climax_brave"), ("Find the hidden weakness", "climax_clever")),
)
DIAMOND_RESOLUTION = DiamondSlot(
    "resolution",
    "score_100",
    "The world of {world} settles into a new equilibrium. Your journey as a {character} has left "
    "its mark -- not just on this place, but on the very rules that govern it. The game "
    "remembers you.",
)
DIAMOND_SLOTS = (DIAMOND_INTRO, DIAMOND_BRANCH) + DIAMOND_PATHS + (
    DIAMOND_CONVERGE,
    DIAMOND_CLIMAX,
    DIAMOND_RESOLUTION,
)

CONTINUE_TEXT = "Continue"


def world_description(world_difference: str) -> str:
    """Curated description for a template key, else the custom text itself."""
    return WORLD_TEMPLATES.get(world_difference, world_difference)


def world_phrase(world_difference: str) -> str:
    if world_difference in WORLD_PHRASES:
        return WORLD_PHRASES[world_difference]
    if len(world_difference) > CUSTOM_PHRASE_LIMIT:
        return world_difference[: CUSTOM_PHRASE_LIMIT - 3] + "..."
    return world_difference


def verbs_to_phrase(verbs: tuple[str, ...] | list[str]) -> str:
    if not verbs:
        return "act"
    if len(verbs) == 1:
        return VERB_PHRASES[verbs[0]]
    if len(verbs) == 2:
        return f"{VERB_PHRASES[verbs[0]]}, and {VERB_PHRASES[verbs[1]]}"
    return ", ".join(verbs[:-1]) + ", and " + verbs[-1]


def prose_tier(chaos_level: int) -> ProseTier:
    tier = CHAOS_PROSE_TIERS[0]
    for candidate in CHAOS_PROSE_TIERS:
        if chaos_level >= candidate.threshold:
            tier = candidate
    return tier


def _fill(template: str, context: dict[str, str]) -> str:
    return (
        template.replace("{world}", context["world"])
        .replace("{character}", context["character"])
        .replace("{verb}", context["verb"])
    )


def build_diamond_events(
    world_difference: str, archetype: str, verbs: tuple[str, ...], chaos_level: int
) -> list[NarrativeEvent]:
    context = {
        "world": world_phrase(world_difference),
        "character": archetype,
        "verb": verbs_to_phrase(verbs),
    }
    tier = prose_tier(chaos_level)
    events: list[NarrativeEvent] = []
    for slot in DIAMOND_SLOTS:
        events.append(
            NarrativeEvent(
                event_id=f"{DIAMOND_PREFIX}_{slot.suffix}",
                trigger=slot.trigger,
                text=f"{tier.prefix}{_fill(slot.text, context)}{tier.suffix}",
                choices=tuple(EventChoice(_fill(text, context), effect) for text, effect in slot.choices),
            )
        )
    return events


def build_seed_events(description: str, archetype: str) -> list[NarrativeEvent]:
    hook_text, hook_choices = ARCHETYPE_HOOKS[archetype]
    return [
        NarrativeEvent("world_intro", "game_start", description),
        NarrativeEvent("character_intro", "game_start", ARCHETYPE_DESCRIPTIONS[archetype]),
        NarrativeEvent(
            "first_challenge",
            "score_10",
            f"The world tests you for the first time. As a {archetype}, you feel the weight of "
            "your purpose pressing in.",
        ),
        NarrativeEvent(
            f"{archetype}_hook",
            "area_2",
            hook_text,
            tuple(EventChoice(text, effect) for text, effect in hook_choices),
        ),
        NarrativeEvent(
            "midpoint_tease",
            "score_50",
            "You begin to understand the shape of this world. What once felt alien now feels "
            "like a language -- one you are slowly learning to speak.",
        ),
    ]


def merge_events(diamond: list[NarrativeEvent], seeds: list[NarrativeEvent]) -> list[NarrativeEvent]:
    """Diamond events first, then seed events whose trigger the diamond leaves free."""
    taken = {event.trigger for event in diamond}
    return diamond + [event for event in seeds if event.trigger not in taken]


def diamond_graph(events: list[NarrativeEvent]) -> NarrativeGraph:
    """Node graph mirroring the diamond chain; resolution is the only ending."""
    texts = {event.event_id: event.text for event in events}

    def node_id(suffix: str) -> str:
        return f"{DIAMOND_PREFIX}_{suffix}"

    def advance(target: str) -> tuple[NarrativeChoice, ...]:
        return (NarrativeChoice(text=CONTINUE_TEXT, target_node_id=node_id(target)),)

    nodes = [
        NarrativeNode(node_id("intro"), texts[node_id("intro")], mood="calm", choices=advance("branch")),
        NarrativeNode(
            node_id("branch"),
            texts[node_id("branch")],
            mood="tense",
            choices=tuple(
                NarrativeChoice(text=text, target_node_id=node_id(effect), effect=effect)
                for text, effect in DIAMOND_BRANCH.choices
            ),
        ),
    ]
    for slot in DIAMOND_PATHS:
        nodes.append(
            NarrativeNode(node_id(slot.suffix), texts[node_id(slot.suffix)], mood="mysterious", choices=advance("converge"))
        )
    nodes.append(
        NarrativeNode(node_id("converge"), texts[node_id("converge")], mood="tense", choices=advance("climax"))
    )
    nodes.append(
        NarrativeNode(
            node_id("climax"),
            texts[node_id("climax")],
            mood="climax",
            choices=tuple(
                NarrativeChoice(text=text, target_node_id=node_id("resolution"), effect=effect)
                for text, effect in DIAMOND_CLIMAX.choices
            ),
        )
    )
    nodes.append(
        NarrativeNode(
            node_id("resolution"),
            texts[node_id("resolution")],
            mood="resolution",
            flags=(ENDING_FLAG,),
        )
    )
    graph = NarrativeGraph(nodes=tuple(nodes), start_node_id=node_id("intro"), template=DIAMOND_PREFIX)
    graph.validate()
    return graph


def build_narrative_config(
    choices: ChoiceVector, genre_data: dict[str, Any] | None = None
) -> NarrativeConfig:
    """World narrative for a run.

    The narrative genre already carries a scene graph in its genre data and
    that graph is reused; every other genre gets the diamond graph.
    """
    description = world_description(choices.world_difference)
    diamond = build_diamond_events(
        choices.world_difference,
        choices.character_archetype,
        choices.verbs,
        choices.chaos_level,
    )
    events = merge_events(diamond, build_seed_events(description, choices.character_archetype))

    scene_payload = (genre_data or {}).get("narrative")
    if scene_payload is not None:
        graph = NarrativeGraph.from_dict(scene_payload)
    else:
        graph = diamond_graph(diamond)

    character = character_for(choices.character_archetype).to_dict()
    character["flavour"] = ARCHETYPE_DESCRIPTIONS[choices.character_archetype]
    return NarrativeConfig(
        world_difference=description,
        character_archetype=choices.character_archetype,
        events=tuple(events),
        graph=graph,
        character=character,
    )
