from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.palette import visual_palette
from seedforge.gen.spec import ComponentDef, EntityDef, WorldConfig

PLAYER_ENTITY_ID = "player"
PLAYER_START = (100, 300)
PLAYER_SIZE = (24, 32)

GENRE_DIMENSIONS: dict[str, tuple[int, int]] = {
    "action": (1600, 900),
    "narrative": (800, 600),
    "card": (800, 450),
    "board": (800, 600),
    "puzzle_logic": (800, 600),
    "rhythm": (1600, 600),
}
DEFAULT_DIMENSIONS = (1600, 900)


@dataclass(frozen=True)
class CharacterDef:
    archetype: str
    name_template: str
    description: str
    motivation: str
    fear: str
    color: str

    def to_dict(self) -> dict[str, str]:
        return {
            "archetype": self.archetype,
            "name_template": self.name_template,
            "description": self.description,
            "motivation": self.motivation,
            "fear": self.fear,
            "color": self.color,
        }


CHARACTERS: dict[str, CharacterDef] = {
    "explorer": CharacterDef(
        archetype="explorer",
        name_template="The Wanderer",
        description=(
            "A restless soul drawn to every uncharted corner. The Explorer moves with purpose "
            "but no fixed destination, gathering knowledge the way others gather gold."
        ),
        motivation="discover the unknown",
        fear="stagnation",
        color="#00d4ff",
    ),
    "guardian": CharacterDef(
        archetype="guardian",
        name_template="The Sentinel",
        description=(
            "A steadfast protector who measures strength not by destruction but by what remains "
            "standing. The Guardian draws power from the bonds they defend."
        ),
        motivation="protect what matters",
        fear="failure",
        color="#00ff88",
    ),
    "fugitive": CharacterDef(
        archetype="fugitive",
        name_template="The Drifter",
        description=(
            "Always running, never resting. The Fugitive turns danger into momentum, leaving "
            "decoys and false trails in their wake."
        ),
        motivation="escape and survive",
        fear="being caught",
        color="#e94560",
    ),
    "collector": CharacterDef(
        archetype="collector",
        name_template="The Seeker",
        description=(
            "Driven by an unshakeable need to make the incomplete whole. The Collector sees value "
            "where others see debris."
        ),
        motivation="find them all",
        fear="missing something",
        color="#ffd700",
    ),
}


def character_for(archetype: str) -> CharacterDef:
    if archetype not in CHARACTERS:
        raise ValueError(f"unknown character archetype: {archetype}")
    return CHARACTERS[archetype]


def _verb_component(verb: str, color: str) -> ComponentDef:
    configs: dict[str, tuple[str, dict[str, Any]]] = {
        "jump": ("jump", {"jump_force": 350, "max_jumps": 2}),
        "shoot": ("shooter", {"fire_rate": 5, "bullet_speed": 500, "bullet_color": color}),
        "collect": ("collector", {"collect_radius": 40}),
        "dodge": ("dodger", {"dash_speed": 600, "dash_cooldown": 800, "invincibility_ms": 300}),
        "build": ("builder", {"build_cooldown": 500, "block_color": color, "max_blocks": 10}),
        "explore": ("explorer", {"vision_radius": 220, "map_reveal": True}),
        "push": ("pusher", {"push_force": 300, "max_push_mass": 3}),
        "activate": ("activator", {"interact_radius": 36}),
        "craft": ("crafter", {"recipe_slots": 4, "craft_time_ms": 600}),
        "defend": ("defender", {"shield_duration_ms": 1000, "shield_cooldown": 1500}),
        "dash": ("dasher", {"dash_distance": 180, "dash_cooldown": 600}),
    }
    component_type, config = configs[verb]
    return ComponentDef(component_type=component_type, config=config)


def build_protagonist(choices: ChoiceVector, color: str) -> EntityDef:
    """Player entity; one component per verb, in verb order."""
    components = [
        ComponentDef("movement", {"speed": 200, "max_speed": 400}),
        ComponentDef("health", {"current": 100, "max": 100}),
    ]
    components.extend(_verb_component(verb, color) for verb in choices.verbs)
    width, height = PLAYER_SIZE
    return EntityDef(
        entity_id=PLAYER_ENTITY_ID,
        entity_type="player",
        x=PLAYER_START[0],
        y=PLAYER_START[1],
        width=width,
        height=height,
        color=color,
        components=tuple(components),
    )


def build_world_config(choices: ChoiceVector) -> WorldConfig:
    palette = visual_palette(choices.visual_style, choices.world_difference)
    width, height = GENRE_DIMENSIONS.get(choices.genre, DEFAULT_DIMENSIONS)
    return WorldConfig(
        gravity=choices.gravity,
        boundary=choices.boundary,
        special_physics=choices.special_physics,
        custom_physics=choices.custom_physics,
        width=width,
        height=height,
        background_color=palette["background"],
        palette=palette,
    )
