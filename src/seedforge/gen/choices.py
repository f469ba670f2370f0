from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

GENRES = ("action", "narrative", "card", "board", "puzzle_logic", "rhythm")
VISUAL_STYLES = ("pixel", "neon", "minimal", "watercolor", "retro_crt")
CORE_VERBS = (
    "jump",
    "shoot",
    "collect",
    "dodge",
    "build",
    "explore",
    "push",
    "activate",
    "craft",
    "defend",
    "dash",
)
OBJECT_TYPES = ("platform", "enemy", "puzzle", "resource")
GRAVITY_MODES = ("normal", "low", "shifting", "reverse")
WORLD_BOUNDARIES = ("walled", "loop", "infinite")
SPECIAL_PHYSICS = ("elastic", "slippery", "sticky")
CHARACTER_ARCHETYPES = ("explorer", "guardian", "fugitive", "collector")
DIFFICULTY_STYLES = ("relaxed", "steady", "hardcore", "rollercoaster")
GAME_PACES = ("fast", "medium", "slow")
SKILL_LUCK_RATIOS = ("pure_skill", "skill_heavy", "balanced", "luck_heavy")
WORLD_DIFFERENCE_KEYS = ("colors_alive", "sound_solid", "memory_touch", "time_uneven")

MIN_CHAOS_LEVEL = 0
MAX_CHAOS_LEVEL = 100


def clamp_chaos_level(level: int | float) -> int:
    return int(max(MIN_CHAOS_LEVEL, min(MAX_CHAOS_LEVEL, round(level))))


def is_canonical_world_difference(world_difference: str) -> bool:
    return world_difference in WORLD_DIFFERENCE_KEYS


def _require_member(value: Any, allowed: tuple[str, ...], field_name: str) -> None:
    if value not in allowed:
        raise ValueError(f"{field_name} must be one of {', '.join(allowed)}; got {value!r}")


@dataclass(frozen=True)
class ChoiceVector:
    """Canonical user-preference input to generation."""

    genre: str
    visual_style: str
    verbs: tuple[str, ...]
    gravity: str = "normal"
    boundary: str = "walled"
    special_physics: str = "elastic"
    world_difference: str = "colors_alive"
    character_archetype: str = "explorer"
    difficulty_style: str = "steady"
    game_pace: str = "medium"
    skill_luck_ratio: str = "balanced"
    chaos_level: int = 0
    object_types: tuple[str, ...] = ()
    custom_element: str = ""
    custom_physics: str = ""

    def __post_init__(self) -> None:
        _require_member(self.genre, GENRES, "genre")
        _require_member(self.visual_style, VISUAL_STYLES, "visual_style")
        if not isinstance(self.verbs, tuple):
            object.__setattr__(self, "verbs", tuple(self.verbs))
        if not self.verbs:
            raise ValueError("verbs must be a non-empty sequence")
        for index, verb in enumerate(self.verbs):
            _require_member(verb, CORE_VERBS, f"verbs[{index}]")
        if len(set(self.verbs)) != len(self.verbs):
            raise ValueError("verbs must not contain duplicates")
        if not isinstance(self.object_types, tuple):
            object.__setattr__(self, "object_types", tuple(self.object_types))
        for index, object_type in enumerate(self.object_types):
            _require_member(object_type, OBJECT_TYPES, f"object_types[{index}]")
        _require_member(self.gravity, GRAVITY_MODES, "gravity")
        _require_member(self.boundary, WORLD_BOUNDARIES, "boundary")
        _require_member(self.special_physics, SPECIAL_PHYSICS, "special_physics")
        _require_member(self.character_archetype, CHARACTER_ARCHETYPES, "character_archetype")
        _require_member(self.difficulty_style, DIFFICULTY_STYLES, "difficulty_style")
        _require_member(self.game_pace, GAME_PACES, "game_pace")
        _require_member(self.skill_luck_ratio, SKILL_LUCK_RATIOS, "skill_luck_ratio")
        if not isinstance(self.world_difference, str) or not self.world_difference.strip():
            raise ValueError("world_difference must be a non-empty string")
        if not isinstance(self.custom_element, str):
            raise ValueError("custom_element must be a string")
        if not isinstance(self.custom_physics, str):
            raise ValueError("custom_physics must be a string")
        if isinstance(self.chaos_level, bool) or not isinstance(self.chaos_level, (int, float)):
            raise ValueError("chaos_level must be numeric")

    @property
    def primary_verb(self) -> str:
        return self.verbs[0]

    def has_verb(self, verb: str) -> bool:
        return verb in self.verbs

    def with_chaos_level(self, level: int | float) -> "ChoiceVector":
        return replace(self, chaos_level=clamp_chaos_level(level))

    def to_dict(self) -> dict[str, Any]:
        return {
            "genre": self.genre,
            "visual_style": self.visual_style,
            "verbs": list(self.verbs),
            "object_types": list(self.object_types),
            "custom_element": self.custom_element,
            "gravity": self.gravity,
            "boundary": self.boundary,
            "special_physics": self.special_physics,
            "custom_physics": self.custom_physics,
            "world_difference": self.world_difference,
            "character_archetype": self.character_archetype,
            "difficulty_style": self.difficulty_style,
            "game_pace": self.game_pace,
            "skill_luck_ratio": self.skill_luck_ratio,
            "chaos_level": self.chaos_level,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ChoiceVector":
        if not isinstance(payload, dict):
            raise ValueError("choice payload must be an object")
        missing = {"genre", "visual_style", "verbs"} - set(payload)
        if missing:
            raise ValueError(f"choice payload missing fields: {sorted(missing)}")
        verbs = payload["verbs"]
        if not isinstance(verbs, list):
            raise ValueError("verbs must be a list")
        object_types = payload.get("object_types", [])
        if not isinstance(object_types, list):
            raise ValueError("object_types must be a list when present")
        return cls(
            genre=str(payload["genre"]),
            visual_style=str(payload["visual_style"]),
            verbs=tuple(str(verb) for verb in verbs),
            object_types=tuple(str(item) for item in object_types),
            custom_element=str(payload.get("custom_element", "")),
            gravity=str(payload.get("gravity", "normal")),
            boundary=str(payload.get("boundary", "walled")),
            special_physics=str(payload.get("special_physics", "elastic")),
            custom_physics=str(payload.get("custom_physics", "")),
            world_difference=str(payload.get("world_difference", "colors_alive")),
            character_archetype=str(payload.get("character_archetype", "explorer")),
            difficulty_style=str(payload.get("difficulty_style", "steady")),
            game_pace=str(payload.get("game_pace", "medium")),
            skill_luck_ratio=str(payload.get("skill_luck_ratio", "balanced")),
            chaos_level=payload.get("chaos_level", 0),
        )


GENRE_DEFAULTS: dict[str, ChoiceVector] = {
    "action": ChoiceVector(
        genre="action",
        visual_style="pixel",
        verbs=("jump", "collect"),
        world_difference="colors_alive",
    ),
    "narrative": ChoiceVector(
        genre="narrative",
        visual_style="retro_crt",
        verbs=("explore", "collect", "craft"),
        world_difference="sound_solid",
    ),
    "card": ChoiceVector(
        genre="card",
        visual_style="neon",
        verbs=("collect", "activate", "defend"),
    ),
    "board": ChoiceVector(
        genre="board",
        visual_style="pixel",
        verbs=("push", "defend", "activate"),
    ),
    "puzzle_logic": ChoiceVector(
        genre="puzzle_logic",
        visual_style="minimal",
        verbs=("activate", "explore"),
        game_pace="slow",
    ),
    "rhythm": ChoiceVector(
        genre="rhythm",
        visual_style="neon",
        verbs=("activate", "dodge", "dash"),
        world_difference="sound_solid",
    ),
}
