"""Platformer layout: platforms, then enemies, then collectibles.

Draw order:

- platform count; per platform: type, width, height, dx, dy, then one
  type-specific draw (moving speed, breakable hit points, bouncy force or
  sticky friction; static draws nothing)
- enemy count; per enemy: type, x, y, size, then the type's behaviour draws
- collectible count; per collectible: x, y, special roll, then either power-up
  type and duration (special) or score tier
"""

from __future__ import annotations

from typing import Any

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.genres.base import Draw, GenreContent, GenreGenerator
from seedforge.gen.rng import draw_between, draw_index, pick
from seedforge.gen.spec import ComponentDef, EntityDef, WorldConfig

START_PLATFORM = (50, 400, 200, 20)
START_CURSOR = (150.0, 400.0)
PLATFORM_MIN_Y_MARGIN = 60

PLATFORM_COLORS = {
    "static": "#4a4a6a",
    "moving": "#6a4a8a",
    "breakable": "#8a5a3a",
    "bouncy": "#3a8a5a",
    "sticky": "#5a3a8a",
}

ENEMY_COUNTS = {
    "relaxed": (2, 5),
    "steady": (4, 8),
    "hardcore": (8, 15),
    "rollercoaster": (5, 10),
}
ENEMY_COLORS = {
    "patrol": "#e94560",
    "chaser": "#ff4444",
    "shooter": "#cc3333",
    "bouncer": "#ff7744",
}

POWER_UPS = ("speed_boost", "shield", "double_score", "magnet")
SPECIAL_THRESHOLD = 0.8


def platform_types(choices: ChoiceVector) -> list[str]:
    types = ["static", "static", "static"]
    if choices.has_verb("jump"):
        types.extend(["bouncy", "moving"])
    if choices.has_verb("build"):
        types.append("breakable")
    if choices.has_verb("dodge"):
        types.extend(["moving", "moving"])
    types.append("sticky")
    return types


def enemy_types(choices: ChoiceVector) -> list[str]:
    types = ["patrol"]
    if choices.has_verb("shoot"):
        types.append("shooter")
    if choices.has_verb("dodge"):
        types.extend(["chaser", "chaser"])
    types.append("bouncer")
    return types


def _platform_component(draw: Draw, platform_type: str, x: float, y: float) -> ComponentDef:
    if platform_type == "moving":
        return ComponentDef(
            "moving",
            {"start_x": x, "start_y": y, "end_x": x + 100, "end_y": y, "speed": 60 + draw() * 80},
        )
    if platform_type == "breakable":
        return ComponentDef("breakable", {"hit_points": 1 + draw_index(draw, 3)})
    if platform_type == "bouncy":
        return ComponentDef("bouncy", {"bounce_force": 400 + draw() * 200})
    if platform_type == "sticky":
        return ComponentDef("sticky", {"friction": 0.8 + draw() * 0.15})
    return ComponentDef("static", {})


def generate_platforms(draw: Draw, choices: ChoiceVector, world: WorldConfig) -> list[EntityDef]:
    """Walk a cursor right with bounded gaps so every platform stays reachable."""
    count = 10 + draw_index(draw, 11)
    types = platform_types(choices)
    start_x, start_y, start_w, start_h = START_PLATFORM
    platforms = [
        EntityDef(
            entity_id="platform_start",
            entity_type="platform",
            x=start_x,
            y=start_y,
            width=start_w,
            height=start_h,
            color=PLATFORM_COLORS["static"],
            components=(ComponentDef("static", {}),),
        )
    ]
    last_x, last_y = START_CURSOR
    for index in range(1, count):
        platform_type = pick(draw, types)
        width = 60 + draw_index(draw, 140)
        height = 16 + draw_index(draw, 12)
        dx = 80 + draw_index(draw, 180)
        dy = -120 + draw_index(draw, 240)
        x = max(0, min(world.width - width, last_x + dx))
        y = max(PLATFORM_MIN_Y_MARGIN, min(world.height - PLATFORM_MIN_Y_MARGIN, last_y + dy))
        component = _platform_component(draw, platform_type, x, y)
        platforms.append(
            EntityDef(
                entity_id=f"platform_{index}",
                entity_type="platform",
                x=x,
                y=y,
                width=width,
                height=height,
                color=PLATFORM_COLORS[platform_type],
                components=(component,),
            )
        )
        last_x = x + width / 2
        last_y = y
    return platforms


def _enemy_behaviour(draw: Draw, enemy_type: str) -> ComponentDef:
    if enemy_type == "patrol":
        return ComponentDef(
            "patrol",
            {
                "patrol_distance": 80 + draw_index(draw, 120),
                "speed": 40 + draw() * 60,
                "direction": "horizontal" if draw() > 0.5 else "vertical",
            },
        )
    if enemy_type == "chaser":
        return ComponentDef("chaser", {"chase_speed": 80 + draw() * 80, "detection_radius": 150 + draw() * 100})
    if enemy_type == "shooter":
        return ComponentDef(
            "enemy_shooter",
            {
                "fire_rate": 1 + draw() * 2,
                "bullet_speed": 200 + draw() * 200,
                "bullet_color": "#ff6666",
                "range": 200 + draw() * 150,
            },
        )
    return ComponentDef("bouncer", {"bounce_speed": 100 + draw() * 100, "bounce_angle_variance": 15 + draw() * 30})


def generate_enemies(draw: Draw, choices: ChoiceVector, world: WorldConfig) -> list[EntityDef]:
    low, high = ENEMY_COUNTS[choices.difficulty_style]
    count = draw_between(draw, low, high)
    types = enemy_types(choices)
    enemies: list[EntityDef] = []
    for index in range(count):
        enemy_type = pick(draw, types)
        x = 200 + draw_index(draw, world.width - 300)
        y = 100 + draw_index(draw, world.height - 200)
        size = 20 + draw_index(draw, 12)
        behaviour = _enemy_behaviour(draw, enemy_type)
        enemies.append(
            EntityDef(
                entity_id=f"enemy_{index}",
                entity_type="enemy",
                x=x,
                y=y,
                width=size,
                height=size,
                color=ENEMY_COLORS[enemy_type],
                components=(behaviour, ComponentDef("health", {"current": 1, "max": 1})),
            )
        )
    return enemies


def generate_collectibles(draw: Draw, choices: ChoiceVector, world: WorldConfig) -> list[EntityDef]:
    if choices.has_verb("collect"):
        count = 15 + draw_index(draw, 11)
    else:
        count = 5 + draw_index(draw, 6)
    collectibles: list[EntityDef] = []
    for index in range(count):
        x = 80 + draw_index(draw, world.width - 160)
        y = 60 + draw_index(draw, world.height - 120)
        special = draw() > SPECIAL_THRESHOLD
        config: dict[str, Any]
        if special:
            config = {
                "score_value": 50,
                "power_up_type": pick(draw, POWER_UPS),
                "power_up_duration_ms": 3000 + draw_index(draw, 5000),
            }
        else:
            config = {"score_value": 10 + draw_index(draw, 3) * 5}
        size = 16 if special else 12
        collectibles.append(
            EntityDef(
                entity_id=f"collectible_{index}",
                entity_type="collectible",
                x=x,
                y=y,
                width=size,
                height=size,
                color="#ff44ff" if special else "#ffd700",
                components=(ComponentDef("collectible", config),),
            )
        )
    return collectibles


class ActionGenerator(GenreGenerator):
    genre = "action"

    def generate(self, draw: Draw, choices: ChoiceVector, world: WorldConfig) -> GenreContent:
        platforms = generate_platforms(draw, choices, world)
        enemies = generate_enemies(draw, choices, world)
        collectibles = generate_collectibles(draw, choices, world)
        return GenreContent(entities=tuple(platforms + enemies + collectibles))
