from __future__ import annotations

import math

from seedforge.gen.choices import DIFFICULTY_STYLES, GAME_PACES, ChoiceVector
from seedforge.gen.spec import DifficultyConfig

DEFAULT_CURVE_POINTS = 10
MIN_CURVE_POINTS = 3
PACE_MULTIPLIERS = {"fast": 1.3, "medium": 1.0, "slow": 0.7}


def _style_value(style: str, t: float, pace_multiplier: float) -> float:
    if style == "relaxed":
        return 0.2 + 0.3 * t * pace_multiplier
    if style == "steady":
        return 0.3 + 0.5 * t * pace_multiplier
    if style == "hardcore":
        return 0.6 + 0.35 * t * pace_multiplier
    # rollercoaster: a rising baseline with two full waves on top
    return 0.35 + 0.25 * t * pace_multiplier + 0.2 * math.sin(4 * math.pi * t)


def generate_difficulty_curve(style: str, pace: str, count: int = DEFAULT_CURVE_POINTS) -> list[float]:
    """``max(3, count)`` difficulty values in [0, 1], one per level."""
    if style not in DIFFICULTY_STYLES:
        raise ValueError(f"unknown difficulty style: {style}")
    if pace not in GAME_PACES:
        raise ValueError(f"unknown game pace: {pace}")
    points = max(MIN_CURVE_POINTS, int(count))
    pace_multiplier = PACE_MULTIPLIERS[pace]
    curve: list[float] = []
    for index in range(points):
        t = index / (points - 1)
        value = _style_value(style, t, pace_multiplier)
        curve.append(max(0.0, min(1.0, value)))
    return curve


def build_difficulty_config(choices: ChoiceVector, count: int = DEFAULT_CURVE_POINTS) -> DifficultyConfig:
    return DifficultyConfig(
        style=choices.difficulty_style,
        pace=choices.game_pace,
        skill_luck_ratio=choices.skill_luck_ratio,
        curve=tuple(generate_difficulty_curve(choices.difficulty_style, choices.game_pace, count)),
    )
