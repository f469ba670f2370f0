from __future__ import annotations

from seedforge.chaos.engine import ChaosConfig, build_chaos_config

PRESET_LEVELS = {
    "order": 0,
    "mild": 25,
    "emergent": 50,
    "wild": 75,
    "surreal": 100,
}
PRESET_LABELS = tuple(PRESET_LEVELS)


def get_chaos_preset(label: str) -> ChaosConfig:
    if label not in PRESET_LEVELS:
        raise ValueError(f"chaos preset must be one of {', '.join(PRESET_LABELS)}")
    return build_chaos_config(PRESET_LEVELS[label])


def level_to_preset_label(level: int | float) -> str:
    """Nearest preset at or above ``level``."""
    if level <= 0:
        return "order"
    if level <= 25:
        return "mild"
    if level <= 50:
        return "emergent"
    if level <= 75:
        return "wild"
    return "surreal"
