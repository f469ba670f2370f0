from __future__ import annotations

PALETTE_KEYS = ("background", "platform", "platform_alt", "enemy", "collectible", "player", "accent")

STYLE_PALETTES: dict[str, dict[str, str]] = {
    "neon": {
        "background": "#0a0a12",
        "platform": "#001a33",
        "platform_alt": "#002244",
        "enemy": "#ff0066",
        "collectible": "#00ffcc",
        "player": "#00ccff",
        "accent": "#ff00ff",
    },
    "minimal": {
        "background": "#f0ece4",
        "platform": "#c8c0b0",
        "platform_alt": "#a8a090",
        "enemy": "#e05040",
        "collectible": "#40a060",
        "player": "#303030",
        "accent": "#4080d0",
    },
    "watercolor": {
        "background": "#f5efe6",
        "platform": "#a8c8a0",
        "platform_alt": "#88b8a0",
        "enemy": "#d88080",
        "collectible": "#e8c860",
        "player": "#6088b0",
        "accent": "#c090c0",
    },
    "retro_crt": {
        "background": "#0c0c0c",
        "platform": "#00aa00",
        "platform_alt": "#008800",
        "enemy": "#ff3300",
        "collectible": "#ffff00",
        "player": "#00ff00",
        "accent": "#00aaff",
    },
}

PIXEL_BACKGROUNDS = {
    "colors_alive": "#1a0a2e",
    "sound_solid": "#0a1628",
    "memory_touch": "#1e0a28",
    "time_uneven": "#0a1e1e",
}
PIXEL_DEFAULT_BACKGROUND = "#0f0f1a"
PIXEL_PALETTE = {
    "platform": "#4a4a6a",
    "platform_alt": "#6a4a8a",
    "enemy": "#e94560",
    "collectible": "#ffd700",
    "player": "#00d4ff",
    "accent": "#ff44ff",
}


def visual_palette(visual_style: str, world_difference: str) -> dict[str, str]:
    """Palette for a style; pixel art tints its background by world difference."""
    if visual_style in STYLE_PALETTES:
        return dict(STYLE_PALETTES[visual_style])
    palette = {"background": PIXEL_BACKGROUNDS.get(world_difference, PIXEL_DEFAULT_BACKGROUND)}
    palette.update(PIXEL_PALETTE)
    return palette
