"""Tactics board content.

Draw order:

- one draw per terrain cell, row-major
- player piece count
- per player piece: column, row
- per enemy piece: column, row
"""

from __future__ import annotations

from typing import Any

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.genres.base import Draw, GenreContent, GenreGenerator
from seedforge.gen.rng import draw_index
from seedforge.gen.spec import WorldConfig

BOARD_WIDTH = 8
BOARD_HEIGHT = 8
START_ROWS = 2
CHAOS_THRESHOLD_SHIFT = 0.15
PLAIN = "plain"

# Cumulative upper bounds; the last entry is the rarest terrain.
TERRAIN_TABLES: dict[str, tuple[tuple[str, float], ...]] = {
    "colors_alive": (("plain", 0.6), ("forest", 0.8), ("water", 0.88), ("mountain", 0.96), ("lava", 1.0)),
    "sound_solid": (("plain", 0.62), ("forest", 0.7), ("water", 0.76), ("mountain", 0.94), ("lava", 1.0)),
    "memory_touch": (("plain", 0.6), ("forest", 0.72), ("water", 0.88), ("mountain", 0.95), ("lava", 1.0)),
    "time_uneven": (("plain", 0.58), ("forest", 0.68), ("water", 0.8), ("mountain", 0.9), ("lava", 1.0)),
}
DEFAULT_TERRAIN_TABLE = (("plain", 0.72), ("water", 0.78), ("forest", 0.85), ("mountain", 0.95), ("lava", 1.0))

PIECE_TEMPLATES: dict[str, dict[str, Any]] = {
    "warrior": {"name": "Warrior", "color": "#4488ff", "move_range": 2, "attack_range": 1, "hp": 10, "atk": 3, "special": "melee expert"},
    "archer": {"name": "Archer", "color": "#44ff88", "move_range": 3, "attack_range": 3, "hp": 6, "atk": 2, "special": "ranged attack"},
    "knight": {"name": "Knight", "color": "#ffaa44", "move_range": 4, "attack_range": 1, "hp": 8, "atk": 4, "special": "charge"},
    "mage": {"name": "Mage", "color": "#aa44ff", "move_range": 2, "attack_range": 2, "hp": 5, "atk": 5, "special": "area attack"},
    "tank": {"name": "Tank", "color": "#888888", "move_range": 1, "attack_range": 1, "hp": 15, "atk": 2, "special": "heavy armour"},
    "scout": {"name": "Scout", "color": "#44dddd", "move_range": 5, "attack_range": 1, "hp": 5, "atk": 2, "special": "reveal fog"},
    "healer": {"name": "Healer", "color": "#ffffff", "move_range": 2, "attack_range": 2, "hp": 6, "atk": 1, "special": "mend allies"},
}
ARCHETYPE_ROSTERS = {
    "explorer": ("scout", "archer", "knight", "mage", "warrior"),
    "guardian": ("tank", "warrior", "healer", "archer", "knight"),
    "fugitive": ("scout", "knight", "archer", "mage", "warrior"),
    "collector": ("mage", "healer", "archer", "warrior", "tank"),
}
ENEMY_ROSTER = ("warrior", "archer", "knight", "mage", "tank")
ENEMY_COLOR = "#ff4444"

# difficulty -> (enemy count offset, enemy stat multiplier)
DIFFICULTY_PROFILES = {
    "relaxed": (-1, 0.8),
    "steady": (0, 1.0),
    "hardcore": (2, 1.3),
    "rollercoaster": (1, 1.1),
}
MIN_ENEMY_PIECES = 2


def terrain_thresholds(world_difference: str, chaos_level: int) -> list[tuple[str, float]]:
    """Shrink every cut but the last so chaos leaks mass toward the rarest terrain."""
    table = TERRAIN_TABLES.get(world_difference, DEFAULT_TERRAIN_TABLE)
    factor = 1.0 - (chaos_level / 100.0) * CHAOS_THRESHOLD_SHIFT
    cuts = [(terrain, upper * factor) for terrain, upper in table[:-1]]
    cuts.append(table[-1])
    return cuts


def terrain_for_roll(roll: float, thresholds: list[tuple[str, float]]) -> str:
    for terrain, upper in thresholds:
        if roll < upper:
            return terrain
    return thresholds[-1][0]


def generate_terrain(draw: Draw, thresholds: list[tuple[str, float]]) -> list[list[str]]:
    terrain = [[terrain_for_roll(draw(), thresholds) for _ in range(BOARD_WIDTH)] for _ in range(BOARD_HEIGHT)]
    for offset in range(START_ROWS):
        terrain[offset] = [PLAIN] * BOARD_WIDTH
        terrain[BOARD_HEIGHT - 1 - offset] = [PLAIN] * BOARD_WIDTH
    return terrain


def _place(draw: Draw, taken: set[tuple[int, int]], rows: tuple[int, int]) -> tuple[int, int]:
    """Draw a cell in ``rows`` and probe forward cyclically until it is free."""
    column = 1 + draw_index(draw, BOARD_WIDTH - 2)
    row_offset = draw_index(draw, START_ROWS)
    slots = START_ROWS * BOARD_WIDTH
    slot = row_offset * BOARD_WIDTH + column
    for _ in range(slots):
        cell = (slot % BOARD_WIDTH, rows[slot // BOARD_WIDTH])
        if cell not in taken:
            taken.add(cell)
            return cell
        slot = (slot + 1) % slots
    raise ValueError("no free cell left in the starting rows")


def _piece(template_id: str, piece_id: str, multiplier: float = 1.0, enemy: bool = False) -> dict[str, Any]:
    template = PIECE_TEMPLATES[template_id]
    hp = max(1, int(template["hp"] * multiplier + 0.5))
    atk = max(1, int(template["atk"] * multiplier + 0.5))
    return {
        "id": piece_id,
        "kind": template_id,
        "name": f"Enemy {template['name']}" if enemy else template["name"],
        "color": ENEMY_COLOR if enemy else template["color"],
        "move_range": template["move_range"],
        "attack_range": template["attack_range"],
        "hp": hp,
        "max_hp": hp,
        "atk": atk,
        "special": template["special"],
    }


class BoardGenerator(GenreGenerator):
    genre = "board"
    data_key = "board"

    def generate(self, draw: Draw, choices: ChoiceVector, world: WorldConfig) -> GenreContent:
        thresholds = terrain_thresholds(choices.world_difference, choices.chaos_level)
        terrain = generate_terrain(draw, thresholds)
        offset, multiplier = DIFFICULTY_PROFILES[choices.difficulty_style]
        player_count = 3 + draw_index(draw, 3)
        enemy_count = max(MIN_ENEMY_PIECES, player_count + offset)
        roster = ARCHETYPE_ROSTERS[choices.character_archetype]

        taken: set[tuple[int, int]] = set()
        pieces: list[dict[str, Any]] = []
        player_rows = (BOARD_HEIGHT - 1, BOARD_HEIGHT - 2)
        for index in range(player_count):
            x, y = _place(draw, taken, player_rows)
            pieces.append({"piece": _piece(roster[index % len(roster)], f"p_{index}"), "x": x, "y": y, "owner": "player"})
        enemy_rows = (0, 1)
        for index in range(enemy_count):
            x, y = _place(draw, taken, enemy_rows)
            piece = _piece(ENEMY_ROSTER[index % len(ENEMY_ROSTER)], f"e_{index}", multiplier, enemy=True)
            pieces.append({"piece": piece, "x": x, "y": y, "owner": "enemy"})

        return GenreContent(
            data={
                self.data_key: {
                    "width": BOARD_WIDTH,
                    "height": BOARD_HEIGHT,
                    "terrain": terrain,
                    "pieces": pieces,
                    "enemy_stat_multiplier": multiplier,
                }
            }
        )
