"""Deck-duel content for the card genre.

Draw order:

- player deck size
- per player card: effect, name, rarity roll, then the effect's cost/value
  draws (damage, heal, buff and debuff draw cost then value; draw draws cost
  then value; gain_mana draws value only)
- per enemy card: the same sequence over the enemy effect pool
- enemy HP spread, enemy name

The enemy deck size comes from difficulty and consumes no draw. A custom
element becomes one legendary card at the front of the player deck and
consumes no draw either.
"""

from __future__ import annotations

from typing import Any

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.genres.base import Draw, GenreContent, GenreGenerator
from seedforge.gen.rng import draw_index, pick
from seedforge.gen.spec import WorldConfig

CARD_NAMES = {
    "damage": ("Fireball", "Shadow Strike", "Thunder Spear", "Frost Blade", "Venom Dart", "Whirlwind", "Burst Ray", "Stone Fist"),
    "heal": ("Healing Spring", "Blessing of Life", "Regrowth", "Holy Ward"),
    "draw": ("Book of Wisdom", "Flash of Insight", "Deep Thought"),
    "gain_mana": ("Mana Crystal", "Psychic Surge", "Meditation"),
    "buff": ("Power Up", "Haste", "Iron Wall"),
    "debuff": ("Curse of Weakness", "Slowing Trap", "Seal of Silence"),
}
EFFECT_COLORS = {
    "damage": "#ff4444",
    "heal": "#44ff44",
    "draw": "#4488ff",
    "gain_mana": "#aa44ff",
    "buff": "#ffaa44",
    "debuff": "#888888",
}
RARITY_MULTIPLIERS = {"common": 1.0, "uncommon": 1.3, "rare": 1.6, "legendary": 2.0}
RARITY_SUFFIXES = {"common": "", "uncommon": "", "rare": "+", "legendary": " EX"}

BASE_EFFECTS = ("damage", "damage", "damage", "heal", "draw", "gain_mana", "buff", "debuff")
ARCHETYPE_EFFECT_BIAS = {
    "guardian": ("heal", "heal", "buff", "buff"),
    "explorer": ("draw", "draw", "gain_mana"),
    "fugitive": ("debuff", "debuff", "draw"),
    "collector": ("gain_mana", "gain_mana", "buff"),
}
ENEMY_BASE_EFFECTS = ("damage", "damage", "damage", "heal", "buff")

# difficulty -> (enemy HP base, enemy deck size, extra enemy effects)
DIFFICULTY_PROFILES: dict[str, tuple[int, int, tuple[str, ...]]] = {
    "relaxed": (20, 15, ()),
    "steady": (25, 20, ("debuff",)),
    "hardcore": (35, 25, ("debuff", "debuff", "buff")),
    "rollercoaster": (28, 20, ("heal", "debuff")),
}
# pace -> (starting mana, hand size)
PACE_PROFILES = {"fast": (4, 5), "medium": (3, 4), "slow": (2, 3)}
# skill/luck -> (legendary, rare, uncommon) roll thresholds
RARITY_THRESHOLDS = {
    "pure_skill": (0.97, 0.85, 0.55),
    "skill_heavy": (0.94, 0.78, 0.48),
    "balanced": (0.9, 0.7, 0.4),
    "luck_heavy": (0.82, 0.6, 0.32),
}

ENEMY_NAMES = ("Shadow Mage", "Clockwork Giant", "Frost Queen", "Chaos Knight", "Phantom Hunter")
MAX_MANA = 10
PLAYER_HP = 30
UNIQUE_CARD_ID = "card_unique"
UNIQUE_NAME_LIMIT = 24


def effect_pool(archetype: str) -> tuple[str, ...]:
    return BASE_EFFECTS + ARCHETYPE_EFFECT_BIAS.get(archetype, ())


def roll_rarity(roll: float, thresholds: tuple[float, float, float]) -> str:
    legendary, rare, uncommon = thresholds
    if roll > legendary:
        return "legendary"
    if roll > rare:
        return "rare"
    if roll > uncommon:
        return "uncommon"
    return "common"


def describe_effect(effect: str, value: int) -> str:
    descriptions = {
        "damage": f"Deal {value} damage",
        "heal": f"Heal {value} HP",
        "draw": f"Draw {value} cards",
        "gain_mana": f"Gain {value} mana",
        "buff": f"+{value} to next attack",
        "debuff": f"Weaken enemy by {value}",
    }
    return descriptions[effect]


def _cost_and_value(draw: Draw, effect: str, multiplier: float) -> tuple[int, int]:
    if effect == "damage":
        cost = 1 + draw_index(draw, 4)
        return cost, int((2 + draw() * 4) * multiplier)
    if effect == "heal":
        cost = 1 + draw_index(draw, 3)
        return cost, int((3 + draw() * 3) * multiplier)
    if effect == "draw":
        cost = 1 + draw_index(draw, 2)
        return cost, 1 + draw_index(draw, 2)
    if effect == "gain_mana":
        return 0, 1 + draw_index(draw, 2)
    if effect == "buff":
        cost = 2 + draw_index(draw, 2)
        return cost, int((2 + draw() * 3) * multiplier)
    cost = 2 + draw_index(draw, 3)
    return cost, int((2 + draw() * 2) * multiplier)


def make_card(draw: Draw, effect: str, index: int, thresholds: tuple[float, float, float]) -> dict[str, Any]:
    name = pick(draw, CARD_NAMES[effect])
    rarity = roll_rarity(draw(), thresholds)
    cost, value = _cost_and_value(draw, effect, RARITY_MULTIPLIERS[rarity])
    return {
        "id": f"card_{effect}_{index}",
        "name": f"{name}{RARITY_SUFFIXES[rarity]}",
        "cost": cost,
        "effect": effect,
        "value": value,
        "description": describe_effect(effect, value),
        "rarity": rarity,
        "color": EFFECT_COLORS[effect],
    }


def unique_card(custom_element: str) -> dict[str, Any]:
    name = custom_element.strip()[:UNIQUE_NAME_LIMIT]
    value = int(6 * RARITY_MULTIPLIERS["legendary"])
    return {
        "id": UNIQUE_CARD_ID,
        "name": f"{name} EX",
        "cost": 3,
        "effect": "damage",
        "value": value,
        "description": describe_effect("damage", value),
        "rarity": "legendary",
        "color": "#ffd700",
        "unique": True,
    }


class CardGenerator(GenreGenerator):
    genre = "card"
    data_key = "card"

    def generate(self, draw: Draw, choices: ChoiceVector, world: WorldConfig) -> GenreContent:
        thresholds = RARITY_THRESHOLDS[choices.skill_luck_ratio]
        hp_base, enemy_deck_size, extra_enemy_effects = DIFFICULTY_PROFILES[choices.difficulty_style]
        starting_mana, hand_size = PACE_PROFILES[choices.game_pace]

        pool = effect_pool(choices.character_archetype)
        deck_size = 25 + draw_index(draw, 6)
        player_deck = [make_card(draw, pick(draw, pool), index, thresholds) for index in range(deck_size)]
        if choices.custom_element.strip():
            player_deck.insert(0, unique_card(choices.custom_element))

        enemy_pool = ENEMY_BASE_EFFECTS + extra_enemy_effects
        enemy_deck = [
            make_card(draw, pick(draw, enemy_pool), index + 100, thresholds) for index in range(enemy_deck_size)
        ]
        enemy_hp = hp_base + draw_index(draw, 10)
        enemy_name = pick(draw, ENEMY_NAMES)
        return GenreContent(
            data={
                self.data_key: {
                    "player_deck": player_deck,
                    "enemy_deck": enemy_deck,
                    "player_hp": PLAYER_HP,
                    "enemy_hp": enemy_hp,
                    "starting_mana": starting_mana,
                    "max_mana": MAX_MANA,
                    "hand_size": hand_size,
                    "enemy_name": enemy_name,
                }
            }
        )
