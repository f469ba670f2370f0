"""Systems, rules and feedback loops derived from the choice vector.

None of these consume draws; they depend on the choices alone.
"""

from __future__ import annotations

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.spec import FeedbackLoop, RuleDef, SystemDef

BASE_SYSTEM_TYPES = ("physics", "movement", "collision", "rendering", "scoring")

VERB_SYSTEMS: dict[str, tuple[str, ...]] = {
    "jump": ("jump",),
    "shoot": ("shooting", "projectile"),
    "collect": ("collection",),
    "dodge": ("dodge",),
    "build": ("building",),
    "explore": ("exploration",),
    "push": ("pushing",),
    "activate": ("interaction",),
    "craft": ("crafting", "inventory"),
    "defend": ("defense",),
    "dash": ("dash",),
}

BASE_RULES = (
    RuleDef(
        trigger="player_collide_enemy",
        action="damage_player",
        effect="flash_red, shake_screen, score_penalty(-10)",
    ),
    RuleDef(
        trigger="player_collide_collectible",
        action="collect_item",
        effect="particle_burst, score_add, destroy_collectible",
    ),
)

GOAL_RULE = RuleDef(
    trigger="player_reach_goal",
    action="complete_level",
    effect='flash_gold, score_add(100), text_show("STAGE CLEAR"), next_level',
)

VERB_RULES: dict[str, tuple[RuleDef, ...]] = {
    "jump": (
        RuleDef("player_jump", "apply_jump_force", "particle_dust, animation_stretch"),
        RuleDef("player_land", "reset_jumps", "particle_land, score_add(1)"),
    ),
    "shoot": (
        RuleDef("player_shoot", "spawn_projectile", "flash_muzzle, sound_shoot"),
        RuleDef(
            "shoot_hit_enemy",
            "damage_enemy",
            "particle_explosion, score_add(25), destroy_projectile",
        ),
    ),
    "collect": (
        RuleDef(
            "all_collectibles_gathered",
            "advance_level",
            'flash_gold, text_show("ALL FOUND!"), level_complete',
            condition="collectible_count == 0",
        ),
    ),
    "dodge": (
        RuleDef("player_dodge", "activate_dash", "afterimage_trail, invincibility_start"),
        RuleDef(
            "dodge_near_miss",
            "score_bonus",
            'flash_white, score_add(50), text_show("CLOSE!")',
            condition="enemy_distance < 30",
        ),
    ),
    "build": (
        RuleDef("player_build", "place_block", "particle_construct, sound_place"),
        RuleDef(
            "build_bridge_complete",
            "score_bonus",
            "glow_blocks, score_add(30)",
            condition="blocks_connected >= 3",
        ),
    ),
    "explore": (
        RuleDef("player_explore_new_area", "reveal_area", "particle_sparkle, score_add(20)"),
        RuleDef(
            "player_explore_secret",
            "unlock_secret",
            'glow_path, score_add(40), text_show("SECRET!")',
            condition="area_hidden == true",
        ),
    ),
    "push": (
        RuleDef("player_push_block", "move_block", "particle_dust, sound_scrape"),
        RuleDef(
            "pushed_block_on_switch",
            "open_gate",
            "flash_green, score_add(15), unlock_gate",
            condition="block_on_plate == true",
        ),
    ),
    "activate": (
        RuleDef("player_activate_switch", "toggle_switch", "flash_yellow, sound_click, score_add(5)"),
        RuleDef(
            "all_switches_active",
            "unlock_exit",
            'glow_exit, text_show("UNLOCKED"), stage_complete',
            condition="inactive_switches == 0",
        ),
    ),
    "craft": (
        RuleDef("player_craft_item", "combine_items", "particle_forge, score_add(20)"),
        RuleDef(
            "player_craft_rare",
            "forge_rare_item",
            'flash_purple, score_add(60), text_show("MASTERWORK!")',
            condition="ingredient_rarity >= 2",
        ),
    ),
    "defend": (
        RuleDef("player_defend", "raise_shield", "shield_glow, sound_block"),
        RuleDef(
            "defend_perfect_block",
            "reflect_attack",
            'flash_blue, score_add(30), text_show("PERFECT!")',
            condition="block_timing_ms < 100",
        ),
    ),
    "dash": (
        RuleDef("player_dash", "trigger_invincibility", "afterimage_trail, sound_whoosh"),
        RuleDef(
            "dash_through_enemy",
            "score_bonus",
            "flash_white, score_add(20)",
            condition="dash_active == true",
        ),
    ),
}

COMBO_RULES: tuple[tuple[tuple[str, str], RuleDef], ...] = (
    (
        ("jump", "shoot"),
        RuleDef(
            "player_shoot",
            "aerial_shot_bonus",
            'flash_cyan, score_add(15), text_show("AIR SHOT!")',
            condition="player_airborne == true",
        ),
    ),
    (
        ("dodge", "collect"),
        RuleDef(
            "player_dodge",
            "dash_collect",
            "magnet_pull, score_add(5)",
            condition="nearby_collectibles > 0",
        ),
    ),
    (
        ("build", "jump"),
        RuleDef(
            "player_jump",
            "super_jump",
            'particle_burst_large, score_add(10), text_show("BOOST!")',
            condition="standing_on_player_block == true",
        ),
    ),
    (
        ("dash", "defend"),
        RuleDef(
            "player_dash",
            "shield_bash",
            'shake_screen, score_add(25), text_show("BASH!")',
            condition="shield_active == true",
        ),
    ),
    (
        ("craft", "collect"),
        RuleDef(
            "player_collide_collectible",
            "auto_craft",
            "particle_forge, score_add(10)",
            condition="recipe_complete == true",
        ),
    ),
)

GRAVITY_RULES = {
    "shifting": RuleDef("gravity_shift", "invert_gravity", "screen_flip, color_shift"),
    "reverse": RuleDef("player_on_ceiling", "ceiling_walk", "particle_sparkle"),
}

UNIVERSAL_LOOPS = (
    FeedbackLoop(
        loop_type="positive",
        description=(
            "Consecutive successful actions increase a score multiplier, "
            "rewarding skilled play streaks."
        ),
        variables=("score", "multiplier", "streak_count"),
    ),
    FeedbackLoop(
        loop_type="negative",
        description=(
            "Taking damage temporarily slows the player, making them more vulnerable "
            "but also forcing a more cautious approach."
        ),
        variables=("health", "speed", "vulnerability"),
    ),
)

VERB_LOOPS: dict[str, FeedbackLoop] = {
    "jump": FeedbackLoop(
        "positive",
        "Consecutive precision jumps grant a speed boost, making it easier to reach platforms.",
        ("jump_streak", "movement_speed", "platform_reach"),
    ),
    "collect": FeedbackLoop(
        "positive",
        "Collecting items increases collection radius, making future collection easier.",
        ("items_collected", "collect_radius"),
    ),
    "shoot": FeedbackLoop(
        "positive",
        "Defeating enemies drops ammo, enabling more shooting. Missing wastes ammo and increases pressure.",
        ("ammo", "enemies_defeated", "accuracy"),
    ),
    "build": FeedbackLoop(
        "positive",
        "Building structures grants resources from the environment, enabling more building.",
        ("blocks_placed", "resources", "build_capacity"),
    ),
    "dodge": FeedbackLoop(
        "positive",
        "Successful dodges charge an energy meter that can be spent on a powerful burst.",
        ("dodge_count", "energy", "burst_power"),
    ),
    "explore": FeedbackLoop(
        "positive",
        "Revealing new areas widens the vision radius, pulling the player deeper into the map.",
        ("areas_revealed", "vision_radius"),
    ),
    "push": FeedbackLoop(
        "negative",
        "Heavier blocks slow the player down while pushing, trading speed for progress.",
        ("block_mass", "push_speed"),
    ),
    "activate": FeedbackLoop(
        "positive",
        "Every activated switch shortens the cooldown of the next one, building momentum.",
        ("switches_active", "activation_cooldown"),
    ),
    "craft": FeedbackLoop(
        "negative",
        "Crafting consumes materials, so powerful items leave the inventory thin.",
        ("materials", "crafted_power", "inventory_space"),
    ),
    "defend": FeedbackLoop(
        "negative",
        "Holding the shield drains stamina, so turtling too long leaves the player exposed.",
        ("stamina", "shield_strength", "exposure"),
    ),
    "dash": FeedbackLoop(
        "negative",
        "Chained dashes lengthen the cooldown, rewarding well-timed bursts over spamming.",
        ("dash_chain", "dash_cooldown"),
    ),
}


def _verb_system_config(verb: str, choices: ChoiceVector) -> dict[str, object]:
    if verb == "jump":
        return {"gravity": choices.gravity}
    return {}


def build_systems(choices: ChoiceVector) -> list[SystemDef]:
    systems = [
        SystemDef("physics", {"gravity": choices.gravity, "boundary": choices.boundary}),
        SystemDef("movement", {"special_physics": choices.special_physics}),
        SystemDef("collision"),
        SystemDef("rendering"),
        SystemDef("scoring"),
    ]
    seen = set(BASE_SYSTEM_TYPES)
    for verb in choices.verbs:
        for system_type in VERB_SYSTEMS[verb]:
            if system_type in seen:
                continue
            seen.add(system_type)
            systems.append(SystemDef(system_type, _verb_system_config(verb, choices)))
    systems.append(SystemDef("narrative"))
    if choices.chaos_level > 0:
        systems.append(SystemDef("chaos", {"level": choices.chaos_level}))
    return systems


def build_rules(choices: ChoiceVector) -> list[RuleDef]:
    """Base, goal, per-verb, combo and gravity rules in that order, deduplicated."""
    rules: list[RuleDef] = list(BASE_RULES)
    rules.append(GOAL_RULE)
    for verb in choices.verbs:
        rules.extend(VERB_RULES[verb])
    for (first, second), rule in COMBO_RULES:
        if choices.has_verb(first) and choices.has_verb(second):
            rules.append(rule)
    gravity_rule = GRAVITY_RULES.get(choices.gravity)
    if gravity_rule is not None:
        rules.append(gravity_rule)

    seen: set[tuple[str, str, str]] = set()
    unique: list[RuleDef] = []
    for rule in rules:
        key = (rule.trigger, rule.action, rule.effect)
        if key in seen:
            continue
        seen.add(key)
        unique.append(rule)
    return unique


def build_feedback_loops(choices: ChoiceVector) -> list[FeedbackLoop]:
    loops = list(UNIVERSAL_LOOPS)
    loops.extend(VERB_LOOPS[verb] for verb in choices.verbs)
    return loops
