from dataclasses import replace

from seedforge.gen.choices import GENRE_DEFAULTS, ChoiceVector
from seedforge.gen.mechanics import (
    BASE_RULES,
    BASE_SYSTEM_TYPES,
    GOAL_RULE,
    GRAVITY_RULES,
    UNIVERSAL_LOOPS,
    VERB_LOOPS,
    build_feedback_loops,
    build_rules,
    build_systems,
)


def test_systems_start_with_base_and_end_with_narrative_without_chaos() -> None:
    systems = build_systems(GENRE_DEFAULTS["action"])
    types = [system.system_type for system in systems]

    assert tuple(types[: len(BASE_SYSTEM_TYPES)]) == BASE_SYSTEM_TYPES
    assert "jump" in types
    assert "collection" in types
    assert types[-1] == "narrative"
    assert "chaos" not in types
    assert len(types) == len(set(types))


def test_chaos_system_carries_level() -> None:
    systems = build_systems(GENRE_DEFAULTS["action"].with_chaos_level(30))

    assert systems[-1].system_type == "chaos"
    assert systems[-1].config == {"level": 30}


def test_shared_verb_systems_are_deduplicated() -> None:
    choices = ChoiceVector(genre="action", visual_style="pixel", verbs=("shoot", "craft", "dash"))
    types = [system.system_type for system in build_systems(choices)]

    assert types.count("projectile") == 1
    assert "inventory" in types
    assert "dash" in types


def test_rules_order_base_goal_then_verbs() -> None:
    rules = build_rules(GENRE_DEFAULTS["action"])

    assert rules[: len(BASE_RULES)] == list(BASE_RULES)
    assert rules[len(BASE_RULES)] == GOAL_RULE
    assert any(rule.trigger == "player_jump" for rule in rules)
    keys = [(rule.trigger, rule.action, rule.effect) for rule in rules]
    assert len(keys) == len(set(keys))


def test_combo_and_gravity_rules_follow_choices() -> None:
    choices = ChoiceVector(genre="action", visual_style="pixel", verbs=("jump", "shoot"), gravity="shifting")
    rules = build_rules(choices)
    actions = [rule.action for rule in rules]

    assert "aerial_shot_bonus" in actions
    assert rules[-1] == GRAVITY_RULES["shifting"]

    without_combo = build_rules(replace(choices, verbs=("jump",), gravity="normal"))
    assert "aerial_shot_bonus" not in [rule.action for rule in without_combo]


def test_every_verb_is_referenced_by_some_rule() -> None:
    for verb in ("jump", "shoot", "collect", "dodge", "build", "explore", "push", "activate", "craft", "defend", "dash"):
        choices = ChoiceVector(genre="action", visual_style="pixel", verbs=(verb,))
        assert any(rule.mentions(verb) for rule in build_rules(choices)), verb


def test_feedback_loops_are_universal_plus_per_verb() -> None:
    choices = GENRE_DEFAULTS["card"]
    loops = build_feedback_loops(choices)

    assert loops[: len(UNIVERSAL_LOOPS)] == list(UNIVERSAL_LOOPS)
    assert loops[len(UNIVERSAL_LOOPS) :] == [VERB_LOOPS[verb] for verb in choices.verbs]
    assert {loop.loop_type for loop in loops} == {"positive", "negative"}
