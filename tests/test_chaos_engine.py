import pytest

from seedforge.chaos.engine import ChaosEngine, build_chaos_config, get_tier
from seedforge.chaos.mutations import (
    DEFAULT_REGISTRY,
    PHYSICS,
    ActiveMutationSet,
    MutationDef,
    MutationRegistry,
    SessionState,
    SetField,
    apply_mutation,
)
from seedforge.chaos.presets import get_chaos_preset, level_to_preset_label


@pytest.mark.parametrize(
    ("level", "frequency_ms", "max_active", "categories"),
    [
        (0, None, 0, ()),
        (1, 90_000, 1, ("physics", "visual")),
        (30, 90_000, 1, ("physics", "visual")),
        (31, 60_000, 2, ("physics", "visual", "entity")),
        (60, 60_000, 2, ("physics", "visual", "entity")),
        (61, 30_000, 3, ("physics", "visual", "entity", "rule")),
        (90, 30_000, 3, ("physics", "visual", "entity", "rule")),
        (91, 15_000, 999, ("physics", "visual", "entity", "rule", "narrative")),
        (100, 15_000, 999, ("physics", "visual", "entity", "rule", "narrative")),
    ],
)
def test_tier_table(level: int, frequency_ms: int | None, max_active: int, categories: tuple[str, ...]) -> None:
    config = build_chaos_config(level)

    assert config.frequency_ms == frequency_ms
    assert config.max_active_mutations == max_active
    assert config.allowed_categories == categories


def test_disabled_level_has_no_mutations() -> None:
    config = build_chaos_config(0)

    assert not config.enabled
    assert config.mutations == ()
    assert not ChaosEngine(0).should_trigger(10**9, 0)


def test_chaos_is_monotone_in_level() -> None:
    previous_eligible: set[str] = set()
    previous_categories: set[str] = set()
    previous_frequency = float("inf")
    for level in range(0, 101):
        config = build_chaos_config(level)
        eligible = set(config.mutations)
        categories = set(config.allowed_categories)
        frequency = float("inf") if config.frequency_ms is None else config.frequency_ms

        assert previous_eligible <= eligible
        assert previous_categories <= categories
        assert frequency <= previous_frequency

        previous_eligible, previous_categories, previous_frequency = eligible, categories, frequency


def test_out_of_range_levels_are_clamped() -> None:
    assert build_chaos_config(250).level == 100
    assert build_chaos_config(-3).level == 0
    assert get_tier(1000) == get_tier(100)


def test_should_trigger_uses_tier_frequency() -> None:
    engine = ChaosEngine(45)

    assert not engine.should_trigger(59_999, 0)
    assert engine.should_trigger(60_000, 0)


def test_select_next_mutation_skips_active_ids() -> None:
    engine = ChaosEngine(20)
    eligible = [mutation.mutation_id for mutation in engine.get_eligible_mutations()]

    assert engine.select_next_mutation(eligible) is None
    picked = engine.select_next_mutation(eligible[1:])
    assert picked is not None
    assert picked.mutation_id == eligible[0]


def test_presets() -> None:
    assert get_chaos_preset("wild").level == 75
    assert level_to_preset_label(0) == "order"
    assert level_to_preset_label(30) == "emergent"
    assert level_to_preset_label(100) == "surreal"
    with pytest.raises(ValueError, match="chaos preset must be one of"):
        get_chaos_preset("bedlam")


def test_negate_then_revert_restores_state() -> None:
    state = SessionState()
    active = ActiveMutationSet()
    flip = DEFAULT_REGISTRY.by_id()["gravity_flip"]

    active.activate(flip, state, lambda: 0.0, now_ms=0)
    assert state.gravity_y == -800.0

    active.revert("gravity_flip", state)
    assert state.gravity_y == 800.0
    assert len(active) == 0


def test_reverting_older_overlapping_mutation_keeps_newer_value() -> None:
    state = SessionState()
    active = ActiveMutationSet()
    by_id = DEFAULT_REGISTRY.by_id()

    active.activate(by_id["friction_ice"], state, lambda: 0.0, now_ms=0)
    active.activate(by_id["friction_honey"], state, lambda: 0.0, now_ms=10)
    active.revert("friction_ice", state)

    assert state.friction == 0.98
    assert active.get("friction_honey").diff["friction"].previous == 0.3

    active.revert("friction_honey", state)
    assert state.friction == 0.3


def test_drawing_effects_use_the_supplied_draw() -> None:
    by_id = DEFAULT_REGISTRY.by_id()
    state = SessionState()

    apply_mutation(by_id["goal_shift"], state, lambda: 0.0)
    apply_mutation(by_id["narrator_chaos"], state, lambda: 0.0)

    assert state.goal_type == "score_threshold"
    assert state.goal_shifted is True
    assert state.score_display_offset == -100
    assert state.health_display_offset == -1


def test_activating_twice_is_rejected() -> None:
    state = SessionState()
    active = ActiveMutationSet()
    mutation = DEFAULT_REGISTRY.by_id()["color_invert"]
    active.activate(mutation, state, lambda: 0.0, now_ms=0)

    with pytest.raises(ValueError, match="already active"):
        active.activate(mutation, state, lambda: 0.0, now_ms=5)
    with pytest.raises(ValueError, match="not active"):
        active.revert("mirror_world", state)


def test_mutation_definitions_are_validated() -> None:
    with pytest.raises(ValueError, match="category must be one of"):
        MutationDef("bad", "Bad", "", "weather", 10, 1000, (SetField("friction", 0.1),))
    with pytest.raises(ValueError, match="unknown session state field"):
        MutationDef("bad", "Bad", "", PHYSICS, 10, 1000, (SetField("wind", 0.1),))
    with pytest.raises(ValueError, match="duration_ms must be positive"):
        MutationDef("bad", "Bad", "", PHYSICS, 10, 0, (SetField("friction", 0.1),))


def test_registry_rejects_duplicate_ids() -> None:
    with pytest.raises(ValueError, match="duplicate mutation_id: gravity_flip"):
        DEFAULT_REGISTRY.merged(MutationRegistry(mutations=(DEFAULT_REGISTRY.by_id()["gravity_flip"],)))
